import django_filters

from .models import Motorcycle


class MotorcycleFilter(django_filters.FilterSet):
    """Filter for Motorcycle model using django-filter

    Year filters select motorcycles available in that year, so both
    ``firstyear`` and ``lastyear`` match against the model's year range.
    """
    bikemake = django_filters.CharFilter(field_name='bikemake', lookup_expr='iexact')
    bikemodel = django_filters.CharFilter(field_name='bikemodel', lookup_expr='icontains')
    firstyear = django_filters.NumberFilter(method='filter_available_in_year')
    lastyear = django_filters.NumberFilter(method='filter_available_in_year')
    year = django_filters.NumberFilter(method='filter_available_in_year')
    biketype = django_filters.NumberFilter(field_name='biketype')
    bike_category = django_filters.CharFilter(field_name='bike_category', lookup_expr='iexact')
    bike_subcategory = django_filters.CharFilter(field_name='bike_subcategory', lookup_expr='iexact')

    class Meta:
        model = Motorcycle
        fields = ['bikemake', 'bikemodel', 'firstyear', 'lastyear', 'year',
                  'biketype', 'bike_category', 'bike_subcategory']

    def filter_available_in_year(self, queryset, name, value):
        if value is None:
            return queryset
        year = int(value)
        return queryset.filter(firstyear__lte=year, lastyear__gte=year)
