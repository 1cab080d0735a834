from rest_framework import serializers
from .models import Motorcycle, MotorcycleCategoryConfig, SearchAnalytics


class MotorcycleSerializer(serializers.ModelSerializer):
    recid = serializers.IntegerField(required=False, min_value=1)

    class Meta:
        model = Motorcycle
        fields = '__all__'

    def validate_custom_parts(self, value):
        if value in (None, ''):
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError('custom_parts must be an object of category -> product variant')
        cleaned = {}
        for key, part in value.items():
            if part is not None and not isinstance(part, str):
                raise serializers.ValidationError(f'Value for "{key}" must be a string or null')
            cleaned[str(key)] = part
        return cleaned

    def validate(self, data):
        firstyear = data.get('firstyear', getattr(self.instance, 'firstyear', None))
        lastyear = data.get('lastyear', getattr(self.instance, 'lastyear', None))
        if firstyear is not None and lastyear is not None and lastyear < firstyear:
            raise serializers.ValidationError({'lastyear': 'Last year cannot be before first year'})
        if self.instance is not None and 'recid' in data and data['recid'] != self.instance.recid:
            raise serializers.ValidationError({'recid': 'RECID cannot be changed'})
        return data

    def validate_recid(self, value):
        if self.instance is None and Motorcycle.objects.filter(recid=value).exists():
            raise serializers.ValidationError(f'Motorcycle with RECID {value} already exists')
        return value


class PartAssignmentSerializer(serializers.Serializer):
    part_category = serializers.CharField(max_length=100)
    product_variant = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)


class MotorcycleCategoryConfigSerializer(serializers.ModelSerializer):
    class Meta:
        model = MotorcycleCategoryConfig
        fields = ['id', 'category', 'subcategory', 'is_active', 'sort_order', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class SearchAnalyticsSerializer(serializers.ModelSerializer):
    class Meta:
        model = SearchAnalytics
        fields = ['id', 'search_query', 'results_count', 'ip_address', 'user_agent', 'created_at']
