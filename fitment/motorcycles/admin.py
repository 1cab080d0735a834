from django.contrib import admin
from .models import Motorcycle, MotorcycleCategoryConfig, SearchAnalytics


@admin.register(Motorcycle)
class MotorcycleAdmin(admin.ModelAdmin):
    list_display = ['recid', 'bikemake', 'bikemodel', 'firstyear', 'lastyear', 'capacity', 'bike_category']
    list_filter = ['bikemake', 'bike_category', 'bike_subcategory']
    search_fields = ['recid', 'bikemake', 'bikemodel']
    ordering = ['bikemake', 'bikemodel', 'firstyear']
    fieldsets = (
        (None, {'fields': ('recid', 'bikemake', 'bikemodel', 'firstyear', 'lastyear', 'capacity',
                           'biketype', 'enginetype', 'bike_category', 'bike_subcategory')}),
        ('Original Equipment', {'fields': ('oe_handlebar', 'oe_fcw', 'oe_rcw', 'oe_barmount', 'oe_chain',
                                           'front_brakepads', 'rear_brakepads', 'grips')}),
        ('Sprocket Groups', {'fields': ('fcwgroup', 'fcwgroup_range', 'rcwgroup', 'rcwgroup_range',
                                        'fcwconv', 'rcwconv', 'twinring', 'rcwcarrier', 'other_fcw')}),
        ('Alternatives', {'classes': ('collapse',),
                          'fields': ('handlebars_78', 'twinwall', 'fatbar', 'fatbar36', 'cam',
                                     'barmount28', 'barmount36', 'chainconv', 'r1_chain', 'r3_chain',
                                     'r4_chain', 'rr4_chain', 'clipon', 'active_handlecompare')}),
        ('Custom Parts', {'fields': ('custom_parts',)}),
    )


@admin.register(MotorcycleCategoryConfig)
class MotorcycleCategoryConfigAdmin(admin.ModelAdmin):
    list_display = ['category', 'subcategory', 'is_active', 'sort_order']
    list_filter = ['is_active', 'category']
    ordering = ['sort_order', 'category']


@admin.register(SearchAnalytics)
class SearchAnalyticsAdmin(admin.ModelAdmin):
    list_display = ['search_query', 'results_count', 'ip_address', 'created_at']
    search_fields = ['search_query']
    ordering = ['-created_at']
    readonly_fields = ['search_query', 'results_count', 'ip_address', 'user_agent', 'created_at']
