from django.contrib import admin
from .models import PartSection, PartCategoryTag


@admin.register(PartSection)
class PartSectionAdmin(admin.ModelAdmin):
    list_display = ['section_key', 'section_label', 'sort_order', 'is_active']
    list_filter = ['is_active']
    search_fields = ['section_key', 'section_label']
    ordering = ['sort_order']


@admin.register(PartCategoryTag)
class PartCategoryTagAdmin(admin.ModelAdmin):
    list_display = ['category_value', 'category_label', 'assigned_section', 'display_mode', 'sort_order']
    list_filter = ['assigned_section', 'display_mode']
    search_fields = ['category_value', 'category_label']
    ordering = ['sort_order', 'category_value']
