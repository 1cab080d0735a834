from django.contrib import admin
from .models import PartMapping


@admin.register(PartMapping)
class PartMappingAdmin(admin.ModelAdmin):
    list_display = ['motorcycle', 'product_id', 'product_title', 'expected_sku', 'compatible', 'status', 'last_synced']
    list_filter = ['status', 'compatible']
    search_fields = ['product_id', 'product_title', 'expected_sku', 'motorcycle__bikemake', 'motorcycle__bikemodel']
    raw_id_fields = ['motorcycle']
