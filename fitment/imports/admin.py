from django.contrib import admin
from .models import ImportHistory


@admin.register(ImportHistory)
class ImportHistoryAdmin(admin.ModelAdmin):
    list_display = ['type', 'filename', 'records_count', 'status', 'created_at']
    list_filter = ['type', 'status', 'created_at']
    search_fields = ['filename']
    ordering = ['-created_at']
    readonly_fields = ['type', 'filename', 'records_count', 'status', 'created_at']
