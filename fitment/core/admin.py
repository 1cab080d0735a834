from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Setting, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'phone', 'is_staff', 'is_active', 'last_login']
    list_filter = ['is_staff', 'is_active']
    search_fields = ['username', 'email', 'phone']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Contact', {'fields': ('phone',)}),
    )


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'description', 'updated_at']
    search_fields = ['key']
    list_editable = ['value']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only history of catalog edits, imports and mapping repairs"""
    list_display = ['created_at', 'action', 'model_name', 'object_id', 'object_name', 'user']
    list_filter = ['action', 'model_name']
    search_fields = ['object_id', 'object_name', 'user__username']
    date_hierarchy = 'created_at'
    list_select_related = ['user']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
