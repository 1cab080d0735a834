from django.contrib import admin
from .models import ShopSession


@admin.register(ShopSession)
class ShopSessionAdmin(admin.ModelAdmin):
    list_display = ['shop', 'session_id', 'scope', 'is_online', 'updated_at']
    search_fields = ['shop', 'session_id']
    ordering = ['-updated_at']
    exclude = ['access_token']
