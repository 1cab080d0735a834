from django.db import models


class ShopSession(models.Model):
    """Persisted commerce session created by the OAuth install flow"""
    session_id = models.CharField(max_length=255, unique=True)
    shop = models.CharField(max_length=255, db_index=True)
    access_token = models.CharField(max_length=255)
    scope = models.TextField(blank=True, null=True)
    expires = models.DateTimeField(blank=True, null=True)
    is_online = models.BooleanField(default=False)
    state = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.shop

    class Meta:
        db_table = 'shop_sessions'
        ordering = ['-updated_at']
