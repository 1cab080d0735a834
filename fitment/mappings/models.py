from django.db import models
from django.utils import timezone
import uuid


class PartMapping(models.Model):
    """Explicit link between a motorcycle and a commerce product"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('stale', 'Stale'),
        ('healing', 'Healing'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product_id = models.CharField(max_length=64, db_index=True)
    motorcycle = models.ForeignKey(
        'motorcycles.Motorcycle',
        on_delete=models.CASCADE,
        related_name='part_mappings',
        db_column='motorcycle_recid',
    )
    compatible = models.BooleanField(default=True)
    # Cached upstream identity, used to re-find the product when its id changes
    expected_sku = models.CharField(max_length=100, blank=True, null=True)
    product_title = models.CharField(max_length=255, blank=True, null=True)
    last_synced = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')

    def __str__(self):
        return f"{self.motorcycle_id} -> {self.product_id}"

    class Meta:
        db_table = 'part_mappings'
        ordering = ['motorcycle_id', 'product_id']
        indexes = [
            models.Index(fields=['expected_sku'], name='part_mappings_sku_idx'),
        ]
