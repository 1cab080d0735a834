from django.db import models
import uuid


class ImportHistory(models.Model):
    """One row per import run, written for successful and failed runs"""
    TYPE_CHOICES = [
        ('motorcycles', 'Motorcycles'),
        ('mappings', 'Mappings'),
        ('parts', 'Parts'),
        ('combined', 'Combined'),
    ]
    STATUS_CHOICES = [
        ('success', 'Success'),
        ('error', 'Error'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    filename = models.CharField(max_length=255)
    records_count = models.IntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.type} import {self.filename} ({self.status})"

    class Meta:
        db_table = 'import_history'
        ordering = ['-created_at']
