from django.db import models


class PartSection(models.Model):
    """Display grouping that part categories are assigned into"""
    section_key = models.CharField(max_length=100, unique=True)
    section_label = models.CharField(max_length=255)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.section_label

    class Meta:
        db_table = 'part_sections'
        ordering = ['sort_order', 'section_key']


class PartCategoryTag(models.Model):
    """Part category: motorcycle slot key, display label and matching product tags"""
    DISPLAY_MODE_CHOICES = [
        ('products', 'Products'),
        ('variants', 'Variants'),
    ]

    category_value = models.CharField(max_length=100, unique=True)
    category_label = models.CharField(max_length=255)
    product_tags = models.JSONField(default=list, blank=True)
    display_mode = models.CharField(max_length=20, choices=DISPLAY_MODE_CHOICES, default='products')
    # Section key; None puts the category in the "others" bucket
    assigned_section = models.CharField(max_length=100, blank=True, null=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.category_label} ({self.category_value})"

    class Meta:
        db_table = 'part_category_tags'
        ordering = ['sort_order', 'category_value']
