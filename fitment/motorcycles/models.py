from django.db import models


# Fixed attribute slots, in the order they are collected for matching
ATTRIBUTE_SLOTS = (
    'oe_handlebar', 'oe_fcw', 'oe_rcw',
    'front_brakepads', 'rear_brakepads',
    'handlebars_78', 'twinwall', 'fatbar', 'fatbar36', 'grips', 'cam',
    'oe_barmount', 'barmount28', 'barmount36',
    'fcwgroup', 'fcwgroup_range', 'fcwconv', 'rcwconv', 'rcwgroup', 'rcwgroup_range',
    'twinring', 'oe_chain', 'chainconv', 'r1_chain', 'r3_chain', 'r4_chain', 'rr4_chain',
    'clipon', 'rcwcarrier', 'active_handlecompare', 'other_fcw',
)

# Slots that hold the factory-fitted part
OE_SLOTS = (
    'oe_handlebar', 'oe_fcw', 'oe_rcw', 'oe_barmount', 'oe_chain',
    'front_brakepads', 'rear_brakepads', 'grips',
)

# Group slot -> paired OE slot
GROUP_SLOTS = {
    'fcwgroup': 'oe_fcw',
    'rcwgroup': 'oe_rcw',
}


class Motorcycle(models.Model):
    """Motorcycle record with fixed part slots and a custom parts map"""
    recid = models.IntegerField(primary_key=True)
    bike_category = models.CharField(max_length=100, blank=True, null=True)
    bike_subcategory = models.CharField(max_length=100, blank=True, null=True)
    bikemake = models.CharField(max_length=100, db_index=True)
    bikemodel = models.CharField(max_length=255)
    firstyear = models.IntegerField()
    lastyear = models.IntegerField()
    capacity = models.IntegerField(blank=True, null=True)
    biketype = models.IntegerField(blank=True, null=True)
    enginetype = models.CharField(max_length=50, blank=True, null=True)

    # Original equipment
    oe_handlebar = models.CharField(max_length=100, blank=True, null=True)
    oe_fcw = models.CharField(max_length=100, blank=True, null=True)
    oe_rcw = models.CharField(max_length=100, blank=True, null=True)
    front_brakepads = models.CharField(max_length=100, blank=True, null=True)
    rear_brakepads = models.CharField(max_length=100, blank=True, null=True)

    # Alternative fitments
    handlebars_78 = models.CharField(max_length=100, blank=True, null=True, db_column='78_handlebars')
    twinwall = models.CharField(max_length=100, blank=True, null=True)
    fatbar = models.CharField(max_length=100, blank=True, null=True)
    fatbar36 = models.CharField(max_length=100, blank=True, null=True)
    grips = models.CharField(max_length=100, blank=True, null=True)
    cam = models.CharField(max_length=100, blank=True, null=True)
    oe_barmount = models.CharField(max_length=100, blank=True, null=True)
    barmount28 = models.CharField(max_length=100, blank=True, null=True)
    barmount36 = models.CharField(max_length=100, blank=True, null=True)
    fcwgroup = models.CharField(max_length=100, blank=True, null=True)
    fcwgroup_range = models.CharField(max_length=100, blank=True, null=True)
    fcwconv = models.CharField(max_length=100, blank=True, null=True)
    rcwconv = models.CharField(max_length=100, blank=True, null=True)
    rcwgroup = models.CharField(max_length=100, blank=True, null=True)
    rcwgroup_range = models.CharField(max_length=100, blank=True, null=True)
    twinring = models.CharField(max_length=100, blank=True, null=True)
    oe_chain = models.CharField(max_length=100, blank=True, null=True)
    chainconv = models.CharField(max_length=100, blank=True, null=True)
    r1_chain = models.CharField(max_length=100, blank=True, null=True)
    r3_chain = models.CharField(max_length=100, blank=True, null=True)
    r4_chain = models.CharField(max_length=100, blank=True, null=True)
    rr4_chain = models.CharField(max_length=100, blank=True, null=True)
    clipon = models.CharField(max_length=100, blank=True, null=True)
    rcwcarrier = models.CharField(max_length=100, blank=True, null=True)
    active_handlecompare = models.CharField(max_length=100, blank=True, null=True)
    other_fcw = models.CharField(max_length=100, blank=True, null=True)

    # Categories created at runtime: {"category_value": "product_variant"}
    custom_parts = models.JSONField(default=dict, blank=True)

    def __str__(self):
        return f"{self.bikemake} {self.bikemodel} ({self.firstyear}-{self.lastyear})"

    def get_part_value(self, category_value):
        """Value assigned to a fixed slot or custom category, or None"""
        if category_value in ATTRIBUTE_SLOTS:
            return getattr(self, category_value)
        return (self.custom_parts or {}).get(category_value)

    def set_part_value(self, category_value, product_variant):
        """Assign (or clear with an empty value) a part for a slot or custom category"""
        value = product_variant or None
        if category_value in ATTRIBUTE_SLOTS:
            setattr(self, category_value, value)
            return category_value
        custom_parts = dict(self.custom_parts or {})
        custom_parts[category_value] = value
        self.custom_parts = custom_parts
        return 'custom_parts'

    def get_parts(self):
        """Every fixed slot plus custom categories as one dict"""
        parts = {slot: getattr(self, slot) for slot in ATTRIBUTE_SLOTS}
        for key, value in (self.custom_parts or {}).items():
            parts.setdefault(key, value)
        return parts

    def has_assigned_parts(self):
        return any(
            isinstance(value, str) and value.strip()
            for value in self.get_parts().values()
        )

    class Meta:
        db_table = 'motorcycles'
        ordering = ['bikemake', 'bikemodel', 'firstyear']
        indexes = [
            models.Index(fields=['bikemake', 'bikemodel'], name='motorcycles_make_model_idx'),
            models.Index(fields=['firstyear', 'lastyear'], name='motorcycles_years_idx'),
        ]


class MotorcycleCategoryConfig(models.Model):
    """Bike category / subcategory taxonomy (e.g. Off-Road > MX/Enduro)"""
    category = models.CharField(max_length=100)
    subcategory = models.CharField(max_length=100, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        if self.subcategory:
            return f"{self.category} > {self.subcategory}"
        return self.category

    class Meta:
        db_table = 'motorcycle_category_config'
        ordering = ['sort_order', 'category', 'subcategory']


class SearchAnalytics(models.Model):
    """One row per storefront/admin search"""
    search_query = models.CharField(max_length=255)
    results_count = models.IntegerField(default=0)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.search_query} ({self.results_count})"

    class Meta:
        db_table = 'search_analytics'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['search_query'], name='search_analytics_query_idx'),
            models.Index(fields=['-created_at'], name='search_analytics_created_idx'),
        ]
