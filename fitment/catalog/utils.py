"""Helpers for part category configuration"""
import json
import logging

logger = logging.getLogger(__name__)

OTHERS_SECTION_KEY = 'others'
OTHERS_SECTION_LABEL = 'Others'

DEFAULT_SECTIONS = [
    ('handlebars', 'Handlebars'),
    ('frontSprocket', 'Front Sprocket'),
    ('rearSprockets', 'Rear Sprockets'),
    ('chain', 'Chain'),
    ('brakePads', 'Brake Pads'),
    ('barMounts', 'Bar Mounts'),
    ('driveConversions', 'Drive Conversions'),
    (OTHERS_SECTION_KEY, OTHERS_SECTION_LABEL),
]


def parse_product_tags(value):
    """
    Normalise a product tag payload into a list of trimmed strings.

    Accepts a list, a JSON-encoded list or a plain string. A string that is
    not valid JSON is kept whole as a single tag.
    """
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        try:
            decoded = json.loads(raw)
        except ValueError:
            logger.debug(f"Product tags are not JSON, using raw value: {raw!r}")
            return [raw]
        if isinstance(decoded, str):
            decoded = [decoded]
        elif not isinstance(decoded, list):
            return [raw]
        value = decoded
    if not isinstance(value, (list, tuple)):
        raise ValueError('Product tags must be a list of strings')
    tags = []
    for tag in value:
        if tag is None:
            continue
        text = str(tag).strip()
        if text:
            tags.append(text)
    return tags


# Built-in (section, label) for each fixed motorcycle slot, used when no
# PartCategoryTag has been configured for the slot
SLOT_DEFAULTS = {
    'oe_handlebar': ('handlebars', 'OE Handlebar'),
    'handlebars_78': ('handlebars', '7/8" Handlebars'),
    'twinwall': ('handlebars', 'Twinwall Handlebars'),
    'fatbar': ('handlebars', 'Fatbar Handlebars'),
    'fatbar36': ('handlebars', 'Fatbar 36 Handlebars'),
    'clipon': ('handlebars', 'Clip-ons'),
    'active_handlecompare': ('handlebars', 'Handlebar Comparison'),
    'grips': ('handlebars', 'Grips'),
    'oe_fcw': ('frontSprocket', 'OE Front Sprocket'),
    'fcwgroup': ('frontSprocket', 'Front Sprocket Group'),
    'fcwgroup_range': ('frontSprocket', 'Front Sprocket Range'),
    'other_fcw': ('frontSprocket', 'Other Front Sprocket'),
    'oe_rcw': ('rearSprockets', 'OE Rear Sprocket'),
    'rcwgroup': ('rearSprockets', 'Rear Sprocket Group'),
    'rcwgroup_range': ('rearSprockets', 'Rear Sprocket Range'),
    'twinring': ('rearSprockets', 'Twinring Rear Sprocket'),
    'rcwcarrier': ('rearSprockets', 'Rear Sprocket Carrier'),
    'oe_chain': ('chain', 'OE Chain'),
    'r1_chain': ('chain', 'R1 Chain'),
    'r3_chain': ('chain', 'R3 Chain'),
    'r4_chain': ('chain', 'R4 Chain'),
    'rr4_chain': ('chain', 'RR4 Chain'),
    'front_brakepads': ('brakePads', 'Front Brake Pads'),
    'rear_brakepads': ('brakePads', 'Rear Brake Pads'),
    'oe_barmount': ('barMounts', 'OE Bar Mount'),
    'barmount28': ('barMounts', 'Bar Mount 28mm'),
    'barmount36': ('barMounts', 'Bar Mount 36mm'),
    'fcwconv': ('driveConversions', 'Front Sprocket Conversion'),
    'rcwconv': ('driveConversions', 'Rear Sprocket Conversion'),
    'chainconv': ('driveConversions', 'Chain Conversion'),
    'cam': (OTHERS_SECTION_KEY, 'Cam'),
}
