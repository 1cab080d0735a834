"""
Collect the part identifiers assigned to a motorcycle.

Works on a Motorcycle instance or any mapping/object exposing the slot names,
so the matching pipeline can be exercised without a database.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional

from fitment.motorcycles.models import ATTRIBUTE_SLOTS, GROUP_SLOTS


@dataclass
class PartValues:
    values: List[str] = field(default_factory=list)
    # Group slot values to match as a prefix (family) instead of exactly
    prefix_candidates: List[str] = field(default_factory=list)


def slot_value(motorcycle: Any, slot: str) -> Optional[str]:
    if isinstance(motorcycle, Mapping):
        return motorcycle.get(slot)
    return getattr(motorcycle, slot, None)


def custom_parts_of(motorcycle: Any) -> Mapping:
    custom_parts = slot_value(motorcycle, 'custom_parts')
    return custom_parts if isinstance(custom_parts, Mapping) else {}


def clean(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def extract_part_values(motorcycle: Any) -> PartValues:
    """Every non-blank slot value plus custom parts, in collection order"""
    part_values = PartValues()

    for slot in ATTRIBUTE_SLOTS:
        value = clean(slot_value(motorcycle, slot))
        if value:
            part_values.values.append(value)

    for value in custom_parts_of(motorcycle).values():
        value = clean(value)
        if value:
            part_values.values.append(value)

    for group_slot, oe_slot in GROUP_SLOTS.items():
        group_value = clean(slot_value(motorcycle, group_slot))
        if group_value and not clean(slot_value(motorcycle, oe_slot)):
            part_values.prefix_candidates.append(group_value)

    return part_values
