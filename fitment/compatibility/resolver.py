"""
Assign a display section and category to each compatible product.

Resolution order, first hit wins:

1. the matched SKU equals one of the motorcycle's original-equipment slots
   (the product is flagged as OE)
2. the matched SKU equals any other slot or custom part, or the title
   matches a group slot
3. the product's tags scored against the configured category tags
4. the "others" section
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional

from fitment.catalog.utils import DEFAULT_SECTIONS, SLOT_DEFAULTS, OTHERS_SECTION_KEY, OTHERS_SECTION_LABEL
from fitment.motorcycles.models import ATTRIBUTE_SLOTS, GROUP_SLOTS, OE_SLOTS
from .extractor import slot_value, custom_parts_of
from .matcher import ProductMatch, normalize


@dataclass
class Resolution:
    section_key: str
    section_label: str
    category_value: Optional[str]
    category_label: str
    is_oe: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CategoryConfig:
    """Lookup over configured category tags and section labels"""

    def __init__(self, category_tags: Iterable[Any], sections: Optional[Any] = None):
        self.category_tags = sorted(
            category_tags,
            key=lambda tag: (getattr(tag, 'sort_order', 0) or 0, tag.category_value),
        )
        self.by_value = {tag.category_value: tag for tag in self.category_tags}
        self.section_labels = dict(DEFAULT_SECTIONS)
        if isinstance(sections, dict):
            self.section_labels.update(sections)
        elif sections is not None:
            self.section_labels.update({s.section_key: s.section_label for s in sections})

    def section_label(self, section_key: str) -> str:
        return self.section_labels.get(section_key, section_key)

    def for_tag(self, tag: Any, is_oe: bool = False) -> Resolution:
        section_key = tag.assigned_section or OTHERS_SECTION_KEY
        return Resolution(section_key, self.section_label(section_key),
                          tag.category_value, tag.category_label, is_oe)

    def for_slot(self, slot: str, is_oe: bool = False) -> Resolution:
        """A slot's configured category, else its built-in default"""
        tag = self.by_value.get(slot)
        if tag is not None:
            return self.for_tag(tag, is_oe)
        section_key, label = SLOT_DEFAULTS.get(slot, (OTHERS_SECTION_KEY, slot))
        return Resolution(section_key, self.section_label(section_key), slot, label, is_oe)

    def others(self) -> Resolution:
        return Resolution(OTHERS_SECTION_KEY, OTHERS_SECTION_LABEL, None, OTHERS_SECTION_LABEL, False)


def matching_group_slot(product: Any, motorcycle: Any) -> Optional[str]:
    """First group slot whose value equals or prefixes the product title"""
    title = normalize(product.title)
    if not title:
        return None
    for group_slot in GROUP_SLOTS:
        group_value = normalize(slot_value(motorcycle, group_slot))
        if group_value and (title == group_value or title.startswith(group_value)):
            return group_slot
    return None


def _resolve_by_tags(product_tags: List[str], config: CategoryConfig) -> Optional[Any]:
    """
    Best category tag for the product's tags.

    Most exact tag matches wins, ties go to the category with fewer
    configured tags, then configuration order. With no exact match anywhere
    the first category sharing a substring with a product tag is used.
    """
    product_tag_set = {normalize(tag) for tag in product_tags if normalize(tag)}
    if not product_tag_set:
        return None

    best_tag = None
    best_key = None
    for tag in config.category_tags:
        configured = {normalize(t) for t in (tag.product_tags or []) if normalize(t)}
        if not configured:
            continue
        exact = len(configured & product_tag_set)
        if exact == 0:
            continue
        key = (exact, -len(configured))
        if best_key is None or key > best_key:
            best_tag, best_key = tag, key
    if best_tag is not None:
        return best_tag

    for tag in config.category_tags:
        for configured in (normalize(t) for t in (tag.product_tags or [])):
            if not configured:
                continue
            if any(configured in product_tag or product_tag in configured for product_tag in product_tag_set):
                return tag
    return None


def resolve_category(match: ProductMatch, motorcycle: Any, category_tags: Iterable[Any],
                     sections: Optional[Any] = None) -> Resolution:
    config = category_tags if isinstance(category_tags, CategoryConfig) else CategoryConfig(category_tags, sections)
    sku = normalize(match.matched_sku)

    if sku:
        for slot in OE_SLOTS:
            if normalize(slot_value(motorcycle, slot)) == sku:
                return config.for_slot(slot, is_oe=True)

        for slot in ATTRIBUTE_SLOTS:
            if slot in OE_SLOTS:
                continue
            if normalize(slot_value(motorcycle, slot)) == sku:
                return config.for_slot(slot)

        for key, value in custom_parts_of(motorcycle).items():
            if normalize(value) == sku:
                return config.for_slot(key)

    group_slot = matching_group_slot(match.product, motorcycle)
    if group_slot is not None:
        return config.for_slot(group_slot)

    tag = _resolve_by_tags(match.product.tags, config)
    if tag is not None:
        return config.for_tag(tag)

    return config.others()


def build_alternative_variants(product: Any, motorcycle: Any, matched_variant: Optional[Any] = None) -> List[Dict[str, Any]]:
    """
    Every variant of a group-matched product with its own OE flag, OE first.
    Empty unless the title matches a group slot and there is more than one variant.
    """
    variants = product.variants or []
    group_slot = matching_group_slot(product, motorcycle)
    if group_slot is None or len(variants) <= 1:
        return []

    oe_value = normalize(slot_value(motorcycle, GROUP_SLOTS[group_slot]))
    alternatives = []
    for variant in variants:
        entry = variant.to_dict()
        entry['is_oe'] = bool(oe_value) and normalize(variant.sku) == oe_value
        entry['is_matched'] = matched_variant is not None and variant.id == matched_variant.id
        alternatives.append(entry)
    alternatives.sort(key=lambda entry: not entry['is_oe'])
    return alternatives
