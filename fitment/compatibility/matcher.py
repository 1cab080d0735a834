"""
Decide which commerce products fit a motorcycle.

Per product the first rule that succeeds wins:

1. top-level SKU equals a part value (matched variant: the first variant)
2. a variant SKU equals a part value (matched variant: that variant)
3. the title equals or starts with a prefix candidate (whole family, no variant)
4. a variant SKU starts with a prefix candidate (matched variant: that variant)

Exact rules run before prefix rules so an exact hit is never shadowed by a
family match. Comparisons are trimmed and case-insensitive.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from fitment.commerce.client import CommerceProduct, CommerceVariant
from .extractor import PartValues, clean

MATCH_SKU = 'sku'
MATCH_VARIANT_SKU = 'variant_sku'
MATCH_TITLE_PREFIX = 'title_prefix'
MATCH_VARIANT_PREFIX = 'variant_prefix'


def normalize(value) -> str:
    return clean(value).lower()


@dataclass
class ProductMatch:
    product: CommerceProduct
    matched_variant: Optional[CommerceVariant]
    match_type: str

    @property
    def matched_sku(self) -> str:
        """The SKU that satisfied the match: top-level for SKU matches, else the variant's"""
        if self.match_type == MATCH_SKU and self.product.sku:
            return self.product.sku
        if self.matched_variant is not None and self.matched_variant.sku:
            return self.matched_variant.sku
        return self.product.sku or ''

    @property
    def is_family_match(self) -> bool:
        return self.match_type in (MATCH_TITLE_PREFIX, MATCH_VARIANT_PREFIX)


def match_product(part_values: PartValues, product: CommerceProduct) -> Optional[ProductMatch]:
    exact = {normalize(v) for v in part_values.values if normalize(v)}
    prefixes = [normalize(p) for p in part_values.prefix_candidates if normalize(p)]
    variants = product.variants or []

    sku = normalize(product.sku)
    if sku and sku in exact:
        return ProductMatch(product, variants[0] if variants else None, MATCH_SKU)

    for variant in variants:
        if normalize(variant.sku) and normalize(variant.sku) in exact:
            return ProductMatch(product, variant, MATCH_VARIANT_SKU)

    title = normalize(product.title)
    if title and any(title == prefix or title.startswith(prefix) for prefix in prefixes):
        return ProductMatch(product, None, MATCH_TITLE_PREFIX)

    for variant in variants:
        variant_sku = normalize(variant.sku)
        if variant_sku and any(variant_sku.startswith(prefix) for prefix in prefixes):
            return ProductMatch(product, variant, MATCH_VARIANT_PREFIX)

    return None


def match_products(part_values: PartValues, products: Iterable[CommerceProduct]) -> List[ProductMatch]:
    """Compatible products in catalog order"""
    matches = []
    for product in products:
        match = match_product(part_values, product)
        if match is not None:
            matches.append(match)
    return matches
