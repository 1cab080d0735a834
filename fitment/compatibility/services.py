"""
Compatible-parts pipeline: extract part values, match the live catalog,
resolve each match to a display category.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from fitment.catalog.models import PartCategoryTag, PartSection
from fitment.catalog.utils import OTHERS_SECTION_KEY
from fitment.commerce.client import CommerceProduct, CommerceVariant, get_commerce_client
from fitment.commerce.exceptions import CommerceUnavailable
from .extractor import extract_part_values
from .matcher import match_products
from .resolver import CategoryConfig, Resolution, resolve_category, build_alternative_variants

logger = logging.getLogger(__name__)


@dataclass
class CompatiblePart:
    product: CommerceProduct
    matched_variant: Optional[CommerceVariant]
    match_type: str
    resolution: Resolution
    alternative_variants: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.product.to_dict()
        data.update({
            'matched_variant': self.matched_variant.to_dict() if self.matched_variant else None,
            'match_type': self.match_type,
            'alternative_variants': self.alternative_variants,
            **self.resolution.to_dict(),
        })
        return data


@dataclass
class CompatibilityResult:
    motorcycle_recid: Any
    parts: List[CompatiblePart] = field(default_factory=list)
    # False when the catalog could not be fetched; parts is then empty
    upstream_available: bool = True
    error: Optional[str] = None

    def grouped(self, section_order: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Parts grouped by section, in section order with "others" last"""
        groups: Dict[str, Dict[str, Any]] = {}
        for part in self.parts:
            key = part.resolution.section_key
            group = groups.setdefault(key, {
                'section_key': key,
                'section_label': part.resolution.section_label,
                'parts': [],
            })
            group['parts'].append(part.to_dict())

        order = {key: index for index, key in enumerate(section_order or [])}

        def sort_key(key):
            if key == OTHERS_SECTION_KEY:
                return (2, 0, key)
            if key in order:
                return (0, order[key], key)
            return (1, 0, key)

        return [groups[key] for key in sorted(groups, key=sort_key)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'motorcycle_recid': self.motorcycle_recid,
            'upstream_available': self.upstream_available,
            'error': self.error,
            'parts': [part.to_dict() for part in self.parts],
        }


def load_category_config() -> CategoryConfig:
    return CategoryConfig(
        list(PartCategoryTag.objects.all()),
        list(PartSection.objects.all()),
    )


def fetch_products(client=None):
    """Live catalog; raises CommerceUnavailable"""
    if client is None:
        client = get_commerce_client()
    return client.list_products()


def find_compatible_parts(motorcycle, client=None, products=None, config=None) -> CompatibilityResult:
    """
    Run the pipeline for one motorcycle.

    `products` may be supplied when the caller already fetched the catalog;
    otherwise it is fetched through `client` (or the stored commerce session).
    An unreachable catalog yields an empty result with upstream_available=False.
    """
    recid = getattr(motorcycle, 'recid', None)
    if products is None:
        try:
            products = fetch_products(client)
        except CommerceUnavailable as e:
            logger.warning(f"Compatible parts for motorcycle {recid} unavailable: {e}")
            return CompatibilityResult(recid, upstream_available=False, error=str(e))

    if config is None:
        config = load_category_config()

    part_values = extract_part_values(motorcycle)
    matches = match_products(part_values, products)

    parts = []
    for match in matches:
        parts.append(CompatiblePart(
            product=match.product,
            matched_variant=match.matched_variant,
            match_type=match.match_type,
            resolution=resolve_category(match, motorcycle, config),
            alternative_variants=build_alternative_variants(match.product, motorcycle, match.matched_variant),
        ))
    logger.debug(f"Motorcycle {recid}: {len(parts)} compatible of {len(products)} products")
    return CompatibilityResult(recid, parts=parts)
