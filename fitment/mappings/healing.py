"""
Self-healing for explicit part mappings.

A mapping whose product id no longer exists upstream is re-found through its
expected SKU (top-level or variant) and rewritten; when the SKU is gone too
the mapping is marked stale.
"""
import logging

from django.utils import timezone

from fitment.core.utils import create_audit_log
from fitment.compatibility.matcher import normalize

logger = logging.getLogger(__name__)


def index_products_by_sku(products):
    by_sku = {}
    for product in products:
        skus = [product.sku] + [variant.sku for variant in product.variants]
        for sku in skus:
            key = normalize(sku)
            if key:
                by_sku.setdefault(key, product)
    return by_sku


def heal_mappings(mappings, products, request=None):
    """
    Resolve mappings against the live catalog.

    Returns a list of (mapping, product) pairs for the mappings that still
    point at a product; healed and stale mappings are saved as a side effect.
    """
    by_id = {product.id: product for product in products}
    by_sku = index_products_by_sku(products)
    now = timezone.now()
    resolved = []

    for mapping in mappings:
        product = by_id.get(mapping.product_id)
        if product is not None:
            if mapping.status != 'active' or not mapping.expected_sku:
                mapping.status = 'active'
                mapping.expected_sku = mapping.expected_sku or product.sku
                mapping.product_title = product.title
                mapping.last_synced = now
                mapping.save(update_fields=['status', 'expected_sku', 'product_title', 'last_synced'])
            resolved.append((mapping, product))
            continue

        product = by_sku.get(normalize(mapping.expected_sku))
        if product is not None:
            old_product_id = mapping.product_id
            mapping.product_id = product.id
            mapping.product_title = product.title
            mapping.status = 'active'
            mapping.last_synced = now
            mapping.save(update_fields=['product_id', 'product_title', 'status', 'last_synced'])
            logger.info(f"Healed mapping {mapping.id}: product {old_product_id} -> {product.id} via SKU {mapping.expected_sku}")
            create_audit_log(
                request=request,
                action='mapping_heal',
                model_name='PartMapping',
                object_id=mapping.id,
                object_name=mapping.product_title,
                changes={'product_id': {'old': old_product_id, 'new': product.id}},
            )
            resolved.append((mapping, product))
            continue

        if mapping.status != 'stale':
            mapping.status = 'stale'
            mapping.save(update_fields=['status'])
            logger.warning(f"Mapping {mapping.id} is stale: product {mapping.product_id} / SKU {mapping.expected_sku} not found upstream")

    return resolved
