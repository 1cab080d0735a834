"""
Commerce platform (Shopify Admin REST) product client.
Products are fetched live on every call and never cached locally.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import os

import requests
from django.conf import settings

from .exceptions import CommerceUnavailable

logger = logging.getLogger(__name__)

PAGE_SIZE = 250


def commerce_setting(name, default=''):
    return getattr(settings, name, os.getenv(name, default))


def split_tags(tags) -> List[str]:
    """Shopify sends tags as one comma separated string"""
    if not tags:
        return []
    if isinstance(tags, (list, tuple)):
        return [str(tag).strip() for tag in tags if str(tag).strip()]
    return [tag.strip() for tag in str(tags).split(',') if tag.strip()]


@dataclass
class CommerceVariant:
    id: str
    title: str = ''
    sku: Optional[str] = None
    price: Optional[str] = None
    inventory_quantity: int = 0
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None

    @property
    def available(self) -> bool:
        return (self.inventory_quantity or 0) > 0

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'CommerceVariant':
        return cls(
            id=str(data.get('id')),
            title=data.get('title') or '',
            sku=data.get('sku') or None,
            price=data.get('price'),
            inventory_quantity=data.get('inventory_quantity') or 0,
            option1=data.get('option1'),
            option2=data.get('option2'),
            option3=data.get('option3'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'sku': self.sku,
            'price': self.price,
            'inventory_quantity': self.inventory_quantity,
            'option1': self.option1,
            'option2': self.option2,
            'option3': self.option3,
            'available': self.available,
        }


@dataclass
class CommerceProduct:
    id: str
    title: str
    sku: Optional[str] = None
    price: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None
    image_url: Optional[str] = None
    product_type: Optional[str] = None
    variants: List[CommerceVariant] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'CommerceProduct':
        """Build from a Shopify product payload; SKU and price come from the first variant"""
        variants = [CommerceVariant.from_api(v) for v in data.get('variants') or []]
        images = data.get('images') or []
        return cls(
            id=str(data.get('id')),
            title=data.get('title') or '',
            sku=variants[0].sku if variants else None,
            price=variants[0].price if variants else '0',
            tags=split_tags(data.get('tags')),
            description=data.get('body_html') or None,
            image_url=images[0].get('src') if images else None,
            product_type=data.get('product_type') or None,
            variants=variants,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'sku': self.sku,
            'price': self.price,
            'tags': list(self.tags),
            'description': self.description,
            'image_url': self.image_url,
            'category': self.product_type,
            'variants': [variant.to_dict() for variant in self.variants],
        }

    def matches_search(self, term: str) -> bool:
        needle = term.strip().lower()
        if not needle:
            return True
        if needle in self.title.lower():
            return True
        if self.sku and needle in self.sku.lower():
            return True
        return any(needle in tag.lower() for tag in self.tags)


class ShopifyClient:
    """Authenticated client for one shop; construct it per request and pass it along"""

    def __init__(self, shop: str, access_token: str, api_version: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        if not shop or not access_token:
            raise CommerceUnavailable('No authenticated commerce session')
        self.shop = shop
        self.api_version = api_version or commerce_setting('SHOPIFY_API_VERSION', '2024-07')
        self.timeout = timeout or float(commerce_setting('SHOPIFY_TIMEOUT_SECONDS', 15))
        self.session = session or requests.Session()
        self.session.headers.update({
            'X-Shopify-Access-Token': access_token,
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

    @property
    def base_url(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Commerce API {method} {url} failed: {str(e)}")
            raise CommerceUnavailable(f'Commerce API request failed: {str(e)}') from e
        if response.status_code >= 400:
            logger.warning(f"Commerce API {method} {url} returned HTTP {response.status_code}")
            raise CommerceUnavailable(f'Commerce API returned HTTP {response.status_code}')
        return response

    def _decode(self, response: requests.Response, key: str, parse):
        """Parse `key` out of a JSON body; a body that is not the expected JSON is an outage"""
        try:
            return parse(response.json().get(key))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Commerce API returned an unreadable body for {key}: {str(e)}")
            raise CommerceUnavailable(f'Commerce API returned an unreadable response: {str(e)}') from e

    def list_products(self) -> List[CommerceProduct]:
        """Every product with its variants, following Link-header pagination"""
        products = []
        url = f"{self.base_url}/products.json"
        params = {'limit': PAGE_SIZE}
        while url:
            response = self._request('GET', url, params=params)
            products.extend(self._decode(
                response, 'products', lambda items: [CommerceProduct.from_api(p) for p in items or []]
            ))
            url = response.links.get('next', {}).get('url')
            # The next-page URL already carries page_info and limit
            params = None

        variant_count = sum(len(p.variants) for p in products)
        logger.info(f"Fetched {len(products)} products with {variant_count} variants from {self.shop}")
        return products

    def get_product(self, product_id: str) -> Optional[CommerceProduct]:
        try:
            response = self.session.request(
                'GET', f"{self.base_url}/products/{product_id}.json", timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Commerce API product {product_id} fetch failed: {str(e)}")
            raise CommerceUnavailable(f'Commerce API request failed: {str(e)}') from e
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise CommerceUnavailable(f'Commerce API returned HTTP {response.status_code}')
        return self._decode(response, 'product', lambda item: CommerceProduct.from_api(item or {}))

    def update_product_tags(self, product_id: str, tags: List[str]) -> CommerceProduct:
        payload = {'product': {'id': product_id, 'tags': ', '.join(tags)}}
        response = self._request('PUT', f"{self.base_url}/products/{product_id}.json", json=payload)
        logger.info(f"Updated tags for product {product_id} on {self.shop}")
        return self._decode(response, 'product', lambda item: CommerceProduct.from_api(item or {}))


def get_commerce_client(shop: Optional[str] = None) -> ShopifyClient:
    """
    Client for the most recently stored shop session, or the statically
    configured shop/token pair. Raises CommerceUnavailable when neither exists.
    """
    from .models import ShopSession

    sessions = ShopSession.objects.exclude(access_token='')
    if shop:
        sessions = sessions.filter(shop=shop)
    stored = sessions.order_by('-updated_at').first()
    if stored:
        return ShopifyClient(stored.shop, stored.access_token)

    configured_shop = commerce_setting('SHOPIFY_SHOP')
    configured_token = commerce_setting('SHOPIFY_ACCESS_TOKEN')
    if configured_shop and configured_token and (not shop or shop == configured_shop):
        return ShopifyClient(configured_shop, configured_token)

    raise CommerceUnavailable('No authenticated commerce session')
