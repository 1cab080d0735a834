"""
Shopify OAuth install flow: authorize URL, callback HMAC/state checks and
the authorization code exchange.
"""
from urllib.parse import urlencode
import hashlib
import hmac
import logging
import re
import secrets

import requests
from django.core.cache import cache

from .client import commerce_setting
from .exceptions import CommerceAuthError, CommerceUnavailable
from .models import ShopSession

logger = logging.getLogger(__name__)

SHOP_DOMAIN_RE = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$')
STATE_CACHE_PREFIX = 'shopify_oauth_state'
STATE_TTL = 600


def normalize_shop_domain(shop):
    """Return `name.myshopify.com` for a valid shop parameter, else None"""
    if not shop:
        return None
    shop = shop.strip().lower()
    if not shop.endswith('.myshopify.com'):
        shop = f"{shop}.myshopify.com"
    return shop if SHOP_DOMAIN_RE.match(shop) else None


def callback_url():
    return f"{commerce_setting('SHOPIFY_APP_URL').rstrip('/')}/api/v1/auth/shopify/callback/"


def begin_install(shop):
    """Store a one-time state for `shop` and return the authorize URL"""
    state = secrets.token_urlsafe(24)
    cache.set(f"{STATE_CACHE_PREFIX}:{state}", shop, STATE_TTL)
    query = urlencode({
        'client_id': commerce_setting('SHOPIFY_API_KEY'),
        'scope': commerce_setting('SHOPIFY_SCOPES', 'read_products,write_products'),
        'redirect_uri': callback_url(),
        'state': state,
    })
    return f"https://{shop}/admin/oauth/authorize?{query}"


def verify_hmac(params):
    """Check the callback's hmac against the remaining query parameters"""
    secret = commerce_setting('SHOPIFY_API_SECRET')
    received = params.get('hmac', '')
    if not secret or not received:
        return False
    message = '&'.join(
        f"{key}={params[key]}" for key in sorted(params) if key not in ('hmac', 'signature')
    )
    digest = hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()
    return hmac.compare_digest(digest, received)


def consume_state(state, shop):
    """One-time state check; the state is dropped whether or not it matches"""
    if not state:
        return False
    key = f"{STATE_CACHE_PREFIX}:{state}"
    expected_shop = cache.get(key)
    cache.delete(key)
    return expected_shop == shop


def exchange_code(shop, code):
    """Swap the authorization code for an offline access token"""
    try:
        response = requests.post(
            f"https://{shop}/admin/oauth/access_token",
            json={
                'client_id': commerce_setting('SHOPIFY_API_KEY'),
                'client_secret': commerce_setting('SHOPIFY_API_SECRET'),
                'code': code,
            },
            timeout=float(commerce_setting('SHOPIFY_TIMEOUT_SECONDS', 15)),
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Access token exchange for {shop} failed: {str(e)}")
        raise CommerceUnavailable(f'Access token exchange failed: {str(e)}') from e
    if response.status_code >= 400:
        logger.error(f"Access token exchange for {shop} returned HTTP {response.status_code}")
        raise CommerceAuthError(f'Access token exchange returned HTTP {response.status_code}')
    return response.json()


def complete_install(params):
    """
    Validate an OAuth callback and persist the resulting ShopSession.
    Raises CommerceAuthError for tampered or replayed callbacks.
    """
    shop = normalize_shop_domain(params.get('shop'))
    if not shop:
        raise CommerceAuthError('Invalid shop domain')
    if not verify_hmac(params):
        raise CommerceAuthError('HMAC verification failed')
    if not consume_state(params.get('state'), shop):
        raise CommerceAuthError('OAuth state mismatch')
    code = params.get('code')
    if not code:
        raise CommerceAuthError('Missing authorization code')

    token_data = exchange_code(shop, code)
    access_token = token_data.get('access_token')
    if not access_token:
        raise CommerceAuthError('No access token in exchange response')

    session, _ = ShopSession.objects.update_or_create(
        session_id=f"offline_{shop}",
        defaults={
            'shop': shop,
            'access_token': access_token,
            'scope': token_data.get('scope'),
            'is_online': False,
            'state': params.get('state'),
        },
    )
    logger.info(f"Stored commerce session for {shop}")
    return session
