"""
Test suite for commerce integration
Tests: product client parsing and pagination, outage handling, product endpoints, and the OAuth install flow
"""
from unittest import mock
import hashlib
import hmac
from django.core.cache import cache
from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status
import requests
from fitment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fitment.commerce.client import ShopifyClient, CommerceProduct, get_commerce_client, split_tags
from fitment.commerce.exceptions import CommerceUnavailable, CommerceAuthError
from fitment.commerce.models import ShopSession
from fitment.commerce.oauth import normalize_shop_domain, verify_hmac, complete_install, STATE_CACHE_PREFIX

PRODUCT_PAYLOAD = {
    'id': 7001,
    'title': '292U-520 Ultralight Front Sprocket',
    'tags': 'sprocket, front , ultralight',
    'body_html': '<p>Lightweight</p>',
    'product_type': 'Sprockets',
    'images': [{'src': 'https://cdn.example.com/292u.jpg'}],
    'variants': [
        {'id': 1, 'title': '12T', 'sku': '292U-520-12', 'price': '39.95', 'inventory_quantity': 3},
        {'id': 2, 'title': '13T', 'sku': '292U-520-13', 'price': '39.95', 'inventory_quantity': 0},
    ],
}


def fake_response(status_code=200, payload=None, next_url=None):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.links = {'next': {'url': next_url}} if next_url else {}
    return response


def sign(params, secret):
    message = '&'.join(f"{key}={params[key]}" for key in sorted(params))
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


class CommerceProductTests(SimpleTestCase):
    """Test product payload parsing"""

    def test_from_api(self):
        """Test SKU, price, tags and image come from the payload"""
        product = CommerceProduct.from_api(PRODUCT_PAYLOAD)
        self.assertEqual(product.id, '7001')
        self.assertEqual(product.sku, '292U-520-12')
        self.assertEqual(product.price, '39.95')
        self.assertEqual(product.tags, ['sprocket', 'front', 'ultralight'])
        self.assertEqual(product.image_url, 'https://cdn.example.com/292u.jpg')
        self.assertTrue(product.variants[0].available)
        self.assertFalse(product.variants[1].available)
        self.assertEqual(product.to_dict()['category'], 'Sprockets')

    def test_split_tags(self):
        """Test tag string splitting"""
        self.assertEqual(split_tags(''), [])
        self.assertEqual(split_tags(['a ', ' ', 'b']), ['a', 'b'])

    def test_matches_search(self):
        """Test product search over title, SKU and tags"""
        product = CommerceProduct.from_api(PRODUCT_PAYLOAD)
        self.assertTrue(product.matches_search('ultralight'))
        self.assertTrue(product.matches_search('292u-520-12'))
        self.assertFalse(product.matches_search('chain'))


class ShopifyClientTests(SimpleTestCase):
    """Test the product client against a mocked HTTP session"""

    def setUp(self):
        self.session = mock.Mock()
        self.session.headers = {}
        self.client = ShopifyClient('test-shop.myshopify.com', 'token', api_version='2024-07',
                                    timeout=5, session=self.session)

    def test_list_products_follows_pagination(self):
        """Test every page is fetched through the Link header"""
        self.session.request.side_effect = [
            fake_response(payload={'products': [PRODUCT_PAYLOAD]}, next_url='https://next-page'),
            fake_response(payload={'products': [dict(PRODUCT_PAYLOAD, id=7002)]}),
        ]
        products = self.client.list_products()
        self.assertEqual([p.id for p in products], ['7001', '7002'])
        self.assertEqual(self.session.request.call_count, 2)
        self.assertEqual(self.session.request.call_args_list[1][0][1], 'https://next-page')
        self.assertEqual(self.session.headers['X-Shopify-Access-Token'], 'token')

    def test_network_error_is_unavailable(self):
        """Test transport failures raise CommerceUnavailable"""
        self.session.request.side_effect = requests.exceptions.ConnectionError('refused')
        with self.assertRaises(CommerceUnavailable):
            self.client.list_products()

    def test_http_error_is_unavailable(self):
        """Test HTTP error statuses raise CommerceUnavailable"""
        self.session.request.return_value = fake_response(status_code=401)
        with self.assertRaises(CommerceUnavailable):
            self.client.list_products()

    def test_non_json_body_is_unavailable(self):
        """Test an HTML maintenance page served with 200 raises CommerceUnavailable"""
        response = fake_response()
        response.json.side_effect = requests.exceptions.JSONDecodeError('Expecting value', '<html>maintenance</html>', 0)
        self.session.request.return_value = response
        with self.assertRaises(CommerceUnavailable):
            self.client.list_products()
        with self.assertRaises(CommerceUnavailable):
            self.client.get_product('7001')
        with self.assertRaises(CommerceUnavailable):
            self.client.update_product_tags('7001', ['a'])

    def test_unexpected_payload_shape_is_unavailable(self):
        """Test a JSON body without a product list raises CommerceUnavailable"""
        self.session.request.return_value = fake_response(payload={'products': 'oops'})
        with self.assertRaises(CommerceUnavailable):
            self.client.list_products()

    def test_get_missing_product(self):
        """Test a 404 product returns None"""
        self.session.request.return_value = fake_response(status_code=404)
        self.assertIsNone(self.client.get_product('1'))

    def test_update_product_tags(self):
        """Test tags are sent as one comma separated string"""
        self.session.request.return_value = fake_response(payload={'product': dict(PRODUCT_PAYLOAD, tags='a, b')})
        product = self.client.update_product_tags('7001', ['a', 'b'])
        self.assertEqual(product.tags, ['a', 'b'])
        self.assertEqual(self.session.request.call_args[1]['json'], {'product': {'id': '7001', 'tags': 'a, b'}})


@override_settings(SHOPIFY_SHOP='', SHOPIFY_ACCESS_TOKEN='')
class CommerceClientFactoryTests(TestCase):
    """Test client construction from stored sessions"""

    def test_no_session(self):
        """Test a missing session raises CommerceUnavailable"""
        with self.assertRaises(CommerceUnavailable):
            get_commerce_client()

    def test_stored_session(self):
        """Test the stored session is used"""
        TestDataFactory.create_shop_session(shop='bikes.myshopify.com')
        self.assertEqual(get_commerce_client().shop, 'bikes.myshopify.com')

    @override_settings(SHOPIFY_SHOP='static.myshopify.com', SHOPIFY_ACCESS_TOKEN='static-token')
    def test_configured_shop(self):
        """Test the statically configured shop is the fallback"""
        self.assertEqual(get_commerce_client().shop, 'static.myshopify.com')


class ProductAPITests(TestCase):
    """Test live product endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.products = [
            TestDataFactory.make_product('1', 'Front Sprocket', variant_skus=['F-13'], tags=['sprocket']),
            TestDataFactory.make_product('2', 'Chain', variant_skus=['C-520'], tags=['chain']),
        ]

    def test_product_list(self):
        """Test product list with search"""
        commerce = mock.Mock()
        commerce.list_products.return_value = self.products
        with mock.patch('fitment.commerce.views.get_commerce_client', return_value=commerce):
            response = self.client.get('/api/v1/products/', {'search': 'chain'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], ['2'])
        self.assertEqual(response['X-Commerce-Status'], 'ok')

    def test_product_list_unavailable(self):
        """Test an outage returns an empty list flagged unavailable"""
        with mock.patch('fitment.commerce.views.get_commerce_client',
                        side_effect=CommerceUnavailable('No authenticated commerce session')):
            response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])
        self.assertEqual(response['X-Commerce-Status'], 'unavailable')

    def test_product_detail_not_found(self):
        """Test 404 for a product the store does not have"""
        commerce = mock.Mock()
        commerce.get_product.return_value = None
        with mock.patch('fitment.commerce.views.get_commerce_client', return_value=commerce):
            response = self.client.get('/api/v1/products/404/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['needs_auth'])

    def test_update_product_tags(self):
        """Test replacing product tags from a JSON string"""
        commerce = mock.Mock()
        commerce.update_product_tags.return_value = self.products[0]
        with mock.patch('fitment.commerce.views.get_commerce_client', return_value=commerce):
            response = self.client.put('/api/v1/products/1/', {'tags': '["sprocket", "front"]'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        commerce.update_product_tags.assert_called_once_with('1', ['sprocket', 'front'])


@override_settings(SHOPIFY_API_KEY='key', SHOPIFY_API_SECRET='shh', SHOPIFY_APP_URL='https://app.example.com')
class ShopifyOAuthTests(TestCase):
    """Test the OAuth install flow"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        cache.clear()

    def test_normalize_shop_domain(self):
        """Test shop parameter normalisation"""
        self.assertEqual(normalize_shop_domain('Bikes'), 'bikes.myshopify.com')
        self.assertEqual(normalize_shop_domain('bikes.myshopify.com'), 'bikes.myshopify.com')
        self.assertIsNone(normalize_shop_domain('evil.com/x'))
        self.assertIsNone(normalize_shop_domain(''))

    def test_verify_hmac(self):
        """Test HMAC verification of callback parameters"""
        params = {'shop': 'bikes.myshopify.com', 'code': 'abc', 'state': 's1', 'timestamp': '1'}
        params['hmac'] = sign(params, 'shh')
        self.assertTrue(verify_hmac(params))
        params['code'] = 'tampered'
        self.assertFalse(verify_hmac(params))

    def test_install_redirects_to_authorize(self):
        """Test the install endpoint redirects to the shop's authorize URL"""
        response = self.client.get('/api/v1/auth/shopify/install/', {'shop': 'bikes'})
        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertTrue(response['Location'].startswith('https://bikes.myshopify.com/admin/oauth/authorize?'))

    def test_install_requires_shop(self):
        """Test the install endpoint without a shop"""
        response = self.client.get('/api/v1/auth/shopify/install/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_complete_install_stores_session(self):
        """Test a valid callback exchanges the code and stores the session"""
        cache.set(f'{STATE_CACHE_PREFIX}:s1', 'bikes.myshopify.com', 60)
        params = {'shop': 'bikes.myshopify.com', 'code': 'abc', 'state': 's1', 'timestamp': '1'}
        params['hmac'] = sign(params, 'shh')
        token_response = fake_response(payload={'access_token': 'shpat_new', 'scope': 'read_products'})
        with mock.patch('fitment.commerce.oauth.requests.post', return_value=token_response) as post:
            session = complete_install(params)
        self.assertEqual(session.access_token, 'shpat_new')
        self.assertEqual(session.session_id, 'offline_bikes.myshopify.com')
        self.assertEqual(post.call_args[1]['json']['code'], 'abc')

    def test_replayed_state_rejected(self):
        """Test a callback whose state was never issued"""
        params = {'shop': 'bikes.myshopify.com', 'code': 'abc', 'state': 'unknown', 'timestamp': '1'}
        params['hmac'] = sign(params, 'shh')
        with self.assertRaises(CommerceAuthError):
            complete_install(params)
        self.assertFalse(ShopSession.objects.exists())

    def test_callback_bad_hmac(self):
        """Test the callback endpoint rejects a bad signature"""
        response = self.client.get('/api/v1/auth/shopify/callback/',
                                   {'shop': 'bikes.myshopify.com', 'code': 'abc', 'state': 's1', 'hmac': 'bad'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_commerce_status(self):
        """Test install status for a shop"""
        response = self.client.get('/api/v1/commerce/status/', {'shop': 'bikes'})
        self.assertFalse(response.data['installed'])
        TestDataFactory.create_shop_session(shop='bikes.myshopify.com')
        response = self.client.get('/api/v1/commerce/status/', {'shop': 'bikes'})
        self.assertTrue(response.data['installed'])
        self.assertEqual(response.data['app_url'], 'https://app.example.com')
