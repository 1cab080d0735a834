"""
Test suite for compatibility matching
Tests: part value extraction, product matching, category resolution, and the compatible-parts endpoints
"""
from types import SimpleNamespace
from unittest import mock
from django.test import TestCase, SimpleTestCase
from rest_framework import status
import requests
from fitment.commerce.client import ShopifyClient
from fitment.commerce.exceptions import CommerceUnavailable
from fitment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .extractor import extract_part_values
from .matcher import (
    match_product, match_products,
    MATCH_SKU, MATCH_VARIANT_SKU, MATCH_TITLE_PREFIX, MATCH_VARIANT_PREFIX
)
from .resolver import CategoryConfig, resolve_category, build_alternative_variants
from .services import find_compatible_parts

make_product = TestDataFactory.make_product


def category_tag(category_value, product_tags, assigned_section=None, sort_order=0, category_label=None):
    return SimpleNamespace(
        category_value=category_value,
        category_label=category_label or category_value,
        product_tags=product_tags,
        assigned_section=assigned_section,
        sort_order=sort_order,
    )


class PartValueExtractionTests(SimpleTestCase):
    """Test collection of part values from a motorcycle"""

    def test_blank_values_are_skipped(self):
        """Test that empty and whitespace-only slots never become part values"""
        part_values = extract_part_values({
            'oe_handlebar': '  ',
            'front_brakepads': ' BRK-001 ',
            'grips': '',
            'custom_parts': {'tyre': '   ', 'levers': 'LEV-9'},
        })
        self.assertEqual(part_values.values, ['BRK-001', 'LEV-9'])
        self.assertNotIn('', part_values.values)

    def test_group_is_prefix_candidate_when_oe_empty(self):
        """Test that the front sprocket group becomes a prefix candidate without an OE sprocket"""
        part_values = extract_part_values({'fcwgroup': '292U-520', 'oe_fcw': ''})
        self.assertEqual(part_values.prefix_candidates, ['292U-520'])

    def test_group_is_not_prefix_candidate_when_oe_set(self):
        """Test that a recorded OE sprocket suppresses the family match"""
        part_values = extract_part_values({'fcwgroup': '292U-520', 'oe_fcw': '292U-520-13'})
        self.assertEqual(part_values.prefix_candidates, [])
        self.assertIn('292U-520-13', part_values.values)


class ProductMatchingTests(SimpleTestCase):
    """Test the product matching rules"""

    def test_top_level_sku_case_and_whitespace_insensitive(self):
        """Test that ' brk-001 ' matches part value 'BRK-001'"""
        part_values = extract_part_values({'front_brakepads': 'BRK-001'})
        product = make_product('1', 'Brake Pads', variant_skus=[' brk-001 '])
        match = match_product(part_values, product)
        self.assertIsNotNone(match)
        self.assertEqual(match.match_type, MATCH_SKU)
        self.assertEqual(match.matched_variant.sku, ' brk-001 ')

    def test_variant_sku_match(self):
        """Test that a later variant's SKU matches exactly"""
        part_values = extract_part_values({'oe_rcw': '808-520-48'})
        product = make_product('2', 'Rear Sprocket', variant_skus=['808-520-47', '808-520-48'])
        match = match_product(part_values, product)
        self.assertEqual(match.match_type, MATCH_VARIANT_SKU)
        self.assertEqual(match.matched_variant.sku, '808-520-48')

    def test_title_prefix_family_match(self):
        """Test that a group value matches the title of the whole family"""
        part_values = extract_part_values({'fcwgroup': '292U-520'})
        product = make_product('3', '292U-520 Ultralight Front Sprocket',
                               variant_skus=['292U-520-12', '292U-520-13', '292U-520-14'])
        match = match_product(part_values, product)
        self.assertEqual(match.match_type, MATCH_TITLE_PREFIX)
        self.assertIsNone(match.matched_variant)
        self.assertTrue(match.is_family_match)

    def test_variant_prefix_match(self):
        """Test that a group value matches a variant SKU by prefix"""
        part_values = extract_part_values({'rcwgroup': '210-520'})
        product = make_product('4', 'Steel Rear Sprocket', variant_skus=['999-1', '210-520-50'])
        match = match_product(part_values, product)
        self.assertEqual(match.match_type, MATCH_VARIANT_PREFIX)
        self.assertEqual(match.matched_variant.sku, '210-520-50')

    def test_exact_wins_over_prefix(self):
        """Test that an exact variant match is not shadowed by the title family match"""
        part_values = extract_part_values({'fcwgroup': '292U-520', 'grips': '292U-520-14'})
        product = make_product('5', '292U-520 Ultralight Front Sprocket',
                               variant_skus=['292U-520-12', '292U-520-13', '292U-520-14'])
        match = match_product(part_values, product)
        self.assertEqual(match.match_type, MATCH_VARIANT_SKU)
        self.assertEqual(match.matched_variant.sku, '292U-520-14')

    def test_no_match(self):
        """Test that unrelated products are not compatible"""
        part_values = extract_part_values({'oe_handlebar': 'HB-1'})
        product = make_product('6', 'Chain', variant_skus=['CH-520'])
        self.assertIsNone(match_product(part_values, product))

    def test_match_products_keeps_catalog_order(self):
        """Test that compatible products are returned in catalog order"""
        part_values = extract_part_values({'oe_handlebar': 'HB-1', 'oe_chain': 'CH-520'})
        products = [
            make_product('b', 'Chain', variant_skus=['CH-520']),
            make_product('x', 'Unrelated', variant_skus=['ZZZ']),
            make_product('a', 'Handlebar', variant_skus=['HB-1']),
        ]
        self.assertEqual([m.product.id for m in match_products(part_values, products)], ['b', 'a'])


class CategoryResolutionTests(SimpleTestCase):
    """Test category and section resolution"""

    def resolve(self, motorcycle, product, tags=()):
        match = match_product(extract_part_values(motorcycle), product)
        return resolve_category(match, motorcycle, CategoryConfig(list(tags)))

    def test_oe_brake_pads(self):
        """Test that an OE brake pad match resolves to Front Brake Pads and is flagged OE"""
        tags = [category_tag('front_brakepads', ['brake pads'], assigned_section='brakePads',
                             category_label='Front Brake Pads')]
        resolution = self.resolve({'front_brakepads': 'BRK-001'},
                                  make_product('1', 'Pads', variant_skus=['brk-001']), tags)
        self.assertEqual(resolution.section_key, 'brakePads')
        self.assertEqual(resolution.section_label, 'Brake Pads')
        self.assertEqual(resolution.category_label, 'Front Brake Pads')
        self.assertTrue(resolution.is_oe)

    def test_oe_by_top_level_sku_with_different_variant_sku(self):
        """Test that the top-level SKU drives OE resolution even when the first variant differs"""
        tags = [category_tag('front_brakepads', ['brake pads'], assigned_section='brakePads',
                             category_label='Front Brake Pads')]
        product = make_product('1', 'Pads', sku='brk-001', variant_skus=['BRK-001-KIT'])
        match = match_product(extract_part_values({'front_brakepads': 'BRK-001'}), product)
        self.assertEqual(match.match_type, MATCH_SKU)
        self.assertEqual(match.matched_sku, 'brk-001')

        resolution = resolve_category(match, {'front_brakepads': 'BRK-001'}, CategoryConfig(tags))
        self.assertEqual(resolution.section_key, 'brakePads')
        self.assertTrue(resolution.is_oe)

    def test_unconfigured_slot_uses_default(self):
        """Test that a slot without configuration falls back to its built-in section"""
        resolution = self.resolve({'twinwall': 'TW-1'}, make_product('1', 'Twinwall', variant_skus=['TW-1']))
        self.assertEqual(resolution.section_key, 'handlebars')
        self.assertFalse(resolution.is_oe)

    def test_others_fallback(self):
        """Test that a product with no slot or tag match lands in Others"""
        motorcycle = {'rcwgroup': '210-520'}
        product = make_product('1', 'Steel Rear Sprocket', variant_skus=['210-520-50'], tags=['steel'])
        match = match_product(extract_part_values(motorcycle), product)
        resolution = resolve_category(match, {}, [])
        self.assertEqual(resolution.section_key, 'others')
        self.assertEqual(resolution.section_label, 'Others')

    def test_tag_scoring_prefers_fewer_configured_tags(self):
        """Test that on an exact-match tie the more specific category wins"""
        tags = [
            category_tag('broad', ['sprocket', 'steel', 'rear', 'drive'], assigned_section='rearSprockets', sort_order=0),
            category_tag('narrow', ['sprocket', 'alloy'], assigned_section='frontSprocket', sort_order=1),
        ]
        motorcycle = {'rcwgroup': '210-520'}
        product = make_product('1', 'Sprocket', variant_skus=['210-520-50'], tags=['Sprocket'])
        match = match_product(extract_part_values(motorcycle), product)
        resolution = resolve_category(match, {}, tags)
        self.assertEqual(resolution.category_value, 'narrow')

    def test_tag_scoring_prefers_more_matches(self):
        """Test that more exact tag matches beat specificity"""
        tags = [
            category_tag('one', ['chain'], assigned_section='chain'),
            category_tag('two', ['chain', 'o-ring', 'gold'], assigned_section='chain'),
        ]
        motorcycle = {'rcwgroup': 'X'}
        product = make_product('1', 'X Chain', variant_skus=['X-1'], tags=['chain', 'o-ring'])
        match = match_product(extract_part_values(motorcycle), product)
        self.assertEqual(resolve_category(match, {}, tags).category_value, 'two')

    def test_partial_tag_fallback(self):
        """Test that substring overlap is used when no tag matches exactly"""
        tags = [category_tag('grips', ['grip'], assigned_section='handlebars')]
        motorcycle = {'rcwgroup': 'X'}
        product = make_product('1', 'X Lock-on', variant_skus=['X-1'], tags=['Lock-on Grips'])
        match = match_product(extract_part_values(motorcycle), product)
        self.assertEqual(resolve_category(match, {}, tags).category_value, 'grips')

    def test_resolution_is_deterministic(self):
        """Test that repeated resolution gives the same answer"""
        tags = [
            category_tag('a', ['x'], assigned_section='chain', sort_order=1),
            category_tag('b', ['x'], assigned_section='handlebars', sort_order=0),
        ]
        motorcycle = {'rcwgroup': 'P'}
        product = make_product('1', 'P part', variant_skus=['P-1'], tags=['x'])
        match = match_product(extract_part_values(motorcycle), product)
        results = {resolve_category(match, {}, tags).category_value for _ in range(5)}
        self.assertEqual(results, {'b'})


class AlternativeVariantTests(SimpleTestCase):
    """Test alternative variant assembly for group matches"""

    def test_family_without_oe(self):
        """Test that every variant of a family appears and none is marked OE"""
        motorcycle = {'fcwgroup': '292U-520', 'oe_fcw': ''}
        product = make_product('1', '292U-520 Ultralight Front Sprocket',
                               variant_skus=['292U-520-12', '292U-520-13', '292U-520-14'])
        alternatives = build_alternative_variants(product, motorcycle)
        self.assertEqual([a['sku'] for a in alternatives], ['292U-520-12', '292U-520-13', '292U-520-14'])
        self.assertFalse(any(a['is_oe'] for a in alternatives))

    def test_oe_variant_first(self):
        """Test that the OE variant is listed first"""
        motorcycle = {'fcwgroup': '292U-520', 'oe_fcw': '292U-520-14'}
        product = make_product('1', '292U-520 Ultralight Front Sprocket',
                               variant_skus=['292U-520-12', '292U-520-13', '292U-520-14'])
        alternatives = build_alternative_variants(product, motorcycle, product.variants[2])
        self.assertEqual(alternatives[0]['sku'], '292U-520-14')
        self.assertTrue(alternatives[0]['is_oe'])
        self.assertTrue(alternatives[0]['is_matched'])

    def test_single_variant_has_no_alternatives(self):
        """Test that single-variant products get no alternatives list"""
        motorcycle = {'fcwgroup': '292U-520'}
        product = make_product('1', '292U-520 Front Sprocket', variant_skus=['292U-520-13'])
        self.assertEqual(build_alternative_variants(product, motorcycle), [])


class CompatiblePartsServiceTests(TestCase):
    """Test the full compatibility pipeline"""

    def setUp(self):
        self.motorcycle = TestDataFactory.create_motorcycle(
            fcwgroup='292U-520', front_brakepads='BRK-001'
        )
        TestDataFactory.create_section('brakePads', 'Brake Pads')
        TestDataFactory.create_category_tag('front_brakepads', 'Front Brake Pads',
                                            product_tags=['brake pads'], assigned_section='brakePads')
        self.products = [
            make_product('10', '292U-520 Ultralight Front Sprocket',
                         variant_skus=['292U-520-12', '292U-520-13', '292U-520-14']),
            make_product('11', 'Sintered Brake Pads', sku='brk-001', variant_skus=['brk-001']),
            make_product('12', 'Unrelated Chain', variant_skus=['CH-1']),
        ]

    def test_find_compatible_parts(self):
        """Test the family and OE brake pad scenarios together"""
        result = find_compatible_parts(self.motorcycle, products=self.products)
        self.assertTrue(result.upstream_available)
        parts = {part.product.id: part for part in result.parts}
        self.assertEqual(set(parts), {'10', '11'})

        family = parts['10']
        self.assertEqual(family.resolution.section_key, 'frontSprocket')
        self.assertEqual(len(family.alternative_variants), 3)

        pads = parts['11']
        self.assertEqual(pads.resolution.category_label, 'Front Brake Pads')
        self.assertTrue(pads.resolution.is_oe)

    def test_upstream_failure_gives_empty_result(self):
        """Test that an unreachable catalog degrades to an empty result"""
        client = mock.Mock()
        client.list_products.side_effect = CommerceUnavailable('down')
        result = find_compatible_parts(self.motorcycle, client=client)
        self.assertEqual(result.parts, [])
        self.assertFalse(result.upstream_available)

    def test_unreadable_catalog_gives_empty_result(self):
        """Test that a 200 response with an HTML body degrades to an empty result"""
        session = mock.Mock()
        session.headers = {}
        response = mock.Mock(status_code=200, links={})
        response.json.side_effect = requests.exceptions.JSONDecodeError('Expecting value', '<html>maintenance</html>', 0)
        session.request.return_value = response
        client = ShopifyClient('test-shop.myshopify.com', 'token', api_version='2024-07', timeout=5, session=session)

        result = find_compatible_parts(self.motorcycle, client=client)
        self.assertEqual(result.parts, [])
        self.assertFalse(result.upstream_available)
        self.assertIn('unreadable', result.error)

    def test_grouped_puts_others_last(self):
        """Test section grouping order"""
        products = [make_product('13', 'Sticker Kit', variant_skus=['292U-520-ST'], tags=['merch'])] + self.products
        result = find_compatible_parts(self.motorcycle, products=products)
        groups = result.grouped(['brakePads', 'frontSprocket'])
        self.assertEqual([g['section_key'] for g in groups], ['brakePads', 'frontSprocket', 'others'])
        self.assertEqual(groups[2]['section_label'], 'Others')


class CompatiblePartsAPITests(TestCase):
    """Test compatible-parts endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.motorcycle = TestDataFactory.create_motorcycle(
            bikemake='KTM', bikemodel='EXC 300', firstyear=2017, lastyear=2023,
            front_brakepads='BRK-001'
        )
        self.products = [make_product('11', 'Sintered Brake Pads', variant_skus=['BRK-001'])]

    def test_compatible_parts(self):
        """Test admin compatible-parts listing"""
        client = mock.Mock()
        client.list_products.return_value = self.products
        with mock.patch('fitment.compatibility.services.get_commerce_client', return_value=client):
            response = self.client.get(f'/api/v1/motorcycles/{self.motorcycle.recid}/compatible-parts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['section_key'], 'brakePads')
        self.assertTrue(response.data[0]['is_oe'])
        self.assertEqual(response['X-Commerce-Status'], 'ok')

    def test_compatible_parts_upstream_down(self):
        """Test that an upstream outage returns an empty list, not an error"""
        with mock.patch('fitment.compatibility.services.get_commerce_client',
                        side_effect=CommerceUnavailable('No authenticated commerce session')):
            response = self.client.get(f'/api/v1/motorcycles/{self.motorcycle.recid}/compatible-parts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])
        self.assertEqual(response['X-Commerce-Status'], 'unavailable')

    def test_compatible_parts_requires_auth(self):
        """Test that the admin endpoint requires authentication"""
        self.client.logout()
        response = self.client.get(f'/api/v1/motorcycles/{self.motorcycle.recid}/compatible-parts/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_compatible_parts_not_found(self):
        """Test 404 for an unknown motorcycle"""
        response = self.client.get('/api/v1/motorcycles/1/compatible-parts/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_compatible_parts(self):
        """Test storefront compatible parts include the compatibility note"""
        self.client.logout()
        client = mock.Mock()
        client.list_products.return_value = self.products
        with mock.patch('fitment.compatibility.services.get_commerce_client', return_value=client):
            response = self.client.get(f'/api/v1/customer/motorcycles/{self.motorcycle.recid}/compatible-parts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('KTM EXC 300', response.data[0]['compatibility'])

    def test_customer_motorcycle_parts(self):
        """Test storefront search by make, model and year"""
        self.client.logout()
        with mock.patch('fitment.compatibility.views.fetch_products', return_value=self.products):
            response = self.client.get('/api/v1/customer/motorcycle-parts/',
                                       {'make': 'ktm', 'model': 'exc 300', 'year': '2019'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['motorcycle']['matching_motorcycles'], 1)
        self.assertEqual([p['id'] for p in response.data['parts']], ['11'])
        self.assertTrue(response.data['upstream_available'])

    def test_customer_motorcycle_parts_missing_params(self):
        """Test 400 when make, model or year is missing"""
        response = self.client.get('/api/v1/customer/motorcycle-parts/', {'make': 'KTM'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_motorcycle_parts_no_matches(self):
        """Test an out-of-range year returns no parts"""
        response = self.client.get('/api/v1/customer/motorcycle-parts/',
                                   {'make': 'KTM', 'model': 'EXC 300', 'year': '1990'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['parts'], [])
