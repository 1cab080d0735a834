"""
Test suite for explicit part mappings
Tests: mapping CRUD, bulk creation, self-healing by SKU, and mapped parts
"""
from unittest import mock
from django.test import TestCase
from rest_framework import status
from fitment.commerce.exceptions import CommerceUnavailable
from fitment.core.models import AuditLog
from fitment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fitment.mappings.healing import heal_mappings
from fitment.mappings.models import PartMapping


class MappingHealingTests(TestCase):
    """Test mapping resolution against the live catalog"""

    def setUp(self):
        self.motorcycle = TestDataFactory.create_motorcycle()
        self.products = [
            TestDataFactory.make_product('200', 'Front Sprocket', variant_skus=['JTF1501.13', 'JTF1501.14']),
            TestDataFactory.make_product('201', 'Chain', variant_skus=['520-X']),
        ]

    def test_existing_product_resolves(self):
        """Test a mapping whose product still exists"""
        mapping = TestDataFactory.create_mapping(self.motorcycle, product_id='201')
        resolved = heal_mappings([mapping], self.products)
        self.assertEqual([(m.pk, p.id) for m, p in resolved], [(mapping.pk, '201')])
        mapping.refresh_from_db()
        self.assertEqual(mapping.expected_sku, '520-X')

    def test_heal_by_variant_sku(self):
        """Test a mapping with a dead product id is re-found through its SKU"""
        mapping = TestDataFactory.create_mapping(self.motorcycle, product_id='999', expected_sku='jtf1501.14')
        resolved = heal_mappings([mapping], self.products)
        self.assertEqual(resolved[0][1].id, '200')
        mapping.refresh_from_db()
        self.assertEqual(mapping.product_id, '200')
        self.assertEqual(mapping.status, 'active')
        self.assertTrue(AuditLog.objects.filter(action='mapping_heal', object_id=str(mapping.pk)).exists())

    def test_unresolvable_mapping_is_stale(self):
        """Test a mapping with no matching product or SKU becomes stale"""
        mapping = TestDataFactory.create_mapping(self.motorcycle, product_id='999', expected_sku='GONE-1')
        self.assertEqual(heal_mappings([mapping], self.products), [])
        mapping.refresh_from_db()
        self.assertEqual(mapping.status, 'stale')


class PartMappingAPITests(TestCase):
    """Test PartMapping API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.motorcycle = TestDataFactory.create_motorcycle(recid=700)

    def test_create_mapping(self):
        """Test creating a mapping"""
        response = self.client.post('/api/v1/mappings/', {
            'product_id': '123',
            'motorcycle_recid': 700,
            'expected_sku': 'HB-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['motorcycle_recid'], 700)
        self.assertEqual(PartMapping.objects.count(), 1)

    def test_create_mapping_unknown_motorcycle(self):
        """Test creating a mapping for a missing motorcycle"""
        response = self.client.post('/api/v1/mappings/', {'product_id': '123', 'motorcycle_recid': 1},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_mappings_by_motorcycle(self):
        """Test filtering mappings by motorcycle"""
        TestDataFactory.create_mapping(self.motorcycle, product_id='1')
        TestDataFactory.create_mapping(TestDataFactory.create_motorcycle(), product_id='2')
        response = self.client.get('/api/v1/mappings/', {'motorcycle_recid': 700})
        self.assertEqual([m['product_id'] for m in response.data], ['1'])

    def test_bulk_create_is_all_or_nothing(self):
        """Test bulk creation rejects the whole batch on one bad row"""
        response = self.client.post('/api/v1/mappings/bulk/', {'mappings': [
            {'product_id': '1', 'motorcycle_recid': 700},
            {'product_id': '', 'motorcycle_recid': 700},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(PartMapping.objects.count(), 0)

        response = self.client.post('/api/v1/mappings/bulk/', {'mappings': [
            {'product_id': '1', 'motorcycle_recid': 700},
            {'product_id': '2', 'motorcycle_recid': 700},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(PartMapping.objects.count(), 2)

    def test_bulk_create_requires_array(self):
        """Test bulk creation payload validation"""
        response = self.client.post('/api/v1/mappings/bulk/', {'mappings': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_mapping(self):
        """Test deleting a mapping"""
        mapping = TestDataFactory.create_mapping(self.motorcycle)
        response = self.client.delete(f'/api/v1/mappings/{mapping.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PartMapping.objects.exists())

    def test_mappings_cascade_with_motorcycle(self):
        """Test deleting a motorcycle removes its mappings"""
        TestDataFactory.create_mapping(self.motorcycle)
        self.motorcycle.delete()
        self.assertFalse(PartMapping.objects.exists())

    def test_mapped_parts(self):
        """Test mapped parts are resolved against the live catalog"""
        mapping = TestDataFactory.create_mapping(self.motorcycle, product_id='old', expected_sku='HB-1')
        products = [TestDataFactory.make_product('new', 'Handlebar', variant_skus=['HB-1'])]
        with mock.patch('fitment.mappings.views.fetch_products', return_value=products):
            response = self.client.get('/api/v1/motorcycles/700/mapped-parts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['id'], 'new')
        self.assertEqual(response.data[0]['mapping_id'], str(mapping.pk))

    def test_mapped_parts_upstream_down(self):
        """Test mapped parts degrade to an empty list"""
        TestDataFactory.create_mapping(self.motorcycle)
        with mock.patch('fitment.mappings.views.fetch_products', side_effect=CommerceUnavailable('down')):
            response = self.client.get('/api/v1/motorcycles/700/mapped-parts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])
        self.assertEqual(response['X-Commerce-Status'], 'unavailable')
