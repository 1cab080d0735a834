"""
Test suite for Motorcycles module
Tests: motorcycle CRUD, search, filters, RECID allocation, part assignment, lookups, and bike categories
"""
from unittest import mock
from django.test import TestCase
from rest_framework import status
from fitment.core.models import AuditLog
from fitment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fitment.motorcycles.models import Motorcycle, MotorcycleCategoryConfig, SearchAnalytics
from fitment.motorcycles import utils as motorcycle_utils
from fitment.motorcycles.utils import (
    RecidLockUnavailable, next_recid, allocate_recids, search_motorcycles
)


class MotorcycleModelTests(TestCase):
    """Test Motorcycle model methods"""

    def setUp(self):
        self.motorcycle = TestDataFactory.create_motorcycle(
            recid=100, bikemake='YAMAHA', bikemodel='YZ 250', firstyear=2005, lastyear=2010
        )

    def test_motorcycle_str(self):
        """Test motorcycle string representation"""
        self.assertEqual(str(self.motorcycle), 'YAMAHA YZ 250 (2005-2010)')

    def test_set_fixed_slot(self):
        """Test assigning a fixed slot"""
        field = self.motorcycle.set_part_value('oe_fcw', 'JTF1501.14')
        self.assertEqual(field, 'oe_fcw')
        self.assertEqual(self.motorcycle.get_part_value('oe_fcw'), 'JTF1501.14')

    def test_set_custom_category(self):
        """Test that unknown categories are stored in custom_parts"""
        field = self.motorcycle.set_part_value('tyre_front', 'TY-80')
        self.assertEqual(field, 'custom_parts')
        self.assertEqual(self.motorcycle.custom_parts, {'tyre_front': 'TY-80'})
        self.assertEqual(self.motorcycle.get_parts()['tyre_front'], 'TY-80')

    def test_clear_slot(self):
        """Test that an empty value clears a slot"""
        self.motorcycle.set_part_value('grips', 'GR-1')
        self.motorcycle.set_part_value('grips', '')
        self.assertIsNone(self.motorcycle.grips)

    def test_has_assigned_parts(self):
        """Test detection of assigned parts ignores blank values"""
        self.assertFalse(self.motorcycle.has_assigned_parts())
        self.motorcycle.custom_parts = {'x': '  '}
        self.assertFalse(self.motorcycle.has_assigned_parts())
        self.motorcycle.handlebars_78 = '821-01'
        self.assertTrue(self.motorcycle.has_assigned_parts())


class RecidAllocationTests(TestCase):
    """Test sequential RECID allocation"""

    def test_next_recid_empty_table(self):
        """Test the first RECID when no motorcycles exist"""
        self.assertEqual(next_recid(), 1)

    def test_next_recid_is_max_plus_one(self):
        """Test RECID allocation after existing records"""
        TestDataFactory.create_motorcycle(recid=41)
        TestDataFactory.create_motorcycle(recid=7)
        self.assertEqual(next_recid(), 42)

    def test_allocate_recids_range(self):
        """Test reserving several sequential RECIDs"""
        TestDataFactory.create_motorcycle(recid=10)
        self.assertEqual(allocate_recids(3), [11, 12, 13])
        self.assertEqual(allocate_recids(0), [])

    def test_lock_contention_raises(self):
        """Test that a held allocation lock fails fast instead of blocking"""
        motorcycle_utils._process_lock.acquire()
        try:
            with self.assertRaises(RecidLockUnavailable):
                next_recid()
        finally:
            motorcycle_utils._process_lock.release()


class MotorcycleSearchTests(TestCase):
    """Test free-text motorcycle search"""

    def setUp(self):
        TestDataFactory.create_motorcycle(recid=1, bikemake='HONDA', bikemodel='CRF 450R')
        TestDataFactory.create_motorcycle(recid=2, bikemake='HONDA', bikemodel='CR 500R')
        TestDataFactory.create_motorcycle(recid=3, bikemake='KTM', bikemodel='EXC 300')

    def search(self, term):
        return sorted(search_motorcycles(Motorcycle.objects.all(), term).values_list('recid', flat=True))

    def test_numeric_search_is_recid(self):
        """Test numeric search looks up the RECID"""
        self.assertEqual(self.search('3'), [3])

    def test_single_word(self):
        """Test single word search matches make or model"""
        self.assertEqual(self.search('honda'), [1, 2])
        self.assertEqual(self.search('exc'), [3])

    def test_multiple_words(self):
        """Test every word must match make or model"""
        self.assertEqual(self.search('honda 450'), [1])

    def test_blank_search(self):
        """Test a blank term returns everything"""
        self.assertEqual(self.search('  '), [1, 2, 3])


class MotorcycleAPITests(TestCase):
    """Test Motorcycle API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.motorcycle = TestDataFactory.create_motorcycle(
            recid=500, bikemake='HONDA', bikemodel='CRF 250R', firstyear=2010, lastyear=2013
        )

    def test_list_motorcycles(self):
        """Test listing motorcycles"""
        response = self.client.get('/api/v1/motorcycles/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response['Cache-Control'], 'no-store, no-cache, must-revalidate, proxy-revalidate')

    def test_list_requires_auth(self):
        """Test that listing requires authentication"""
        self.client.logout()
        response = self.client.get('/api/v1/motorcycles/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_search_records_analytics(self):
        """Test search results and search analytics tracking"""
        response = self.client.get('/api/v1/motorcycles/', {'search': 'crf'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        analytics = SearchAnalytics.objects.get()
        self.assertEqual(analytics.search_query, 'crf')
        self.assertEqual(analytics.results_count, 1)

    def test_filter_by_year(self):
        """Test that the year filter selects motorcycles available that year"""
        TestDataFactory.create_motorcycle(recid=501, bikemake='KTM', firstyear=2018, lastyear=2022)
        response = self.client.get('/api/v1/motorcycles/', {'year': 2012})
        self.assertEqual([m['recid'] for m in response.data], [500])
        response = self.client.get('/api/v1/motorcycles/', {'bikemake': 'ktm'})
        self.assertEqual([m['recid'] for m in response.data], [501])

    def test_create_motorcycle_allocates_recid(self):
        """Test creating a motorcycle without a RECID"""
        data = {
            'bikemake': 'KTM',
            'bikemodel': 'SX 125',
            'firstyear': 2016,
            'lastyear': 2018,
            'biketype': 2,
        }
        response = self.client.post('/api/v1/motorcycles/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['recid'], 501)
        self.assertTrue(AuditLog.objects.filter(action='create', object_id='501').exists())

    def test_create_motorcycle_duplicate_recid(self):
        """Test creating a motorcycle with a RECID that exists"""
        data = {'recid': 500, 'bikemake': 'KTM', 'bikemodel': 'SX', 'firstyear': 2016, 'lastyear': 2018}
        response = self.client.post('/api/v1/motorcycles/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('recid', response.data)

    def test_create_motorcycle_invalid_years(self):
        """Test last year before first year is rejected"""
        data = {'bikemake': 'KTM', 'bikemodel': 'SX', 'firstyear': 2018, 'lastyear': 2016}
        response = self.client.post('/api/v1/motorcycles/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('lastyear', response.data)

    def test_create_motorcycle_lock_busy(self):
        """Test 503 when RECID allocation is in progress elsewhere"""
        data = {'bikemake': 'KTM', 'bikemodel': 'SX', 'firstyear': 2016, 'lastyear': 2018}
        with mock.patch('fitment.motorcycles.views.next_recid',
                        side_effect=RecidLockUnavailable('RECID allocation is in progress, please retry')):
            response = self.client.post('/api/v1/motorcycles/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertTrue(response.data['retryable'])
        self.assertFalse(Motorcycle.objects.filter(bikemake='KTM').exists())

    def test_next_recid_endpoint(self):
        """Test the next RECID preview"""
        response = self.client.get('/api/v1/motorcycles/next-recid/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['next_recid'], 501)

    def test_update_motorcycle(self):
        """Test PUT updates only the fields supplied"""
        response = self.client.put(f'/api/v1/motorcycles/{self.motorcycle.recid}/',
                                   {'capacity': 249}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.capacity, 249)
        self.assertEqual(self.motorcycle.bikemodel, 'CRF 250R')
        self.assertTrue(AuditLog.objects.filter(action='update', model_name='Motorcycle').exists())

    def test_recid_is_immutable(self):
        """Test that the RECID cannot be changed"""
        response = self.client.patch(f'/api/v1/motorcycles/{self.motorcycle.recid}/',
                                     {'recid': 999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_motorcycle(self):
        """Test deleting a motorcycle"""
        response = self.client.delete(f'/api/v1/motorcycles/{self.motorcycle.recid}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Motorcycle.objects.filter(recid=500).exists())

    def test_get_missing_motorcycle(self):
        """Test 404 for an unknown RECID"""
        response = self.client.get('/api/v1/motorcycles/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_assign_part(self):
        """Test assigning a part to a fixed slot and a custom category"""
        url = f'/api/v1/motorcycles/{self.motorcycle.recid}/parts/'
        response = self.client.patch(url, {'part_category': 'oe_fcw', 'product_variant': ' JTF1501.14 '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['oe_fcw'], 'JTF1501.14')

        response = self.client.patch(url, {'part_category': 'tyre_front', 'product_variant': 'TY-80'}, format='json')
        self.assertEqual(response.data['custom_parts'], {'tyre_front': 'TY-80'})

        response = self.client.get(url)
        self.assertEqual(response.data['parts']['oe_fcw'], 'JTF1501.14')
        self.assertEqual(response.data['parts']['tyre_front'], 'TY-80')
        self.assertTrue(AuditLog.objects.filter(action='part_assign').exists())

    def test_assign_part_requires_category(self):
        """Test part assignment validation"""
        response = self.client.patch(f'/api/v1/motorcycles/{self.motorcycle.recid}/parts/',
                                     {'product_variant': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_makes_and_years(self):
        """Test distinct makes and years, refreshed after a new motorcycle"""
        response = self.client.get('/api/v1/motorcycles/makes/')
        self.assertEqual(response.data, ['HONDA'])
        TestDataFactory.create_motorcycle(recid=502, bikemake='BETA', firstyear=2013, lastyear=2014)
        response = self.client.get('/api/v1/motorcycles/makes/')
        self.assertEqual(response.data, ['BETA', 'HONDA'])
        response = self.client.get('/api/v1/motorcycles/years/')
        self.assertEqual(response.data, [2014, 2013, 2012, 2011, 2010])


class MotorcycleCategoryAPITests(TestCase):
    """Test bike category taxonomy endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_filter_categories(self):
        """Test creating categories and listing only active ones"""
        response = self.client.post('/api/v1/motorcycle-categories/',
                                    {'category': 'Off-Road', 'subcategory': 'Enduro'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        MotorcycleCategoryConfig.objects.create(category='Road', subcategory='Sport', is_active=False)
        response = self.client.get('/api/v1/motorcycle-categories/', {'active': 'true'})
        self.assertEqual([c['category'] for c in response.data], ['Off-Road'])

    def test_update_and_delete_category(self):
        """Test updating and deleting a category"""
        config = MotorcycleCategoryConfig.objects.create(category='Road', subcategory='Sport')
        response = self.client.patch(f'/api/v1/motorcycle-categories/{config.pk}/',
                                     {'sort_order': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sort_order'], 5)
        response = self.client.delete(f'/api/v1/motorcycle-categories/{config.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class SearchAnalyticsAPITests(TestCase):
    """Test top search analytics"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_top_searches(self):
        """Test searches are grouped and counted"""
        SearchAnalytics.objects.create(search_query='crf', results_count=2)
        SearchAnalytics.objects.create(search_query='crf', results_count=4)
        SearchAnalytics.objects.create(search_query='ktm', results_count=1)
        response = self.client.get('/api/v1/analytics/top-searches/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['search_query'], 'crf')
        self.assertEqual(response.data[0]['search_count'], 2)
        self.assertEqual(response.data[0]['avg_results'], 3)
