"""
Test suite for core module
Tests: authentication, settings, audit logs, and dashboard statistics
"""
from unittest import mock
from django.test import TestCase
from rest_framework import status
from fitment.commerce.exceptions import CommerceUnavailable
from fitment.core.models import Setting, AuditLog
from fitment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fitment.core.utils import create_audit_log


class AuthAPITests(TestCase):
    """Test JWT authentication endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='admin_user', password='secret123', is_staff=True)
        self.client = AuthenticatedAPIClient()

    def test_login_and_me(self):
        """Test obtaining a token and reading the current user"""
        response = self.client.post('/api/v1/auth/login/',
                                    {'username': 'admin_user', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'admin_user')
        self.assertTrue(response.data['is_admin'])

    def test_login_wrong_password(self):
        """Test login with bad credentials"""
        response = self.client.post('/api/v1/auth/login/',
                                    {'username': 'admin_user', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        """Test refreshing an access token"""
        response = self.client.post('/api/v1/auth/login/',
                                    {'username': 'admin_user', 'password': 'secret123'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': response.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_me_requires_auth(self):
        """Test the current user endpoint without a token"""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class SettingAPITests(TestCase):
    """Test system settings endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_upsert_setting(self):
        """Test PUT creates then updates a setting"""
        response = self.client.put('/api/v1/settings/storefront_enabled/', {'value': 'true'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.put('/api/v1/settings/storefront_enabled/', {'value': 'false'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Setting.objects.get(key='storefront_enabled').value, 'false')

    def test_list_settings(self):
        """Test any authenticated user can list settings"""
        TestDataFactory.create_setting('b_key')
        TestDataFactory.create_setting('a_key')
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/settings/')
        self.assertEqual([s['key'] for s in response.data], ['a_key', 'b_key'])

    def test_non_admin_cannot_create(self):
        """Test non-staff users cannot create or change settings"""
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/settings/', {'key': 'x', 'value': 'y'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.put('/api/v1/settings/x/', {'value': 'y'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_setting(self):
        """Test deleting a setting"""
        TestDataFactory.create_setting('obsolete')
        response = self.client.delete('/api/v1/settings/obsolete/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Setting.objects.filter(key='obsolete').exists())


class AuditLogTests(TestCase):
    """Test audit log creation and listing"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_audit_log_requires_fields(self):
        """Test that incomplete entries are skipped"""
        self.assertIsNone(create_audit_log(action='create', model_name='Motorcycle'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_filter_audit_logs(self):
        """Test filtering by action and model"""
        create_audit_log(user=self.user, action='create', model_name='Motorcycle', object_id=1)
        create_audit_log(user=self.user, action='delete', model_name='Motorcycle', object_id=2)
        create_audit_log(user=self.user, action='create', model_name='PartSection', object_id=3)
        response = self.client.get('/api/v1/audit-logs/', {'action': 'create', 'model_name': 'Motorcycle'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['object_id'] for log in response.data], ['1'])
        self.assertEqual(response.data[0]['username'], self.user.username)

    def test_audit_log_limit(self):
        """Test the limit parameter"""
        for index in range(3):
            create_audit_log(user=self.user, action='update', model_name='Motorcycle', object_id=index)
        response = self.client.get('/api/v1/audit-logs/', {'limit': 2})
        self.assertEqual(len(response.data), 2)


class DashboardStatsTests(TestCase):
    """Test dashboard statistics"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_stats(self):
        """Test coverage and category breakdown"""
        with_parts = TestDataFactory.create_motorcycle(bikemake='HONDA', oe_handlebar='HB-1')
        mapped = TestDataFactory.create_motorcycle(bikemake='HONDA')
        TestDataFactory.create_motorcycle(bikemake='KTM', capacity=None)
        TestDataFactory.create_mapping(mapped)
        TestDataFactory.create_category_tag('oe_handlebar', 'OE Handlebar')

        with mock.patch('fitment.commerce.client.get_commerce_client',
                        side_effect=CommerceUnavailable('No authenticated commerce session')):
            response = self.client.get('/api/v1/stats/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_motorcycles'], 3)
        self.assertEqual(response.data['motorcycles_with_parts'], 2)
        self.assertEqual(response.data['unmapped_motorcycles'], 1)
        self.assertEqual(response.data['coverage_percentage'], 67)
        self.assertEqual(response.data['category_breakdown'], {'OE Handlebar': 1})
        self.assertEqual(response.data['popular_makes'][0], {'make': 'HONDA', 'count': 2})
        self.assertEqual(response.data['missing_capacity'], 1)
        self.assertIsNone(response.data['commerce_products'])
        self.assertIsNone(response.data['last_import'])
        self.assertTrue(with_parts.has_assigned_parts())
