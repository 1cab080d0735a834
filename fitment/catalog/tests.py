"""
Test suite for part sections and part categories
Tests: tag parsing, section/category CRUD, cascades, batch reordering, and seeding
"""
from io import StringIO
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from fitment.core.models import AuditLog
from fitment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fitment.catalog.models import PartSection, PartCategoryTag
from fitment.catalog.utils import parse_product_tags, DEFAULT_SECTIONS, SLOT_DEFAULTS


class ParseProductTagsTests(SimpleTestCase):
    """Test product tag payload normalisation"""

    def test_list(self):
        """Test a list is trimmed and blanks dropped"""
        self.assertEqual(parse_product_tags([' chain ', '', None, 'o-ring']), ['chain', 'o-ring'])

    def test_json_string(self):
        """Test a JSON encoded list"""
        self.assertEqual(parse_product_tags('["brake pads", "front"]'), ['brake pads', 'front'])

    def test_malformed_json_is_single_tag(self):
        """Test that unparseable text is kept as one tag"""
        self.assertEqual(parse_product_tags('["broken'), ['["broken'])
        self.assertEqual(parse_product_tags('handlebar'), ['handlebar'])

    def test_empty(self):
        """Test empty payloads"""
        self.assertEqual(parse_product_tags(None), [])
        self.assertEqual(parse_product_tags('   '), [])

    def test_invalid_type(self):
        """Test that non-list payloads raise"""
        with self.assertRaises(ValueError):
            parse_product_tags(42)


class PartSectionAPITests(TestCase):
    """Test PartSection API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.section = TestDataFactory.create_section('brakePads', 'Brake Pads', sort_order=0)
        self.tag = TestDataFactory.create_category_tag('front_brakepads', 'Front Brake Pads',
                                                       assigned_section='brakePads')

    def test_list_sections(self):
        """Test listing sections with category counts"""
        response = self.client.get('/api/v1/part-sections/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['section_key'], 'brakePads')
        self.assertEqual(response.data[0]['category_count'], 1)

    def test_create_section(self):
        """Test creating a section"""
        response = self.client.post('/api/v1/part-sections/',
                                    {'section_key': 'chain', 'section_label': 'Chain', 'sort_order': 1},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(PartSection.objects.filter(section_key='chain').exists())

    def test_create_duplicate_section(self):
        """Test duplicate section keys are rejected"""
        response = self.client.post('/api/v1/part-sections/',
                                    {'section_key': 'brakePads', 'section_label': 'Again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rename_section_moves_categories(self):
        """Test renaming a section key updates its categories"""
        response = self.client.patch(f'/api/v1/part-sections/{self.section.pk}/',
                                     {'section_key': 'pads'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.tag.refresh_from_db()
        self.assertEqual(self.tag.assigned_section, 'pads')

    def test_delete_section_unassigns_categories(self):
        """Test deleting a section moves its categories to others"""
        response = self.client.delete(f'/api/v1/part-sections/{self.section.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.tag.refresh_from_db()
        self.assertIsNone(self.tag.assigned_section)

    def test_reorder_sections(self):
        """Test batch reorder of sections"""
        other = TestDataFactory.create_section('chain', 'Chain', sort_order=1)
        response = self.client.post('/api/v1/part-sections/reorder/', [
            {'id': self.section.pk, 'sort_order': 1},
            {'id': other.pk, 'sort_order': 0},
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['section_key'] for s in response.data], ['chain', 'brakePads'])
        self.assertTrue(AuditLog.objects.filter(action='reorder').exists())

    def test_reorder_unknown_section(self):
        """Test reorder rejects unknown ids without saving anything"""
        response = self.client.post('/api/v1/part-sections/reorder/', {'items': [
            {'id': self.section.pk, 'sort_order': 9},
            {'id': 9999, 'sort_order': 0},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.section.refresh_from_db()
        self.assertEqual(self.section.sort_order, 0)


class PartCategoryTagAPITests(TestCase):
    """Test PartCategoryTag API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.section = TestDataFactory.create_section('handlebars', 'Handlebars')

    def test_create_with_json_string_tags(self):
        """Test tags sent as a JSON string are stored as a list"""
        response = self.client.post('/api/v1/part-category-tags/', {
            'category_value': 'oe_handlebar',
            'category_label': 'OE Handlebar',
            'product_tags': '["handlebar", "oe"]',
            'assigned_section': 'handlebars',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        tag = PartCategoryTag.objects.get(category_value='oe_handlebar')
        self.assertEqual(tag.product_tags, ['handlebar', 'oe'])

    def test_create_with_unknown_section(self):
        """Test assigning to a section that does not exist"""
        response = self.client.post('/api/v1/part-category-tags/', {
            'category_value': 'grips',
            'category_label': 'Grips',
            'assigned_section': 'nowhere',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('assigned_section', response.data)

    def test_filter_by_section(self):
        """Test listing categories of one section and the others bucket"""
        TestDataFactory.create_category_tag('twinwall', assigned_section='handlebars')
        TestDataFactory.create_category_tag('cam')
        response = self.client.get('/api/v1/part-category-tags/', {'section': 'handlebars'})
        self.assertEqual([t['category_value'] for t in response.data], ['twinwall'])
        response = self.client.get('/api/v1/part-category-tags/', {'section': 'others'})
        self.assertEqual([t['category_value'] for t in response.data], ['cam'])

    def test_update_by_category_value(self):
        """Test PUT updates only supplied fields"""
        TestDataFactory.create_category_tag('grips', 'Grips', product_tags=['grip'])
        response = self.client.put('/api/v1/part-category-tags/grips/',
                                   {'product_tags': ['grip', 'lock-on']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['product_tags'], ['grip', 'lock-on'])
        self.assertEqual(response.data['category_label'], 'Grips')

    def test_delete_category(self):
        """Test deleting a category"""
        TestDataFactory.create_category_tag('grips')
        response = self.client.delete('/api/v1/part-category-tags/grips/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PartCategoryTag.objects.filter(category_value='grips').exists())

    def test_reorder_moves_between_sections(self):
        """Test reorder can move a category to another section"""
        TestDataFactory.create_section('chain', 'Chain')
        tag = TestDataFactory.create_category_tag('oe_chain', assigned_section='handlebars')
        response = self.client.post('/api/v1/part-category-tags/reorder/', [
            {'id': tag.pk, 'sort_order': 3, 'assigned_section': 'chain'},
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tag.refresh_from_db()
        self.assertEqual(tag.assigned_section, 'chain')
        self.assertEqual(tag.sort_order, 3)

    def test_reorder_to_unknown_section(self):
        """Test reorder rejects unknown target sections"""
        tag = TestDataFactory.create_category_tag('oe_chain')
        response = self.client.post('/api/v1/part-category-tags/reorder/', [
            {'id': tag.pk, 'sort_order': 1, 'assigned_section': 'nowhere'},
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SeedPartSectionsCommandTests(TestCase):
    """Test the seed_part_sections management command"""

    def test_seed_is_idempotent(self):
        """Test seeding sections and slot categories twice"""
        call_command('seed_part_sections', '--with-categories', stdout=StringIO())
        call_command('seed_part_sections', '--with-categories', stdout=StringIO())
        self.assertEqual(PartSection.objects.count(), len(DEFAULT_SECTIONS))
        self.assertEqual(PartCategoryTag.objects.count(), len(SLOT_DEFAULTS))
        self.assertEqual(PartCategoryTag.objects.get(category_value='front_brakepads').assigned_section, 'brakePads')
