"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from fitment.catalog.models import PartSection, PartCategoryTag
from fitment.commerce.client import CommerceProduct, CommerceVariant
from fitment.commerce.models import ShopSession
from fitment.core.models import Setting
from fitment.mappings.models import PartMapping
from fitment.motorcycles.models import Motorcycle
import itertools
import random
import string

User = get_user_model()

_recids = itertools.count(90000)


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_motorcycle(recid=None, bikemake='HONDA', bikemodel=None, firstyear=2015, lastyear=2020, **parts):
        """Create a test motorcycle; extra keyword arguments set part slots"""
        if recid is None:
            recid = next(_recids)
        if not bikemodel:
            bikemodel = f'CRF {TestDataFactory.random_string(4).upper()}'
        return Motorcycle.objects.create(
            recid=recid,
            bikemake=bikemake,
            bikemodel=bikemodel,
            firstyear=firstyear,
            lastyear=lastyear,
            capacity=parts.pop('capacity', 250),
            biketype=parts.pop('biketype', 2),
            **parts
        )

    @staticmethod
    def create_section(section_key=None, section_label=None, sort_order=0, is_active=True):
        """Create a test part section"""
        if not section_key:
            section_key = f'section{TestDataFactory.random_string(6)}'
        return PartSection.objects.create(
            section_key=section_key,
            section_label=section_label or section_key.title(),
            sort_order=sort_order,
            is_active=is_active
        )

    @staticmethod
    def create_category_tag(category_value=None, category_label=None, product_tags=None,
                            assigned_section=None, sort_order=0):
        """Create a test part category"""
        if not category_value:
            category_value = f'category_{TestDataFactory.random_string(6).lower()}'
        return PartCategoryTag.objects.create(
            category_value=category_value,
            category_label=category_label or category_value.replace('_', ' ').title(),
            product_tags=product_tags or [],
            assigned_section=assigned_section,
            sort_order=sort_order
        )

    @staticmethod
    def create_mapping(motorcycle, product_id=None, expected_sku=None, product_title=None, status='active'):
        """Create a test part mapping"""
        return PartMapping.objects.create(
            motorcycle=motorcycle,
            product_id=product_id or str(random.randint(1000000, 9999999)),
            expected_sku=expected_sku,
            product_title=product_title,
            status=status
        )

    @staticmethod
    def create_shop_session(shop='test-shop.myshopify.com', access_token='shpat_test'):
        """Create a stored commerce session"""
        return ShopSession.objects.create(
            session_id=f'offline_{shop}',
            shop=shop,
            access_token=access_token,
            scope='read_products,write_products'
        )

    @staticmethod
    def create_setting(key=None, value='on', description=''):
        """Create a test system setting"""
        if not key:
            key = f'setting_{TestDataFactory.random_string(6).lower()}'
        return Setting.objects.create(key=key, value=value, description=description)

    @staticmethod
    def make_product(product_id='1', title='Test Product', variant_skus=None, sku=None, tags=None):
        """In-memory commerce product; the top-level SKU defaults to the first variant's"""
        variants = [
            CommerceVariant(id=f'{product_id}-{index}', title=variant_sku, sku=variant_sku,
                            price='10.00', inventory_quantity=5)
            for index, variant_sku in enumerate(variant_skus or [])
        ]
        if sku is None and variants:
            sku = variants[0].sku
        return CommerceProduct(
            id=str(product_id),
            title=title,
            sku=sku,
            price='10.00',
            tags=list(tags or []),
            variants=variants
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
