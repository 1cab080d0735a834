from django.urls import path
from .views import (
    product_list, product_detail, commerce_status,
    shopify_install, shopify_callback
)

urlpatterns = [
    # Live commerce products
    path('products/', product_list, name='product-list'),
    path('products/<str:product_id>/', product_detail, name='product-detail'),

    # Installation and OAuth
    path('commerce/status/', commerce_status, name='commerce-status'),
    path('auth/shopify/install/', shopify_install, name='shopify-install'),
    path('auth/shopify/callback/', shopify_callback, name='shopify-callback'),
]
