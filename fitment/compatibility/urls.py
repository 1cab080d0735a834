from django.urls import path
from .views import motorcycle_compatible_parts, customer_compatible_parts, customer_motorcycle_parts

urlpatterns = [
    # Admin
    path('motorcycles/<int:recid>/compatible-parts/', motorcycle_compatible_parts, name='motorcycle-compatible-parts'),

    # Storefront (no authentication)
    path('customer/motorcycles/<int:recid>/compatible-parts/', customer_compatible_parts, name='customer-compatible-parts'),
    path('customer/motorcycle-parts/', customer_motorcycle_parts, name='customer-motorcycle-parts'),
]
