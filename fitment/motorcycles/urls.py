from django.urls import path
from .views import (
    motorcycle_list_create, motorcycle_makes, motorcycle_years, motorcycle_next_recid,
    motorcycle_detail, motorcycle_parts,
    motorcycle_category_list_create, motorcycle_category_detail,
    top_searches
)

urlpatterns = [
    # Motorcycle endpoints
    path('motorcycles/', motorcycle_list_create, name='motorcycle-list-create'),
    path('motorcycles/makes/', motorcycle_makes, name='motorcycle-makes'),
    path('motorcycles/years/', motorcycle_years, name='motorcycle-years'),
    path('motorcycles/next-recid/', motorcycle_next_recid, name='motorcycle-next-recid'),
    path('motorcycles/<int:recid>/', motorcycle_detail, name='motorcycle-detail'),
    path('motorcycles/<int:recid>/parts/', motorcycle_parts, name='motorcycle-parts'),

    # Bike category taxonomy
    path('motorcycle-categories/', motorcycle_category_list_create, name='motorcycle-category-list-create'),
    path('motorcycle-categories/<int:pk>/', motorcycle_category_detail, name='motorcycle-category-detail'),

    # Search analytics
    path('analytics/top-searches/', top_searches, name='top-searches'),
]
