from django.urls import path
from .views import mapping_list_create, mapping_bulk_create, mapping_detail, motorcycle_mapped_parts

urlpatterns = [
    path('mappings/', mapping_list_create, name='mapping-list-create'),
    path('mappings/bulk/', mapping_bulk_create, name='mapping-bulk-create'),
    path('mappings/<uuid:pk>/', mapping_detail, name='mapping-detail'),
    path('motorcycles/<int:recid>/mapped-parts/', motorcycle_mapped_parts, name='motorcycle-mapped-parts'),
]
