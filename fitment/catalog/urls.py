from django.urls import path
from .views import (
    part_section_list_create, part_section_detail, part_section_reorder,
    part_category_tag_list_create, part_category_tag_detail, part_category_tag_reorder
)

urlpatterns = [
    # Part section endpoints
    path('part-sections/', part_section_list_create, name='part-section-list-create'),
    path('part-sections/reorder/', part_section_reorder, name='part-section-reorder'),
    path('part-sections/<int:pk>/', part_section_detail, name='part-section-detail'),

    # Part category endpoints (keyed by category value)
    path('part-category-tags/', part_category_tag_list_create, name='part-category-tag-list-create'),
    path('part-category-tags/reorder/', part_category_tag_reorder, name='part-category-tag-reorder'),
    path('part-category-tags/<str:category_value>/', part_category_tag_detail, name='part-category-tag-detail'),
]
