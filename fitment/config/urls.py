"""
URL configuration for the fitment catalog.

Every app mounts its endpoints under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Fitment Catalog Admin Panel"
admin.site.site_title = "Fitment Catalog Admin Portal"
admin.site.index_title = "Motorcycle parts fitment administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('fitment.core.urls')),
    path('api/v1/', include('fitment.motorcycles.urls')),
    path('api/v1/', include('fitment.catalog.urls')),
    path('api/v1/', include('fitment.mappings.urls')),
    path('api/v1/', include('fitment.imports.urls')),
    path('api/v1/', include('fitment.commerce.urls')),
    path('api/v1/', include('fitment.compatibility.urls')),
]
