from django.urls import path
from .views import (
    import_history_list_create, import_motorcycles, import_mappings,
    import_csv, import_template, export_combined_data
)

urlpatterns = [
    path('import-history/', import_history_list_create, name='import-history-list-create'),
    path('import/motorcycles/', import_motorcycles, name='import-motorcycles'),
    path('import/mappings/', import_mappings, name='import-mappings'),
    path('import/csv/', import_csv, name='import-csv'),
    path('import/template/', import_template, name='import-template'),
    path('export/combined-data/', export_combined_data, name='export-combined-data'),
]
