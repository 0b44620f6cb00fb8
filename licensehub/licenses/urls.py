from django.urls import path
from .views import (
    license_list_create, license_detail, license_dropdowns, license_manage_keys,
    license_key_create, license_key_bulk_create, license_key_delete, license_key_status,
    license_logs,
)

urlpatterns = [
    # License endpoints
    path('license-management/', license_list_create, name='license-list-create'),
    path('license-management/drop-downs/', license_dropdowns, name='license-dropdowns'),
    path('license-management/manage-keys/<uuid:pk>/', license_manage_keys, name='license-manage-keys'),
    path('license-management/<uuid:pk>/', license_detail, name='license-detail'),

    # License key endpoints
    path('license-management/<uuid:pk>/keys/', license_key_create, name='license-key-create'),
    path('license-management/<uuid:pk>/keys/bulk/', license_key_bulk_create, name='license-key-bulk-create'),
    path('license-keys/<uuid:pk>/', license_key_delete, name='license-key-delete'),
    path('license-keys/<uuid:pk>/status/', license_key_status, name='license-key-status'),

    # Audit file
    path('license-logs/<uuid:pk>/', license_logs, name='license-logs'),
]
