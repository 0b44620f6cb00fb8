from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from .views import (
    LicenseHubTokenObtainPairView, user_me,
    user_list_create, user_detail, user_dropdowns, user_managers,
    license_access_verification, audit_log_list,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', LicenseHubTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # User management endpoints
    path('user-management/', user_list_create, name='user-list-create'),
    path('user-management/drop-downs/', user_dropdowns, name='user-dropdowns'),
    path('user-management/managers/', user_managers, name='user-managers'),
    path('user-management/<uuid:pk>/', user_detail, name='user-detail'),

    # Step-up verification before license assignment
    path('license-assignment/verify-access/', license_access_verification, name='license-access-verification'),

    # Audit trail
    path('audit/', audit_log_list, name='audit-log-list'),
]
