"""
URL configuration for the licensehub project.

Every app mounts its routes under ``api/``; the Django admin stays at ``admin/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "LicenseHub Administration"
admin.site.site_title = "LicenseHub Admin Portal"
admin.site.index_title = "License, user and procurement management"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('licensehub.core.urls')),
    path('api/', include('licensehub.licenses.urls')),
    path('api/', include('licensehub.procurement.urls')),
    path('api/', include('licensehub.notifications.urls')),
]
