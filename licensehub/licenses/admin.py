from django.contrib import admin
from .models import License, LicenseKey


class LicenseKeyInline(admin.TabularInline):
    model = LicenseKey
    fk_name = 'license'
    extra = 0
    fields = ['key', 'status', 'assigned_to', 'added_by', 'created_at']
    readonly_fields = ['created_at']


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    list_display = ['name', 'vendor', 'type', 'status', 'total_seats', 'expiry_date', 'created_at']
    list_filter = ['type', 'status', 'vendor']
    search_fields = ['name', 'vendor', 'description', 'owner']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [LicenseKeyInline]


@admin.register(LicenseKey)
class LicenseKeyAdmin(admin.ModelAdmin):
    list_display = ['license', 'key', 'status', 'assigned_to', 'created_at']
    list_filter = ['status']
    search_fields = ['key', 'license__name', 'assigned_to__email']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
