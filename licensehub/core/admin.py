from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['email', 'name', 'role', 'department', 'position', 'is_active', 'created_at']
    list_filter = ['role', 'department', 'is_active', 'is_staff']
    search_fields = ['email', 'name', 'position']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Directory', {'fields': ('name', 'position', 'department', 'role', 'manager', 'added_by')}),
        ('Timestamps', {'fields': ('created_at', 'updated_at')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Directory', {'fields': ('email', 'name', 'department', 'role')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'entity', 'entity_id', 'ip_address', 'created_at']
    list_filter = ['action', 'entity', 'created_at']
    search_fields = ['user__email', 'user__name', 'entity', 'entity_id', 'description']
    ordering = ['-created_at']
    readonly_fields = ['user', 'action', 'entity', 'entity_id', 'description', 'changes',
                       'ip_address', 'user_agent', 'created_at']
