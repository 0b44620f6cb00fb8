import uuid

from django.contrib.auth.models import AbstractUser
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class Role(models.TextChoices):
    EMPLOYEE = 'EMPLOYEE', 'Employee'
    MANAGER = 'MANAGER', 'Manager'
    ADMIN = 'ADMIN', 'Admin'
    ACCOUNT_OWNER = 'ACCOUNT_OWNER', 'Account Owner'
    FINANCE = 'FINANCE', 'Finance'
    TEAM_LEAD = 'TEAM_LEAD', 'Team Lead'


class Department(models.TextChoices):
    ITSG = 'ITSG', 'ITSG'
    SRE = 'SRE', 'SRE'
    HR = 'HR', 'HR'
    SSED = 'SSED', 'SSED'
    FINANCE = 'FINANCE', 'Finance'


class User(AbstractUser):
    """Directory user; role and department drive every authorization decision"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    position = models.CharField(max_length=100, blank=True, null=True)
    department = models.CharField(max_length=20, choices=Department.choices, default=Department.ITSG)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.EMPLOYEE)
    manager = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='reports')
    added_by = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='added_users')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return self.name or self.email

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['department'], name='idx_user_department'),
            models.Index(fields=['role'], name='idx_user_role'),
        ]


class AuditLog(models.Model):
    """Audit trail for mutations performed through the API"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('status_change', 'Status Change'),
        ('assign', 'Assign'),
        ('revoke', 'Revoke'),
        ('read', 'Read'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    action = models.CharField(max_length=30, choices=ACTION_CHOICES)
    entity = models.CharField(max_length=100)
    entity_id = models.CharField(max_length=100, blank=True, null=True)
    description = models.CharField(max_length=500)
    changes = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action} {self.entity} {self.entity_id or ''}".strip()

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['entity', 'entity_id'], name='idx_audit_entity'),
        ]
