import uuid

from django.conf import settings
from django.db import models


class NotificationType(models.TextChoices):
    LICENSE_CREATED = 'LICENSE_CREATED', 'License Created'
    LICENSE_ASSIGNED = 'LICENSE_ASSIGNED', 'License Assigned'
    LICENSE_EXPIRED = 'LICENSE_EXPIRED', 'License Expired'
    LICENSE_REQUESTED = 'LICENSE_REQUESTED', 'License Requested'
    PROCUREMENT_REQUEST = 'PROCUREMENT_REQUEST', 'Procurement Request'
    USER_ADDED = 'USER_ADDED', 'User Added'
    GENERAL = 'GENERAL', 'General'


class Notification(models.Model):
    """In-app notification; only ever marked read, never deleted"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(max_length=30, choices=NotificationType.choices, default=NotificationType.GENERAL)
    url = models.CharField(max_length=500, blank=True, null=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.title} -> {self.user}"

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='idx_notification_user'),
            models.Index(fields=['user', 'read'], name='idx_notification_unread'),
        ]
