import logging

from .models import Notification
from .templates import render
from licensehub.core.exceptions import NotFound
from licensehub.core.models import User
from licensehub.core.permissions import can_access_notification
from licensehub.core.utils import create_audit_log

logger = logging.getLogger(__name__)


def send_notification(user, notification_type, payload=None, url=None):
    """Render the template for ``notification_type`` and store it for ``user``"""
    title, message = render(notification_type, payload)
    notification = Notification.objects.create(
        user=user,
        title=title,
        message=message,
        type=notification_type,
        url=url,
    )
    logger.debug(f"Notification {notification_type} sent to {user.email}")
    return notification


def notify_users(users, notification_type, payload=None, url=None):
    """Send the same notification to every user in ``users``"""
    return [send_notification(user, notification_type, payload=payload, url=url) for user in users]


def users_with(roles, departments):
    """Recipients matching any of ``roles`` within any of ``departments``"""
    return list(User.objects.filter(role__in=roles, department__in=departments, is_active=True))


def get_notifications(identity):
    return list(Notification.objects.filter(user_id=identity.user_id).order_by('-created_at'))


def mark_notification_read(identity, notification_id, request=None):
    """
    Mark one of the caller's notifications as read.

    Another user's notification is reported as missing rather than forbidden
    so ids cannot be guessed.
    """
    notification = Notification.objects.filter(pk=notification_id).first()
    if notification is None or not can_access_notification(identity, notification):
        raise NotFound('Notification not found')
    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])
        create_audit_log(
            identity=identity,
            action='read',
            entity='Notification',
            entity_id=notification.pk,
            description=f"Marked notification '{notification.title[:200]}' as read",
            request=request,
        )
    return notification
