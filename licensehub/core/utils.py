"""Utility functions for audit logging"""
import logging

from django.db import transaction

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def get_user_agent(request):
    if not request or not hasattr(request, 'META'):
        return None
    agent = request.META.get('HTTP_USER_AGENT')
    return agent[:500] if agent else None


def changed_fields(old_values, new_values):
    """
    Field-level diff of two dicts.

    Returns ``{field: {'old': ..., 'new': ...}}`` for every key of
    ``new_values`` whose value differs from ``old_values``.
    """
    changes = {}
    for key, new_value in new_values.items():
        old_value = old_values.get(key)
        if old_value != new_value:
            changes[key] = {'old': old_value, 'new': new_value}
    return changes


def create_audit_log(identity=None, action=None, entity=None, entity_id=None,
                     description='', changes=None, request=None):
    """
    Create an audit log entry

    Args:
        identity: Identity of the caller (None for system actions)
        action: Action type (create, update, delete, status_change, ...)
        entity: Name of the entity being acted upon
        entity_id: ID of the entity
        description: Human-readable summary shown in the audit trail
        changes: Dictionary of changes made
        request: Optional request, used for IP address and user agent
    """
    if not action or not entity:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, entity={entity})")
        return None

    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                user_id=identity.user_id if identity else None,
                action=action,
                entity=entity,
                entity_id=str(entity_id) if entity_id is not None else None,
                description=description[:500],
                changes=changes or {},
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None
