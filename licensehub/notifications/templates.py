"""
Title and message templates for each notification type.

Every template takes the (possibly empty) payload dict and falls back to a
neutral wording for any missing key.
"""
from .models import NotificationType

LICENSE_REQUEST_STATUS_MESSAGES = {
    'ASSIGNING': 'is currently being assigned',
    'REVIEWING': 'is under review by approvers',
    'APPROVED': 'has been approved',
    'CREATED': 'has been created',
}


def _license_created(payload):
    return (
        'License Created',
        f"A new license ({payload.get('license_name') or 'Unknown'}) from vendor "
        f"({payload.get('vendor') or 'Unknown Vendor'}) has been created.",
    )


def _license_assigned(payload):
    message = payload.get('message') or (
        f"License {payload.get('license_name') or ''} has been assigned to "
        f"{payload.get('assignee_name') or 'a user'}."
    )
    return 'License Assigned', message


def _license_expired(payload):
    return (
        'License Expired',
        f"The license **{payload.get('name') or 'Unknown'}** from vendor "
        f"**{payload.get('vendor') or 'Unknown Vendor'}** expired on "
        f"{payload.get('expired_at') or 'an unknown date'}.",
    )


def _license_requested(payload):
    status = payload.get('status')
    if status == 'DENIED':
        reason = payload.get('reason')
        action = f"has been denied (Reason: {reason})" if reason else 'has been denied'
    else:
        action = LICENSE_REQUEST_STATUS_MESSAGES.get(status, 'was updated')

    license_name = payload.get('license_name') or 'Unknown License'
    vendor = payload.get('vendor') or 'Unknown Vendor'
    if payload.get('for_admin'):
        requestor = payload.get('requestor_name') or 'A user'
        return (
            f"License Request {status}",
            f"{requestor}'s license request for **{license_name}** ({vendor}) {action}.",
        )
    return (
        f"Your License Request is {status}",
        f"Your request for **{license_name}** ({vendor}) {action}.",
    )


def _procurement_request(payload):
    return (
        'Procurement Request',
        f"{payload.get('requester_name') or 'A user'} submitted a procurement request for "
        f"{payload.get('item') or 'an item'}.",
    )


def _user_added(payload):
    if payload.get('for_user'):
        return (
            'Welcome to the License Hub',
            f"You’ve been successfully added to the {payload.get('department') or 'organization'}.",
        )
    return (
        'New User Added',
        f"{payload.get('user_name') or 'A new user'} has been added to the "
        f"{payload.get('department') or 'system'}.",
    )


def _general(payload):
    return (
        payload.get('title') or 'Notification',
        payload.get('message') or 'You have a new notification.',
    )


TEMPLATES = {
    NotificationType.LICENSE_CREATED: _license_created,
    NotificationType.LICENSE_ASSIGNED: _license_assigned,
    NotificationType.LICENSE_EXPIRED: _license_expired,
    NotificationType.LICENSE_REQUESTED: _license_requested,
    NotificationType.PROCUREMENT_REQUEST: _procurement_request,
    NotificationType.USER_ADDED: _user_added,
    NotificationType.GENERAL: _general,
}


def render(notification_type, payload=None):
    """Return ``(title, message)`` for ``notification_type``"""
    template = TEMPLATES[NotificationType(notification_type)]
    return template(payload or {})
