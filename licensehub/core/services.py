"""
Data access for users, the directory and the audit trail.

Every function takes already-validated parameters; caller-dependent
operations take the caller's ``Identity`` explicitly.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import authenticate
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .exceptions import NotFound, DomainValidationError
from .filters import UserFilter
from .models import User, AuditLog, Role
from .pagination import paginate
from .permissions import directory_scope
from .utils import create_audit_log, changed_fields

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('name', 'email', 'role', 'department', 'position')


def get_users(params, filters=None):
    """
    Page through the user-management table.

    ``params`` holds validated ``page``/``limit``; ``filters`` is the raw
    query dict handed to UserFilter (search/role/department).
    """
    queryset = User.objects.select_related('manager', 'added_by').order_by('-created_at', 'id')
    filterset = UserFilter(data=filters or {}, queryset=queryset)
    if not filterset.is_valid():
        raise DomainValidationError(_first_filter_error(filterset.errors))
    return paginate(filterset.qs, params['page'], params['limit'])


def _first_filter_error(errors):
    for field, messages in errors.items():
        return f"{field}: {messages[0]}"
    return 'Invalid filter'


def get_user_by_id(user_id):
    return User.objects.select_related('manager', 'added_by').filter(pk=user_id).first()


def get_managers():
    return list(User.objects.filter(role=Role.MANAGER).order_by('name'))


def search_directory(identity, search=''):
    """
    Directory lookup for pickers.

    ITSG callers search every department; anyone else only sees rows from
    their own department.
    """
    queryset = User.objects.all()
    department = directory_scope(identity)
    if department is not None:
        queryset = queryset.filter(department=department)
    search = (search or '').strip()
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(email__icontains=search))
    limit = settings.LICENSEHUB['DIRECTORY_RESULT_LIMIT']
    return list(queryset.order_by('name')[:limit])


def _resolve_manager(manager_id, department, user_id=None):
    """A manager is another MANAGER of the same department"""
    if not manager_id:
        return None
    candidates = User.objects.filter(pk=manager_id, department=department, role=Role.MANAGER)
    if user_id is not None:
        candidates = candidates.exclude(pk=user_id)
    manager = candidates.first()
    if manager is None:
        raise DomainValidationError('Please select a valid manager from the same department')
    return manager


@transaction.atomic
def create_user(data, identity, request=None):
    """Create a directory user with a hashed password, added by ``identity``"""
    from licensehub.notifications.models import NotificationType
    from licensehub.notifications.services import send_notification

    manager = _resolve_manager(data.get('manager_id'), data['department'])
    user = User.objects.create_user(
        username=data['email'],
        email=data['email'],
        password=data['password'],
        name=data['name'],
        role=data['role'],
        department=data['department'],
        position=data.get('position') or None,
        manager=manager,
        added_by_id=identity.user_id,
    )

    send_notification(
        user=user,
        notification_type=NotificationType.USER_ADDED,
        payload={'for_user': True, 'department': user.department},
    )
    create_audit_log(
        identity=identity,
        action='create',
        entity='User',
        entity_id=user.pk,
        description=f"Created user {user.name} ({user.email})",
        changes={field: getattr(user, field) for field in PROFILE_FIELDS},
        request=request,
    )
    logger.info(f"User {user.email} created by {identity.email}")
    return user


@transaction.atomic
def update_user(user_id, data, identity, request=None):
    user = User.objects.select_for_update().filter(pk=user_id).first()
    if user is None:
        raise NotFound('User not found')

    before = {field: getattr(user, field) for field in PROFILE_FIELDS}
    before['manager_id'] = str(user.manager_id) if user.manager_id else None

    department = data.get('department', user.department)
    if 'manager_id' in data:
        manager = _resolve_manager(data['manager_id'], department, user_id=user.pk)
        user.manager = manager
    elif user.manager_id and department != user.department:
        # An existing manager must stay in the same department
        _resolve_manager(user.manager_id, department, user_id=user.pk)

    for field in PROFILE_FIELDS:
        if field in data:
            value = data[field]
            if field == 'position':
                value = value or None
            setattr(user, field, value)
    user.username = user.email
    user.save()

    after = {field: getattr(user, field) for field in PROFILE_FIELDS}
    after['manager_id'] = str(user.manager_id) if user.manager_id else None
    changes = changed_fields(before, after)
    create_audit_log(
        identity=identity,
        action='update',
        entity='User',
        entity_id=user.pk,
        description=f"Updated user {user.name} ({user.email})",
        changes=changes,
        request=request,
    )
    return user


def verify_password(identity, password):
    """
    Re-check the caller's password against the identity provider.

    Used as a step-up check before sensitive actions; never mutates state.
    """
    user = authenticate(None, username=identity.email, password=password)
    return user is not None and str(user.pk) == identity.user_id


def get_audit_logs(params):
    queryset = AuditLog.objects.select_related('user')

    if params.get('entity'):
        queryset = queryset.filter(entity=params['entity'])
    if params.get('entity_id'):
        queryset = queryset.filter(entity_id=params['entity_id'])
    if params.get('action', 'all') != 'all':
        queryset = queryset.filter(action=params['action'])

    now = timezone.now()
    date_range = params.get('date_range', 'all')
    if date_range == 'today':
        queryset = queryset.filter(created_at__gte=now.replace(hour=0, minute=0, second=0, microsecond=0))
    elif date_range == '7days':
        queryset = queryset.filter(created_at__gte=now - timedelta(days=7))
    elif date_range == '30days':
        queryset = queryset.filter(created_at__gte=now - timedelta(days=30))

    search = (params.get('search') or '').strip()
    if search:
        queryset = queryset.filter(Q(description__icontains=search) | Q(user__name__icontains=search))

    limit = settings.LICENSEHUB['AUDIT_RESULT_LIMIT']
    return list(queryset.order_by('-created_at')[:limit])
