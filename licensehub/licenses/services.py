"""
Data access and mutations for licenses and their keys.

Seat accounting is derived at read time: ``available_seats`` is the license's
total seats minus its ASSIGNED keys, never stored. Key creation locks the
license row so the number of keys can never exceed ``total_seats``.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, F, Prefetch, Q, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from .audit_log import LicenseLogger
from .filters import LicenseFilter
from .models import License, LicenseKey, LicenseStatus, KeyStatus
from licensehub.core.cache_signals import suspend_cache_signals
from licensehub.core.cache_utils import revalidate_tags_on_commit, LICENSE_MANAGEMENT_TAG, LICENSE_DROPDOWNS_TAG
from licensehub.core.exceptions import NotFound, DomainValidationError, Conflict
from licensehub.core.models import Role, Department
from licensehub.core.pagination import paginate
from licensehub.core.utils import create_audit_log, changed_fields
from licensehub.notifications.models import NotificationType
from licensehub.notifications.services import notify_users, users_with

User = get_user_model()
logger = logging.getLogger(__name__)

LICENSE_FIELDS = ('name', 'vendor', 'description', 'type', 'total_seats', 'cost', 'expiry_date', 'owner')
LICENSE_ADMIN_ROLES = [Role.ADMIN, Role.ACCOUNT_OWNER, Role.MANAGER]


def with_seat_counts(queryset):
    """Annotate ``assigned_count``, ``key_count`` and ``available_seats``"""
    return queryset.annotate(
        assigned_count=Count('keys', filter=Q(keys__status=KeyStatus.ASSIGNED), distinct=True),
        key_count=Count('keys', distinct=True),
    ).annotate(
        available_seats=Greatest(F('total_seats') - F('assigned_count'), Value(0)),
    )


def available_seats(license):
    """Seats not taken by an ASSIGNED key; never negative"""
    annotated = getattr(license, 'available_seats', None)
    if annotated is not None:
        return annotated
    assigned = license.keys.filter(status=KeyStatus.ASSIGNED).count()
    return max(0, license.total_seats - assigned)


def _key_summaries():
    return Prefetch('keys', queryset=LicenseKey.objects.only('id', 'status', 'license_id').order_by('-created_at'))


def get_licenses(filters, page):
    """One page (``LICENSE_PAGE_SIZE`` rows) of the license-management table"""
    queryset = with_seat_counts(License.objects.select_related('added_by').prefetch_related(_key_summaries()))
    filterset = LicenseFilter(data=filters or {}, queryset=queryset)
    if not filterset.is_valid():
        field, messages = next(iter(filterset.errors.items()))
        raise DomainValidationError(f"{field}: {messages[0]}")
    return paginate(filterset.qs.order_by('-created_at', 'id'), page, settings.LICENSEHUB['LICENSE_PAGE_SIZE'])


def get_license(license_id):
    queryset = with_seat_counts(
        License.objects.select_related('added_by').prefetch_related(_key_summaries())
    ).annotate(
        unassigned_keys_count=Count('keys', filter=~Q(keys__status=KeyStatus.ASSIGNED), distinct=True),
    )
    return queryset.filter(pk=license_id).first()


def get_license_with_keys(license_id):
    keys = LicenseKey.objects.select_related('added_by', 'assigned_to').order_by('-created_at')
    queryset = with_seat_counts(License.objects.select_related('added_by').prefetch_related(Prefetch('keys', queryset=keys)))
    return queryset.filter(pk=license_id).first()


def license_dropdowns():
    return list(with_seat_counts(License.objects.all()).order_by('name'))


def _lock_license(license_id):
    license = License.objects.select_for_update().filter(pk=license_id).first()
    if license is None:
        raise NotFound('License not found')
    return license


def _snapshot(license):
    return {field: getattr(license, field) for field in LICENSE_FIELDS + ('status',)}


@transaction.atomic
def create_license(data, identity, request=None):
    license = License.objects.create(
        name=data['name'],
        vendor=data.get('vendor') or '',
        description=data.get('description') or None,
        type=data['type'],
        total_seats=data['total_seats'],
        cost=data.get('cost'),
        expiry_date=data.get('expiry_date'),
        owner=data.get('owner') or None,
        added_by_id=identity.user_id,
    )
    license.refresh_status()

    recipients = users_with(LICENSE_ADMIN_ROLES, [Department.ITSG])
    notify_users(
        recipients,
        NotificationType.LICENSE_CREATED,
        payload={'license_name': license.name, 'vendor': license.vendor},
        url=f"/license-management/{license.pk}",
    )
    create_audit_log(
        identity=identity,
        action='create',
        entity='License',
        entity_id=license.pk,
        description=f"Created license {license.name}",
        changes=_snapshot(license),
        request=request,
    )
    transaction.on_commit(lambda: LicenseLogger.created(license.pk, identity))
    logger.info(f"License {license.name} created by {identity.email}")
    return license


@transaction.atomic
def update_license(license_id, data, identity, request=None):
    """
    Apply a full or partial update.

    A type change is refused while ACTIVE or ASSIGNED keys exist, and seats
    cannot drop below the number of keys already issued. Status is
    recomputed from the expiry date and the assigned-key count.
    """
    license = _lock_license(license_id)
    before = _snapshot(license)

    if 'type' in data and data['type'] != license.type:
        in_use = license.keys.filter(status__in=[KeyStatus.ACTIVE, KeyStatus.ASSIGNED]).exists()
        if in_use:
            raise DomainValidationError('Cannot update license type : some license keys are still active or assigned')

    if 'total_seats' in data:
        key_count = license.keys.count()
        if data['total_seats'] < key_count:
            raise DomainValidationError(f"Cannot reduce total seats below {key_count} existing keys.")

    for field in LICENSE_FIELDS:
        if field in data:
            value = data[field]
            if field in ('description', 'owner'):
                value = value or None
            elif field == 'vendor':
                value = value or ''
            setattr(license, field, value)

    assigned = license.keys.filter(status=KeyStatus.ASSIGNED).count()
    license.status = license.compute_status(assigned)
    license.save()

    changes = changed_fields(before, _snapshot(license))
    create_audit_log(
        identity=identity,
        action='update',
        entity='License',
        entity_id=license.pk,
        description=f"Updated license {license.name}",
        changes=changes,
        request=request,
    )
    transaction.on_commit(lambda: LicenseLogger.updated(license.pk, identity, changes))
    return license


@transaction.atomic
def delete_license(license_id, identity, request=None):
    license = _lock_license(license_id)
    if license.keys.filter(status=KeyStatus.ASSIGNED).exists():
        raise Conflict('Cannot delete license with assigned keys')

    deleted_id = license.pk
    name = license.name
    with suspend_cache_signals():
        license.delete()
    revalidate_tags_on_commit(LICENSE_MANAGEMENT_TAG, LICENSE_DROPDOWNS_TAG)

    create_audit_log(
        identity=identity,
        action='delete',
        entity='License',
        entity_id=deleted_id,
        description=f"Deleted license {name}",
        request=request,
    )
    transaction.on_commit(lambda: LicenseLogger.deleted(deleted_id, identity.user_id))
    logger.info(f"License {name} deleted by {identity.email}")


def _ensure_capacity(license, adding):
    remaining = license.total_seats - license.keys.count()
    if remaining <= 0:
        raise DomainValidationError('No available seats remaining for this license')
    if adding > remaining:
        raise DomainValidationError(f"Only {remaining} seats available, but {adding} keys provided")


@transaction.atomic
def add_license_key(license_id, key, identity, request=None):
    license = _lock_license(license_id)
    if key and license.keys.filter(key=key).exists():
        raise Conflict('License key already exists for this license')
    _ensure_capacity(license, 1)

    license_key = LicenseKey.objects.create(
        license=license,
        key=key,
        status=KeyStatus.ACTIVE,
        added_by_id=identity.user_id,
    )
    create_audit_log(
        identity=identity,
        action='create',
        entity='LicenseKey',
        entity_id=license_key.pk,
        description=f"Added key to license {license.name}",
        request=request,
    )
    return license_key


@transaction.atomic
def bulk_add_license_keys(license_id, keys, identity, request=None):
    """Add several keys at once; all-or-nothing"""
    license = _lock_license(license_id)

    repeated = sorted({key for key in keys if keys.count(key) > 1})
    existing = sorted(license.keys.filter(key__in=keys).values_list('key', flat=True))
    duplicates = sorted(set(repeated) | set(existing))
    if duplicates:
        raise Conflict(f"Duplicate keys found: {', '.join(duplicates)}")
    _ensure_capacity(license, len(keys))

    with suspend_cache_signals():
        created = LicenseKey.objects.bulk_create([
            LicenseKey(license=license, key=key, status=KeyStatus.ACTIVE, added_by_id=identity.user_id)
            for key in keys
        ])
    revalidate_tags_on_commit(LICENSE_MANAGEMENT_TAG, LICENSE_DROPDOWNS_TAG)

    create_audit_log(
        identity=identity,
        action='create',
        entity='LicenseKey',
        entity_id=license.pk,
        description=f"Added {len(created)} keys to license {license.name}",
        changes={'count': len(created)},
        request=request,
    )
    return created


def _lock_key(key_id):
    license_key = LicenseKey.objects.select_for_update().select_related('license').filter(pk=key_id).first()
    if license_key is None:
        raise NotFound('License key not found')
    return license_key


@transaction.atomic
def remove_license_key(key_id, identity, request=None):
    license_key = _lock_key(key_id)
    if license_key.status == KeyStatus.ASSIGNED:
        raise Conflict('Cannot delete an assigned license key')

    license = license_key.license
    license_key.delete()
    license.refresh_status()
    create_audit_log(
        identity=identity,
        action='delete',
        entity='LicenseKey',
        entity_id=key_id,
        description=f"Removed key from license {license.name}",
        request=request,
    )


@transaction.atomic
def update_license_key_status(key_id, status, identity, assigned_to_id=None, request=None):
    """
    Move a key to ``status``.

    ASSIGNED records the assignee; any other status clears it. Transitions to
    ASSIGNED and REVOKED are appended to the license audit file.
    """
    license_key = _lock_key(key_id)
    license = license_key.license
    previous = license_key.status

    if status == KeyStatus.ASSIGNED:
        assigned_to_id = assigned_to_id or license_key.assigned_to_id
        if assigned_to_id is None:
            raise DomainValidationError('An assignee is required to assign a license key')
        if not User.objects.filter(pk=assigned_to_id, is_active=True).exists():
            raise DomainValidationError('User not found')

    license_key.status = status
    if status == KeyStatus.ASSIGNED:
        license_key.assigned_to_id = assigned_to_id
    else:
        license_key.assigned_to_id = None
    license_key.save(update_fields=['status', 'assigned_to', 'updated_at'])
    license.refresh_status()

    action = 'status_change'
    if status == KeyStatus.ASSIGNED and previous != KeyStatus.ASSIGNED:
        action = 'assign'
        assignee = license_key.assigned_to_id
        transaction.on_commit(lambda: LicenseLogger.assigned(license.pk, license_key.pk, assignee))
    elif status == KeyStatus.REVOKED and previous != KeyStatus.REVOKED:
        action = 'revoke'
        transaction.on_commit(lambda: LicenseLogger.revoked(license.pk, license_key.pk, identity.user_id))

    create_audit_log(
        identity=identity,
        action=action,
        entity='LicenseKey',
        entity_id=license_key.pk,
        description=f"Key status {previous} -> {status} on license {license.name}",
        changes=changed_fields({'status': previous}, {'status': status}),
        request=request,
    )
    return license_key


def expiring_licenses(within_days):
    """Licenses whose expiry date falls within ``within_days`` from now, or already passed"""
    cutoff = timezone.now() + timedelta(days=within_days)
    return list(License.objects.filter(expiry_date__isnull=False, expiry_date__lte=cutoff).order_by('expiry_date'))


def mark_expired(licenses):
    """Flip past-due licenses to EXPIRED; returns the ones that changed"""
    changed = []
    for license in licenses:
        if license.is_expired and license.status != LicenseStatus.EXPIRED:
            license.status = LicenseStatus.EXPIRED
            license.save(update_fields=['status', 'updated_at'])
            changed.append(license)
    return changed
