"""
License audit log.

Writer: ``LicenseLogger`` appends one JSON object per line through the
``licensehub.license_audit`` logger (file handler + JSON formatter configured
in ``LOGGING``).

Reader: ``read_license_logs`` loads the same file back for a single license,
newest entry first.
"""
import json
import logging
from datetime import datetime, timezone as dt_timezone
from pathlib import Path

from django.conf import settings
from django.utils import timezone

audit_logger = logging.getLogger('licensehub.license_audit')
logger = logging.getLogger(__name__)


def _emit(message, event, license_id, **fields):
    record = {
        'event': event,
        'licenseId': str(license_id),
        **fields,
        'timestamp': timezone.now().isoformat(),
    }
    audit_logger.info(message, extra={'audit': record})


def _user_details(identity):
    return {'email': identity.email, 'userId': identity.user_id}


class LicenseLogger:
    """Structured audit events for a license's lifecycle"""

    @staticmethod
    def created(license_id, identity, **data):
        _emit('LICENSE_CREATED', 'CREATED', license_id, userDetails=_user_details(identity), **data)

    @staticmethod
    def updated(license_id, identity, changes):
        _emit('LICENSE_UPDATED', 'UPDATED', license_id, userDetails=_user_details(identity), changes=changes)

    @staticmethod
    def assigned(license_id, key_id, assigned_to_user_id):
        _emit(
            'LICENSE_ASSIGNED', 'ASSIGNED', license_id,
            keyId=str(key_id),
            assignedToUserId=str(assigned_to_user_id) if assigned_to_user_id else None,
        )

    @staticmethod
    def revoked(license_id, key_id, revoked_by):
        _emit('LICENSE_REVOKED', 'REVOKED', license_id, keyId=str(key_id), revokedBy=str(revoked_by))

    @staticmethod
    def deleted(license_id, user_id):
        _emit('LICENSE_DELETED', 'DELETED', license_id, userId=str(user_id))


def _timestamp_key(entry):
    """Parsed ``timestamp`` for ordering; unparseable values sort last"""
    value = str(entry.get('timestamp') or '')
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return datetime.min.replace(tzinfo=dt_timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    return parsed


def read_license_logs(license_id, log_path=None):
    """
    Entries of the audit file whose ``licenseId`` matches, newest first.

    A missing file yields ``[]``. Lines that are not valid JSON objects are
    skipped with a warning.
    """
    path = Path(log_path or settings.LICENSEHUB['LICENSE_AUDIT_LOG'])
    if not path.exists():
        return []

    license_id = str(license_id)
    entries = []
    with path.open(encoding='utf-8') as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                logger.warning(f"Skipping malformed line {line_number} in {path}")
                continue
            if not isinstance(entry, dict):
                logger.warning(f"Skipping non-object line {line_number} in {path}")
                continue
            if entry.get('licenseId') == license_id:
                entries.append(entry)

    entries.sort(key=_timestamp_key, reverse=True)
    return entries
