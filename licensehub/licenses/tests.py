"""
Test suite for the licenses module
Tests: seat accounting, license CRUD, key management limits, the audit file
writer/reader and the expiry check command
"""
import json
import logging
import os
import shutil
import tempfile
from datetime import timedelta
from io import StringIO
from unittest import mock

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from licensehub.core.models import Role, Department
from licensehub.core.permissions import Identity
from licensehub.core.log_formatters import JsonLineFormatter
from licensehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from licensehub.licenses import services
from licensehub.licenses.audit_log import LicenseLogger, audit_logger, read_license_logs
from licensehub.licenses.models import License, LicenseKey, LicenseStatus, LicenseType, KeyStatus
from licensehub.notifications.models import Notification, NotificationType


class SeatAccountingTests(TestCase):
    """Test available seats derived from assigned keys"""

    def setUp(self):
        self.license = TestDataFactory.create_license(total_seats=3)

    def test_no_keys_means_every_seat_available(self):
        self.assertEqual(services.available_seats(self.license), 3)

    def test_only_assigned_keys_take_seats(self):
        TestDataFactory.create_license_key(self.license, status=KeyStatus.ASSIGNED)
        TestDataFactory.create_license_key(self.license, status=KeyStatus.ACTIVE)
        TestDataFactory.create_license_key(self.license, status=KeyStatus.REVOKED)
        self.assertEqual(services.available_seats(self.license), 2)

    def test_annotation_matches_helper(self):
        TestDataFactory.create_license_key(self.license, status=KeyStatus.ASSIGNED)
        annotated = services.with_seat_counts(License.objects.filter(pk=self.license.pk)).get()
        self.assertEqual(annotated.available_seats, 2)
        self.assertEqual(annotated.key_count, 1)

    def test_available_seats_never_negative(self):
        for _ in range(3):
            TestDataFactory.create_license_key(self.license, status=KeyStatus.ASSIGNED)
        License.objects.filter(pk=self.license.pk).update(total_seats=1)
        self.license.refresh_from_db()
        self.assertEqual(services.available_seats(self.license), 0)

    def test_compute_status(self):
        self.assertEqual(self.license.compute_status(0), LicenseStatus.AVAILABLE)
        self.assertEqual(self.license.compute_status(3), LicenseStatus.FULL)
        self.license.expiry_date = timezone.now() - timedelta(days=1)
        self.assertEqual(self.license.compute_status(0), LicenseStatus.EXPIRED)


class LicenseAuditLogTests(TestCase):
    """Test the NDJSON audit file reader and writer"""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmpdir)
        self.log_path = os.path.join(self.tmpdir, 'licenseAudit.log')

    def write_lines(self, lines):
        with open(self.log_path, 'w', encoding='utf-8') as handle:
            handle.write('\n'.join(lines) + '\n')

    def test_missing_file_returns_empty_list(self):
        self.assertEqual(read_license_logs('abc', log_path=self.log_path), [])

    def test_filters_by_license_and_sorts_newest_first(self):
        self.write_lines([
            json.dumps({'event': 'CREATED', 'licenseId': 'L1', 'timestamp': '2025-01-01T10:00:00+00:00'}),
            json.dumps({'event': 'UPDATED', 'licenseId': 'L2', 'timestamp': '2025-01-02T10:00:00+00:00'}),
            json.dumps({'event': 'ASSIGNED', 'licenseId': 'L1', 'timestamp': '2025-01-03T10:00:00+00:00'}),
            json.dumps({'event': 'REVOKED', 'licenseId': 'L1', 'timestamp': '2025-01-02T09:00:00+00:00'}),
        ])
        entries = read_license_logs('L1', log_path=self.log_path)
        self.assertEqual([entry['event'] for entry in entries], ['ASSIGNED', 'REVOKED', 'CREATED'])

    def test_malformed_lines_are_skipped(self):
        self.write_lines([
            json.dumps({'event': 'CREATED', 'licenseId': 'L1', 'timestamp': '2025-01-01T10:00:00+00:00'}),
            '{not json',
            '',
            '[1, 2, 3]',
        ])
        with self.assertLogs('licensehub.licenses.audit_log', level='WARNING'):
            entries = read_license_logs('L1', log_path=self.log_path)
        self.assertEqual(len(entries), 1)

    def test_writer_emits_structured_record(self):
        caller = Identity(user_id='u-1', email='admin@test.com', role=Role.ADMIN, department=Department.ITSG)
        with self.assertLogs('licensehub.license_audit', level='INFO') as captured:
            LicenseLogger.created('L9', caller)
            LicenseLogger.revoked('L9', 'K1', 'u-1')
        created, revoked = captured.records
        self.assertEqual(created.getMessage(), 'LICENSE_CREATED')
        self.assertEqual(created.audit['event'], 'CREATED')
        self.assertEqual(created.audit['licenseId'], 'L9')
        self.assertEqual(created.audit['userDetails'], {'email': 'admin@test.com', 'userId': 'u-1'})
        self.assertIn('timestamp', created.audit)
        self.assertEqual(revoked.audit['keyId'], 'K1')
        self.assertEqual(revoked.audit['revokedBy'], 'u-1')

    def test_sorts_on_parsed_time_across_offsets(self):
        self.write_lines([
            json.dumps({'event': 'CREATED', 'licenseId': 'L1', 'timestamp': '2025-01-01T10:00:00Z'}),
            json.dumps({'event': 'UPDATED', 'licenseId': 'L1', 'timestamp': '2025-01-01T11:30:00+08:00'}),
            json.dumps({'event': 'ASSIGNED', 'licenseId': 'L1', 'timestamp': '2025-01-01T09:00:00-05:00'}),
        ])
        entries = read_license_logs('L1', log_path=self.log_path)
        self.assertEqual([entry['event'] for entry in entries], ['ASSIGNED', 'CREATED', 'UPDATED'])

    def test_formatter_renders_one_json_object_per_line(self):
        record = logging.LogRecord('licensehub.license_audit', logging.INFO, __file__, 1, 'LICENSE_DELETED', None, None)
        record.audit = {'event': 'DELETED', 'licenseId': 'L3'}
        line = JsonLineFormatter(service='license-management').format(record)
        self.assertNotIn('\n', line)
        self.assertEqual(json.loads(line), {
            'level': 'info',
            'message': 'LICENSE_DELETED',
            'service': 'license-management',
            'event': 'DELETED',
            'licenseId': 'L3',
        })

    def test_file_round_trip(self):
        handler = logging.FileHandler(self.log_path, encoding='utf-8')
        handler.setFormatter(JsonLineFormatter(service='license-management'))
        previous_handlers = audit_logger.handlers[:]
        audit_logger.handlers = [handler]

        def restore():
            handler.close()
            audit_logger.handlers = previous_handlers
        self.addCleanup(restore)

        caller = Identity(user_id='u-1', email='admin@test.com', role=Role.ADMIN, department=Department.ITSG)
        start = timezone.now()
        moments = [start + timedelta(seconds=offset) for offset in range(4)]
        with mock.patch('licensehub.licenses.audit_log.timezone.now', side_effect=moments):
            LicenseLogger.created('L1', caller)
            LicenseLogger.created('L2', caller)
            LicenseLogger.assigned('L1', 'K1', 'u-2')
            LicenseLogger.deleted('L1', 'u-1')
        handler.flush()

        entries = read_license_logs('L1', log_path=self.log_path)
        self.assertEqual([entry['event'] for entry in entries], ['DELETED', 'ASSIGNED', 'CREATED'])
        self.assertEqual({entry['service'] for entry in entries}, {'license-management'})
        self.assertEqual(entries[1]['assignedToUserId'], 'u-2')
        self.assertEqual(entries[2]['userDetails'], {'email': 'admin@test.com', 'userId': 'u-1'})
        self.assertEqual(entries[0]['timestamp'], moments[3].isoformat())


class LicenseAPITests(TestCase):
    """Test license endpoints"""

    def setUp(self):
        cache.clear()
        self.itsg_admin = TestDataFactory.create_user(role=Role.ADMIN, department=Department.ITSG)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.itsg_admin)
        self.payload = {
            'name': 'Figma',
            'vendor': 'Figma Inc',
            'description': 'Design tool',
            'total_seats': 3,
            'cost': '1200.00',
            'expiry_date': (timezone.now() + timedelta(days=90)).isoformat(),
            'type': LicenseType.SEAT_BASED,
        }

    def test_create_license(self):
        with self.assertLogs('licensehub.license_audit', level='INFO') as captured, \
                self.captureOnCommitCallbacks(execute=True):
            response = self.client.post('/api/license-management/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['available_seats'], 3)
        self.assertEqual(response.data['data']['status'], LicenseStatus.AVAILABLE)

        license = License.objects.get(name='Figma')
        self.assertEqual(license.added_by, self.itsg_admin)
        self.assertEqual(captured.records[0].audit['event'], 'CREATED')
        self.assertEqual(captured.records[0].audit['licenseId'], str(license.pk))

        notification = Notification.objects.get(user=self.itsg_admin)
        self.assertEqual(notification.type, NotificationType.LICENSE_CREATED)
        self.assertEqual(notification.message, 'A new license (Figma) from vendor (Figma Inc) has been created.')

    def test_create_license_requires_itsg(self):
        sre_admin = TestDataFactory.create_user(role=Role.ADMIN, department=Department.SRE)
        self.client.authenticate_user(sre_admin)
        response = self.client.post('/api/license-management/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_license_rejects_past_expiry(self):
        payload = {**self.payload, 'expiry_date': (timezone.now() - timedelta(days=1)).isoformat()}
        response = self.client.post('/api/license-management/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Expiry date must be a valid future date')

    def test_create_license_seat_bounds(self):
        response = self.client.post('/api/license-management/', {**self.payload, 'total_seats': 1001}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Total seats cannot exceed 1000')

    def test_list_is_paginated_by_ten(self):
        for _ in range(12):
            TestDataFactory.create_license()
        response = self.client.get('/api/license-management/', {'page': 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 2)
        self.assertEqual(response.data['meta']['total_pages'], 2)

    def test_list_filters(self):
        TestDataFactory.create_license(name='Slack', vendor='Salesforce')
        TestDataFactory.create_license(name='Zoom', vendor='Zoom Video')
        response = self.client.get('/api/license-management/', {'vendor': 'Salesforce', 'type': 'ALL'})
        self.assertEqual([row['name'] for row in response.data['data']], ['Slack'])
        response = self.client.get('/api/license-management/', {'search': 'zoo'})
        self.assertEqual([row['name'] for row in response.data['data']], ['Zoom'])

    def test_detail_counts(self):
        license = TestDataFactory.create_license(total_seats=4)
        TestDataFactory.create_license_key(license, status=KeyStatus.ASSIGNED)
        TestDataFactory.create_license_key(license, status=KeyStatus.ACTIVE)
        response = self.client.get(f'/api/license-management/{license.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['key_count'], 2)
        self.assertEqual(data['unassigned_keys_count'], 1)
        self.assertEqual(data['available_seats'], 3)

    def test_dropdowns_report_available_seats(self):
        license = TestDataFactory.create_license(name='Notion', total_seats=2)
        TestDataFactory.create_license_key(license, status=KeyStatus.ASSIGNED)
        response = self.client.get('/api/license-management/drop-downs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        row = next(row for row in response.data['data'] if row['name'] == 'Notion')
        self.assertEqual(row['available_seats'], 1)

    def test_update_blocks_type_change_with_active_keys(self):
        license = TestDataFactory.create_license()
        TestDataFactory.create_license_key(license, status=KeyStatus.ACTIVE)
        response = self.client.patch(f'/api/license-management/{license.pk}/', {'type': LicenseType.KEY_BASED},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'],
                         'Cannot update license type : some license keys are still active or assigned')

    def test_update_blocks_seats_below_key_count(self):
        license = TestDataFactory.create_license(total_seats=3)
        TestDataFactory.create_license_key(license)
        TestDataFactory.create_license_key(license)
        response = self.client.patch(f'/api/license-management/{license.pk}/', {'total_seats': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_with_past_expiry_marks_expired(self):
        license = TestDataFactory.create_license()
        past = (timezone.now() - timedelta(days=2)).isoformat()
        with self.assertLogs('licensehub.license_audit', level='INFO') as captured, \
                self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(f'/api/license-management/{license.pk}/', {'expiry_date': past},
                                         format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        license.refresh_from_db()
        self.assertEqual(license.status, LicenseStatus.EXPIRED)
        record = captured.records[0].audit
        self.assertEqual(record['event'], 'UPDATED')
        self.assertIn('expiry_date', record['changes'])
        self.assertIn('status', record['changes'])

    def test_delete_blocked_with_assigned_keys(self):
        license = TestDataFactory.create_license()
        TestDataFactory.create_license_key(license, status=KeyStatus.ASSIGNED)
        response = self.client.delete(f'/api/license-management/{license.pk}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {'success': False, 'error': 'Cannot delete license with assigned keys'})

    def test_delete_license(self):
        license = TestDataFactory.create_license()
        TestDataFactory.create_license_key(license, status=KeyStatus.ACTIVE)
        with self.assertLogs('licensehub.license_audit', level='INFO') as captured, \
                self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(f'/api/license-management/{license.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(License.objects.filter(pk=license.pk).exists())
        self.assertFalse(LicenseKey.objects.filter(license_id=license.pk).exists())
        self.assertEqual(captured.records[0].audit['event'], 'DELETED')

    def test_unknown_license(self):
        response = self.client.get('/api/license-management/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'License not found'})


class LicenseKeyAPITests(TestCase):
    """Test key management limits and permissions"""

    def setUp(self):
        cache.clear()
        self.lead = TestDataFactory.create_user(role=Role.TEAM_LEAD, department=Department.SRE)
        self.employee = TestDataFactory.create_user(role=Role.EMPLOYEE, department=Department.ITSG)
        self.license = TestDataFactory.create_license(total_seats=2, license_type=LicenseType.KEY_BASED)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.lead)

    def test_add_key(self):
        response = self.client.post(f'/api/license-management/{self.license.pk}/keys/', {'key': 'ABC-123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        key = LicenseKey.objects.get(license=self.license)
        self.assertEqual(key.status, KeyStatus.ACTIVE)
        self.assertEqual(key.added_by, self.lead)

    def test_add_duplicate_key(self):
        TestDataFactory.create_license_key(self.license, key='ABC-123')
        response = self.client.post(f'/api/license-management/{self.license.pk}/keys/', {'key': 'ABC-123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'License key already exists for this license')

    def test_add_key_beyond_total_seats(self):
        TestDataFactory.create_license_key(self.license)
        TestDataFactory.create_license_key(self.license)
        response = self.client.post(f'/api/license-management/{self.license.pk}/keys/', {'key': 'ONE-MORE'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No available seats remaining for this license')
        self.assertEqual(self.license.keys.count(), 2)

    def test_add_key_requires_lead_role(self):
        self.client.authenticate_user(self.employee)
        response = self.client.post(f'/api/license-management/{self.license.pk}/keys/', {'key': 'ABC-123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_bulk_add_respects_capacity(self):
        response = self.client.post(f'/api/license-management/{self.license.pk}/keys/bulk/',
                                    {'keys': ['A', 'B', 'C']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Only 2 seats available, but 3 keys provided')
        self.assertEqual(self.license.keys.count(), 0)

    def test_bulk_add_rejects_duplicates(self):
        TestDataFactory.create_license_key(self.license, key='A')
        response = self.client.post(f'/api/license-management/{self.license.pk}/keys/bulk/',
                                    {'keys': ['A']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Duplicate keys found: A')

    def test_bulk_add(self):
        response = self.client.post(f'/api/license-management/{self.license.pk}/keys/bulk/',
                                    {'keys': ['A', 'B']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data'], {'created': 2})

    def test_remove_key_requires_lead_role(self):
        key = TestDataFactory.create_license_key(self.license)
        self.client.authenticate_user(self.employee)
        response = self.client.delete(f'/api/license-keys/{key.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(LicenseKey.objects.filter(pk=key.pk).exists())

    def test_remove_assigned_key_is_rejected(self):
        key = TestDataFactory.create_license_key(self.license, status=KeyStatus.ASSIGNED)
        response = self.client.delete(f'/api/license-keys/{key.pk}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Cannot delete an assigned license key')

    def test_remove_key(self):
        key = TestDataFactory.create_license_key(self.license)
        response = self.client.delete(f'/api/license-keys/{key.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(LicenseKey.objects.filter(pk=key.pk).exists())

    def test_assign_key_logs_and_fills_license(self):
        assignee = TestDataFactory.create_user()
        first = TestDataFactory.create_license_key(self.license)
        second = TestDataFactory.create_license_key(self.license)
        with self.assertLogs('licensehub.license_audit', level='INFO') as captured, \
                self.captureOnCommitCallbacks(execute=True):
            for key in (first, second):
                response = self.client.patch(f'/api/license-keys/{key.pk}/status/',
                                             {'status': KeyStatus.ASSIGNED, 'assigned_to_id': str(assignee.pk)},
                                             format='json')
                self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([record.audit['event'] for record in captured.records], ['ASSIGNED', 'ASSIGNED'])
        self.assertEqual(captured.records[0].audit['assignedToUserId'], str(assignee.pk))
        self.license.refresh_from_db()
        self.assertEqual(self.license.status, LicenseStatus.FULL)

    def test_revoke_key_logs_revoker(self):
        key = TestDataFactory.create_license_key(self.license, status=KeyStatus.ASSIGNED)
        with self.assertLogs('licensehub.license_audit', level='INFO') as captured, \
                self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(f'/api/license-keys/{key.pk}/status/', {'status': KeyStatus.REVOKED},
                                         format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(captured.records[0].audit['event'], 'REVOKED')
        self.assertEqual(captured.records[0].audit['revokedBy'], str(self.lead.pk))
        key.refresh_from_db()
        self.assertIsNone(key.assigned_to)

    def test_assign_requires_assignee(self):
        key = TestDataFactory.create_license_key(self.license)
        response = self.client.patch(f'/api/license-keys/{key.pk}/status/', {'status': KeyStatus.ASSIGNED},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'An assignee is required to assign a license key')

        response = self.client.patch(f'/api/license-keys/{key.pk}/status/',
                                     {'status': KeyStatus.ASSIGNED,
                                      'assigned_to_id': '00000000-0000-0000-0000-000000000000'},
                                     format='json')
        self.assertEqual(response.data['error'], 'User not found')
        key.refresh_from_db()
        self.assertEqual(key.status, KeyStatus.ACTIVE)

    def test_status_change_requires_lead_role(self):
        key = TestDataFactory.create_license_key(self.license)
        self.client.authenticate_user(self.employee)
        response = self.client.patch(f'/api/license-keys/{key.pk}/status/', {'status': KeyStatus.INACTIVE},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manage_keys_view(self):
        TestDataFactory.create_license_key(self.license, key='XYZ')
        response = self.client.get(f'/api/license-management/manage-keys/{self.license.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([key['key'] for key in response.data['data']['keys']], ['XYZ'])


class LicenseLogsAPITests(TestCase):
    """Test the license-logs endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_requires_authentication(self):
        response = self.client.get('/api/license-logs/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unknown_license_has_no_entries(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/license-logs/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'data': []})


class CheckLicenseExpiryCommandTests(TestCase):
    """Test the check_license_expiry management command"""

    def setUp(self):
        self.itsg_manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.ITSG)
        self.hr_manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.HR)

    def test_notifies_itsg_admins_and_marks_expired(self):
        expired = TestDataFactory.create_license(name='Old', expiry_date=timezone.now() - timedelta(days=1))
        TestDataFactory.create_license(name='Soon', expiry_date=timezone.now() + timedelta(days=2))
        TestDataFactory.create_license(name='Later', expiry_date=timezone.now() + timedelta(days=30))

        with self.assertLogs('licensehub.license_cron', level='INFO') as captured:
            call_command('check_license_expiry', stdout=StringIO())

        notifications = Notification.objects.filter(user=self.itsg_manager, type=NotificationType.LICENSE_EXPIRED)
        self.assertEqual(notifications.count(), 2)
        self.assertFalse(Notification.objects.filter(user=self.hr_manager).exists())
        expired.refresh_from_db()
        self.assertEqual(expired.status, LicenseStatus.EXPIRED)
        self.assertIn('INFO:licensehub.license_cron:Sent expired alert for Old (Acme)', captured.output)

    def test_nothing_to_report(self):
        TestDataFactory.create_license(expiry_date=timezone.now() + timedelta(days=30))
        with self.assertLogs('licensehub.license_cron', level='INFO') as captured:
            call_command('check_license_expiry', stdout=StringIO())
        self.assertIn('No expiring or expired licenses today', captured.output[-1])
        self.assertFalse(Notification.objects.exists())
