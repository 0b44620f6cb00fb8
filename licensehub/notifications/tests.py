"""
Test suite for the notifications module
Tests: templates, sending, listing and owner-only mark-as-read
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from licensehub.core.models import AuditLog, Role, Department
from licensehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from licensehub.notifications.models import Notification, NotificationType
from licensehub.notifications.services import send_notification, notify_users, users_with
from licensehub.notifications.templates import render


class NotificationTemplateTests(TestCase):
    """Test title/message rendering per notification type"""

    def test_every_type_has_a_template(self):
        for notification_type in NotificationType:
            title, message = render(notification_type)
            self.assertTrue(title)
            self.assertTrue(message)

    def test_license_created_defaults(self):
        self.assertEqual(
            render(NotificationType.LICENSE_CREATED, {}),
            ('License Created', 'A new license (Unknown) from vendor (Unknown Vendor) has been created.'),
        )

    def test_license_expired(self):
        _, message = render(NotificationType.LICENSE_EXPIRED,
                            {'name': 'Figma', 'vendor': 'Figma Inc', 'expired_at': 'Jan 5, 2026'})
        self.assertEqual(message, 'The license **Figma** from vendor **Figma Inc** expired on Jan 5, 2026.')

    def test_license_requested_for_admin_with_reason(self):
        title, message = render(NotificationType.LICENSE_REQUESTED, {
            'for_admin': True, 'status': 'DENIED', 'reason': 'No budget',
            'requestor_name': 'Jane', 'license_name': 'Figma', 'vendor': 'Figma Inc',
        })
        self.assertEqual(title, 'License Request DENIED')
        self.assertEqual(message, "Jane's license request for **Figma** (Figma Inc) has been denied (Reason: No budget).")

    def test_license_requested_unknown_status_for_user(self):
        title, message = render(NotificationType.LICENSE_REQUESTED, {'status': 'ARCHIVED'})
        self.assertEqual(title, 'Your License Request is ARCHIVED')
        self.assertEqual(message, 'Your request for **Unknown License** (Unknown Vendor) was updated.')

    def test_user_added_variants(self):
        self.assertEqual(render(NotificationType.USER_ADDED, {'for_user': True, 'department': 'SRE'})[1],
                         'You’ve been successfully added to the SRE.')
        self.assertEqual(render(NotificationType.USER_ADDED, {'user_name': 'Jane'}),
                         ('New User Added', 'Jane has been added to the system.'))

    def test_general_uses_payload(self):
        self.assertEqual(render(NotificationType.GENERAL, {'title': 'Hi', 'message': 'There'}), ('Hi', 'There'))


class NotificationServiceTests(TestCase):
    """Test sending notifications"""

    def test_send_notification_stores_rendered_template(self):
        user = TestDataFactory.create_user()
        notification = send_notification(user, NotificationType.PROCUREMENT_REQUEST,
                                          payload={'requester_name': 'Jane', 'item': 'Laptops'},
                                          url='/procurement/1')
        self.assertEqual(notification.title, 'Procurement Request')
        self.assertEqual(notification.message, 'Jane submitted a procurement request for Laptops.')
        self.assertEqual(notification.url, '/procurement/1')
        self.assertFalse(notification.read)

    def test_users_with_matches_role_and_department(self):
        itsg_admin = TestDataFactory.create_user(role=Role.ADMIN, department=Department.ITSG)
        TestDataFactory.create_user(role=Role.ADMIN, department=Department.HR)
        TestDataFactory.create_user(role=Role.EMPLOYEE, department=Department.ITSG)
        self.assertEqual(users_with([Role.ADMIN], [Department.ITSG]), [itsg_admin])

    def test_notify_users(self):
        users = [TestDataFactory.create_user() for _ in range(3)]
        notify_users(users, NotificationType.GENERAL)
        self.assertEqual(Notification.objects.count(), 3)


class NotificationAPITests(TestCase):
    """Test notification endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_returns_own_notifications_newest_first(self):
        older = TestDataFactory.create_notification(self.user, title='Older')
        newer = TestDataFactory.create_notification(self.user, title='Newer', read=True)
        TestDataFactory.create_notification(self.other, title='Not mine')
        response = self.client.get('/api/notification/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['id'] for row in response.data['data']], [str(newer.pk), str(older.pk)])
        self.assertEqual(response.data['meta'], {'unread': 1})

    def test_mark_read(self):
        notification = TestDataFactory.create_notification(self.user)
        response = self.client.post(f'/api/notification/{notification.pk}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['read'])
        notification.refresh_from_db()
        self.assertTrue(notification.read)

    def test_mark_read_writes_audit_row_once(self):
        notification = TestDataFactory.create_notification(self.user, title='Welcome')
        self.client.post(f'/api/notification/{notification.pk}/read/')
        self.client.post(f'/api/notification/{notification.pk}/read/')

        log = AuditLog.objects.get(entity='Notification', entity_id=str(notification.pk))
        self.assertEqual(log.action, 'read')
        self.assertEqual(log.user, self.user)
        self.assertEqual(log.description, "Marked notification 'Welcome' as read")

    def test_mark_read_refreshes_cached_list(self):
        notification = TestDataFactory.create_notification(self.user)
        self.assertEqual(self.client.get('/api/notification/').data['meta'], {'unread': 1})
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post(f'/api/notification/{notification.pk}/read/')
        self.assertEqual(self.client.get('/api/notification/').data['meta'], {'unread': 0})

    def test_cannot_mark_someone_elses_notification(self):
        notification = TestDataFactory.create_notification(self.other)
        response = self.client.post(f'/api/notification/{notification.pk}/read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'success': False, 'error': 'Notification not found'})
        notification.refresh_from_db()
        self.assertFalse(notification.read)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/notification/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
