"""
Test suite for the core module
Tests: authorization policy, user management, directory scope, step-up
password verification, pagination and the audit trail
"""
from io import StringIO
from pathlib import Path

from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from licensehub.config.database import database_from_env
from licensehub.core.models import User, AuditLog, Role, Department
from licensehub.core.permissions import (
    Identity, evaluate, directory_scope, navigation_permissions, UNAUTHORIZED,
)
from licensehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from licensehub.notifications.models import Notification, NotificationType


def identity(role=Role.EMPLOYEE, department=Department.ITSG):
    return Identity(user_id='00000000-0000-0000-0000-000000000001', email='caller@test.com',
                    role=role, department=department)


class PolicyTests(TestCase):
    """Test the POLICY table and its predicates"""

    def test_anonymous_is_unauthorized(self):
        decision = evaluate(None, 'user.manage')
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.error, UNAUTHORIZED)

    def test_user_manage_is_itsg_only(self):
        self.assertTrue(evaluate(identity(Role.EMPLOYEE, Department.ITSG), 'user.manage').allowed)
        decision = evaluate(identity(Role.ADMIN, Department.HR), 'user.manage')
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.error, 'Forbidden: ITSG Only')

    def test_license_key_manage_requires_lead_role(self):
        self.assertTrue(evaluate(identity(Role.TEAM_LEAD, Department.SRE), 'license_key.manage').allowed)
        self.assertTrue(evaluate(identity(Role.ADMIN, Department.HR), 'license_key.manage').allowed)
        self.assertFalse(evaluate(identity(Role.EMPLOYEE, Department.ITSG), 'license_key.manage').allowed)

    def test_procurement_requires_role_and_department(self):
        self.assertTrue(evaluate(identity(Role.MANAGER, Department.FINANCE), 'procurement.view').allowed)
        self.assertFalse(evaluate(identity(Role.MANAGER, Department.HR), 'procurement.view').allowed)
        self.assertFalse(evaluate(identity(Role.EMPLOYEE, Department.FINANCE), 'procurement.create').allowed)

    def test_directory_scope(self):
        self.assertIsNone(directory_scope(identity(department=Department.ITSG)))
        self.assertEqual(directory_scope(identity(department=Department.HR)), Department.HR)

    def test_navigation_permissions(self):
        permissions = navigation_permissions(identity(Role.ADMIN, Department.ITSG))
        self.assertTrue(permissions['dashboard'])
        self.assertTrue(permissions['user_management'])
        self.assertTrue(permissions['reports'])
        self.assertFalse(permissions['procurement'])

    def test_decision_success_mirrors_allowed(self):
        self.assertTrue(evaluate(identity(), 'nav.dashboard').success)


class AuthAPITests(TestCase):
    """Test login and the current-identity endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user(
            email='lead@test.com', password='secret123', role=Role.TEAM_LEAD, department=Department.SRE,
        )
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_with_claims(self):
        response = self.client.post('/api/auth/login/', {'email': 'lead@test.com', 'password': 'secret123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        token = AccessToken(response.data['access'])
        self.assertEqual(token['role'], Role.TEAM_LEAD)
        self.assertEqual(token['department'], Department.SRE)
        self.assertEqual(token['email'], 'lead@test.com')

    def test_login_with_wrong_password(self):
        response = self.client.post('/api/auth/login/', {'email': 'lead@test.com', 'password': 'nope'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_includes_navigation_permissions(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['email'], 'lead@test.com')
        self.assertTrue(response.data['data']['permissions']['license_management'])
        self.assertFalse(response.data['data']['permissions']['user_management'])

    def test_me_requires_authentication(self):
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'error': 'Unauthorized'})


class CreateUserAPITests(TestCase):
    """Test the create-user action and its gate"""

    def setUp(self):
        cache.clear()
        self.itsg_user = TestDataFactory.create_user(role=Role.ADMIN, department=Department.ITSG)
        self.client = AuthenticatedAPIClient()
        self.payload = {
            'name': 'Jane Doe',
            'email': 'Jane.Doe@Test.com',
            'password': 'secret123',
            'role': Role.EMPLOYEE,
            'department': Department.SRE,
            'position': 'Engineer',
            'manager_id': 'none',
        }

    def test_create_user_unauthenticated(self):
        response = self.client.post('/api/user-management/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'success': False, 'error': 'Unauthorized'})

    def test_create_user_outside_itsg_is_forbidden(self):
        hr_admin = TestDataFactory.create_user(role=Role.ADMIN, department=Department.HR)
        self.client.authenticate_user(hr_admin)
        response = self.client.post('/api/user-management/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Forbidden: ITSG Only')
        self.assertFalse(User.objects.filter(email='jane.doe@test.com').exists())

    def test_create_user_validation_error(self):
        self.client.authenticate_user(self.itsg_user)
        response = self.client.post('/api/user-management/', {**self.payload, 'name': 'J'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'Name must be at least 2 characters')
        self.assertIn('name', response.data['details'])

    def test_create_user_invalid_manager_id(self):
        self.client.authenticate_user(self.itsg_user)
        response = self.client.post('/api/user-management/', {**self.payload, 'manager_id': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid manager ID')

    def test_create_user_success(self):
        self.client.authenticate_user(self.itsg_user)
        response = self.client.post('/api/user-management/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])

        user = User.objects.get(email='jane.doe@test.com')
        self.assertTrue(user.check_password('secret123'))
        self.assertIsNone(user.manager)
        self.assertEqual(user.added_by, self.itsg_user)
        self.assertEqual(user.username, user.email)

        welcome = Notification.objects.get(user=user)
        self.assertEqual(welcome.type, NotificationType.USER_ADDED)
        self.assertEqual(welcome.title, 'Welcome to the License Hub')
        self.assertTrue(AuditLog.objects.filter(entity='User', entity_id=str(user.pk), action='create').exists())

    def test_create_user_with_manager_from_other_department(self):
        manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.HR)
        self.client.authenticate_user(self.itsg_user)
        response = self.client.post('/api/user-management/', {**self.payload, 'manager_id': str(manager.pk)},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Please select a valid manager from the same department')

    def test_create_user_with_manager_from_same_department(self):
        manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.SRE)
        self.client.authenticate_user(self.itsg_user)
        response = self.client.post('/api/user-management/', {**self.payload, 'manager_id': str(manager.pk)},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email='jane.doe@test.com').manager, manager)

    def test_create_user_duplicate_email(self):
        TestDataFactory.create_user(email='jane.doe@test.com')
        self.client.authenticate_user(self.itsg_user)
        response = self.client.post('/api/user-management/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'A user with this email already exists')


class UpdateUserAPITests(TestCase):
    """Test the update-user action"""

    def setUp(self):
        self.itsg_user = TestDataFactory.create_user(role=Role.ADMIN, department=Department.ITSG)
        self.target = TestDataFactory.create_user(name='Old Name', department=Department.SRE)
        self.client = AuthenticatedAPIClient()

    def test_partial_update_records_changes(self):
        self.client.authenticate_user(self.itsg_user)
        response = self.client.patch(f'/api/user-management/{self.target.pk}/', {'name': 'New Name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.target.refresh_from_db()
        self.assertEqual(self.target.name, 'New Name')

        log = AuditLog.objects.get(entity='User', entity_id=str(self.target.pk), action='update')
        self.assertEqual(log.changes, {'name': {'old': 'Old Name', 'new': 'New Name'}})

    def test_user_cannot_manage_themselves(self):
        manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.SRE)
        self.client.authenticate_user(self.itsg_user)
        response = self.client.patch(f'/api/user-management/{manager.pk}/', {'manager_id': str(manager.pk)},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Please select a valid manager from the same department')
        manager.refresh_from_db()
        self.assertIsNone(manager.manager_id)

    def test_assign_manager_from_same_department(self):
        manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.SRE)
        self.client.authenticate_user(self.itsg_user)
        response = self.client.patch(f'/api/user-management/{self.target.pk}/', {'manager_id': str(manager.pk)},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.target.refresh_from_db()
        self.assertEqual(self.target.manager_id, manager.pk)

    def test_update_outside_itsg_is_forbidden(self):
        sre_admin = TestDataFactory.create_user(role=Role.ADMIN, department=Department.SRE)
        self.client.authenticate_user(sre_admin)
        response = self.client.patch(f'/api/user-management/{self.target.pk}/', {'name': 'New Name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_unknown_user(self):
        self.client.authenticate_user(self.itsg_user)
        response = self.client.get('/api/user-management/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'User not found'})


class UserListAPITests(TestCase):
    """Test pagination and filtering of the user-management table"""

    def setUp(self):
        cache.clear()
        self.caller = TestDataFactory.create_user(role=Role.ADMIN, department=Department.ITSG)
        for index in range(7):
            TestDataFactory.create_user(
                name=f'Member {index}',
                department=Department.HR if index % 2 else Department.SRE,
            )
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.caller)

    def test_default_page(self):
        response = self.client.get('/api/user-management/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 5)
        self.assertEqual(response.data['meta'], {'total': 8, 'page': 1, 'limit': 5, 'total_pages': 2})

    def test_second_page_returns_remaining_rows(self):
        response = self.client.get('/api/user-management/', {'page': 2, 'limit': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 3)

        full_list = self.client.get('/api/user-management/', {'limit': 100}).data['data']
        self.assertEqual(
            [row['id'] for row in response.data['data']],
            [row['id'] for row in full_list][5:10],
        )

    def test_page_past_the_end_is_empty(self):
        response = self.client.get('/api/user-management/', {'page': 9, 'limit': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], [])
        self.assertEqual(response.data['meta']['total'], 8)

    def test_limit_is_capped(self):
        response = self.client.get('/api/user-management/', {'limit': 101})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Limit cannot exceed 100')

    def test_filter_by_department(self):
        response = self.client.get('/api/user-management/', {'department': Department.HR, 'limit': 100})
        self.assertEqual(response.data['meta']['total'], 3)

    def test_search_is_case_insensitive(self):
        response = self.client.get('/api/user-management/', {'search': 'member', 'limit': 100})
        self.assertEqual(response.data['meta']['total'], 7)

    def test_new_user_invalidates_cached_page(self):
        first = self.client.get('/api/user-management/')
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_user()
        second = self.client.get('/api/user-management/')
        self.assertEqual(second.data['meta']['total'], first.data['meta']['total'] + 1)

    def test_cached_page_is_revalidated_only_after_commit(self):
        first = self.client.get('/api/user-management/')
        with self.captureOnCommitCallbacks() as callbacks:
            TestDataFactory.create_user()
            during = self.client.get('/api/user-management/')
        self.assertEqual(during.data['meta']['total'], first.data['meta']['total'])

        for callback in callbacks:
            callback()
        after = self.client.get('/api/user-management/')
        self.assertEqual(after.data['meta']['total'], first.data['meta']['total'] + 1)


class DirectoryAPITests(TestCase):
    """Test department-scoped directory search"""

    def setUp(self):
        cache.clear()
        self.hr_user = TestDataFactory.create_user(name='Helen HR', department=Department.HR)
        self.hr_peer = TestDataFactory.create_user(name='Harry HR', department=Department.HR)
        self.sre_user = TestDataFactory.create_user(name='Sam SRE', department=Department.SRE)
        self.itsg_user = TestDataFactory.create_user(name='Ivy ITSG', department=Department.ITSG)
        self.client = AuthenticatedAPIClient()

    def test_non_itsg_caller_sees_own_department_only(self):
        self.client.authenticate_user(self.hr_user)
        response = self.client.get('/api/user-management/drop-downs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        departments = {row['department'] for row in response.data['data']}
        self.assertEqual(departments, {Department.HR})
        self.assertEqual(len(response.data['data']), 2)

    def test_itsg_caller_sees_every_department(self):
        self.client.authenticate_user(self.itsg_user)
        response = self.client.get('/api/user-management/drop-downs/')
        self.assertEqual(len(response.data['data']), 4)

    def test_search_within_scope(self):
        self.client.authenticate_user(self.hr_user)
        response = self.client.get('/api/user-management/drop-downs/', {'search': 'sam'})
        self.assertEqual(response.data['data'], [])

    def test_managers_endpoint(self):
        manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.SRE)
        self.client.authenticate_user(self.hr_user)
        response = self.client.get('/api/user-management/managers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(str(manager.pk), [row['id'] for row in response.data['data']])


class VerifyAccessAPITests(TestCase):
    """Test the step-up password check"""

    def setUp(self):
        self.user = TestDataFactory.create_user(password='secret123')
        self.client = AuthenticatedAPIClient()

    def test_correct_password(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/license-assignment/verify-access/', {'password': 'secret123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True})

    def test_wrong_password(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/license-assignment/verify-access/', {'password': 'wrong'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': False, 'message': 'Invalid password.'})

    def test_unauthenticated(self):
        response = self.client.post('/api/license-assignment/verify-access/', {'password': 'secret123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Unauthorized')


class AuditTrailAPITests(TestCase):
    """Test the database audit trail endpoint"""

    def setUp(self):
        self.lead = TestDataFactory.create_user(role=Role.TEAM_LEAD, department=Department.ITSG)
        self.client = AuthenticatedAPIClient()
        AuditLog.objects.create(user=self.lead, action='create', entity='License', entity_id='1',
                                description='Created license Figma')
        AuditLog.objects.create(user=self.lead, action='delete', entity='License', entity_id='2',
                                description='Deleted license Slack')

    def test_audit_requires_itsg_lead(self):
        employee = TestDataFactory.create_user(role=Role.EMPLOYEE, department=Department.ITSG)
        self.client.authenticate_user(employee)
        response = self.client.get('/api/audit/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_filter_by_action(self):
        self.client.authenticate_user(self.lead)
        response = self.client.get('/api/audit/', {'action': 'delete'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['description'] for row in response.data['data']], ['Deleted license Slack'])

    def test_search_description(self):
        self.client.authenticate_user(self.lead)
        response = self.client.get('/api/audit/', {'search': 'figma', 'date_range': 'today'})
        self.assertEqual(len(response.data['data']), 1)

    def test_unknown_action(self):
        self.client.authenticate_user(self.lead)
        response = self.client.get('/api/audit/', {'action': 'explode'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SeedDemoUsersCommandTests(TestCase):
    """Test the seed_demo_users management command"""

    def test_creates_users_once(self):
        out = StringIO()
        call_command('seed_demo_users', '--password', 'demo-pass-1', stdout=out)
        self.assertIn('11 users created', out.getvalue())

        employee = User.objects.get(email='itsg.employee@licensehub.local')
        self.assertTrue(employee.check_password('demo-pass-1'))
        self.assertEqual(employee.manager.email, 'itsg.lead@licensehub.local')
        self.assertTrue(User.objects.filter(role=Role.ACCOUNT_OWNER, department=Department.ITSG).exists())

        out = StringIO()
        call_command('seed_demo_users', stdout=out)
        self.assertIn('0 users created, 11 users already existed', out.getvalue())
        self.assertEqual(User.objects.count(), 11)


class DatabaseSettingsTests(TestCase):
    """Test DATABASES selection from DB_ENGINE"""

    def test_postgresql_and_postgres_alias(self):
        for engine in ('postgresql', 'postgres', 'PostgreSQL'):
            config = database_from_env({'DB_ENGINE': engine, 'DB_NAME': 'licenses'}, Path('/srv'))
            self.assertEqual(config['ENGINE'], 'django.db.backends.postgresql')
            self.assertEqual(config['NAME'], 'licenses')

    def test_sqlite_is_the_default(self):
        config = database_from_env({}, Path('/srv'))
        self.assertEqual(config['ENGINE'], 'django.db.backends.sqlite3')
        self.assertEqual(config['NAME'], str(Path('/srv') / 'db.sqlite3'))

    def test_unknown_engine_is_rejected(self):
        with self.assertRaises(ImproperlyConfigured):
            database_from_env({'DB_ENGINE': 'mysql'}, Path('/srv'))
