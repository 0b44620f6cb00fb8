"""
Test suite for the procurement module
Tests: access policy, archived/active listing, request creation and cost totals
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from licensehub.core.models import Role, Department
from licensehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from licensehub.notifications.models import Notification, NotificationType
from licensehub.procurement.models import ProcurementRequest, ProcurementStatus


class ProcurementAccessTests(TestCase):
    """Test who may view and raise procurement requests"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_unauthenticated(self):
        response = self.client.get('/api/procurement/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_employee_is_forbidden(self):
        employee = TestDataFactory.create_user(role=Role.EMPLOYEE, department=Department.FINANCE)
        self.client.authenticate_user(employee)
        response = self.client.get('/api/procurement/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {'error': 'Forbidden: ITSG/Finance Managers Only'})

    def test_manager_outside_itsg_and_finance_is_forbidden(self):
        manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.HR)
        self.client.authenticate_user(manager)
        response = self.client.post('/api/procurement/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProcurementListTests(TestCase):
    """Test active and archived listings"""

    def setUp(self):
        self.manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.FINANCE)
        self.pending = TestDataFactory.create_procurement(self.manager, status=ProcurementStatus.PENDING)
        self.approved = TestDataFactory.create_procurement(self.manager, status=ProcurementStatus.APPROVED)
        self.completed = TestDataFactory.create_procurement(self.manager, status=ProcurementStatus.COMPLETED)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def test_active_list_excludes_completed(self):
        response = self.client.get('/api/procurement/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [row['id'] for row in response.data['data']]
        self.assertEqual(ids, [str(self.approved.pk), str(self.pending.pk)])

    def test_archived_list_is_completed_only(self):
        response = self.client.get('/api/procurement/', {'archived': 'true'})
        self.assertEqual([row['id'] for row in response.data['data']], [str(self.completed.pk)])

    def test_list_includes_requester(self):
        response = self.client.get('/api/procurement/')
        self.assertEqual(response.data['data'][0]['requested_by']['email'], self.manager.email)

    def test_detail(self):
        response = self.client.get(f'/api/procurement/{self.pending.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['id'], str(self.pending.pk))

    def test_detail_not_found(self):
        response = self.client.get('/api/procurement/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ProcurementCreateTests(TestCase):
    """Test raising a procurement request"""

    def setUp(self):
        self.requester = TestDataFactory.create_user(name='Ivy Lead', role=Role.TEAM_LEAD, department=Department.ITSG)
        self.finance_manager = TestDataFactory.create_user(role=Role.MANAGER, department=Department.FINANCE)
        self.finance_employee = TestDataFactory.create_user(role=Role.EMPLOYEE, department=Department.FINANCE)
        self.license = TestDataFactory.create_license(name='Figma')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.requester)
        self.payload = {
            'item_description': 'Figma seats',
            'justification': 'Design team growth',
            'vendor': 'Figma Inc',
            'vendor_email': 'sales@figma.com',
            'price': '15.50',
            'quantity': 4,
            'license_id': str(self.license.pk),
        }

    def test_create_computes_total_and_defaults(self):
        response = self.client.post('/api/procurement/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])

        procurement = ProcurementRequest.objects.get()
        self.assertEqual(procurement.total_cost, Decimal('62.00'))
        self.assertEqual(procurement.currency, 'PHP')
        self.assertEqual(procurement.cc, Department.ITSG)
        self.assertEqual(procurement.status, ProcurementStatus.PENDING)
        self.assertEqual(procurement.requested_by, self.requester)
        self.assertEqual(procurement.license, self.license)

    def test_create_notifies_finance_approvers(self):
        self.client.post('/api/procurement/', self.payload, format='json')
        notification = Notification.objects.get(user=self.finance_manager)
        self.assertEqual(notification.type, NotificationType.PROCUREMENT_REQUEST)
        self.assertEqual(notification.message, 'Ivy Lead submitted a procurement request for Figma seats.')
        self.assertFalse(Notification.objects.filter(user=self.finance_employee).exists())

    def test_create_without_price_has_zero_total(self):
        payload = {key: value for key, value in self.payload.items() if key != 'price'}
        response = self.client.post('/api/procurement/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(ProcurementRequest.objects.get().total_cost, Decimal('0'))

    def test_create_validation(self):
        response = self.client.post('/api/procurement/', {**self.payload, 'justification': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Justification is required.')

    def test_create_with_unknown_license(self):
        payload = {**self.payload, 'license_id': '00000000-0000-0000-0000-000000000000'}
        response = self.client.post('/api/procurement/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'License not found')
