"""
Test utilities and factories for creating test data
"""
from datetime import timedelta
from decimal import Decimal
import random
import string

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from licensehub.core.models import Role, Department
from licensehub.licenses.models import License, LicenseKey, LicenseType, KeyStatus
from licensehub.notifications.models import Notification, NotificationType
from licensehub.procurement.models import ProcurementRequest, ProcurementStatus

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(name=None, email=None, password='testpass123', role=Role.EMPLOYEE,
                    department=Department.ITSG, manager=None, position=None):
        """Create a test user"""
        if not name:
            name = f'Test User {TestDataFactory.random_string(6)}'
        if not email:
            email = f'user_{TestDataFactory.random_string(8).lower()}@test.com'
        return User.objects.create_user(
            username=email,
            email=email,
            password=password,
            name=name,
            role=role,
            department=department,
            manager=manager,
            position=position,
        )

    @staticmethod
    def create_license(name=None, vendor='Acme', total_seats=5, license_type=LicenseType.SEAT_BASED,
                       expiry_date=None, added_by=None, description=None):
        """Create a test license expiring in 30 days unless told otherwise"""
        if not name:
            name = f'License_{TestDataFactory.random_string(6)}'
        if expiry_date is None:
            expiry_date = timezone.now() + timedelta(days=30)
        return License.objects.create(
            name=name,
            vendor=vendor,
            description=description,
            type=license_type,
            total_seats=total_seats,
            cost=Decimal('100.00'),
            expiry_date=expiry_date,
            added_by=added_by,
        )

    @staticmethod
    def create_license_key(license, key=None, status=KeyStatus.ACTIVE, assigned_to=None, added_by=None):
        """Create a test license key"""
        if key is None:
            key = f'KEY-{TestDataFactory.random_string(12).upper()}'
        return LicenseKey.objects.create(
            license=license,
            key=key,
            status=status,
            assigned_to=assigned_to,
            added_by=added_by,
        )

    @staticmethod
    def create_procurement(requested_by, status=ProcurementStatus.PENDING, vendor='Acme', price=Decimal('10.00'),
                           quantity=1):
        """Create a test procurement request"""
        return ProcurementRequest.objects.create(
            item_description=f'Item {TestDataFactory.random_string(6)}',
            justification='Needed for the team',
            vendor=vendor,
            price=price,
            quantity=quantity,
            total_cost=price * quantity,
            status=status,
            requested_by=requested_by,
        )

    @staticmethod
    def create_notification(user, title='Notification', message='Hello', notification_type=NotificationType.GENERAL,
                            read=False):
        """Create a test notification"""
        return Notification.objects.create(
            user=user,
            title=title,
            message=message,
            type=notification_type,
            read=read,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
