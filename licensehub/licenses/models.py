import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class LicenseType(models.TextChoices):
    SEAT_BASED = 'SEAT_BASED', 'Seat Based'
    KEY_BASED = 'KEY_BASED', 'Key Based'


class LicenseStatus(models.TextChoices):
    AVAILABLE = 'AVAILABLE', 'Available'
    FULL = 'FULL', 'Full'
    EXPIRED = 'EXPIRED', 'Expired'


class KeyStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    INACTIVE = 'INACTIVE', 'Inactive'
    ASSIGNED = 'ASSIGNED', 'Assigned'
    REVOKED = 'REVOKED', 'Revoked'


class License(models.Model):
    """A purchased software license with a fixed number of seats"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    vendor = models.CharField(max_length=50, blank=True, default='')
    owner = models.CharField(max_length=100, blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    type = models.CharField(max_length=20, choices=LicenseType.choices, default=LicenseType.SEAT_BASED)
    total_seats = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=20, choices=LicenseStatus.choices, default=LicenseStatus.AVAILABLE)
    cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    expiry_date = models.DateTimeField(null=True, blank=True)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='added_licenses'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.vendor})" if self.vendor else self.name

    @property
    def is_expired(self):
        return self.expiry_date is not None and self.expiry_date < timezone.now()

    def compute_status(self, assigned_count):
        """EXPIRED past the expiry date, FULL once every seat is assigned, else AVAILABLE"""
        if self.is_expired:
            return LicenseStatus.EXPIRED
        if assigned_count >= self.total_seats:
            return LicenseStatus.FULL
        return LicenseStatus.AVAILABLE

    def refresh_status(self, save=True):
        assigned = self.keys.filter(status=KeyStatus.ASSIGNED).count()
        status = self.compute_status(assigned)
        if status != self.status:
            self.status = status
            if save:
                self.save(update_fields=['status', 'updated_at'])
        return self.status

    class Meta:
        db_table = 'licenses'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['vendor'], name='idx_license_vendor'),
            models.Index(fields=['status'], name='idx_license_status'),
            models.Index(fields=['expiry_date'], name='idx_license_expiry'),
        ]


class LicenseKey(models.Model):
    """One seat of a license; ``key`` is empty for seat-based licenses"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(License, on_delete=models.CASCADE, related_name='keys')
    key = models.CharField(max_length=255, blank=True, null=True)
    status = models.CharField(max_length=20, choices=KeyStatus.choices, default=KeyStatus.ACTIVE)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='added_license_keys'
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_license_keys'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.license.name}: {self.key or self.id}"

    class Meta:
        db_table = 'license_keys'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['license', 'key'], name='uniq_license_key'),
        ]
        indexes = [
            models.Index(fields=['license', 'status'], name='idx_license_key_status'),
        ]
