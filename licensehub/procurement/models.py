import uuid

from django.conf import settings
from django.db import models

from licensehub.core.models import Department


class ProcurementStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'
    COMPLETED = 'COMPLETED', 'Completed'


class PurchaseStatus(models.TextChoices):
    NOT_STARTED = 'NOT_STARTED', 'Not Started'
    IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
    PURCHASED = 'PURCHASED', 'Purchased'
    COMPLETED = 'COMPLETED', 'Completed'


class ProcurementRequest(models.Model):
    """Purchase request raised by ITSG/Finance managers; COMPLETED rows are archived"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    item_name = models.CharField(max_length=200, blank=True, null=True)
    item_description = models.TextField()
    justification = models.TextField()
    vendor = models.CharField(max_length=100)
    vendor_email = models.EmailField(blank=True, null=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default='PHP')
    cc = models.CharField(max_length=20, choices=Department.choices, default=Department.ITSG)
    notes = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=ProcurementStatus.choices, default=ProcurementStatus.PENDING)
    purchase_status = models.CharField(
        max_length=20, choices=PurchaseStatus.choices, default=PurchaseStatus.NOT_STARTED
    )
    rejection_reason = models.TextField(blank=True, null=True)
    expected_delivery = models.DateField(null=True, blank=True)
    license = models.ForeignKey(
        'licenses.License', on_delete=models.SET_NULL, null=True, blank=True, related_name='procurement_requests'
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='procurement_requests'
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_procurements'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.item_name or self.item_description[:50]} ({self.vendor})"

    class Meta:
        db_table = 'procurement_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', '-created_at'], name='idx_procurement_status'),
        ]
