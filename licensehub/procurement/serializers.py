from decimal import Decimal

from rest_framework import serializers

from .models import ProcurementRequest
from licensehub.core.models import Department
from licensehub.core.serializers import DirectoryEntrySerializer


class ProcurementLicenseSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    vendor = serializers.CharField()


class ProcurementSerializer(serializers.ModelSerializer):
    license = ProcurementLicenseSerializer(read_only=True)
    requested_by = DirectoryEntrySerializer(read_only=True)
    approved_by = DirectoryEntrySerializer(read_only=True)

    class Meta:
        model = ProcurementRequest
        fields = ['id', 'item_name', 'item_description', 'justification', 'vendor', 'vendor_email',
                  'price', 'quantity', 'total_cost', 'currency', 'cc', 'notes', 'status',
                  'purchase_status', 'rejection_reason', 'expected_delivery', 'license',
                  'requested_by', 'approved_by', 'created_at', 'updated_at']
        read_only_fields = fields


class ProcurementCreateSerializer(serializers.Serializer):
    item_name = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    item_description = serializers.CharField(
        min_length=2, error_messages={'min_length': 'Item description is required.', 'blank': 'Item description is required.'},
    )
    justification = serializers.CharField(
        min_length=5, error_messages={'min_length': 'Justification is required.', 'blank': 'Justification is required.'},
    )
    vendor = serializers.CharField(
        min_length=2, max_length=100,
        error_messages={'min_length': 'Vendor name is required.', 'blank': 'Vendor name is required.'},
    )
    vendor_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True,
    )
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    currency = serializers.CharField(max_length=3, required=False, default='PHP')
    cc = serializers.ChoiceField(choices=Department.choices, required=False, default=Department.ITSG)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    license_id = serializers.UUIDField(required=False, allow_null=True)


class ProcurementQuerySerializer(serializers.Serializer):
    archived = serializers.BooleanField(required=False, default=False)
