from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from .models import License, LicenseKey, LicenseType, KeyStatus
from licensehub.core.serializers import UserRefSerializer


class LicenseAddedBySerializer(serializers.Serializer):
    name = serializers.CharField()
    department = serializers.CharField()
    role = serializers.CharField()


class AssignedUserSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    email = serializers.EmailField()


class LicenseKeySerializer(serializers.ModelSerializer):
    added_by = UserRefSerializer(read_only=True)
    assigned_to = AssignedUserSerializer(read_only=True)

    class Meta:
        model = LicenseKey
        fields = ['id', 'license', 'key', 'status', 'added_by', 'assigned_to', 'created_at', 'updated_at']
        read_only_fields = fields


class LicenseKeySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = LicenseKey
        fields = ['id', 'status']


class LicenseSerializer(serializers.ModelSerializer):
    """License row for list pages; counts come from queryset annotations"""
    added_by = LicenseAddedBySerializer(read_only=True)
    keys = LicenseKeySummarySerializer(many=True, read_only=True)
    key_count = serializers.IntegerField(read_only=True)
    available_seats = serializers.IntegerField(read_only=True)

    class Meta:
        model = License
        fields = ['id', 'name', 'vendor', 'owner', 'description', 'type', 'total_seats', 'status',
                  'cost', 'expiry_date', 'added_by', 'keys', 'key_count', 'available_seats',
                  'created_at', 'updated_at']
        read_only_fields = fields


class LicenseDetailSerializer(LicenseSerializer):
    unassigned_keys_count = serializers.IntegerField(read_only=True)

    class Meta(LicenseSerializer.Meta):
        fields = LicenseSerializer.Meta.fields + ['unassigned_keys_count']
        read_only_fields = fields


class LicenseWithKeysSerializer(LicenseSerializer):
    keys = LicenseKeySerializer(many=True, read_only=True)


class LicenseDropdownSerializer(serializers.ModelSerializer):
    available_seats = serializers.IntegerField(read_only=True)

    class Meta:
        model = License
        fields = ['id', 'name', 'vendor', 'owner', 'available_seats']


class LicenseWriteSerializer(serializers.Serializer):
    """Create/update payload for a license"""
    name = serializers.CharField(
        max_length=100,
        error_messages={
            'blank': 'Name is required',
            'max_length': 'Name must be at most 100 characters',
        },
    )
    vendor = serializers.CharField(
        max_length=50, allow_blank=True,
        error_messages={'max_length': 'Vendor name must be at most 50 characters'},
    )
    description = serializers.CharField(
        max_length=500, required=False, allow_blank=True, allow_null=True,
        error_messages={'max_length': 'Description must be at most 500 characters'},
    )
    total_seats = serializers.IntegerField(
        min_value=1, max_value=1000,
        error_messages={
            'min_value': 'Total seats must be at least 1',
            'max_value': 'Total seats cannot exceed 1000',
        },
    )
    cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True,
        min_value=Decimal('0'), max_value=Decimal('1000000'),
        error_messages={
            'min_value': 'Cost must be at least 0',
            'max_value': 'Cost cannot exceed 1,000,000',
        },
    )
    expiry_date = serializers.DateTimeField(
        error_messages={'invalid': 'Expiry date must be a valid future date'},
    )
    type = serializers.ChoiceField(choices=LicenseType.choices)
    owner = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)

    def validate_expiry_date(self, value):
        # Updates may carry a past date; the license is then marked EXPIRED
        if not self.context.get('allow_past_expiry') and value <= timezone.now():
            raise serializers.ValidationError('Expiry date must be a valid future date')
        return value


class LicenseKeyCreateSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate_key(self, value):
        value = (value or '').strip()
        return value or None


class LicenseKeyBulkCreateSerializer(serializers.Serializer):
    keys = serializers.ListField(
        child=serializers.CharField(max_length=255),
        allow_empty=False,
        error_messages={'empty': 'At least one key is required'},
    )

    def validate_keys(self, value):
        keys = [key.strip() for key in value if key.strip()]
        if not keys:
            raise serializers.ValidationError('At least one key is required')
        return keys


class LicenseKeyStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=KeyStatus.choices)
    assigned_to_id = serializers.UUIDField(required=False, allow_null=True)


class LicenseListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
