import uuid

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed

from .models import User, AuditLog, Role, Department


class UserRefSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name']


class UserSerializer(serializers.ModelSerializer):
    manager = UserRefSerializer(read_only=True)
    added_by = UserRefSerializer(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'position', 'department', 'role', 'manager', 'added_by', 'created_at', 'updated_at']
        read_only_fields = fields


class ManagerSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'role', 'department']


class DirectoryEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'department']


class ManagerIdField(serializers.CharField):
    """Accepts ``"none"`` (no manager) or a UUID; ``"none"`` becomes ``None``"""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if value == 'none':
            return None
        try:
            return str(uuid.UUID(value))
        except ValueError:
            raise serializers.ValidationError('Invalid manager ID')


class UserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(
        min_length=2, max_length=100,
        error_messages={
            'min_length': 'Name must be at least 2 characters',
            'max_length': 'Name is too long',
        },
    )
    email = serializers.EmailField(error_messages={'invalid': 'Invalid email address'})
    role = serializers.ChoiceField(choices=Role.choices)
    department = serializers.ChoiceField(choices=Department.choices)
    position = serializers.CharField(
        max_length=100, allow_null=True, allow_blank=True, required=False,
        error_messages={'max_length': 'Position is too long'},
    )
    manager_id = ManagerIdField(required=False, allow_null=True)

    def validate_email(self, value):
        queryset = User.objects.filter(email__iexact=value)
        instance_id = self.context.get('user_id')
        if instance_id:
            queryset = queryset.exclude(pk=instance_id)
        if queryset.exists():
            raise serializers.ValidationError('A user with this email already exists')
        return value.lower()


class UserCreateSerializer(UserUpdateSerializer):
    password = serializers.CharField(
        write_only=True, min_length=6, max_length=100,
        error_messages={
            'min_length': 'Password must be at least 6 characters',
            'max_length': 'Password is too long',
        },
    )


class DirectoryQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default='')


class PasswordVerificationSerializer(serializers.Serializer):
    password = serializers.CharField(trim_whitespace=False)


class AuditLogSerializer(serializers.ModelSerializer):
    user = DirectoryEntrySerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'entity', 'entity_id', 'description',
                  'changes', 'ip_address', 'user_agent', 'created_at']


class AuditLogQuerySerializer(serializers.Serializer):
    DATE_RANGES = ['today', '7days', '30days', 'all']

    search = serializers.CharField(required=False, allow_blank=True, default='')
    action = serializers.CharField(required=False, default='all')
    date_range = serializers.ChoiceField(choices=DATE_RANGES, required=False, default='all')
    entity = serializers.CharField(required=False, allow_blank=True)
    entity_id = serializers.CharField(required=False, allow_blank=True)

    def validate_action(self, value):
        valid = {choice for choice, _ in AuditLog.ACTION_CHOICES}
        if value != 'all' and value not in valid:
            raise serializers.ValidationError(f"Unknown action: {value}")
        return value


class LicenseHubTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        # Session metadata consumed by the frontend
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        token['department'] = user.department
        return token
