import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from . import services
from .cache_utils import cached_query, USER_MANAGEMENT_TAG, MANAGERS_TAG
from .exceptions import NotFound
from .pagination import PageQuerySerializer
from .permissions import get_identity, navigation_permissions, requires
from .serializers import (
    UserSerializer, UserCreateSerializer, UserUpdateSerializer,
    ManagerSerializer, DirectoryEntrySerializer, DirectoryQuerySerializer,
    PasswordVerificationSerializer, AuditLogSerializer, AuditLogQuerySerializer,
    LicenseHubTokenObtainPairSerializer,
)

logger = logging.getLogger(__name__)


class LicenseHubTokenObtainPairView(TokenObtainPairView):
    serializer_class = LicenseHubTokenObtainPairSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current identity with navigation permissions"""
    identity = get_identity(request)
    data = UserSerializer(request.user).data
    data['permissions'] = navigation_permissions(identity)
    return Response({'data': data})


@cached_query(USER_MANAGEMENT_TAG)
def _user_page(page, limit, search='', role='', department=''):
    filters = {'search': search, 'role': role, 'department': department}
    rows, meta = services.get_users({'page': page, 'limit': limit}, filters)
    return {'data': UserSerializer(rows, many=True).data, 'meta': meta}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, requires('user.manage', methods=['POST'])])
def user_list_create(request):
    """List users (paginated, filtered) or create a new user"""
    if request.method == 'GET':
        query = PageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        payload = _user_page(
            query.validated_data['page'],
            query.validated_data['limit'],
            search=request.query_params.get('search', ''),
            role=request.query_params.get('role', ''),
            department=request.query_params.get('department', ''),
        )
        return Response(payload)

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = services.create_user(serializer.validated_data, get_identity(request), request=request)
    return Response({'success': True, 'data': UserSerializer(user).data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated, requires('user.manage', methods=['PUT', 'PATCH'])])
def user_detail(request, pk):
    """Retrieve or update a user"""
    if request.method == 'GET':
        user = services.get_user_by_id(pk)
        if user is None:
            raise NotFound('User not found')
        return Response({'data': UserSerializer(user).data})

    serializer = UserUpdateSerializer(
        data=request.data,
        partial=request.method == 'PATCH',
        context={'user_id': pk},
    )
    serializer.is_valid(raise_exception=True)
    user = services.update_user(pk, serializer.validated_data, get_identity(request), request=request)
    return Response({'success': True, 'data': UserSerializer(user).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_dropdowns(request):
    """Directory search, scoped to the caller's department unless ITSG"""
    query = DirectoryQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    users = services.search_directory(get_identity(request), query.validated_data['search'])
    return Response({'data': DirectoryEntrySerializer(users, many=True).data})


@cached_query(MANAGERS_TAG)
def _manager_options():
    return ManagerSerializer(services.get_managers(), many=True).data


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_managers(request):
    return Response({'data': _manager_options()})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def license_access_verification(request):
    """Step-up password check before opening license assignment"""
    serializer = PasswordVerificationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    identity = get_identity(request)
    if not services.verify_password(identity, serializer.validated_data['password']):
        logger.warning(f"Failed license access verification for {identity.email}")
        return Response({'success': False, 'message': 'Invalid password.'})
    return Response({'success': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated, requires('audit.view')])
def audit_log_list(request):
    """Audit trail with search, action, entity and date-range filters"""
    query = AuditLogQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    logs = services.get_audit_logs(query.validated_data)
    return Response({'data': AuditLogSerializer(logs, many=True).data})
