import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from . import services
from .audit_log import read_license_logs
from .serializers import (
    LicenseSerializer, LicenseDetailSerializer, LicenseWithKeysSerializer, LicenseDropdownSerializer,
    LicenseWriteSerializer, LicenseKeySerializer, LicenseKeyCreateSerializer,
    LicenseKeyBulkCreateSerializer, LicenseKeyStatusSerializer, LicenseListQuerySerializer,
)
from licensehub.core.cache_utils import cached_query, LICENSE_MANAGEMENT_TAG, LICENSE_DROPDOWNS_TAG
from licensehub.core.exceptions import NotFound
from licensehub.core.permissions import get_identity, requires

logger = logging.getLogger(__name__)

LIST_FILTERS = ('search', 'vendor', 'type', 'status')


@cached_query(LICENSE_MANAGEMENT_TAG)
def _license_page(page, **filters):
    rows, meta = services.get_licenses(filters, page)
    return {'data': LicenseSerializer(rows, many=True).data, 'meta': meta}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, requires('license.manage', methods=['POST'])])
def license_list_create(request):
    """List licenses (10 per page) or create a new license"""
    if request.method == 'GET':
        query = LicenseListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        filters = {name: request.query_params.get(name, '') for name in LIST_FILTERS}
        return Response(_license_page(query.validated_data['page'], **filters))

    serializer = LicenseWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    license = services.create_license(serializer.validated_data, get_identity(request), request=request)
    data = LicenseDetailSerializer(services.get_license(license.pk)).data
    return Response({'success': True, 'data': data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, requires('license.manage', methods=['PUT', 'PATCH', 'DELETE'])])
def license_detail(request, pk):
    """Retrieve, update or delete a license"""
    identity = get_identity(request)

    if request.method == 'GET':
        license = services.get_license(pk)
        if license is None:
            raise NotFound('License not found')
        return Response({'data': LicenseDetailSerializer(license).data})

    if request.method == 'DELETE':
        services.delete_license(pk, identity, request=request)
        return Response({'success': True})

    serializer = LicenseWriteSerializer(
        data=request.data,
        partial=request.method == 'PATCH',
        context={'allow_past_expiry': True},
    )
    serializer.is_valid(raise_exception=True)
    services.update_license(pk, serializer.validated_data, identity, request=request)
    return Response({'success': True, 'data': LicenseDetailSerializer(services.get_license(pk)).data})


@cached_query(LICENSE_DROPDOWNS_TAG)
def _license_options():
    return LicenseDropdownSerializer(services.license_dropdowns(), many=True).data


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def license_dropdowns(request):
    """Licenses with their remaining seats, for pickers"""
    return Response({'data': _license_options()})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def license_manage_keys(request, pk):
    license = services.get_license_with_keys(pk)
    if license is None:
        raise NotFound('License not found')
    return Response({'data': LicenseWithKeysSerializer(license).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, requires('license_key.manage')])
def license_key_create(request, pk):
    """Add a single key to a license"""
    serializer = LicenseKeyCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    license_key = services.add_license_key(pk, serializer.validated_data.get('key'), get_identity(request), request=request)
    return Response({'success': True, 'data': LicenseKeySerializer(license_key).data}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, requires('license_key.manage')])
def license_key_bulk_create(request, pk):
    """Add several keys to a license in one transaction"""
    serializer = LicenseKeyBulkCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    created = services.bulk_add_license_keys(pk, serializer.validated_data['keys'], get_identity(request), request=request)
    return Response(
        {'success': True, 'data': {'created': len(created)}},
        status=status.HTTP_201_CREATED,
    )


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, requires('license_key.manage')])
def license_key_delete(request, pk):
    services.remove_license_key(pk, get_identity(request), request=request)
    return Response({'success': True})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, requires('license_key.manage')])
def license_key_status(request, pk):
    """Change a key's status (ASSIGNED/REVOKED transitions are audit-logged)"""
    serializer = LicenseKeyStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    license_key = services.update_license_key_status(
        pk,
        serializer.validated_data['status'],
        get_identity(request),
        assigned_to_id=serializer.validated_data.get('assigned_to_id'),
        request=request,
    )
    return Response({'success': True, 'data': LicenseKeySerializer(license_key).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def license_logs(request, pk):
    """Audit file entries for one license, newest first"""
    return Response({'data': read_license_logs(pk)})
