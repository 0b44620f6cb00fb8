from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from . import services
from .serializers import ProcurementSerializer, ProcurementCreateSerializer, ProcurementQuerySerializer
from licensehub.core.exceptions import NotFound
from licensehub.core.permissions import get_identity, requires


@api_view(['GET', 'POST'])
@permission_classes([
    IsAuthenticated,
    requires('procurement.view', methods=['GET']),
    requires('procurement.create', methods=['POST']),
])
def procurement_list_create(request):
    """List active or archived procurement requests, or raise a new one"""
    if request.method == 'GET':
        query = ProcurementQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        procurements = services.get_procurements(archived=query.validated_data['archived'])
        return Response({'data': ProcurementSerializer(procurements, many=True).data})

    serializer = ProcurementCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    procurement = services.create_procurement(serializer.validated_data, get_identity(request), request=request)
    procurement = services.get_procurement(procurement.pk)
    return Response({'success': True, 'data': ProcurementSerializer(procurement).data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, requires('procurement.view')])
def procurement_detail(request, pk):
    procurement = services.get_procurement(pk)
    if procurement is None:
        raise NotFound('Procurement request not found')
    return Response({'data': ProcurementSerializer(procurement).data})
