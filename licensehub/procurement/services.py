import logging

from django.db import transaction

from .models import ProcurementRequest, ProcurementStatus
from licensehub.core.exceptions import DomainValidationError
from licensehub.core.models import Role, Department
from licensehub.core.utils import create_audit_log
from licensehub.licenses.models import License
from licensehub.notifications.models import NotificationType
from licensehub.notifications.services import notify_users, users_with

logger = logging.getLogger(__name__)

FINANCE_APPROVER_ROLES = [Role.MANAGER, Role.TEAM_LEAD]


def _with_relations(queryset):
    return queryset.select_related('license', 'requested_by', 'approved_by')


def get_procurements(archived=False):
    """Archived lists COMPLETED requests only; the active list is everything else"""
    queryset = _with_relations(ProcurementRequest.objects.all())
    if archived:
        queryset = queryset.filter(status=ProcurementStatus.COMPLETED)
    else:
        queryset = queryset.exclude(status=ProcurementStatus.COMPLETED)
    return list(queryset.order_by('-created_at'))


def get_procurement(procurement_id):
    return _with_relations(ProcurementRequest.objects.filter(pk=procurement_id)).first()


@transaction.atomic
def create_procurement(data, identity, request=None):
    license = None
    if data.get('license_id'):
        license = License.objects.filter(pk=data['license_id']).first()
        if license is None:
            raise DomainValidationError('License not found')

    price = data.get('price')
    quantity = data.get('quantity') or 1
    procurement = ProcurementRequest.objects.create(
        item_name=data.get('item_name') or None,
        item_description=data['item_description'],
        justification=data['justification'],
        vendor=data['vendor'],
        vendor_email=data.get('vendor_email') or None,
        price=price,
        quantity=quantity,
        total_cost=price * quantity if price is not None else 0,
        currency=data.get('currency') or 'PHP',
        cc=data.get('cc') or Department.ITSG,
        notes=data.get('notes') or None,
        license=license,
        requested_by_id=identity.user_id,
    )

    notify_users(
        users_with(FINANCE_APPROVER_ROLES, [Department.FINANCE]),
        NotificationType.PROCUREMENT_REQUEST,
        payload={
            'requester_name': identity.name or identity.email,
            'item': procurement.item_name or procurement.item_description,
        },
        url=f"/procurement/{procurement.pk}",
    )
    create_audit_log(
        identity=identity,
        action='create',
        entity='ProcurementRequest',
        entity_id=procurement.pk,
        description=f"Requested procurement of {procurement.item_name or procurement.item_description[:100]}",
        changes={'vendor': procurement.vendor, 'total_cost': procurement.total_cost, 'currency': procurement.currency},
        request=request,
    )
    logger.info(f"Procurement request {procurement.pk} created by {identity.email}")
    return procurement
