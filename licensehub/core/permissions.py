"""
Authorization policy.

Every role/department check in the project goes through the POLICY table
below. A rule lists the roles and departments allowed to perform an
operation; ``None`` on either side means "any". Callers are represented by
an explicit ``Identity`` built once per request and passed down to the
services instead of re-reading ``request.user`` everywhere.
"""
from dataclasses import dataclass

from rest_framework.permissions import BasePermission

from .models import Role, Department

UNAUTHORIZED = 'Unauthorized'


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    role: str
    department: str
    name: str = ''

    @classmethod
    def from_user(cls, user):
        if user is None or not user.is_authenticated:
            return None
        return cls(
            user_id=str(user.pk),
            email=user.email,
            role=user.role,
            department=user.department,
            name=user.name,
        )

    @property
    def is_itsg(self):
        return self.department == Department.ITSG


@dataclass(frozen=True)
class Rule:
    roles: frozenset = None
    departments: frozenset = None
    reason: str = ''

    def allows(self, role, department):
        role_allowed = self.roles is None or role in self.roles
        department_allowed = self.departments is None or department in self.departments
        return role_allowed and department_allowed


@dataclass(frozen=True)
class Decision:
    allowed: bool
    error: str = None

    @property
    def success(self):
        return self.allowed


def _any_of(*choices):
    return frozenset(choice.value for choice in choices)


ALL_ROLES = frozenset(Role.values)

POLICY = {
    'user.manage': Rule(departments=_any_of(Department.ITSG), reason='ITSG Only'),
    'license.manage': Rule(departments=_any_of(Department.ITSG), reason='ITSG Only'),
    'license_key.manage': Rule(
        roles=_any_of(Role.TEAM_LEAD, Role.MANAGER, Role.ADMIN),
        reason='Team Lead, Manager or Admin Only',
    ),
    'procurement.view': Rule(
        roles=_any_of(Role.MANAGER, Role.TEAM_LEAD),
        departments=_any_of(Department.ITSG, Department.FINANCE),
        reason='ITSG/Finance Managers Only',
    ),
    'procurement.create': Rule(
        roles=_any_of(Role.MANAGER, Role.TEAM_LEAD),
        departments=_any_of(Department.ITSG, Department.FINANCE),
        reason='ITSG/Finance Managers Only',
    ),
    'audit.view': Rule(
        roles=_any_of(Role.TEAM_LEAD, Role.ADMIN),
        departments=_any_of(Department.ITSG),
        reason='ITSG Team Leads/Admins Only',
    ),
    # Sidebar navigation
    'nav.dashboard': Rule(roles=ALL_ROLES),
    'nav.license_management': Rule(
        roles=_any_of(Role.MANAGER, Role.ADMIN, Role.TEAM_LEAD),
        departments=_any_of(Department.ITSG, Department.SRE),
    ),
    'nav.user_management': Rule(
        roles=_any_of(Role.ADMIN, Role.TEAM_LEAD),
        departments=_any_of(Department.ITSG, Department.HR),
    ),
    'nav.requests': Rule(roles=ALL_ROLES),
    'nav.assignments': Rule(
        roles=_any_of(Role.TEAM_LEAD, Role.ADMIN, Role.MANAGER),
        departments=_any_of(Department.ITSG, Department.SRE),
    ),
    'nav.procurement': Rule(
        roles=_any_of(Role.FINANCE, Role.MANAGER, Role.TEAM_LEAD),
        departments=_any_of(Department.ITSG, Department.FINANCE),
    ),
    'nav.reports': Rule(
        roles=_any_of(Role.TEAM_LEAD, Role.ADMIN),
        departments=_any_of(Department.ITSG),
    ),
}


def evaluate(identity, operation):
    """Return the Decision for ``identity`` performing ``operation``"""
    if identity is None:
        return Decision(False, UNAUTHORIZED)
    rule = POLICY[operation]
    if rule.allows(identity.role, identity.department):
        return Decision(True)
    return Decision(False, f"Forbidden: {rule.reason}" if rule.reason else 'Forbidden')


def directory_scope(identity):
    """
    Department filter applied to directory searches.

    ITSG sees every department (``None``); everyone else only their own.
    """
    if identity.is_itsg:
        return None
    return identity.department


def can_access_notification(identity, notification):
    return identity is not None and str(notification.user_id) == identity.user_id


def navigation_permissions(identity):
    """Map of sidebar item -> allowed, for the current identity"""
    return {
        operation.split('.', 1)[1]: evaluate(identity, operation).allowed
        for operation in POLICY
        if operation.startswith('nav.')
    }


def get_identity(request):
    return Identity.from_user(getattr(request, 'user', None))


class PolicyPermission(BasePermission):
    """DRF permission backed by a POLICY operation"""
    operation = None
    methods = None

    def has_permission(self, request, view):
        if self.methods is not None and request.method not in self.methods:
            return True
        decision = evaluate(get_identity(request), self.operation)
        if not decision.allowed:
            self.message = decision.error
        return decision.allowed


def requires(operation, methods=None):
    """
    Build a PolicyPermission for ``operation``.

    ``methods`` limits the check to those HTTP methods, so one view can serve
    an open GET and a gated POST.
    """
    if operation not in POLICY:
        raise KeyError(f"Unknown policy operation: {operation}")
    return type(
        f"Requires_{operation.replace('.', '_')}",
        (PolicyPermission,),
        {'operation': operation, 'methods': frozenset(methods) if methods else None},
    )
