# app/services/v1/permission_service.py
"""
Permission resolution.

Every gate in the service goes through ``resolve``: route dependencies, the
``/permissions/check`` endpoint, page access and navigation filtering. The
module is pure; it never touches the database and never logs.
"""
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, FrozenSet, Any

from app.db.models import User, Permission
from app.db.schemas import AccessMode, PermissionSource
from .role_templates import role_template

P = Permission


@dataclass(frozen=True)
class PermissionSubject:
    """
    What the resolver needs to know about a caller.

    ``explicit_permissions`` is None when no override is stored, in which case
    the role template applies. An empty frozenset is an explicit empty grant.
    """

    role: str
    explicit_permissions: Optional[FrozenSet[Permission]] = None
    source: PermissionSource = PermissionSource.ROLE_TEMPLATE
    facility_id: Optional[str] = None

    @classmethod
    def from_user(cls, user: User, facility_id: Optional[str] = None) -> "PermissionSubject":
        facility_overrides: Mapping[str, Any] = user.facility_permissions or {}
        if facility_id is not None and str(facility_id) in facility_overrides:
            return cls(
                role=user.role,
                explicit_permissions=parse_permissions(facility_overrides[str(facility_id)]),
                source=PermissionSource.FACILITY,
                facility_id=str(facility_id),
            )
        if user.permissions is not None:
            return cls(
                role=user.role,
                explicit_permissions=parse_permissions(user.permissions),
                source=PermissionSource.EXPLICIT,
                facility_id=facility_id,
            )
        return cls(role=user.role, facility_id=facility_id)


@dataclass(frozen=True)
class NavItem:
    key: str
    label: str
    path: str
    # Shown when the caller holds ANY of these; empty means always shown
    permissions: FrozenSet[Permission] = frozenset()


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem("dashboard", "Dashboard", "/dashboard",
            frozenset({P.VIEW_SCHEDULES, P.VIEW_STAFF, P.VIEW_REPORTS})),
    NavItem("schedule", "Schedule", "/schedule", frozenset({P.VIEW_SCHEDULES})),
    NavItem("shift_templates", "Shift Templates", "/shift-templates", frozenset({P.VIEW_SCHEDULES})),
    NavItem("staff", "Staff Directory", "/staff-directory", frozenset({P.VIEW_STAFF})),
    NavItem("job_postings", "Job Postings", "/job-postings", frozenset({P.VIEW_JOB_OPENINGS})),
    NavItem("messaging", "Messages", "/messaging"),
    NavItem("billing", "Billing", "/billing-dashboard", frozenset({P.VIEW_BILLING})),
    NavItem("rates", "Rates", "/rates", frozenset({P.VIEW_RATES})),
    NavItem("timesheets", "Timesheets", "/timesheets", frozenset({P.VIEW_TIMESHEETS})),
    NavItem("reports", "Reports", "/reports", frozenset({P.VIEW_REPORTS})),
    NavItem("analytics", "Analytics", "/analytics", frozenset({P.VIEW_ANALYTICS})),
    NavItem("attendance", "Attendance", "/attendance-reports", frozenset({P.VIEW_ATTENDANCE_REPORTS})),
    NavItem("overtime", "Overtime", "/overtime-reports", frozenset({P.VIEW_OVERTIME_REPORTS})),
    NavItem("float_pool", "Float Pool Savings", "/float-pool", frozenset({P.VIEW_FLOAT_POOL_SAVINGS})),
    NavItem("agency_usage", "Agency Usage", "/agency-usage", frozenset({P.VIEW_AGENCY_USAGE})),
    NavItem("workflow", "Workflow Automation", "/workflow-automation",
            frozenset({P.VIEW_WORKFLOW_AUTOMATION})),
    NavItem("referrals", "Referrals", "/referral-system", frozenset({P.VIEW_REFERRAL_SYSTEM})),
    NavItem("compliance", "Compliance", "/compliance", frozenset({P.VIEW_COMPLIANCE})),
    NavItem("facility_profile", "Facility Profile", "/facility-profile",
            frozenset({P.VIEW_FACILITY_PROFILE})),
    NavItem("settings", "Settings", "/facility-settings", frozenset({P.MANAGE_FACILITY_SETTINGS})),
    NavItem("users", "Users", "/facility-users", frozenset({P.MANAGE_FACILITY_USERS})),
    NavItem("audit_logs", "Audit Logs", "/audit-logs", frozenset({P.VIEW_AUDIT_LOGS})),
)

# Pages not listed here are open to every authenticated caller
PAGE_PERMISSIONS: Mapping[str, FrozenSet[Permission]] = {
    "dashboard": frozenset({P.VIEW_SCHEDULES, P.VIEW_STAFF, P.VIEW_REPORTS}),
    "schedule": frozenset({P.VIEW_SCHEDULES}),
    "staff": frozenset({P.VIEW_STAFF}),
    "billing": frozenset({P.VIEW_BILLING}),
    "reports": frozenset({P.VIEW_REPORTS}),
    "analytics": frozenset({P.VIEW_ANALYTICS}),
    "compliance": frozenset({P.MANAGE_COMPLIANCE}),
    "settings": frozenset({P.VIEW_FACILITY_PROFILE}),
    "users": frozenset({P.MANAGE_FACILITY_USERS}),
}


def parse_permissions(values: Optional[Iterable[Any]]) -> FrozenSet[Permission]:
    """Stored tags to Permission values; unknown tags are dropped."""
    parsed = set()
    for value in values or ():
        try:
            parsed.add(Permission(value))
        except ValueError:
            continue
    return frozenset(parsed)


def effective_permissions(subject: PermissionSubject) -> FrozenSet[Permission]:
    if subject.explicit_permissions is not None:
        return subject.explicit_permissions
    return role_template(subject.role)


def resolve(
    subject: PermissionSubject,
    required: Iterable[Permission],
    mode: AccessMode = AccessMode.ANY,
) -> bool:
    """
    Decide whether ``subject`` passes a permission gate.

    An empty ``required`` set is no gate at all and always passes.
    """
    required_set = frozenset(required)
    if not required_set:
        return True

    granted = effective_permissions(subject)
    if mode == AccessMode.ALL:
        return required_set <= granted
    return not granted.isdisjoint(required_set)


def can_access_page(subject: PermissionSubject, page: str) -> bool:
    return resolve(subject, PAGE_PERMISSIONS.get(page, frozenset()), AccessMode.ANY)


def visible_nav_items(subject: PermissionSubject) -> list[NavItem]:
    return [item for item in NAV_ITEMS if resolve(subject, item.permissions, AccessMode.ANY)]


__all__ = [
    "PermissionSubject",
    "NavItem",
    "NAV_ITEMS",
    "PAGE_PERMISSIONS",
    "parse_permissions",
    "effective_permissions",
    "resolve",
    "can_access_page",
    "visible_nav_items",
]
