# app/services/v1/role_templates.py
"""
Default permission set for each role.

A user without an explicit permission list gets their role's template.
Roles missing from this table (legacy tags) get nothing.
"""
from typing import Mapping, FrozenSet
from app.db.models import Role, Permission

P = Permission

_SCHEDULING = frozenset({
    P.VIEW_SCHEDULES, P.CREATE_SHIFTS, P.EDIT_SHIFTS, P.ASSIGN_STAFF,
})

_FACILITY_ADMIN = frozenset({
    P.VIEW_SCHEDULES, P.CREATE_SHIFTS, P.EDIT_SHIFTS, P.DELETE_SHIFTS, P.ASSIGN_STAFF,
    P.APPROVE_SHIFT_REQUESTS,
    P.VIEW_STAFF, P.CREATE_STAFF, P.EDIT_STAFF, P.DEACTIVATE_STAFF,
    P.VIEW_STAFF_CREDENTIALS, P.EDIT_STAFF_CREDENTIALS, P.MANAGE_CREDENTIALS,
    P.VIEW_FACILITY_PROFILE, P.EDIT_FACILITY_PROFILE, P.MANAGE_FACILITY_SETTINGS,
    P.VIEW_BILLING, P.MANAGE_BILLING, P.VIEW_RATES, P.EDIT_RATES, P.APPROVE_INVOICES,
    P.VIEW_REPORTS, P.VIEW_ANALYTICS, P.EXPORT_DATA,
    P.VIEW_COMPLIANCE, P.MANAGE_COMPLIANCE, P.UPLOAD_DOCUMENTS,
    P.MANAGE_FACILITY_USERS, P.MANAGE_PERMISSIONS, P.VIEW_AUDIT_LOGS,
    P.VIEW_JOB_OPENINGS, P.MANAGE_JOB_OPENINGS,
    P.VIEW_WORKFLOW_AUTOMATION, P.MANAGE_WORKFLOW_AUTOMATION,
    P.VIEW_REFERRAL_SYSTEM, P.MANAGE_REFERRAL_SYSTEM,
    P.VIEW_ATTENDANCE_REPORTS, P.VIEW_OVERTIME_REPORTS,
    P.VIEW_FLOAT_POOL_SAVINGS, P.VIEW_AGENCY_USAGE,
    P.VIEW_TIMESHEETS, P.APPROVE_TIMESHEETS,
})

ROLE_TEMPLATES: Mapping[Role, FrozenSet[Permission]] = {
    Role.SUPER_ADMIN: frozenset(Permission),
    Role.FACILITY_ADMIN: _FACILITY_ADMIN,
    Role.SCHEDULING_COORDINATOR: _SCHEDULING | {
        P.APPROVE_SHIFT_REQUESTS, P.VIEW_STAFF, P.VIEW_REPORTS, P.VIEW_ANALYTICS,
    },
    Role.HR_MANAGER: frozenset({
        P.VIEW_STAFF, P.CREATE_STAFF, P.EDIT_STAFF, P.DEACTIVATE_STAFF,
        P.VIEW_STAFF_CREDENTIALS, P.EDIT_STAFF_CREDENTIALS, P.MANAGE_CREDENTIALS,
        P.VIEW_COMPLIANCE, P.MANAGE_COMPLIANCE, P.UPLOAD_DOCUMENTS,
        P.VIEW_REPORTS, P.EXPORT_DATA,
        P.VIEW_JOB_OPENINGS, P.MANAGE_JOB_OPENINGS,
        P.VIEW_REFERRAL_SYSTEM, P.MANAGE_REFERRAL_SYSTEM,
        P.VIEW_ATTENDANCE_REPORTS, P.VIEW_OVERTIME_REPORTS,
    }),
    Role.CORPORATE: _SCHEDULING | {P.VIEW_STAFF, P.VIEW_REPORTS, P.VIEW_ANALYTICS},
    Role.REGIONAL_DIRECTOR: _SCHEDULING | {
        P.VIEW_STAFF, P.VIEW_FACILITY_PROFILE, P.EDIT_FACILITY_PROFILE,
        P.VIEW_BILLING, P.VIEW_REPORTS, P.VIEW_ANALYTICS, P.EXPORT_DATA,
        P.VIEW_COMPLIANCE, P.MANAGE_COMPLIANCE,
        P.VIEW_REFERRAL_SYSTEM, P.MANAGE_REFERRAL_SYSTEM,
        P.VIEW_ATTENDANCE_REPORTS, P.VIEW_OVERTIME_REPORTS,
        P.VIEW_FLOAT_POOL_SAVINGS, P.VIEW_AGENCY_USAGE,
    },
    Role.BILLING: frozenset({
        P.VIEW_BILLING, P.MANAGE_BILLING, P.VIEW_RATES, P.EDIT_RATES, P.APPROVE_INVOICES,
        P.VIEW_REPORTS, P.EXPORT_DATA, P.VIEW_ANALYTICS,
        P.VIEW_TIMESHEETS, P.APPROVE_PAYROLL,
    }),
    Role.SUPERVISOR: frozenset({
        P.VIEW_SCHEDULES, P.ASSIGN_STAFF, P.VIEW_STAFF, P.VIEW_REPORTS,
        P.VIEW_TIMESHEETS, P.APPROVE_TIMESHEETS,
    }),
    Role.DIRECTOR_OF_NURSING: _SCHEDULING | {
        P.APPROVE_SHIFT_REQUESTS,
        P.VIEW_STAFF, P.CREATE_STAFF, P.EDIT_STAFF,
        P.VIEW_STAFF_CREDENTIALS, P.EDIT_STAFF_CREDENTIALS, P.MANAGE_CREDENTIALS,
        P.VIEW_REPORTS, P.VIEW_ANALYTICS, P.VIEW_COMPLIANCE, P.MANAGE_COMPLIANCE,
        P.VIEW_REFERRAL_SYSTEM, P.MANAGE_REFERRAL_SYSTEM,
        P.VIEW_ATTENDANCE_REPORTS, P.VIEW_OVERTIME_REPORTS, P.VIEW_FLOAT_POOL_SAVINGS,
    },
    Role.EMPLOYEE: frozenset({P.VIEW_SCHEDULES, P.VIEW_FACILITY_PROFILE}),
    Role.CONTRACTOR: frozenset({P.VIEW_SCHEDULES}),
    Role.VIEWER: frozenset({
        P.VIEW_SCHEDULES, P.VIEW_STAFF, P.VIEW_FACILITY_PROFILE, P.VIEW_BILLING, P.VIEW_REPORTS,
    }),
}


def role_template(role: str) -> FrozenSet[Permission]:
    """Template for a stored role tag; unknown tags get an empty set."""
    try:
        return ROLE_TEMPLATES.get(Role(role), frozenset())
    except ValueError:
        return frozenset()


__all__ = ["ROLE_TEMPLATES", "role_template"]
