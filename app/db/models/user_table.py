# app/db/models/user_table.py
from __future__ import annotations
from typing import Any, Optional
from enum import Enum
from sqlalchemy import String, Boolean, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column
from .db_base_model import DbBaseModel


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    FACILITY_ADMIN = "facility_admin"
    SCHEDULING_COORDINATOR = "scheduling_coordinator"
    HR_MANAGER = "hr_manager"
    CORPORATE = "corporate"
    REGIONAL_DIRECTOR = "regional_director"
    BILLING = "billing"
    SUPERVISOR = "supervisor"
    DIRECTOR_OF_NURSING = "director_of_nursing"
    EMPLOYEE = "employee"
    CONTRACTOR = "contractor"
    VIEWER = "viewer"


class Permission(str, Enum):
    # Schedules and shifts
    VIEW_SCHEDULES = "view_schedules"
    CREATE_SHIFTS = "create_shifts"
    EDIT_SHIFTS = "edit_shifts"
    DELETE_SHIFTS = "delete_shifts"
    ASSIGN_STAFF = "assign_staff"
    APPROVE_SHIFT_REQUESTS = "approve_shift_requests"
    # Staff
    VIEW_STAFF = "view_staff"
    CREATE_STAFF = "create_staff"
    EDIT_STAFF = "edit_staff"
    DEACTIVATE_STAFF = "deactivate_staff"
    VIEW_STAFF_CREDENTIALS = "view_staff_credentials"
    EDIT_STAFF_CREDENTIALS = "edit_staff_credentials"
    MANAGE_CREDENTIALS = "manage_credentials"
    # Facility profile
    VIEW_FACILITY_PROFILE = "view_facility_profile"
    EDIT_FACILITY_PROFILE = "edit_facility_profile"
    MANAGE_FACILITY_SETTINGS = "manage_facility_settings"
    # Billing
    VIEW_BILLING = "view_billing"
    MANAGE_BILLING = "manage_billing"
    VIEW_RATES = "view_rates"
    EDIT_RATES = "edit_rates"
    APPROVE_INVOICES = "approve_invoices"
    # Reports
    VIEW_REPORTS = "view_reports"
    VIEW_ANALYTICS = "view_analytics"
    EXPORT_DATA = "export_data"
    # Compliance
    VIEW_COMPLIANCE = "view_compliance"
    MANAGE_COMPLIANCE = "manage_compliance"
    UPLOAD_DOCUMENTS = "upload_documents"
    # Administration
    MANAGE_FACILITY_USERS = "manage_facility_users"
    MANAGE_PERMISSIONS = "manage_permissions"
    VIEW_AUDIT_LOGS = "view_audit_logs"
    VIEW_JOB_OPENINGS = "view_job_openings"
    MANAGE_JOB_OPENINGS = "manage_job_openings"
    VIEW_WORKFLOW_AUTOMATION = "view_workflow_automation"
    MANAGE_WORKFLOW_AUTOMATION = "manage_workflow_automation"
    VIEW_REFERRAL_SYSTEM = "view_referral_system"
    MANAGE_REFERRAL_SYSTEM = "manage_referral_system"
    # Workforce reports
    VIEW_ATTENDANCE_REPORTS = "view_attendance_reports"
    VIEW_OVERTIME_REPORTS = "view_overtime_reports"
    VIEW_FLOAT_POOL_SAVINGS = "view_float_pool_savings"
    VIEW_AGENCY_USAGE = "view_agency_usage"
    # Timesheets and payroll
    VIEW_TIMESHEETS = "view_timesheets"
    APPROVE_TIMESHEETS = "approve_timesheets"
    APPROVE_PAYROLL = "approve_payroll"


class User(DbBaseModel):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=DbBaseModel.generate_uuid,
    )

    email: Mapped[str] = mapped_column(String(254), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(80), nullable=False)
    last_name: Mapped[str] = mapped_column(String(80), nullable=False)

    # Plain text: legacy role tags still load and resolve to no permissions
    role: Mapped[str] = mapped_column(String(40), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    primary_facility_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("facilities.facility_id"),
        nullable=True,
    )

    associated_facility_ids: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )

    # NULL -> role template applies, [] -> explicit empty grant
    permissions: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)

    # {facility_id: [permission, ...]}
    facility_permissions: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON, nullable=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


__all__ = ["User", "Role", "Permission"]
