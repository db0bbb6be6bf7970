# app/services/v1/__init__.py
from .role_templates import ROLE_TEMPLATES, role_template
from .permission_service import (
    PermissionSubject,
    NavItem,
    NAV_ITEMS,
    PAGE_PERMISSIONS,
    parse_permissions,
    effective_permissions,
    resolve,
    can_access_page,
    visible_nav_items,
)
from .shift_expansion import expand, shift_hours, generated_shift_id, weekday_number
from .shift_template_service import ShiftTemplateService
from .shift_generation_job import ShiftGenerationJob
from .user_service import UserService
from .facility_service import FacilityService

__all__ = [
    "ROLE_TEMPLATES",
    "role_template",
    "PermissionSubject",
    "NavItem",
    "NAV_ITEMS",
    "PAGE_PERMISSIONS",
    "parse_permissions",
    "effective_permissions",
    "resolve",
    "can_access_page",
    "visible_nav_items",
    "expand",
    "shift_hours",
    "generated_shift_id",
    "weekday_number",
    "ShiftTemplateService",
    "ShiftGenerationJob",
    "UserService",
    "FacilityService",
]
