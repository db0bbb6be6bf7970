# app/db/schemas/__init__.py
from .facility_schema import FacilityCreate, FacilityResponse
from .user_schemas import (
    UserCreate,
    UserResponse,
    UserPermissionsUpdate,
    UserRoleUpdate,
)
from .permission_schemas import (
    AccessMode,
    PermissionSource,
    PermissionCheckRequest,
    PermissionCheckResponse,
    RoleTemplateResponse,
    NavItemResponse,
    EffectivePermissionsResponse,
)
from .shift_template_schemas import (
    ShiftTemplateCreate,
    ShiftTemplateUpdate,
    ShiftTemplateResponse,
    TemplateChangeResponse,
    TEMPLATE_FIELDS,
    validate_template,
)
from .generated_shift_schemas import (
    GeneratedShiftCreate,
    GeneratedShiftResponse,
    GenerationResult,
    DeactivationResult,
    GenerationRunSummary,
)

__all__ = [
    "FacilityCreate",
    "FacilityResponse",
    "UserCreate",
    "UserResponse",
    "UserPermissionsUpdate",
    "UserRoleUpdate",
    "AccessMode",
    "PermissionSource",
    "PermissionCheckRequest",
    "PermissionCheckResponse",
    "RoleTemplateResponse",
    "NavItemResponse",
    "EffectivePermissionsResponse",
    "ShiftTemplateCreate",
    "ShiftTemplateUpdate",
    "ShiftTemplateResponse",
    "TemplateChangeResponse",
    "TEMPLATE_FIELDS",
    "validate_template",
    "GeneratedShiftCreate",
    "GeneratedShiftResponse",
    "GenerationResult",
    "DeactivationResult",
    "GenerationRunSummary",
]
