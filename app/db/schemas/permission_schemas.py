# app/db/schemas/permission_schemas.py
from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional, List
from ..models import Permission


class AccessMode(str, Enum):
    ANY = "any"  # at least one required permission
    ALL = "all"  # every required permission


class PermissionSource(str, Enum):
    FACILITY = "facility"  # per-facility override
    EXPLICIT = "explicit"  # user.permissions
    ROLE_TEMPLATE = "role_template"


class PermissionCheckRequest(BaseModel):
    permissions: List[Permission] = Field(default_factory=list)
    mode: AccessMode = AccessMode.ANY
    facility_id: Optional[str] = None


class PermissionCheckResponse(BaseModel):
    allowed: bool
    mode: AccessMode
    permissions: List[Permission]


class RoleTemplateResponse(BaseModel):
    role: str
    permissions: List[Permission]


class NavItemResponse(BaseModel):
    key: str
    label: str
    path: str


class EffectivePermissionsResponse(BaseModel):
    user_id: str
    role: str
    facility_id: Optional[str] = None
    source: PermissionSource
    permissions: List[Permission]
    nav_items: List[NavItemResponse]
