# app/db/schemas/user_schemas.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional, List, Dict
from ..models import Role, Permission


class UserBase(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    first_name: str = Field(..., min_length=1, max_length=80)
    last_name: str = Field(..., min_length=1, max_length=80)


class UserCreate(UserBase):
    user_id: Optional[str] = Field(None, description="Optional fixed id (seeding)")
    role: Role
    primary_facility_id: Optional[str] = None
    associated_facility_ids: List[str] = Field(default_factory=list)
    permissions: Optional[List[Permission]] = None
    facility_permissions: Optional[Dict[str, List[Permission]]] = None


class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    # Stored as text, may hold a legacy tag
    role: str
    is_active: bool
    primary_facility_id: Optional[str] = None
    associated_facility_ids: List[str] = Field(default_factory=list)
    permissions: Optional[List[str]] = None
    facility_permissions: Optional[Dict[str, List[str]]] = None
    created_at: datetime
    updated_at: datetime


class UserPermissionsUpdate(BaseModel):
    """
    Explicit permission edit.

    ``permissions=None`` drops the override so the role template applies again,
    ``permissions=[]`` grants nothing. With ``facility_id`` the edit targets
    that facility's override only.
    """

    permissions: Optional[List[Permission]] = None
    facility_id: Optional[str] = None


class UserRoleUpdate(BaseModel):
    role: Role
