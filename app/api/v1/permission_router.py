# app/api/v1/permission_router.py
from typing import List, Optional

from fastapi import APIRouter, Depends

from app.db.models import User
from app.db.schemas import (
    PermissionCheckRequest,
    PermissionCheckResponse,
    RoleTemplateResponse,
    EffectivePermissionsResponse,
    NavItemResponse,
)
from app.services.v1 import (
    ROLE_TEMPLATES,
    PermissionSubject,
    effective_permissions,
    resolve,
    visible_nav_items,
)
from .deps import get_current_user

permission_router = APIRouter(
    prefix="/permissions",
    tags=["Permissions"],
)


@permission_router.get(
    "/roles",
    response_model=List[RoleTemplateResponse],
    summary="Default permissions per role",
)
async def list_role_templates():
    return [
        RoleTemplateResponse(role=role.value, permissions=sorted(perms, key=lambda p: p.value))
        for role, perms in ROLE_TEMPLATES.items()
    ]


@permission_router.get(
    "/me",
    response_model=EffectivePermissionsResponse,
    summary="Caller's effective permissions and navigation",
    responses={401: {"description": "Missing or unknown X-User-ID"}},
)
async def my_permissions(
    facility_id: Optional[str] = None,
    user: User = Depends(get_current_user),
):
    subject = PermissionSubject.from_user(user, facility_id=facility_id)
    return EffectivePermissionsResponse(
        user_id=user.user_id,
        role=user.role,
        facility_id=subject.facility_id,
        source=subject.source,
        permissions=sorted(effective_permissions(subject), key=lambda p: p.value),
        nav_items=[
            NavItemResponse(key=item.key, label=item.label, path=item.path)
            for item in visible_nav_items(subject)
        ],
    )


@permission_router.post(
    "/check",
    response_model=PermissionCheckResponse,
    summary="Check a permission gate for the caller",
    description="An empty permission list is no gate and is always allowed.",
    responses={401: {"description": "Missing or unknown X-User-ID"}},
)
async def check_permissions(
    payload: PermissionCheckRequest,
    user: User = Depends(get_current_user),
):
    subject = PermissionSubject.from_user(user, facility_id=payload.facility_id)
    return PermissionCheckResponse(
        allowed=resolve(subject, payload.permissions, payload.mode),
        mode=payload.mode,
        permissions=payload.permissions,
    )


__all__ = ["permission_router"]
