# app/api/v1/user_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.db.models import Permission
from app.db.schemas import UserResponse, UserPermissionsUpdate, UserRoleUpdate
from app.services.v1 import UserService
from .deps import require_permissions

user_router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


@user_router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
    responses={404: {"description": "User not found"}},
    dependencies=[Depends(require_permissions(Permission.VIEW_STAFF))],
)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    return await UserService(db).get_user(user_id)


@user_router.put(
    "/{user_id}/permissions",
    response_model=UserResponse,
    summary="Set or reset a user's explicit permissions",
    description="""
    `permissions: null` removes the override so the role template applies,
    `permissions: []` grants nothing. With `facility_id` only that facility's
    override changes.
    """,
    responses={404: {"description": "User not found"}},
    dependencies=[Depends(require_permissions(Permission.MANAGE_PERMISSIONS))],
)
async def set_user_permissions(
    user_id: str,
    payload: UserPermissionsUpdate,
    db: AsyncSession = Depends(get_db),
):
    service = UserService(db)
    if payload.facility_id is not None:
        return await service.set_facility_permissions(user_id, payload.facility_id, payload.permissions)
    return await service.set_permissions(user_id, payload.permissions)


@user_router.put(
    "/{user_id}/role",
    response_model=UserResponse,
    summary="Change a user's role",
    responses={404: {"description": "User not found"}},
    dependencies=[Depends(require_permissions(Permission.MANAGE_PERMISSIONS))],
)
async def change_user_role(
    user_id: str,
    payload: UserRoleUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).change_role(user_id, payload.role)


__all__ = ["user_router"]
