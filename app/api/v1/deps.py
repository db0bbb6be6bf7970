# app/api/v1/deps.py
"""
Request dependencies: caller identity and permission gates.

The caller is named by the ``X-User-ID`` header set by the upstream gateway.
A per-facility permission override only counts for the facility the request
acts on: the body's ``facility_id`` on create, the stored template's facility
on template routes, and ``?facility_id=`` elsewhere. Nothing falls back to the
user's primary facility.
"""
from typing import Callable, Coroutine, Any, Iterable, Optional

from fastapi import Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.db.models import User, Permission
from app.db.schemas import AccessMode
from app.services.v1 import PermissionSubject, ShiftTemplateService, UserService, resolve
from common.api_error import PermissionDeniedError
from common.config import SchedulingConfig


def get_scheduling_config(request: Request) -> SchedulingConfig:
    config = getattr(request.app.state, "config", None)
    if config is None:
        return SchedulingConfig()
    return config.scheduling


async def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await UserService(db).authenticate(x_user_id)


def query_facility(facility_id: Optional[str] = Query(None)) -> Optional[str]:
    return facility_id


async def template_facility(template_id: str, db: AsyncSession = Depends(get_db)) -> str:
    """Facility owning the template named in the path; 404 when it does not exist."""
    template = await ShiftTemplateService(db).get_template(template_id)
    return template.facility_id


def ensure_permitted(
    user: User,
    permissions: Iterable[Permission],
    facility_id: Optional[str] = None,
    mode: AccessMode = AccessMode.ALL,
) -> None:
    required = tuple(permissions)
    subject = PermissionSubject.from_user(user, facility_id=facility_id)
    if not resolve(subject, required, mode):
        raise PermissionDeniedError(
            f"Requires {mode.value} of: {', '.join(p.value for p in required)}"
        )


def require_permissions(
    *permissions: Permission,
    mode: AccessMode = AccessMode.ALL,
    facility: Callable[..., Any] = query_facility,
) -> Callable[..., Coroutine[Any, Any, User]]:
    """
    Dependency factory gating a route.

    ``facility`` is a dependency yielding the facility the route acts on.

    Usage:
        @router.patch(
            "/{template_id}",
            dependencies=[Depends(require_permissions(Permission.EDIT_SHIFTS, facility=template_facility))],
        )
    """

    async def checker(
        user: User = Depends(get_current_user),
        facility_id: Optional[str] = Depends(facility),
    ) -> User:
        ensure_permitted(user, permissions, facility_id, mode)
        return user

    return checker


__all__ = [
    "get_scheduling_config",
    "get_current_user",
    "query_facility",
    "template_facility",
    "ensure_permitted",
    "require_permissions",
]
