# app/services/v1/user_service.py
from typing import Optional, Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import User, Role, Permission
from app.db.schemas import UserCreate
from common.api_error import AuthenticationError, NotFoundError
from common.logger import get_app_logger

logger = get_app_logger(__name__)


def _tags(permissions: Sequence[Permission]) -> list[str]:
    return sorted({Permission(p).value for p in permissions})


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: str) -> User:
        query = (
            select(User)
            .where(User.user_id == user_id)
            .execution_options(logging_token="UserService.get_user")
        )
        user = (await self.db.execute(query)).scalar_one_or_none()
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def authenticate(self, user_id: Optional[str]) -> User:
        """Resolve the caller named by the gateway header."""
        if not user_id:
            raise AuthenticationError("Missing X-User-ID header")
        user = await self.db.get(User, user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Unknown or inactive user")
        return user

    async def create_user(self, data: UserCreate) -> User:
        values = data.model_dump(exclude_none=True, exclude={"permissions", "facility_permissions"})
        values["role"] = data.role.value
        if data.permissions is not None:
            values["permissions"] = _tags(data.permissions)
        if data.facility_permissions is not None:
            values["facility_permissions"] = {
                facility_id: _tags(perms) for facility_id, perms in data.facility_permissions.items()
            }
        user = User(**values)
        self.db.add(user)
        await self.db.flush()
        return user

    async def set_permissions(
        self, user_id: str, permissions: Optional[Sequence[Permission]]
    ) -> User:
        """Store an explicit grant, or None to fall back to the role template."""
        user = await self.get_user(user_id)
        user.permissions = None if permissions is None else _tags(permissions)
        await self.db.flush()
        logger.info(
            "User permissions changed",
            user_id=user_id,
            permissions=user.permissions,
        )
        return user

    async def set_facility_permissions(
        self,
        user_id: str,
        facility_id: str,
        permissions: Optional[Sequence[Permission]],
    ) -> User:
        """Per-facility override; None removes the override for that facility."""
        user = await self.get_user(user_id)
        overrides = dict(user.facility_permissions or {})
        if permissions is None:
            overrides.pop(str(facility_id), None)
        else:
            overrides[str(facility_id)] = _tags(permissions)
        # Reassign so the JSON column is flagged dirty
        user.facility_permissions = overrides or None
        await self.db.flush()
        logger.info(
            "User facility permissions changed",
            user_id=user_id,
            facility_id=facility_id,
            permissions=overrides.get(str(facility_id)),
        )
        return user

    async def change_role(self, user_id: str, role: Role) -> User:
        user = await self.get_user(user_id)
        previous = user.role
        user.role = role.value
        await self.db.flush()
        logger.info("User role changed", user_id=user_id, previous=previous, role=user.role)
        return user


__all__ = ["UserService"]
