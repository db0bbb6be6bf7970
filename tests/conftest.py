"""
Shared fixtures: structlog configured once, and a throwaway SQLite file per
test through aiosqlite.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy.pool import NullPool

from app.db import DbManager
from app.db.models import DbBaseModel, Role
from app.db.schemas import FacilityCreate, ShiftTemplateCreate, UserCreate
from app.services.v1 import FacilityService, UserService
from common.config import configure_structlog

# Monday 2025-01-06, before any shift starts
T0 = datetime(2025, 1, 6, 6, 0)

FACILITY_ID = "11111111-1111-1111-1111-111111111111"
OTHER_FACILITY_ID = "22222222-2222-2222-2222-222222222222"


@pytest.fixture(scope="session", autouse=True)
def _configure_logging():
    configure_structlog(logging.WARNING)


def template_payload(**overrides: Any) -> ShiftTemplateCreate:
    values: dict[str, Any] = {
        "facility_id": FACILITY_ID,
        "name": "ICU Day RN",
        "department": "ICU",
        "specialty": "Registered Nurse",
        "min_staff": 2,
        "max_staff": 2,
        "start_time": "07:00",
        "end_time": "19:00",
        "days_of_week": [1, 3, 5],
        "days_posted_out": 7,
        "hourly_rate": Decimal("52.00"),
    }
    values.update(overrides)
    return ShiftTemplateCreate(**values)


def make_db_manager(path) -> DbManager:
    return DbManager(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)


async def create_schema(manager: DbManager) -> None:
    async with manager.engine.begin() as conn:
        await conn.run_sync(DbBaseModel.metadata.create_all)


async def seed_facility(
    manager: DbManager,
    facility_id: str = FACILITY_ID,
    name: str = "Sunrise Skilled Nursing",
) -> None:
    async with manager.session() as session:
        await FacilityService(session).create_facility(
            FacilityCreate(
                facility_id=facility_id,
                name=name,
                facility_type="skilled_nursing",
            )
        )


async def seed_user(manager: DbManager, role: Role, **overrides: Any) -> str:
    values: dict[str, Any] = {
        "email": f"{role.value}@staffing.example",
        "first_name": role.value.title(),
        "last_name": "Tester",
        "role": role,
        "primary_facility_id": FACILITY_ID,
    }
    values.update(overrides)
    async with manager.session() as session:
        user = await UserService(session).create_user(UserCreate(**values))
        return user.user_id


@pytest.fixture
async def db_manager(tmp_path):
    manager = make_db_manager(tmp_path / "scheduler.db")
    await create_schema(manager)
    await seed_facility(manager)
    yield manager
    await manager.dispose()


@pytest.fixture
async def session(db_manager):
    async with db_manager.session_maker() as session:
        yield session
        await session.rollback()
