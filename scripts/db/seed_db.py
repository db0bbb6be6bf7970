# scripts/db/seed_db.py
import csv
from pathlib import Path
from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel

from app.db import DbManager
from app.db.models import Role
from app.db.schemas import FacilityCreate, UserCreate, ShiftTemplateCreate, GenerationResult
from app.services.v1 import FacilityService, ShiftTemplateService, UserService
from common.config import SchedulingConfig
from common.logger import get_app_logger

logger = get_app_logger(__name__)


class SeedSummary(BaseModel):
    facilities: int = 0
    users: int = 0
    shift_templates: int = 0
    generated_shifts: int = 0
    failed_shifts: int = 0


def write_records_to_csv(filename: str, records: list[BaseModel]) -> None:
    """Write Pydantic schema records to CSV."""
    if not records:
        return

    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = list(records[0].model_dump(mode="json").keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for record in records:
            row = record.model_dump(mode="json")
            # Lists and dicts flatten to their JSON-ish repr
            writer.writerow({k: v if not isinstance(v, (list, dict)) else repr(v) for k, v in row.items()})


def build_users(template: dict[str, Any], facility_id: str, index: int) -> list[UserCreate]:
    users = []
    for role in template["roles"]:
        users.append(
            UserCreate(
                email=template["email"].format(role=role, index=index),
                first_name=template["first_name"].format(role_title=role.replace("_", " ").title()),
                last_name=template["last_name"].format(index=index),
                role=Role(role),
                primary_facility_id=facility_id,
                associated_facility_ids=[facility_id],
            )
        )
    return users


async def seed_db(
    db_manager: DbManager,
    data_template: dict[str, Any],
    facilities: int,
    scheduling: Optional[SchedulingConfig] = None,
    now: Optional[datetime] = None,
    with_super_admin: bool = True,
    export_csv: bool = False,
    csv_dir: str = "data/seed",
) -> SeedSummary:
    """
    Seed facilities, one user per role for each, and their shift templates.

    Templates are created through ShiftTemplateService so their shifts are
    generated exactly as the API would.

    Args:
        db_manager: Initialized DbManager instance
        data_template: Dict with "facilities", "users" and "shift_templates" entries
        facilities: Number of facilities to create
        now: Generation reference time (defaults to now)
        export_csv: Whether to export the seeded users to CSV
        csv_dir: Directory to save CSV files
    """
    summary = SeedSummary()
    seeded_users: list[UserCreate] = []

    for index in range(1, facilities + 1):
        async with db_manager.session() as session:
            facility_template = data_template["facilities"]
            facility = await FacilityService(session).create_facility(
                FacilityCreate(
                    name=f"{facility_template['name']} #{index}",
                    facility_type=facility_template["facility_type"],
                    timezone=facility_template["timezone"],
                )
            )
            summary.facilities += 1

            user_service = UserService(session)
            for user in build_users(data_template["users"], facility.facility_id, index):
                await user_service.create_user(user)
                seeded_users.append(user)
                summary.users += 1

            template_service = ShiftTemplateService(session, scheduling)
            for template_values in data_template["shift_templates"]:
                _, result = await template_service.create_template(
                    ShiftTemplateCreate(facility_id=facility.facility_id, **template_values),
                    now=now,
                )
                summary.shift_templates += 1
                if isinstance(result, GenerationResult):
                    summary.generated_shifts += result.created
                    summary.failed_shifts += result.failed

    if with_super_admin:
        async with db_manager.session() as session:
            admin = UserCreate(
                email="super.admin@staffing.example",
                first_name="Super",
                last_name="Admin",
                role=Role.SUPER_ADMIN,
            )
            await UserService(session).create_user(admin)
            seeded_users.append(admin)
            summary.users += 1

    if export_csv:
        write_records_to_csv(str(Path(csv_dir) / f"users_{date.today().isoformat()}.csv"), seeded_users)

    logger.info("Database seeded", **summary.model_dump())
    return summary


__all__ = ["seed_db", "SeedSummary", "write_records_to_csv", "build_users"]
