# app/services/v1/facility_service.py
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Facility
from app.db.schemas import FacilityCreate
from common.api_error import NotFoundError


class FacilityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_facility(self, facility_id: str) -> Facility:
        facility = await self.db.get(Facility, facility_id)
        if facility is None:
            raise NotFoundError("Facility", facility_id)
        return facility

    async def list_facilities(self) -> Sequence[Facility]:
        query = (
            select(Facility)
            .order_by(Facility.name)
            .execution_options(logging_token="FacilityService.list_facilities")
        )
        return (await self.db.execute(query)).scalars().all()

    async def create_facility(self, data: FacilityCreate) -> Facility:
        facility = Facility(**data.model_dump(exclude_none=True))
        self.db.add(facility)
        await self.db.flush()
        return facility


__all__ = ["FacilityService"]
