# app/db/schemas/facility_schema.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class FacilityBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)
    facility_type: str = Field(..., max_length=40, description="e.g. hospital, skilled_nursing")
    timezone: str = Field("America/New_York", max_length=64)


class FacilityCreate(FacilityBase):
    facility_id: Optional[str] = Field(None, description="Optional fixed id (seeding)")


class FacilityResponse(FacilityBase):
    model_config = ConfigDict(from_attributes=True)

    facility_id: str
    is_active: bool
    created_at: datetime
