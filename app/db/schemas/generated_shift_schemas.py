# app/db/schemas/generated_shift_schemas.py
from pydantic import BaseModel, Field, ConfigDict, computed_field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List
from ..models import ShiftStatus


class GeneratedShiftBase(BaseModel):
    template_id: str
    facility_id: str
    title: str
    department: str
    specialty: str
    shift_date: date
    start_time: str
    end_time: str
    slot_index: int = 0
    required_workers: int = 1
    max_workers: int = 1
    hourly_rate: Decimal
    total_hours: Decimal


class GeneratedShiftCreate(GeneratedShiftBase):
    """A shift row produced by template expansion, not yet persisted."""

    model_config = ConfigDict(frozen=True)

    shift_id: str


class GeneratedShiftResponse(GeneratedShiftBase):
    model_config = ConfigDict(from_attributes=True)

    shift_id: str
    status: ShiftStatus
    assigned_staff_ids: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class GenerationResult(BaseModel):
    """Per-template outcome of one generation pass; partial failures included."""

    template_id: str
    created: int = 0
    updated: int = 0
    reopened: int = 0
    cancelled: int = 0
    unchanged: int = 0
    failed: int = 0
    failed_shift_ids: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def generated(self) -> int:
        return self.created + self.updated + self.reopened + self.unchanged


class DeactivationResult(BaseModel):
    template_id: str
    cancelled: int


class GenerationRunSummary(BaseModel):
    """Outcome of one scheduled tick across all active templates."""

    as_of: datetime
    results: List[GenerationResult] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)

    @computed_field
    @property
    def templates_processed(self) -> int:
        return len(self.results)

    @computed_field
    @property
    def total_failed_rows(self) -> int:
        return sum(result.failed for result in self.results)
