# app/db/schemas/shift_template_schemas.py
"""
Shift template request/response models and template validation.

Templates are validated when they are created or updated, never while being
expanded: ``validate_template`` is the single gate and raises
``TemplateValidationError`` listing every problem it found.
"""
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, List
import re

from common.api_error import TemplateValidationError
from ..models import StaffingModel
from .generated_shift_schemas import GenerationResult

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
MIN_DAYS_POSTED_OUT = 1
MAX_DAYS_POSTED_OUT = 90

# Columns a template carries besides its id and bookkeeping
TEMPLATE_FIELDS = (
    "facility_id",
    "name",
    "department",
    "specialty",
    "shift_type",
    "min_staff",
    "max_staff",
    "staffing_model",
    "start_time",
    "end_time",
    "overnight",
    "days_of_week",
    "is_active",
    "days_posted_out",
    "hourly_rate",
    "notes",
)
REQUIRED_FIELDS = (
    "facility_id",
    "name",
    "department",
    "specialty",
    "min_staff",
    "max_staff",
    "start_time",
    "end_time",
    "days_of_week",
    "days_posted_out",
)


class ShiftTemplateBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    department: str = Field(..., min_length=1, max_length=80)
    specialty: str = Field(..., min_length=1, max_length=80)
    shift_type: Optional[str] = Field(None, max_length=20, description="day, night, evening")
    min_staff: int
    max_staff: int
    staffing_model: StaffingModel = StaffingModel.PER_SLOT
    start_time: str = Field(..., description="Wall clock HH:MM", examples=["07:00"])
    end_time: str = Field(..., description="Wall clock HH:MM", examples=["19:00"])
    overnight: bool = False
    days_of_week: List[int] = Field(..., description="0 = Sunday ... 6 = Saturday")
    hourly_rate: Decimal = Decimal("0")
    notes: Optional[str] = Field(None, max_length=1000)


class ShiftTemplateCreate(ShiftTemplateBase):
    facility_id: str
    is_active: bool = True
    days_posted_out: Optional[int] = Field(
        None, description="Generation horizon in days; server default when omitted"
    )


class ShiftTemplateUpdate(BaseModel):
    # All fields optional for PATCH
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    department: Optional[str] = Field(None, min_length=1, max_length=80)
    specialty: Optional[str] = Field(None, min_length=1, max_length=80)
    shift_type: Optional[str] = Field(None, max_length=20)
    min_staff: Optional[int] = None
    max_staff: Optional[int] = None
    staffing_model: Optional[StaffingModel] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    overnight: Optional[bool] = None
    days_of_week: Optional[List[int]] = None
    is_active: Optional[bool] = None
    days_posted_out: Optional[int] = None
    hourly_rate: Optional[Decimal] = None
    notes: Optional[str] = Field(None, max_length=1000)


class ShiftTemplateResponse(ShiftTemplateBase):
    model_config = ConfigDict(from_attributes=True)

    template_id: str
    facility_id: str
    is_active: bool
    days_posted_out: int
    generated_shifts_count: int
    created_at: datetime
    updated_at: datetime


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def validate_template(values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate a complete set of template values.

    Returns a normalized copy (weekdays de-duplicated and sorted, rate as
    Decimal). Raises TemplateValidationError with one message per problem.
    """
    errors: List[str] = []
    cleaned = {key: values.get(key) for key in TEMPLATE_FIELDS if key in values}

    for key in REQUIRED_FIELDS:
        if cleaned.get(key) is None:
            errors.append(f"{key} is required")
    for key in ("name", "department", "specialty"):
        value = cleaned.get(key)
        if isinstance(value, str) and not value.strip():
            errors.append(f"{key} must not be blank")

    start_time, end_time = cleaned.get("start_time"), cleaned.get("end_time")
    times_ok = True
    for key, value in (("start_time", start_time), ("end_time", end_time)):
        if value is not None and not (isinstance(value, str) and TIME_PATTERN.match(value)):
            errors.append(f"{key} must be HH:MM between 00:00 and 23:59, got {value!r}")
            times_ok = False
    if times_ok and start_time is not None and end_time is not None:
        if start_time == end_time:
            errors.append("start_time and end_time must differ")
        elif _minutes(end_time) < _minutes(start_time) and not cleaned.get("overnight"):
            errors.append("end_time is before start_time; set overnight for windows past midnight")

    days = cleaned.get("days_of_week")
    if days is not None:
        if not isinstance(days, (list, tuple, set)) or not days:
            errors.append("days_of_week must contain at least one weekday")
        elif any(isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 6 for d in days):
            errors.append(f"days_of_week values must be 0-6 (0 = Sunday), got {list(days)}")
        else:
            cleaned["days_of_week"] = sorted(set(days))

    min_staff, max_staff = cleaned.get("min_staff"), cleaned.get("max_staff")
    if min_staff is not None and min_staff < 1:
        errors.append("min_staff must be at least 1")
    if min_staff is not None and max_staff is not None and max_staff < min_staff:
        errors.append("max_staff must be greater than or equal to min_staff")

    days_posted_out = cleaned.get("days_posted_out")
    if days_posted_out is not None and not (
        MIN_DAYS_POSTED_OUT <= days_posted_out <= MAX_DAYS_POSTED_OUT
    ):
        errors.append(
            f"days_posted_out must be between {MIN_DAYS_POSTED_OUT} and {MAX_DAYS_POSTED_OUT}"
        )

    if "hourly_rate" in cleaned:
        try:
            rate = Decimal(str(cleaned["hourly_rate"] if cleaned["hourly_rate"] is not None else 0))
        except InvalidOperation:
            errors.append("hourly_rate must be a number")
        else:
            if rate < 0:
                errors.append("hourly_rate must not be negative")
            cleaned["hourly_rate"] = rate

    if errors:
        raise TemplateValidationError("Invalid shift template", errors=errors)
    return cleaned


class TemplateChangeResponse(BaseModel):
    """A template write plus what it did to the generated shifts."""

    template: ShiftTemplateResponse
    generation: Optional[GenerationResult] = None
    cancelled: int = 0
