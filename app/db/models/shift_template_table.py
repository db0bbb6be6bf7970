# app/db/models/shift_template_table.py
from __future__ import annotations
from typing import TYPE_CHECKING, Optional
from decimal import Decimal
from enum import Enum
from sqlalchemy import (
    String,
    Integer,
    Boolean,
    Numeric,
    Text,
    JSON,
    ForeignKey,
    Enum as sqlalchemy_Enum,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .facility_table import Facility
    from .generated_shift_table import GeneratedShift


class StaffingModel(str, Enum):
    PER_SLOT = "per_slot"  # max_staff rows per day, one worker each
    GROUPED = "grouped"  # one row per day carrying the worker counts


class ShiftTemplate(DbBaseModel):
    __tablename__ = "shift_templates"

    template_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=DbBaseModel.generate_uuid,
    )

    facility_id: Mapped[str] = mapped_column(
        ForeignKey("facilities.facility_id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    department: Mapped[str] = mapped_column(String(80), nullable=False)
    specialty: Mapped[str] = mapped_column(String(80), nullable=False)

    # day, night, evening
    shift_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    min_staff: Mapped[int] = mapped_column(Integer, nullable=False)
    max_staff: Mapped[int] = mapped_column(Integer, nullable=False)

    staffing_model: Mapped[StaffingModel] = mapped_column(
        sqlalchemy_Enum(StaffingModel, name="staffing_model"),
        nullable=False,
        default=StaffingModel.PER_SLOT,
    )

    # HH:MM wall clock
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    overnight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # 0 = Sunday ... 6 = Saturday
    days_of_week: Mapped[list[int]] = mapped_column(JSON, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    days_posted_out: Mapped[int] = mapped_column(Integer, nullable=False, default=14)

    hourly_rate: Mapped[Decimal] = mapped_column(
        Numeric(8, 2), nullable=False, default=Decimal("0")
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    generated_shifts_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    facility: Mapped["Facility"] = relationship(
        "Facility", back_populates="shift_templates"
    )

    generated_shifts: Mapped[list["GeneratedShift"]] = relationship(
        "GeneratedShift", back_populates="template"
    )


__all__ = ["ShiftTemplate", "StaffingModel"]
