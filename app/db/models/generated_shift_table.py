# app/db/models/generated_shift_table.py
from __future__ import annotations
from typing import TYPE_CHECKING
from datetime import date
from decimal import Decimal
from enum import Enum
from sqlalchemy import (
    String,
    Integer,
    Date,
    Numeric,
    JSON,
    ForeignKey,
    UniqueConstraint,
    Enum as sqlalchemy_Enum,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .shift_template_table import ShiftTemplate


class ShiftStatus(str, Enum):
    OPEN = "open"  # Posted, nobody assigned yet
    ASSIGNED = "assigned"  # Staffed, not started
    IN_PROGRESS = "in_progress"  # Started
    COMPLETED = "completed"  # Finished
    CANCELLED = "cancelled"  # Withdrawn before it started


class GeneratedShift(DbBaseModel):
    __tablename__ = "generated_shifts"
    __table_args__ = (
        UniqueConstraint(
            "template_id", "shift_date", "slot_index", name="uq_generated_shift_slot"
        ),
    )

    # uuid5 of "{template_id}:{shift_date}:{slot_index}"
    shift_id: Mapped[str] = mapped_column(String(36), primary_key=True)

    template_id: Mapped[str] = mapped_column(
        ForeignKey("shift_templates.template_id"),
        nullable=False,
        index=True,
    )

    facility_id: Mapped[str] = mapped_column(
        ForeignKey("facilities.facility_id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(120), nullable=False)
    department: Mapped[str] = mapped_column(String(80), nullable=False)
    specialty: Mapped[str] = mapped_column(String(80), nullable=False)

    shift_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)

    slot_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    required_workers: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_workers: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    total_hours: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)

    status: Mapped[ShiftStatus] = mapped_column(
        sqlalchemy_Enum(ShiftStatus, name="shift_status"),
        nullable=False,
        default=ShiftStatus.OPEN,
    )

    assigned_staff_ids: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )

    template: Mapped["ShiftTemplate"] = relationship(
        "ShiftTemplate", back_populates="generated_shifts"
    )


__all__ = ["GeneratedShift", "ShiftStatus"]
