# app/db/models/facility_table.py
from __future__ import annotations
from typing import TYPE_CHECKING
from sqlalchemy import String, Boolean
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .shift_template_table import ShiftTemplate


class Facility(DbBaseModel):
    __tablename__ = "facilities"

    facility_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=DbBaseModel.generate_uuid,
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)

    # hospital, skilled_nursing, assisted_living, ...
    facility_type: Mapped[str] = mapped_column(String(40), nullable=False)

    timezone: Mapped[str] = mapped_column(
        String(64), nullable=False, default="America/New_York"
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    shift_templates: Mapped[list["ShiftTemplate"]] = relationship(
        "ShiftTemplate", back_populates="facility"
    )


__all__ = ["Facility"]
