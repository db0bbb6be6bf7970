# app/services/v1/shift_expansion.py
"""
Shift template expansion.

Turns a recurrence definition into concrete shift rows for every matching
weekday in ``[as_of, as_of + days_posted_out]``. Row ids are uuid5 of
``template_id:date:slot`` so expanding the same template twice yields the
same ids and the service layer can upsert by id.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Iterable
from uuid import UUID

from app.db.models import DbBaseModel, StaffingModel
from app.db.schemas import GeneratedShiftCreate

GENERATED_SHIFT_NAMESPACE = UUID("6f1c1f0e-8a55-4c36-9b4e-2d8f3f7f9a10")
HOURS_QUANTUM = Decimal("0.01")


def weekday_number(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


def parse_wall_clock(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def shift_hours(start_time: str, end_time: str, overnight: bool = False) -> Decimal:
    start, end = parse_wall_clock(start_time), parse_wall_clock(end_time)
    minutes = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
    if minutes <= 0 and overnight:
        minutes += 24 * 60
    return (Decimal(minutes) / Decimal(60)).quantize(HOURS_QUANTUM)


def generated_shift_id(template_id: str, shift_date: date, slot_index: int) -> str:
    return DbBaseModel.generate_stable_uuid(
        GENERATED_SHIFT_NAMESPACE, f"{template_id}:{shift_date.isoformat()}:{slot_index}"
    )


def expansion_dates(
    as_of: date, days_posted_out: int, days_of_week: Iterable[int]
) -> list[date]:
    weekdays = set(days_of_week)
    if not weekdays:
        return []
    candidates = (as_of + timedelta(days=offset) for offset in range(days_posted_out + 1))
    return [day for day in candidates if weekday_number(day) in weekdays]


def expand(template: Any, as_of: date) -> list[GeneratedShiftCreate]:
    """
    Expand ``template`` from ``as_of``.

    Inactive templates and templates without weekdays produce nothing.
    ``template`` is a ShiftTemplate row or anything with the same attributes.
    """
    if not template.is_active or not template.days_of_week:
        return []

    staffing_model = StaffingModel(template.staffing_model)
    total_hours = shift_hours(template.start_time, template.end_time, template.overnight)
    hourly_rate = Decimal(str(template.hourly_rate if template.hourly_rate is not None else 0))

    if staffing_model == StaffingModel.GROUPED:
        slots = [(0, template.min_staff, template.max_staff)]
    else:
        slots = [(slot, 1, 1) for slot in range(template.max_staff)]

    drafts: list[GeneratedShiftCreate] = []
    for shift_date in expansion_dates(as_of, template.days_posted_out, template.days_of_week):
        for slot_index, required_workers, max_workers in slots:
            drafts.append(
                GeneratedShiftCreate(
                    shift_id=generated_shift_id(template.template_id, shift_date, slot_index),
                    template_id=template.template_id,
                    facility_id=template.facility_id,
                    title=template.name,
                    department=template.department,
                    specialty=template.specialty,
                    shift_date=shift_date,
                    start_time=template.start_time,
                    end_time=template.end_time,
                    slot_index=slot_index,
                    required_workers=required_workers,
                    max_workers=max_workers,
                    hourly_rate=hourly_rate,
                    total_hours=total_hours,
                )
            )
    return drafts


__all__ = [
    "GENERATED_SHIFT_NAMESPACE",
    "weekday_number",
    "parse_wall_clock",
    "shift_hours",
    "generated_shift_id",
    "expansion_dates",
    "expand",
]
