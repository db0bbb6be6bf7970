"""
Tests: Shift Template Expansion
=================================
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.db.models import StaffingModel
from app.services.v1 import expand, generated_shift_id, shift_hours, weekday_number

MONDAY = date(2025, 1, 6)


def _template(**overrides):
    values = dict(
        template_id="tmpl-1",
        facility_id="fac-1",
        name="ICU Day RN",
        department="ICU",
        specialty="Registered Nurse",
        min_staff=2,
        max_staff=2,
        staffing_model=StaffingModel.PER_SLOT,
        start_time="07:00",
        end_time="19:00",
        overnight=False,
        days_of_week=[1, 3, 5],
        is_active=True,
        days_posted_out=7,
        hourly_rate=Decimal("52.00"),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestWeekdays:
    def test_sunday_is_zero(self):
        assert weekday_number(date(2025, 1, 5)) == 0
        assert weekday_number(MONDAY) == 1
        assert weekday_number(date(2025, 1, 11)) == 6


class TestExpand:
    def test_reference_example(self):
        rows = expand(_template(), MONDAY)

        assert len(rows) == 8
        assert sorted({r.shift_date for r in rows}) == [
            date(2025, 1, 6),
            date(2025, 1, 8),
            date(2025, 1, 10),
            date(2025, 1, 13),
        ]
        for day in {r.shift_date for r in rows}:
            assert [r.slot_index for r in rows if r.shift_date == day] == [0, 1]

    def test_rows_copy_template_fields(self):
        row = expand(_template(), MONDAY)[0]
        assert row.title == "ICU Day RN"
        assert row.department == "ICU"
        assert row.specialty == "Registered Nurse"
        assert row.facility_id == "fac-1"
        assert (row.start_time, row.end_time) == ("07:00", "19:00")
        assert row.hourly_rate == Decimal("52.00")
        assert row.total_hours == Decimal("12.00")
        assert (row.required_workers, row.max_workers) == (1, 1)

    def test_mon_wed_fri_over_fourteen_days(self):
        rows = expand(_template(days_posted_out=14, max_staff=3), MONDAY)
        days = {r.shift_date for r in rows}

        assert {weekday_number(d) for d in days} == {1, 3, 5}
        assert len(rows) == len(days) * 3

    def test_is_deterministic(self):
        first = expand(_template(), MONDAY)
        second = expand(_template(), MONDAY)
        assert [r.shift_id for r in first] == [r.shift_id for r in second]
        assert len({r.shift_id for r in first}) == len(first)

    def test_ids_are_stable_across_reference_dates(self):
        # Wednesday's rows keep their ids when expanded from Tuesday
        from_monday = {r.shift_id for r in expand(_template(), MONDAY)}
        from_tuesday = {r.shift_id for r in expand(_template(), date(2025, 1, 7))}
        assert generated_shift_id("tmpl-1", date(2025, 1, 8), 0) in from_monday & from_tuesday

    def test_grouped_model_one_row_per_day(self):
        rows = expand(
            _template(staffing_model=StaffingModel.GROUPED, min_staff=2, max_staff=4),
            MONDAY,
        )
        assert len(rows) == 4
        assert all((r.slot_index, r.required_workers, r.max_workers) == (0, 2, 4) for r in rows)

    @pytest.mark.parametrize(
        "overrides",
        [{"is_active": False}, {"days_of_week": []}],
    )
    def test_inactive_or_weekdayless_template_expands_to_nothing(self, overrides):
        assert expand(_template(**overrides), MONDAY) == []


class TestShiftHours:
    def test_day_window(self):
        assert shift_hours("07:00", "19:00") == Decimal("12.00")

    def test_overnight_wraps_midnight(self):
        assert shift_hours("19:00", "07:00", overnight=True) == Decimal("12.00")

    def test_partial_hours(self):
        assert shift_hours("08:15", "12:45") == Decimal("4.50")
