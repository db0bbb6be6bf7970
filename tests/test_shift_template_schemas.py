"""
Tests: Shift Template Validation
=================================
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.db.schemas import ShiftTemplateUpdate, validate_template
from common.api_error import TemplateValidationError


def _values(**overrides):
    values = {
        "facility_id": "fac-1",
        "name": "ICU Day RN",
        "department": "ICU",
        "specialty": "Registered Nurse",
        "min_staff": 2,
        "max_staff": 3,
        "start_time": "07:00",
        "end_time": "19:00",
        "overnight": False,
        "days_of_week": [5, 1, 3, 1],
        "days_posted_out": 14,
        "hourly_rate": "52.00",
    }
    values.update(overrides)
    return values


class TestValidTemplates:
    def test_weekdays_are_deduplicated_and_sorted(self):
        assert validate_template(_values())["days_of_week"] == [1, 3, 5]

    def test_overnight_window_allowed_when_flagged(self):
        cleaned = validate_template(_values(start_time="19:00", end_time="07:00", overnight=True))
        assert cleaned["end_time"] == "07:00"

    def test_edge_times(self):
        validate_template(_values(start_time="00:00", end_time="23:59"))


class TestInvalidTemplates:
    @pytest.mark.parametrize(
        "overrides, fragment",
        [
            ({"start_time": "7:00"}, "start_time must be HH:MM"),
            ({"end_time": "24:00"}, "end_time must be HH:MM"),
            ({"start_time": "noon"}, "start_time must be HH:MM"),
            ({"end_time": "07:00"}, "must differ"),
            ({"start_time": "19:00", "end_time": "07:00"}, "set overnight"),
            ({"days_of_week": []}, "at least one weekday"),
            ({"days_of_week": [1, 7]}, "values must be 0-6"),
            ({"min_staff": 0, "max_staff": 0}, "min_staff must be at least 1"),
            ({"min_staff": 3, "max_staff": 2}, "max_staff must be greater"),
            ({"days_posted_out": 0}, "days_posted_out must be between"),
            ({"days_posted_out": 91}, "days_posted_out must be between"),
            ({"hourly_rate": "-1"}, "must not be negative"),
            ({"name": None}, "name is required"),
            ({"name": "  "}, "name must not be blank"),
            ({"department": ""}, "department must not be blank"),
        ],
    )
    def test_rejected(self, overrides, fragment):
        with pytest.raises(TemplateValidationError) as info:
            validate_template(_values(**overrides))

        assert info.value.status_code == 422
        assert info.value.code == "INVALID_TEMPLATE"
        assert any(fragment in message for message in info.value.errors)

    def test_all_problems_reported_together(self):
        with pytest.raises(TemplateValidationError) as info:
            validate_template(_values(start_time="25:00", days_of_week=[], min_staff=0))
        assert len(info.value.errors) == 3


class TestUpdatePayload:
    @pytest.mark.parametrize("field", ["name", "department", "specialty"])
    def test_empty_text_rejected(self, field):
        with pytest.raises(ValidationError):
            ShiftTemplateUpdate(**{field: ""})

    def test_unset_fields_stay_unset(self):
        update = ShiftTemplateUpdate(hourly_rate="60.00")
        assert update.model_dump(exclude_unset=True) == {"hourly_rate": Decimal("60.00")}
