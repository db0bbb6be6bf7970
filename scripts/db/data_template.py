"""
Easily extendible template file for seed data
- Add new templates
- Compose them into DEFAULT_DATA_TEMPLATE

    Example: Seed facilities with day shifts only
        await seed_db(db_manager, {**DEFAULT_DATA_TEMPLATE, "shift_templates": [DAY_SHIFT_TEMPLATE]}, facilities=2)
"""

from decimal import Decimal
from typing import Any

FACILITY_DATA_TEMPLATE: dict[str, Any] = {
    "name": "Sunrise Skilled Nursing",
    "facility_type": "skilled_nursing",
    "timezone": "America/New_York",
}

# One user per role and facility; email gets the role and facility index
USER_DATA_TEMPLATE: dict[str, Any] = {
    "email": "{role}.{index}@staffing.example",
    "first_name": "{role_title}",
    "last_name": "Facility {index}",
    "roles": [
        "facility_admin",
        "scheduling_coordinator",
        "hr_manager",
        "billing",
        "supervisor",
        "director_of_nursing",
        "employee",
        "contractor",
        "viewer",
    ],
}

DAY_SHIFT_TEMPLATE: dict[str, Any] = {
    "name": "ICU Day RN",
    "department": "ICU",
    "specialty": "Registered Nurse",
    "shift_type": "day",
    "min_staff": 2,
    "max_staff": 3,
    "start_time": "07:00",
    "end_time": "19:00",
    "days_of_week": [1, 2, 3, 4, 5],
    "hourly_rate": Decimal("52.00"),
}

NIGHT_SHIFT_TEMPLATE: dict[str, Any] = {
    "name": "Med-Surg Night CNA",
    "department": "Medical-Surgical",
    "specialty": "Certified Nursing Assistant",
    "shift_type": "night",
    "min_staff": 2,
    "max_staff": 4,
    "staffing_model": "grouped",
    "start_time": "19:00",
    "end_time": "07:00",
    "overnight": True,
    "days_of_week": [0, 5, 6],
    "hourly_rate": Decimal("24.50"),
}

# Combined default template
DEFAULT_DATA_TEMPLATE: dict[str, Any] = {
    "facilities": FACILITY_DATA_TEMPLATE,
    "users": USER_DATA_TEMPLATE,
    "shift_templates": [DAY_SHIFT_TEMPLATE, NIGHT_SHIFT_TEMPLATE],
}

__all__ = [
    "DEFAULT_DATA_TEMPLATE",
    "FACILITY_DATA_TEMPLATE",
    "USER_DATA_TEMPLATE",
    "DAY_SHIFT_TEMPLATE",
    "NIGHT_SHIFT_TEMPLATE",
]
