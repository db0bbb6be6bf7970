# app/db/models/__init__.py
from .db_base_model import DbBaseModel, utc_now
from .facility_table import Facility
from .user_table import User, Role, Permission
from .shift_template_table import ShiftTemplate, StaffingModel
from .generated_shift_table import GeneratedShift, ShiftStatus

__all__ = [
    "DbBaseModel",
    "utc_now",
    "Facility",
    "User",
    "Role",
    "Permission",
    "ShiftTemplate",
    "StaffingModel",
    "GeneratedShift",
    "ShiftStatus",
]
