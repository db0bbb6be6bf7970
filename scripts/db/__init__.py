from .seed_db import seed_db, SeedSummary
from .data_template import DEFAULT_DATA_TEMPLATE

__all__ = ["seed_db", "SeedSummary", "DEFAULT_DATA_TEMPLATE"]
