# app/db/__init__.py
from .db_manager import DbManager, enable_sqlite_savepoints
from .deps import get_db, get_session, get_db_manager

__all__ = [
    "DbManager",
    "enable_sqlite_savepoints",
    "get_db",
    "get_session",
    "get_db_manager",
]
