# common/__init__.py
from .api_error import AppError, ConfigurationError
from .config import DatabaseConfig, SchedulingConfig
from .logger import logger, get_app_logger

__all__ = [
    "AppError",
    "ConfigurationError",
    "DatabaseConfig",
    "SchedulingConfig",
    "logger",
    "get_app_logger",
]
