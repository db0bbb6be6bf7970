# common/logger/logger_middleware/__init__.py
from .logger_middleware import RequestLoggingMiddleware
from .middleware_types import RequestMetadata, RequestDetails, RequestLogEntry

__all__ = [
    "RequestLoggingMiddleware",
    "RequestMetadata",
    "RequestDetails",
    "RequestLogEntry",
]
