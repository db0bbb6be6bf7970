# common/logger/logger_middleware/middleware_types.py
"""
Type definitions for request logging middleware.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, computed_field


class RequestMetadata(BaseModel):
    """
    Core request metadata - always captured.
    """

    method: str = Field(..., description="HTTP method (GET, POST, etc.)")
    path: str = Field(..., description="Request path without query params")
    status_code: int = Field(..., ge=100, le=599, description="HTTP status code")
    duration_ms: float = Field(..., ge=0, description="Request duration in milliseconds")

    model_config = {"frozen": True}


class RequestDetails(BaseModel):
    """
    Extended request details.
    """

    request_id: Optional[str] = Field(None, description="Unique request ID")
    user_id: Optional[str] = Field(None, description="Caller from X-User-ID")
    client_host: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="User-Agent header")
    query_params: Optional[Dict[str, Any]] = Field(None, description="Query parameters")
    path_params: Optional[Dict[str, Any]] = Field(None, description="Path parameters")

    model_config = {"frozen": True}


class RequestLogEntry(BaseModel):
    """
    Complete request log entry; serializes cleanly to JSON.
    """

    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: RequestMetadata
    details: Optional[RequestDetails] = None
    slow_threshold_ms: float = Field(1000.0, exclude=True)

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_slow(self) -> bool:
        return self.metadata.duration_ms > self.slow_threshold_ms

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_error(self) -> bool:
        return self.metadata.status_code >= 500


__all__ = [
    "RequestMetadata",
    "RequestDetails",
    "RequestLogEntry",
]
