# common/logger/logger_middleware/logger_middleware.py
"""
Request logging middleware for FastAPI.

Binds a request id into structlog contextvars so every log line emitted while
serving the request carries it, echoes it back as X-Request-ID, and logs one
summary line per request.

Usage:
    app.add_middleware(
        RequestLoggingMiddleware,
        slow_request_ms=500,
        log_query_params=False,
    )
"""

from typing import Callable, Awaitable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import structlog
import time
import uuid

from ..logger import get_app_logger
from .middleware_types import RequestMetadata, RequestDetails, RequestLogEntry


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for structured request logging.

    Level strategy:
    - ERROR: 5xx responses
    - WARNING: slow requests or 4xx responses
    - INFO: everything else
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        expose_timing_header: bool = False,
        slow_request_ms: float = 1000.0,
        log_query_params: bool = True,
        log_client_info: bool = True,
        logger_name: Optional[str] = None,
    ):
        super().__init__(app)
        self.expose_timing_header = expose_timing_header
        self.slow_request_ms = slow_request_ms
        self.log_query_params = log_query_params
        self.log_client_info = log_client_info
        self.logger = get_app_logger(name=logger_name or __name__, track_timing=True)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            response.headers["X-Request-ID"] = request_id
            if self.expose_timing_header:
                response.headers["Server-Timing"] = f"total;dur={duration_ms:.2f}"

            self._log_request(self._build_log_entry(request, response, duration_ms, request_id))
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

    def _build_log_entry(
        self,
        request: Request,
        response: Response,
        duration_ms: float,
        request_id: str,
    ) -> RequestLogEntry:
        metadata = RequestMetadata(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        details = RequestDetails(
            request_id=request_id,
            user_id=request.headers.get("X-User-ID"),
            client_host=(
                request.client.host if self.log_client_info and request.client else None
            ),
            user_agent=(
                request.headers.get("user-agent") if self.log_client_info else None
            ),
            query_params=(
                dict(request.query_params)
                if self.log_query_params and request.query_params
                else None
            ),
            path_params=request.path_params or None,
        )
        return RequestLogEntry(
            metadata=metadata,
            details=details,
            slow_threshold_ms=self.slow_request_ms,
        )

    def _log_request(self, log_entry: RequestLogEntry) -> None:
        log_data = log_entry.model_dump(mode="json", exclude_none=True)

        if log_entry.is_error:
            self.logger.error("Request failed with server error", **log_data)
        elif log_entry.is_slow:
            self.logger.warning(
                f"Slow request detected ({log_entry.metadata.duration_ms}ms)",
                **log_data,
            )
        elif log_entry.metadata.status_code >= 400:
            self.logger.warning("Request failed with client error", **log_data)
        else:
            self.logger.info("Request completed", **log_data)


__all__ = ["RequestLoggingMiddleware"]
