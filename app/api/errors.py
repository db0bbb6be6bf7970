# app/api/errors.py
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.api_error import AppError, TemplateValidationError
from common.logger import get_app_logger

logger = get_app_logger(__name__)


def error_body(code: str, message: str, **extra: Any) -> dict[str, Any]:
    return {
        "error": code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **extra,
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Domain Error: {exc.code}",
        path=request.url.path,
        error_code=exc.code,
        message=exc.message,
    )

    extra: dict[str, Any] = {}
    if isinstance(exc, TemplateValidationError) and exc.errors:
        extra["details"] = exc.errors
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, **extra),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("Request validation failed", path=request.url.path)
    return JSONResponse(
        status_code=422,
        content=error_body(
            "INVALID_REQUEST",
            "Request body or parameters are invalid",
            details=jsonable_encoder(exc.errors()),
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]


__all__ = ["register_exception_handlers", "app_error_handler", "error_body"]
