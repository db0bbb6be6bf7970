# app/api/app_factory.py
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from app.db import DbManager
from common.config import AppConfig, is_configured
from common.logger import get_app_logger
from common.logger.logger_middleware import RequestLoggingMiddleware
from .errors import register_exception_handlers
from .v1 import api_v1_router

logger = get_app_logger(__name__, track_timing=True)


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Current system health status")
    timestamp: datetime = Field(..., description="Server time in ISO 8601 format")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")
    logging_configured: bool = Field(..., description="Logging configuration status")
    log_level: str = Field(..., description="Application log level")
    database: dict[str, Any] = Field(default_factory=dict, description="Database health")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message describing the failure")
    timestamp: datetime = Field(..., description="Server time when the error occurred")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    config: AppConfig = app.state.config
    owns_manager = getattr(app.state, "db_manager", None) is None

    if owns_manager:
        if not config.database:
            raise RuntimeError("Database configuration required")
        logger.info("Connecting to database", **config.database.to_dict_safe())

        db_manager = DbManager.from_config(config.database)
        await db_manager.verify_connection()

        # Ensure migrations are up-to-date (fail fast if not)
        try:
            await db_manager.verify_migrations_current()
            logger.info("✓ All migrations applied")
        except RuntimeError as e:
            logger.error("❌ Migration check failed", error=str(e))
            logger.error("Run 'alembic upgrade head'")
            await db_manager.dispose()
            raise

        app.state.db_manager = db_manager

    yield

    logger.info("shutting down")
    if owns_manager:
        await app.state.db_manager.dispose()


def create_app(config: AppConfig, db_manager: Optional[DbManager] = None) -> FastAPI:
    """
    Build the API.

    With ``db_manager`` the app uses it as-is and skips the startup checks;
    otherwise the lifespan connects using ``config.database``.
    """
    app = FastAPI(
        title=config.app_title,
        version=config.app_version,
        description=f"Running in {config.environment.value} environment",
        lifespan=lifespan,
    )
    app.state.config = config
    if db_manager is not None:
        app.state.db_manager = db_manager

    app.add_middleware(
        RequestLoggingMiddleware,
        expose_timing_header=not config.environment.is_production,
        slow_request_ms=config.logging.slow_request_ms,
    )
    register_exception_handlers(app)
    app.include_router(api_v1_router)

    @app.get(
        "/health",
        response_model=HealthCheckResponse,
        tags=["Health"],
        responses={
            200: {"description": "System is healthy", "model": HealthCheckResponse},
            503: {"description": "Database unreachable", "model": ErrorResponse},
        },
    )
    async def check_health(request: Request) -> HealthCheckResponse:
        manager: Optional[DbManager] = getattr(request.app.state, "db_manager", None)
        database = await manager.health_check() if manager else {"healthy": False, "error": "not connected"}

        if not database.get("healthy"):
            logger.error("Health check failed", endpoint="/health", database=database)
            raise HTTPException(
                status_code=503,
                detail=ErrorResponse(
                    error="DATABASE_UNAVAILABLE",
                    message=str(database.get("error", "database unhealthy")),
                    timestamp=datetime.now(),
                ).model_dump(mode="json"),
            )

        logger.debug("Health check passed", version=config.app_version, endpoint="/health")
        return HealthCheckResponse(
            status="Healthy",
            timestamp=datetime.now(),
            version=config.app_version,
            environment=config.environment.value,
            logging_configured=is_configured(),
            log_level=config.logging.level_value,
            database=database,
        )

    return app


__all__ = ["create_app", "lifespan", "HealthCheckResponse"]
