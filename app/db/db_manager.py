# app/db/db_manager.py
"""
Database manager focused on connection management and session handling.
Schema migrations are handled separately via Alembic CLI.

Design principles:
- Single responsibility: Connection/session management only
- Fail fast: Invalid configuration crashes on startup
- Explicit over implicit: No magic auto-migrations
"""

from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine,
)
from sqlalchemy import event, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Any, Optional, Union
import ssl as ssl_module
import time
from common import DatabaseConfig, get_app_logger
from common.api_error import DatabaseError

logger = get_app_logger(__name__)


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Let pysqlite/aiosqlite honour SAVEPOINT.

    The driver opens transactions lazily on its own, which breaks
    ``begin_nested``; take over transaction control instead. WAL lets a
    request's read transaction coexist with a job writing on another
    connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


class DbManager:
    """
    Database connection and session manager.

    Usage:
        # Startup
        db_manager = DbManager.from_config(config.database)
        await db_manager.verify_connection()

        # Runtime
        async with db_manager.session() as session:
            result = await session.execute(...)

        # Shutdown
        await db_manager.dispose()
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        echo: bool = False,
        connect_args: Optional[dict[str, Any]] = None,
        **engine_kwargs: Any,
    ):
        """
        Args:
            url: Database URL (postgresql+asyncpg://, postgresql+psycopg:// or sqlite+aiosqlite://)
            pool_size: Number of persistent connections (ignored for sqlite)
            max_overflow: Additional connections beyond pool_size (ignored for sqlite)
            pool_timeout: Seconds to wait for connection from pool
            pool_recycle: Recycle connections after N seconds
            pool_pre_ping: Test connections before using
            echo: Log all SQL statements (use for debugging)
            connect_args: Driver-specific connection arguments (SSL, etc.)
            engine_kwargs: Passed straight to create_async_engine (e.g. poolclass)
        """
        self._validate_url(url)
        self.is_sqlite = url.startswith("sqlite+aiosqlite://")

        # Store config for introspection
        self._config: dict[str, Union[str, int, bool]] = {
            "url": url.split("@")[-1],
            "sqlite": self.is_sqlite,
        }

        if self.is_sqlite:
            # SQLite pools are per-file; sizing knobs do not apply
            self.engine: AsyncEngine = create_async_engine(
                url=url,
                echo=echo,
                connect_args=connect_args or {},
                **engine_kwargs,
            )
            enable_sqlite_savepoints(self.engine)
        else:
            self._config.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
            )
            self.engine = create_async_engine(
                url=url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                pool_pre_ping=pool_pre_ping,
                connect_args=connect_args or {},
                **engine_kwargs,
            )

        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        self._verified = False

        logger.info("DbManager initialized", **self._config)

    @classmethod
    def from_config(cls, config: DatabaseConfig, **kwargs: Any) -> "DbManager":
        """
        Create DbManager from DatabaseConfig with SSL support.

        Example:
            db_manager = DbManager.from_config(config.database)
        """
        connect_args = kwargs.pop("connect_args", {})

        if config.driver.is_sqlite:
            return cls(
                url=config.get_connection_url(),
                connect_args=connect_args,
                **kwargs,
            )

        ssl_mode = config.ssl_mode.value if config.ssl_mode else None
        if ssl_mode and config.driver.value == "asyncpg":
            if ssl_mode == "disable":
                connect_args["ssl"] = False
            elif config.requires_ssl():
                ssl_context = ssl_module.create_default_context()
                if config.ssl_ca_path:
                    ssl_context.load_verify_locations(cafile=str(config.ssl_ca_path))
                if config.ssl_cert_path and config.ssl_key_path:
                    ssl_context.load_cert_chain(
                        certfile=str(config.ssl_cert_path),
                        keyfile=str(config.ssl_key_path),
                    )
                if ssl_mode == "verify-full":
                    ssl_context.check_hostname = True
                    ssl_context.verify_mode = ssl_module.CERT_REQUIRED
                else:
                    ssl_context.check_hostname = False
                    if ssl_mode == "require":
                        ssl_context.verify_mode = ssl_module.CERT_NONE
                connect_args["ssl"] = ssl_context
        elif ssl_mode:
            # psycopg takes libpq's sslmode verbatim
            connect_args["sslmode"] = ssl_mode

        return cls(
            url=config.get_connection_url(include_password=True),
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            connect_args=connect_args,
            **kwargs,
        )

    @staticmethod
    def _validate_url(url: str) -> None:
        """Validate database URL format."""
        if not url or not url.startswith(
            ("postgresql+asyncpg://", "postgresql+psycopg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "Invalid database URL. Expected postgresql+asyncpg://, "
                f"postgresql+psycopg:// or sqlite+aiosqlite://, got: {url[:20]}..."
            )

    async def verify_connection(self) -> None:
        """
        Verify database connection on startup.

        Raises:
            ConnectionError: If connection fails
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            self._verified = True
            logger.info("✓ Database connection verified")
        except SQLAlchemyError as e:
            logger.error("❌ Database connection failed", error=str(e))
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    async def verify_migrations_current(self) -> str:
        """
        Check that Alembic has stamped the schema.

        Returns:
            The current revision id

        Raises:
            RuntimeError: If alembic_version table doesn't exist or is empty
        """
        async with self.engine.connect() as conn:
            table_exists = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).has_table("alembic_version")
            )
            if not table_exists:
                raise RuntimeError(
                    "alembic_version table not found. "
                    "Have you run 'alembic upgrade head'?"
                )

            result = await conn.execute(text("SELECT version_num FROM alembic_version"))
            current_version = result.scalar()

        if current_version is None:
            raise RuntimeError("alembic_version is empty. Run 'alembic upgrade head'.")
        logger.info("Current migration version", revision=current_version)
        return current_version

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional database session.

        Automatically commits on success, rolls back on exception.

        Usage:
            async with db_manager.session() as session:
                template = await session.get(ShiftTemplate, template_id)
                template.is_active = False
                # Commits automatically on exit
        """
        session = self.session_maker()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Session error, rolled back", error=str(e))
            raise DatabaseError(f"Database operation failed: {e}") from e
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> dict[str, Any]:
        """
        Connectivity check with round-trip time and pool status.

        Example:
            {"healthy": True, "response_time_ms": 5.2, "pool_status": "..."}
        """
        start = time.perf_counter()
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            return {"healthy": False, "error": str(e)}

        return {
            "healthy": True,
            "response_time_ms": round((time.perf_counter() - start) * 1000, 2),
            "pool_status": self.engine.pool.status(),
        }

    async def dispose(self) -> None:
        """
        Dispose of all connections and cleanup resources.
        Call this on application shutdown.
        """
        await self.engine.dispose()
        logger.info("✓ Database connections disposed")

    def get_config_snapshot(self) -> dict[str, Any]:
        """Get current configuration (for monitoring/debugging)."""
        return self._config.copy()


__all__ = ["DbManager", "enable_sqlite_savepoints"]
