"""
Alembic environment configuration.
Uses the same DatabaseConfig as the application for consistency.
"""

import os
import sys
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
from dotenv import load_dotenv

# Add project to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app.db.models import DbBaseModel
from common.config import DatabaseConfig, DbDriver, get_config, initialize_config
from common.api_error import ConfigurationError

load_dotenv()
try:
    initialize_config()
except ConfigurationError as e:
    # Can't use logger yet, but that's OK - this is a fatal startup error
    print(f"FATAL: Configuration error:\n{e}")
    sys.exit(1)

# Alembic Config object
config = context.config

# Load app configuration (includes database config)
app_config = get_config()

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Target metadata for autogenerate
target_metadata = DbBaseModel.metadata


def _database() -> DatabaseConfig:
    if not app_config.database:
        raise RuntimeError("Database configuration not found in environment")
    return app_config.database


def get_sync_url() -> str:
    """
    Get synchronous database URL for Alembic.

    Alembic needs a sync URL even though the app uses async:
    asyncpg -> psycopg2, psycopg stays psycopg (v3 has a sync mode),
    aiosqlite -> pysqlite.
    """
    db_config = _database()

    if db_config.driver == DbDriver.AIOSQLITE:
        return f"sqlite:///{db_config.name}"

    driver = "postgresql" if db_config.driver == DbDriver.ASYNCPG else "postgresql+psycopg"

    if db_config.username and db_config.password:
        password = db_config.password.get_secret_value()
        auth = f"{db_config.username}:{password}@"
    elif db_config.username:
        auth = f"{db_config.username}@"
    else:
        auth = ""
    return f"{driver}://{auth}{db_config.host}:{db_config.port}/{db_config.name}"


def get_connect_args() -> dict:
    """
    Get connection arguments including SSL configuration.

    Returns the same SSL settings used by the application, in libpq terms.
    """
    db_config = _database()
    connect_args: dict = {}

    if db_config.driver.is_sqlite or not db_config.ssl_mode:
        return connect_args

    connect_args["sslmode"] = db_config.ssl_mode.value
    if db_config.requires_ssl():
        if db_config.ssl_ca_path:
            connect_args["sslrootcert"] = str(db_config.ssl_ca_path)
        if db_config.ssl_cert_path:
            connect_args["sslcert"] = str(db_config.ssl_cert_path)
        if db_config.ssl_key_path:
            connect_args["sslkey"] = str(db_config.ssl_key_path)

    return connect_args


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    Calls to context.execute() emit SQL to script output.
    """
    context.configure(
        url=get_sync_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_database().driver.is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode using the application's database settings.
    """
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = get_sync_url()

    # NullPool: migrations hold one connection and exit
    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        connect_args=get_connect_args(),
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=_database().driver.is_sqlite,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
