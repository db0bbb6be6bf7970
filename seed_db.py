# seed_db.py
"""
Database Seeding Script
=======================

Seeds facilities, one user per role for each facility, a super admin, and the
default shift templates (whose shifts are generated on creation).

Usage:
    python seed_db.py --facilities 3
    python seed_db.py --facilities 1 --as-of 2025-01-06T06:00 --export-csv --csv-dir data/seed

Requirements:
    - A valid database configuration (environment variables or .env).
    - Migrations applied (alembic upgrade head).
"""

import sys
import argparse
import asyncio
from datetime import datetime
from typing import Optional
from dotenv import load_dotenv
from rich.console import Console

from scripts.db import seed_db, DEFAULT_DATA_TEMPLATE
from app.db import DbManager
from common.config import AppConfig, get_config, initialize_config
from common.api_error import ConfigurationError


async def run_seed_db(
    config: AppConfig,
    facilities: int,
    as_of: Optional[datetime],
    export_csv: bool,
    csv_dir: str,
):
    """
    Example:
        >>> asyncio.run(run_seed_db(config, facilities=2, as_of=None, export_csv=False, csv_dir="data/seed"))
    """
    db_manager = DbManager.from_config(config.database)
    try:
        await db_manager.verify_connection()
        return await seed_db(
            db_manager=db_manager,
            data_template=DEFAULT_DATA_TEMPLATE,
            facilities=facilities,
            scheduling=config.scheduling,
            now=as_of,
            export_csv=export_csv,
            csv_dir=csv_dir,
        )
    finally:
        await db_manager.dispose()


def main():
    parser = argparse.ArgumentParser(description="Seed the staffing database")
    parser.add_argument(
        "--facilities", type=int, default=1, help="Number of facilities to create"
    )
    parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        default=None,
        help="Generation reference time, ISO 8601 (default: now)",
    )
    parser.add_argument(
        "--export-csv", action="store_true", help="Export seeded users to CSV"
    )
    parser.add_argument(
        "--csv-dir", type=str, default="data/seed", help="Directory to export CSV files"
    )
    args = parser.parse_args()

    config = get_config()
    if config.database is None:
        print("FATAL: Database configuration required (set DB_DRIVER and DB_NAME)")
        sys.exit(1)

    summary = asyncio.run(
        run_seed_db(config, args.facilities, args.as_of, args.export_csv, args.csv_dir)
    )
    Console().print_json(summary.model_dump_json())


if __name__ == "__main__":
    try:
        load_dotenv()
        initialize_config()
    except ConfigurationError as e:
        print(f"FATAL: Configuration error:\n{e}")
        sys.exit(1)
    main()
