# generate_shifts.py
"""
Shift generation tick.

Expands every active shift template (or only the ones given) into generated
shifts. Meant to be run from cron; exits non-zero when any template failed.

Usage:
    python generate_shifts.py
    python generate_shifts.py --template-id <id> --template-id <id>
    python generate_shifts.py --as-of 2025-01-06T06:00
"""

import sys
import argparse
import asyncio
from datetime import datetime
from typing import Optional
from dotenv import load_dotenv
from rich.console import Console

from app.db import DbManager
from app.db.schemas import GenerationRunSummary
from app.services.v1 import ShiftGenerationJob
from common.config import AppConfig, get_config, initialize_config
from common.api_error import ConfigurationError


async def run_generation(
    config: AppConfig,
    as_of: Optional[datetime],
    template_ids: Optional[list[str]],
) -> GenerationRunSummary:
    db_manager = DbManager.from_config(config.database)
    try:
        await db_manager.verify_connection()
        job = ShiftGenerationJob(db_manager, config.scheduling)
        return await job.run(now=as_of, template_ids=template_ids)
    finally:
        await db_manager.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate shifts from templates")
    parser.add_argument(
        "--template-id",
        action="append",
        dest="template_ids",
        default=None,
        help="Only this template (repeatable); default is every active template",
    )
    parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        default=None,
        help="Wall-clock reference, ISO 8601 (default: now)",
    )
    args = parser.parse_args()

    config = get_config()
    if config.database is None:
        print("FATAL: Database configuration required (set DB_DRIVER and DB_NAME)")
        return 1

    summary = asyncio.run(run_generation(config, args.as_of, args.template_ids))
    Console().print_json(summary.model_dump_json())
    return 1 if summary.errors or summary.total_failed_rows else 0


if __name__ == "__main__":
    try:
        load_dotenv()
        initialize_config()
    except ConfigurationError as e:
        print(f"FATAL: Configuration error:\n{e}")
        sys.exit(1)
    sys.exit(main())
