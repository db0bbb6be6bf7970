# app/services/v1/shift_generation_job.py
"""
Scheduled generation tick.

Expands every active template, each in its own session so that one
template's failure rolls back only that template and is reported in the
run summary.
"""
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import select

from app.db import DbManager
from app.db.models import ShiftTemplate
from app.db.schemas import GenerationRunSummary
from common.api_error import AppError
from common.config import SchedulingConfig
from common.logger import get_app_logger
from .shift_template_service import ShiftTemplateService

logger = get_app_logger(__name__, track_timing=True)


class ShiftGenerationJob:
    def __init__(self, db_manager: DbManager, scheduling: Optional[SchedulingConfig] = None):
        self.db_manager = db_manager
        self.scheduling = scheduling or SchedulingConfig()

    async def active_template_ids(self) -> list[str]:
        async with self.db_manager.session() as session:
            query = (
                select(ShiftTemplate.template_id)
                .where(ShiftTemplate.is_active.is_(True))
                .order_by(ShiftTemplate.template_id)
                .execution_options(logging_token="ShiftGenerationJob.active_template_ids")
            )
            return list((await session.execute(query)).scalars())

    async def run(
        self,
        now: Optional[datetime] = None,
        template_ids: Optional[Iterable[str]] = None,
    ) -> GenerationRunSummary:
        """
        Run one tick.

        Args:
            now: Wall-clock reference; defaults to the current local time
            template_ids: Restrict the run to these templates; inactive ones land in
                ``errors``
        """
        now = now or datetime.now()
        ids = list(template_ids) if template_ids is not None else await self.active_template_ids()
        summary = GenerationRunSummary(as_of=now)
        run_logger = logger.bind(as_of=now.isoformat(), templates=len(ids))
        run_logger.info("Shift generation started")

        for template_id in ids:
            try:
                async with self.db_manager.session() as session:
                    service = ShiftTemplateService(session, self.scheduling)
                    result = await service.regenerate_template(template_id, now)
            except AppError as e:
                run_logger.error(
                    "Shift generation failed for template",
                    template_id=template_id,
                    error=e.message,
                    code=e.code,
                )
                summary.errors[template_id] = e.message
                continue
            summary.results.append(result)

        run_logger.info(
            "Shift generation finished",
            processed=summary.templates_processed,
            failed_templates=len(summary.errors),
            failed_rows=summary.total_failed_rows,
        )
        return summary


__all__ = ["ShiftGenerationJob"]
