# app/services/v1/shift_template_service.py
"""
Shift template data access: CRUD, generation by upsert and deactivation.

Generation diffs the expansion against stored rows by id. Every row write runs
in its own SAVEPOINT and is retried on database errors, so one bad row is
reported in ``GenerationResult.failed`` instead of aborting the batch.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import select, insert, update, and_, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Facility, ShiftTemplate, GeneratedShift, ShiftStatus
from app.db.schemas import (
    GeneratedShiftCreate,
    GenerationResult,
    ShiftTemplateCreate,
    ShiftTemplateUpdate,
    TEMPLATE_FIELDS,
    validate_template,
)
from common.api_error import NotFoundError, TemplateInactiveError
from common.config import SchedulingConfig
from common.logger import get_app_logger
from .shift_expansion import expand

logger = get_app_logger(__name__)

# Columns copied from the template onto each generated row
DRIFT_FIELDS = (
    "facility_id",
    "title",
    "department",
    "specialty",
    "start_time",
    "end_time",
    "required_workers",
    "max_workers",
    "hourly_rate",
    "total_hours",
)
CANCELLABLE_STATUSES = (ShiftStatus.OPEN, ShiftStatus.ASSIGNED)


def _same(left: Any, right: Any) -> bool:
    if isinstance(left, Decimal) or isinstance(right, Decimal):
        return Decimal(str(left)) == Decimal(str(right))
    return left == right


def is_future(shift_date: date, start_time: str, now: datetime) -> bool:
    """Shift has not started yet at wall-clock ``now``."""
    today = now.date()
    return shift_date > today or (shift_date == today and start_time > now.strftime("%H:%M"))


class ShiftTemplateService:
    def __init__(self, db: AsyncSession, scheduling: Optional[SchedulingConfig] = None):
        self.db = db
        self.scheduling = scheduling or SchedulingConfig()

    # ------------------------------------------------------------------ #
    # Templates
    # ------------------------------------------------------------------ #

    async def _require_facility(self, facility_id: str) -> Facility:
        facility = await self.db.get(Facility, facility_id)
        if facility is None:
            raise NotFoundError("Facility", facility_id)
        return facility

    async def get_template(self, template_id: str) -> ShiftTemplate:
        query = (
            select(ShiftTemplate)
            .where(ShiftTemplate.template_id == template_id)
            .execution_options(logging_token="ShiftTemplateService.get_template")
        )
        template = (await self.db.execute(query)).scalar_one_or_none()
        if template is None:
            raise NotFoundError("ShiftTemplate", template_id)
        return template

    async def get_template_for_update(self, template_id: str) -> ShiftTemplate:
        """Load and row-lock a template; concurrent editors queue, last writer wins."""
        query = (
            select(ShiftTemplate)
            .where(ShiftTemplate.template_id == template_id)
            .with_for_update()
            .execution_options(
                populate_existing=True,
                logging_token="ShiftTemplateService.get_template_for_update",
            )
        )
        template = (await self.db.execute(query)).scalar_one_or_none()
        if template is None:
            raise NotFoundError("ShiftTemplate", template_id)
        return template

    async def list_templates(
        self,
        facility_id: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[ShiftTemplate]:
        query = select(ShiftTemplate).order_by(ShiftTemplate.name)
        if facility_id is not None:
            query = query.where(ShiftTemplate.facility_id == facility_id)
        if is_active is not None:
            query = query.where(ShiftTemplate.is_active == is_active)
        query = query.execution_options(logging_token="ShiftTemplateService.list_templates")
        return (await self.db.execute(query)).scalars().all()

    async def create_template(
        self, data: ShiftTemplateCreate, now: Optional[datetime] = None
    ) -> tuple[ShiftTemplate, Optional[GenerationResult]]:
        values = data.model_dump()
        if values.get("days_posted_out") is None:
            values["days_posted_out"] = self.scheduling.default_days_posted_out
        values = validate_template(values)
        await self._require_facility(values["facility_id"])

        template = ShiftTemplate(**values)
        self.db.add(template)
        await self.db.flush()
        logger.info(
            "Shift template created",
            template_id=template.template_id,
            facility_id=template.facility_id,
        )

        result = None
        if template.is_active:
            result = await self.generate_shifts(template, now)
        return template, result

    async def update_template(
        self,
        template_id: str,
        updates: ShiftTemplateUpdate,
        now: Optional[datetime] = None,
    ) -> tuple[ShiftTemplate, Optional[GenerationResult], int]:
        """
        Apply a partial update and bring generated shifts in line with it.

        Returns the template, the regeneration result (None when the update
        deactivated the template) and the number of cancelled shifts.
        """
        template = await self.get_template_for_update(template_id)
        changes = updates.model_dump(exclude_unset=True)
        current = {field: getattr(template, field) for field in TEMPLATE_FIELDS}
        merged = validate_template({**current, **changes})

        was_active = template.is_active
        for field, value in merged.items():
            if not _same(getattr(template, field), value):
                setattr(template, field, value)
        await self.db.flush()
        logger.info(
            "Shift template updated",
            template_id=template_id,
            fields=sorted(changes),
        )

        if was_active and not template.is_active:
            cancelled = await self.cancel_future_shifts(template, now)
            return template, None, cancelled

        result = await self.generate_shifts(template, now)
        return template, result, result.cancelled

    async def regenerate_template(
        self, template_id: str, now: Optional[datetime] = None
    ) -> GenerationResult:
        """Re-run generation for an active template; inactive ones are refused."""
        template = await self.get_template_for_update(template_id)
        if not template.is_active:
            raise TemplateInactiveError(template_id)
        return await self.generate_shifts(template, now)

    async def deactivate_template(self, template_id: str, now: Optional[datetime] = None) -> int:
        """Stop generation and cancel shifts that have not started. Returns the cancel count."""
        template = await self.get_template_for_update(template_id)
        template.is_active = False
        await self.db.flush()
        return await self.cancel_future_shifts(template, now)

    # ------------------------------------------------------------------ #
    # Generated shifts
    # ------------------------------------------------------------------ #

    async def cancel_future_shifts(
        self, template: ShiftTemplate, now: Optional[datetime] = None
    ) -> int:
        now = now or datetime.now()
        today, clock = now.date(), now.strftime("%H:%M")
        stmt = (
            update(GeneratedShift)
            .where(
                GeneratedShift.template_id == template.template_id,
                GeneratedShift.status.in_(CANCELLABLE_STATUSES),
                or_(
                    GeneratedShift.shift_date > today,
                    and_(GeneratedShift.shift_date == today, GeneratedShift.start_time > clock),
                ),
            )
            .values(status=ShiftStatus.CANCELLED)
            .execution_options(synchronize_session=False)
        )
        cancelled = (await self.db.execute(stmt)).rowcount or 0
        logger.info(
            "Future shifts cancelled",
            template_id=template.template_id,
            cancelled=cancelled,
        )
        return cancelled

    async def generate_shifts(
        self, template: ShiftTemplate, now: Optional[datetime] = None
    ) -> GenerationResult:
        """Upsert the template's expansion from ``now`` and cancel open rows it no longer produces."""
        now = now or datetime.now()
        as_of = now.date()
        drafts = expand(template, as_of)
        result = GenerationResult(template_id=template.template_id)

        # Every row from today on, including rows past a horizon that has since shrunk
        existing_query = (
            select(GeneratedShift)
            .where(
                GeneratedShift.template_id == template.template_id,
                GeneratedShift.shift_date >= as_of,
            )
            .execution_options(
                populate_existing=True,
                logging_token="ShiftTemplateService.generate_shifts",
            )
        )
        existing = {
            row.shift_id: row for row in (await self.db.execute(existing_query)).scalars()
        }

        for draft in drafts:
            row = existing.get(draft.shift_id)
            action = self._plan(draft, row, now)
            if action is None:
                result.unchanged += 1
                continue
            outcome = await self._write_with_retry(action, draft.shift_id, self._row_values(draft))
            if outcome is None:
                result.failed += 1
                result.failed_shift_ids.append(draft.shift_id)
            else:
                setattr(result, outcome, getattr(result, outcome) + 1)

        produced = {draft.shift_id for draft in drafts}
        for shift_id, row in existing.items():
            if (
                shift_id not in produced
                and row.status == ShiftStatus.OPEN
                and is_future(row.shift_date, row.start_time, now)
            ):
                if await self._write_with_retry("cancelled", shift_id, {}) is not None:
                    result.cancelled += 1
                else:
                    result.failed += 1
                    result.failed_shift_ids.append(shift_id)

        template.generated_shifts_count = (template.generated_shifts_count or 0) + result.created
        await self.db.flush()

        log = logger.warning if result.failed else logger.info
        log("Shifts generated", **result.model_dump(exclude={"failed_shift_ids"}))
        return result

    @staticmethod
    def _plan(
        draft: GeneratedShiftCreate, row: Optional[GeneratedShift], now: datetime
    ) -> Optional[str]:
        """Which write a draft needs: created, updated, reopened or None."""
        if row is None:
            return "created"
        if row.status == ShiftStatus.OPEN:
            drifted = any(not _same(getattr(row, f), getattr(draft, f)) for f in DRIFT_FIELDS)
            return "updated" if drifted else None
        if row.status == ShiftStatus.CANCELLED and is_future(draft.shift_date, draft.start_time, now):
            return "reopened"
        # assigned, in progress and completed rows belong to their workers now
        return None

    @staticmethod
    def _row_values(draft: GeneratedShiftCreate) -> dict[str, Any]:
        return draft.model_dump(exclude={"shift_id"})

    async def _write_row(self, action: str, shift_id: str, values: dict[str, Any]) -> None:
        if action == "created":
            stmt: Any = insert(GeneratedShift).values(
                shift_id=shift_id,
                status=ShiftStatus.OPEN,
                assigned_staff_ids=[],
                **values,
            )
        else:
            if action == "reopened":
                values = {**values, "status": ShiftStatus.OPEN}
            elif action == "cancelled":
                values = {"status": ShiftStatus.CANCELLED}
            stmt = (
                update(GeneratedShift)
                .where(GeneratedShift.shift_id == shift_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        await self.db.execute(stmt)

    async def _write_with_retry(
        self, action: str, shift_id: str, values: dict[str, Any]
    ) -> Optional[str]:
        """
        Write one row in a SAVEPOINT, retrying database errors.

        Returns the counter the write lands in, or None once retries run out.
        An insert that hits the unique slot key means another generator got
        there first with the same deterministic row, which counts as unchanged.
        """
        attempts = self.scheduling.max_row_retries
        for attempt in range(1, attempts + 1):
            try:
                async with self.db.begin_nested():
                    await self._write_row(action, shift_id, values)
                return action
            except IntegrityError as e:
                if action == "created":
                    logger.info("Shift row already generated", shift_id=shift_id)
                    return "unchanged"
                error: SQLAlchemyError = e
            except SQLAlchemyError as e:
                error = e
            logger.warning(
                "Shift row write failed",
                shift_id=shift_id,
                action=action,
                attempt=attempt,
                max_attempts=attempts,
                error=str(error),
            )
        logger.error("Giving up on shift row", shift_id=shift_id, action=action)
        return None

    async def list_generated_shifts(
        self,
        template_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        status: Optional[ShiftStatus] = None,
    ) -> Sequence[GeneratedShift]:
        await self.get_template(template_id)
        query = select(GeneratedShift).where(GeneratedShift.template_id == template_id)
        if start is not None:
            query = query.where(GeneratedShift.shift_date >= start)
        if end is not None:
            query = query.where(GeneratedShift.shift_date <= end)
        if status is not None:
            query = query.where(GeneratedShift.status == status)
        query = query.order_by(
            GeneratedShift.shift_date, GeneratedShift.start_time, GeneratedShift.slot_index
        ).execution_options(
            populate_existing=True,
            logging_token="ShiftTemplateService.list_generated_shifts",
        )
        return (await self.db.execute(query)).scalars().all()


__all__ = ["ShiftTemplateService", "is_future"]
