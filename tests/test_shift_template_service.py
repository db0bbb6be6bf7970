"""
Tests: Shift Template Service (SQLite)
=================================
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from app.db.models import GeneratedShift, ShiftStatus
from app.db.schemas import ShiftTemplateUpdate
from app.services.v1 import ShiftTemplateService, ShiftGenerationJob, generated_shift_id
from common.api_error import NotFoundError, TemplateInactiveError, TemplateValidationError
from common.config import SchedulingConfig

from .conftest import T0, template_payload


async def _create(session, **overrides):
    service = ShiftTemplateService(session)
    template, result = await service.create_template(template_payload(**overrides), now=T0)
    return service, template, result


async def _set_status(session, shift_id: str, status: ShiftStatus) -> None:
    await session.execute(
        update(GeneratedShift).where(GeneratedShift.shift_id == shift_id).values(status=status)
    )


async def _statuses(service, template_id) -> dict[str, ShiftStatus]:
    return {row.shift_id: row.status for row in await service.list_generated_shifts(template_id)}


class TestCreate:
    async def test_create_generates_reference_rows(self, session):
        service, template, result = await _create(session)

        assert result.created == 8
        assert result.failed == 0
        assert template.generated_shifts_count == 8

        rows = await service.list_generated_shifts(template.template_id)
        assert sorted({r.shift_date for r in rows}) == [
            date(2025, 1, 6),
            date(2025, 1, 8),
            date(2025, 1, 10),
            date(2025, 1, 13),
        ]
        assert all(r.status == ShiftStatus.OPEN for r in rows)

    async def test_inactive_template_generates_nothing(self, session):
        service, template, result = await _create(session, is_active=False)
        assert result is None
        assert await service.list_generated_shifts(template.template_id) == []

    async def test_unknown_facility(self, session):
        with pytest.raises(NotFoundError):
            await _create(session, facility_id="missing")

    async def test_default_horizon_from_config(self, session):
        service = ShiftTemplateService(session, SchedulingConfig(default_days_posted_out=3))
        template, _ = await service.create_template(
            template_payload(days_posted_out=None), now=T0
        )
        assert template.days_posted_out == 3

    async def test_invalid_template_rejected(self, session):
        with pytest.raises(TemplateValidationError):
            await _create(session, start_time="19:00", end_time="07:00")


class TestRegenerate:
    async def test_regeneration_is_idempotent(self, session):
        service, template, _ = await _create(session)

        again = await service.generate_shifts(template, now=T0)

        assert (again.created, again.updated, again.cancelled) == (0, 0, 0)
        assert again.unchanged == 8
        assert len(await service.list_generated_shifts(template.template_id)) == 8
        assert template.generated_shifts_count == 8

    async def test_rate_change_updates_open_rows_only(self, session):
        service, template, _ = await _create(session)
        assigned = generated_shift_id(template.template_id, date(2025, 1, 8), 0)
        await _set_status(session, assigned, ShiftStatus.ASSIGNED)

        _, result, _ = await service.update_template(
            template.template_id, ShiftTemplateUpdate(hourly_rate=Decimal("60.00")), now=T0
        )

        assert result.updated == 7
        assert result.unchanged == 1
        rows = {r.shift_id: r for r in await service.list_generated_shifts(template.template_id)}
        assert rows[assigned].hourly_rate == Decimal("52.00")
        assert {r.hourly_rate for k, r in rows.items() if k != assigned} == {Decimal("60.00")}

    async def test_fewer_slots_cancels_surplus_future_rows(self, session):
        service, template, _ = await _create(session)

        _, result, cancelled = await service.update_template(
            template.template_id, ShiftTemplateUpdate(min_staff=1, max_staff=1), now=T0
        )

        assert result.cancelled == 4
        assert cancelled == 4
        statuses = await _statuses(service, template.template_id)
        assert sum(1 for s in statuses.values() if s == ShiftStatus.CANCELLED) == 4

    async def test_horizon_moves_forward(self, session):
        service, template, _ = await _create(session)
        result = await service.generate_shifts(template, now=datetime(2025, 1, 8, 6, 0))
        # Wed 01-08 .. Wed 01-15 adds Wed 01-15
        assert result.created == 2

    async def test_shorter_horizon_cancels_rows_beyond_it(self, session):
        service, template, created = await _create(session, days_posted_out=14)
        assert created.created == 14

        _, result, cancelled = await service.update_template(
            template.template_id, ShiftTemplateUpdate(days_posted_out=2), now=T0
        )

        # Mon 01-06 and Wed 01-08 stay; Fri 01-10 through Mon 01-20 go
        assert result.unchanged == 4
        assert cancelled == 10
        rows = await service.list_generated_shifts(template.template_id)
        open_dates = {r.shift_date for r in rows if r.status == ShiftStatus.OPEN}
        assert open_dates == {date(2025, 1, 6), date(2025, 1, 8)}

    async def test_regenerate_refuses_inactive_template(self, session):
        service, template, _ = await _create(session, is_active=False)
        with pytest.raises(TemplateInactiveError):
            await service.regenerate_template(template.template_id, now=T0)

    async def test_blank_name_rejected_on_update(self, session):
        service, template, _ = await _create(session)
        with pytest.raises(TemplateValidationError):
            await service.update_template(
                template.template_id, ShiftTemplateUpdate(name="   "), now=T0
            )

    async def test_merged_update_is_revalidated(self, session):
        service, template, _ = await _create(session)
        with pytest.raises(TemplateValidationError):
            await service.update_template(
                template.template_id, ShiftTemplateUpdate(max_staff=1), now=T0
            )


class TestDeactivate:
    async def test_cancels_future_and_keeps_started(self, session):
        service, template, _ = await _create(session)
        tid = template.template_id
        in_progress = generated_shift_id(tid, date(2025, 1, 8), 0)
        completed = generated_shift_id(tid, date(2025, 1, 6), 0)
        assigned_future = generated_shift_id(tid, date(2025, 1, 10), 1)
        await _set_status(session, in_progress, ShiftStatus.IN_PROGRESS)
        await _set_status(session, completed, ShiftStatus.COMPLETED)
        await _set_status(session, assigned_future, ShiftStatus.ASSIGNED)

        # Wednesday 08:00, the 07:00 shifts have started
        cancelled = await service.deactivate_template(tid, now=datetime(2025, 1, 8, 8, 0))

        assert cancelled == 4
        statuses = await _statuses(service, tid)
        assert statuses[in_progress] == ShiftStatus.IN_PROGRESS
        assert statuses[completed] == ShiftStatus.COMPLETED
        assert statuses[generated_shift_id(tid, date(2025, 1, 8), 1)] == ShiftStatus.OPEN
        assert statuses[assigned_future] == ShiftStatus.CANCELLED
        assert statuses[generated_shift_id(tid, date(2025, 1, 13), 0)] == ShiftStatus.CANCELLED

        refreshed = await service.get_template(tid)
        assert refreshed.is_active is False

    async def test_deactivate_through_update_then_reactivate(self, session):
        service, template, _ = await _create(session)
        tid = template.template_id

        _, result, cancelled = await service.update_template(
            tid, ShiftTemplateUpdate(is_active=False), now=T0
        )
        assert result is None
        assert cancelled == 8

        _, result, _ = await service.update_template(
            tid, ShiftTemplateUpdate(is_active=True), now=T0
        )
        assert result.reopened == 8
        assert result.created == 0
        assert set((await _statuses(service, tid)).values()) == {ShiftStatus.OPEN}

    async def test_unknown_template(self, session):
        with pytest.raises(NotFoundError):
            await ShiftTemplateService(session).deactivate_template("missing", now=T0)


class TestRowRetry:
    async def test_persistent_failure_is_counted_not_raised(self, session, monkeypatch):
        service = ShiftTemplateService(session, SchedulingConfig(max_row_retries=3))
        template, _ = await service.create_template(
            template_payload(is_active=False), now=T0
        )
        template.is_active = True
        broken = generated_shift_id(template.template_id, date(2025, 1, 10), 1)
        flaky = generated_shift_id(template.template_id, date(2025, 1, 8), 0)
        attempts = {broken: 0, flaky: 0}
        original = ShiftTemplateService._write_row

        async def write_row(self, action, shift_id, values):
            if shift_id in attempts:
                attempts[shift_id] += 1
                if shift_id == broken or attempts[shift_id] == 1:
                    raise OperationalError("INSERT", {}, Exception("database is locked"))
            await original(self, action, shift_id, values)

        monkeypatch.setattr(ShiftTemplateService, "_write_row", write_row)

        result = await service.generate_shifts(template, now=T0)

        assert attempts == {broken: 3, flaky: 2}
        assert result.created == 7
        assert result.failed == 1
        assert result.failed_shift_ids == [broken]
        ids = {r.shift_id for r in await service.list_generated_shifts(template.template_id)}
        assert broken not in ids
        assert flaky in ids


    async def test_duplicate_insert_counts_as_unchanged(self, session, monkeypatch):
        service, template, _ = await _create(session)
        attempts = []
        original = ShiftTemplateService._write_row

        async def write_row(self, action, shift_id, values):
            attempts.append(shift_id)
            await original(self, action, shift_id, values)

        # Another generator inserted the same rows after this one read the table
        monkeypatch.setattr(ShiftTemplateService, "_plan", staticmethod(lambda draft, row, now: "created"))
        monkeypatch.setattr(ShiftTemplateService, "_write_row", write_row)

        result = await service.generate_shifts(template, now=T0)

        assert (result.created, result.unchanged, result.failed) == (0, 8, 0)
        assert len(attempts) == 8
        assert len(await service.list_generated_shifts(template.template_id)) == 8


class TestGenerationJob:
    async def test_tick_covers_active_templates(self, db_manager):
        async with db_manager.session() as session:
            service = ShiftTemplateService(session)
            active, _ = await service.create_template(template_payload(), now=T0)
            await service.create_template(
                template_payload(name="Paused", is_active=False), now=T0
            )

        summary = await ShiftGenerationJob(db_manager).run(now=datetime(2025, 1, 8, 6, 0))

        assert [r.template_id for r in summary.results] == [active.template_id]
        assert summary.results[0].created == 2
        assert summary.errors == {}

    async def test_missing_template_reported(self, db_manager):
        summary = await ShiftGenerationJob(db_manager).run(now=T0, template_ids=["missing"])
        assert summary.results == []
        assert "missing" in summary.errors

    async def test_inactive_template_named_explicitly_is_reported(self, db_manager):
        async with db_manager.session() as session:
            service = ShiftTemplateService(session)
            paused, _ = await service.create_template(
                template_payload(name="Paused", is_active=False), now=T0
            )

        summary = await ShiftGenerationJob(db_manager).run(now=T0, template_ids=[paused.template_id])

        assert summary.results == []
        assert "inactive" in summary.errors[paused.template_id]
