# app/api/v1/shift_template_router.py
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db, get_db_manager, DbManager
from app.db.models import Permission, ShiftStatus, User
from app.db.schemas import (
    ShiftTemplateCreate,
    ShiftTemplateUpdate,
    ShiftTemplateResponse,
    TemplateChangeResponse,
    GeneratedShiftResponse,
    GenerationResult,
    DeactivationResult,
    GenerationRunSummary,
)
from app.services.v1 import ShiftTemplateService, ShiftGenerationJob
from common.config import SchedulingConfig
from .deps import (
    ensure_permitted,
    get_current_user,
    get_scheduling_config,
    require_permissions,
    template_facility,
)

shift_template_router = APIRouter(
    prefix="/shift-templates",
    tags=["Shift Templates"],
)

AS_OF_QUERY = Query(
    None,
    description="Wall-clock reference for generation; defaults to server time",
)


def get_template_service(
    db: AsyncSession = Depends(get_db),
    scheduling: SchedulingConfig = Depends(get_scheduling_config),
) -> ShiftTemplateService:
    return ShiftTemplateService(db, scheduling)


@shift_template_router.get(
    "",
    response_model=List[ShiftTemplateResponse],
    summary="List shift templates",
    dependencies=[Depends(require_permissions(Permission.VIEW_SCHEDULES))],
)
async def list_templates(
    facility_id: Optional[str] = None,
    is_active: Optional[bool] = None,
    service: ShiftTemplateService = Depends(get_template_service),
):
    return await service.list_templates(facility_id=facility_id, is_active=is_active)


@shift_template_router.post(
    "",
    response_model=TemplateChangeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a shift template",
    description="""
    Validates the template, stores it and, when active, generates its shifts
    for the posting horizon.

    **Generation:** per-row failures are retried and reported in
    `generation.failed`; they do not fail the request.
    """,
    responses={
        403: {"description": "Missing create_shifts at the template's facility"},
        404: {"description": "Facility not found"},
        422: {"description": "Invalid template"},
    },
)
async def create_template(
    payload: ShiftTemplateCreate,
    as_of: Optional[datetime] = AS_OF_QUERY,
    user: User = Depends(get_current_user),
    service: ShiftTemplateService = Depends(get_template_service),
):
    ensure_permitted(user, (Permission.CREATE_SHIFTS,), payload.facility_id)
    template, result = await service.create_template(payload, now=as_of)
    return TemplateChangeResponse(
        template=ShiftTemplateResponse.model_validate(template),
        generation=result,
    )


@shift_template_router.post(
    "/generate",
    response_model=GenerationRunSummary,
    summary="Run the generation tick now",
    description="Expands every active template, each in its own transaction.",
    dependencies=[Depends(require_permissions(Permission.CREATE_SHIFTS))],
)
async def run_generation(
    as_of: Optional[datetime] = AS_OF_QUERY,
    db_manager: DbManager = Depends(get_db_manager),
    scheduling: SchedulingConfig = Depends(get_scheduling_config),
):
    return await ShiftGenerationJob(db_manager, scheduling).run(now=as_of)


@shift_template_router.get(
    "/{template_id}",
    response_model=ShiftTemplateResponse,
    summary="Get a shift template",
    responses={404: {"description": "Template not found"}},
    dependencies=[Depends(require_permissions(Permission.VIEW_SCHEDULES, facility=template_facility))],
)
async def get_template(
    template_id: str,
    service: ShiftTemplateService = Depends(get_template_service),
):
    return await service.get_template(template_id)


@shift_template_router.patch(
    "/{template_id}",
    response_model=TemplateChangeResponse,
    summary="Update a shift template",
    description="""
    Partial update under a row lock (last writer wins). The merged template
    is re-validated. Setting `is_active` to false cancels shifts that have not
    started; any other change regenerates by upsert.
    """,
    responses={
        404: {"description": "Template not found"},
        422: {"description": "Invalid template"},
    },
    dependencies=[Depends(require_permissions(Permission.EDIT_SHIFTS, facility=template_facility))],
)
async def update_template(
    template_id: str,
    payload: ShiftTemplateUpdate,
    as_of: Optional[datetime] = AS_OF_QUERY,
    service: ShiftTemplateService = Depends(get_template_service),
):
    template, result, cancelled = await service.update_template(template_id, payload, now=as_of)
    return TemplateChangeResponse(
        template=ShiftTemplateResponse.model_validate(template),
        generation=result,
        cancelled=cancelled,
    )


@shift_template_router.post(
    "/{template_id}/deactivate",
    response_model=DeactivationResult,
    summary="Deactivate a shift template",
    responses={404: {"description": "Template not found"}},
    dependencies=[Depends(require_permissions(Permission.EDIT_SHIFTS, facility=template_facility))],
)
async def deactivate_template(
    template_id: str,
    as_of: Optional[datetime] = AS_OF_QUERY,
    service: ShiftTemplateService = Depends(get_template_service),
):
    cancelled = await service.deactivate_template(template_id, now=as_of)
    return DeactivationResult(template_id=template_id, cancelled=cancelled)


@shift_template_router.post(
    "/{template_id}/regenerate",
    response_model=GenerationResult,
    summary="Regenerate a template's shifts",
    responses={
        404: {"description": "Template not found"},
        409: {"description": "Template is inactive"},
    },
    dependencies=[Depends(require_permissions(Permission.CREATE_SHIFTS, facility=template_facility))],
)
async def regenerate_template(
    template_id: str,
    as_of: Optional[datetime] = AS_OF_QUERY,
    service: ShiftTemplateService = Depends(get_template_service),
):
    return await service.regenerate_template(template_id, now=as_of)


@shift_template_router.get(
    "/{template_id}/shifts",
    response_model=List[GeneratedShiftResponse],
    summary="List generated shifts for a template",
    responses={404: {"description": "Template not found"}},
    dependencies=[Depends(require_permissions(Permission.VIEW_SCHEDULES, facility=template_facility))],
)
async def list_generated_shifts(
    template_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    shift_status: Optional[ShiftStatus] = Query(None, alias="status"),
    service: ShiftTemplateService = Depends(get_template_service),
):
    return await service.list_generated_shifts(template_id, start=start, end=end, status=shift_status)


__all__ = ["shift_template_router"]
