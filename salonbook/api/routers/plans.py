"""Plans API: create, list, progress, counter adjustments, admin edits and delete."""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.api.dependencies import get_actor, get_admin, get_session
from salonbook.api.schemas.plans import (
    NextSessionResponse,
    PlanAdjustRequest,
    PlanCreateRequest,
    PlanResponse,
    PlanUpdateRequest,
)
from salonbook.core.exceptions import ValidationError
from salonbook.services.access import Actor, ensure_owner
from salonbook.services.plan_service import PlanService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plans", tags=["plans"])


def plan_to_schema(p) -> PlanResponse:
    progress = PlanService.progress(p)
    return PlanResponse(
        id=p.id,
        user_id=p.user_id,
        service_slug=p.service_slug,
        service_title=p.service_title,
        plan_name=p.plan_name,
        total_sessions=p.total_sessions,
        completed_sessions=p.completed_sessions,
        status=p.status,
        created_by=p.created_by,
        created_by_user_id=p.created_by_user_id,
        notes=p.notes,
        remaining_sessions=progress.remaining,
        progress_percent=progress.percent,
        created_at=getattr(p, "created_at", None),
        updated_at=getattr(p, "updated_at", None),
    )


@router.get("", response_model=List[PlanResponse])
async def list_plans(
    user_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    """Newest first. Clients only see their own plans."""
    plans = await PlanService(session).list_plans(
        actor, user_id=user_id, status=status, skip=skip, limit=limit
    )
    return [plan_to_schema(p) for p in plans]


@router.post("", response_model=PlanResponse, status_code=201)
async def create_plan(
    body: PlanCreateRequest,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    user_id = body.user_id or actor.user_id
    if user_id is None:
        raise ValidationError("user_id is required", details={"field": "user_id"})
    ensure_owner(actor, user_id)
    plan = await PlanService(session).create_plan(
        user_id=user_id,
        service_slug=body.service_slug,
        service_title=body.service_title,
        plan_name=body.plan_name,
        total_sessions=body.total_sessions,
        created_by="admin" if actor.is_admin else "auto",
        created_by_user_id=actor.user_id if actor.is_admin else None,
        notes=body.notes,
    )
    return plan_to_schema(plan)


@router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    return plan_to_schema(await PlanService(session).get_plan(plan_id, actor))


@router.get("/{plan_id}/next-session", response_model=NextSessionResponse)
async def next_session(
    plan_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    svc = PlanService(session)
    plan = await svc.get_plan(plan_id, actor)
    return NextSessionResponse(plan_id=plan.id, session_number=await svc.next_session_number(plan))


@router.post("/{plan_id}/adjust", response_model=PlanResponse)
async def adjust_completed(
    plan_id: uuid.UUID,
    body: PlanAdjustRequest,
    _: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    """Move the completed counter by *delta*; the result is clamped to 0..total."""
    return plan_to_schema(await PlanService(session).adjust_completed(plan_id, body.delta))


@router.patch("/{plan_id}", response_model=PlanResponse)
async def edit_plan(
    plan_id: uuid.UUID,
    body: PlanUpdateRequest,
    _: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    patch = body.model_dump(exclude_unset=True)
    return plan_to_schema(await PlanService(session).edit_plan(plan_id, patch))


@router.delete("/{plan_id}", status_code=204)
async def delete_plan(
    plan_id: uuid.UUID,
    _: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    await PlanService(session).delete_plan(plan_id)
