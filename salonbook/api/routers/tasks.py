"""Scheduled tasks API: called by cron with the admin key."""
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.api.dependencies import (
    get_admin,
    get_booking_config,
    get_evolution_config,
    get_session,
)
from salonbook.api.schemas.tasks import CleanupResponse, ReminderItem, ReminderRunResponse
from salonbook.config import BookingConfig, EvolutionConfig
from salonbook.services.appointment_service import AppointmentService
from salonbook.services.reminder_service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"], dependencies=[Depends(get_admin)])


@router.post("/reminders", response_model=ReminderRunResponse)
async def send_reminders(
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
    evolution: EvolutionConfig = Depends(get_evolution_config),
):
    """Remind clients whose confirmed session starts in 45 to 75 minutes."""
    outcomes = await ReminderService(session, config, evolution).run()
    return ReminderRunResponse(
        reminders_sent=sum(1 for o in outcomes if o.success),
        results=[ReminderItem(**asdict(o)) for o in outcomes],
    )


@router.post("/cleanup-pending", response_model=CleanupResponse)
async def cleanup_pending(
    max_age_minutes: Optional[int] = Query(default=None, ge=1),
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
):
    """Cancel self-serve bookings left pending longer than the threshold."""
    cancelled = await AppointmentService(session, config).cleanup_stale_pending(max_age_minutes)
    return CleanupResponse(
        cancelled=len(cancelled),
        appointment_ids=[str(a.id) for a in cancelled],
    )
