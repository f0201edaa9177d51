"""Appointments API: book, list, availability, lifecycle transitions, price and partner edits."""
from __future__ import annotations

import datetime as _dt
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.api.dependencies import (
    get_actor,
    get_admin,
    get_booking_config,
    get_evolution_config,
    get_session,
)
from salonbook.api.schemas.appointments import (
    AppointmentResponse,
    AvailabilityResponse,
    BookRequest,
    CompleteSessionResponse,
    PartnerAssignRequest,
    PriceMarkRequest,
    RescheduleRequest,
)
from salonbook.config import BookingConfig, EvolutionConfig
from salonbook.core.exceptions import ValidationError
from salonbook.ledger import booking as rules
from salonbook.ledger.notes import BookingNotes
from salonbook.services.access import Actor, ensure_owner
from salonbook.services.appointment_service import AppointmentService
from salonbook.services.notification_service import NotificationService, schedule

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])


# ── Helpers ───────────────────────────────────────────────────────────────────

def appointment_to_schema(a) -> AppointmentResponse:
    notes = BookingNotes.parse(a.notes)
    return AppointmentResponse(
        id=a.id,
        user_id=a.user_id,
        service_slug=a.service_slug,
        service_title=a.service_title,
        appointment_date=a.appointment_date,
        appointment_time=rules.format_time(a.appointment_time),
        status=a.status,
        partner_id=a.partner_id,
        plan_id=a.plan_id,
        session_number=a.session_number,
        notes=notes.to_dict(),
        rescheduled=notes.rescheduled,
        price_cents=notes.price_cents,
        reminder_sent=bool(a.reminder_sent),
        created_at=getattr(a, "created_at", None),
        updated_at=getattr(a, "updated_at", None),
    )


def slot_time(value: str) -> _dt.time:
    parsed = rules.parse_time(value or "")
    if parsed is None:
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM", details={"field": "appointment_time"})
    return parsed


async def notify_after_commit(
    session: AsyncSession, evolution: EvolutionConfig, event: str, appointments
) -> None:
    messages = await NotificationService(session, evolution).prepare(event, appointments)
    await session.commit()
    schedule(messages, evolution)


# ── Endpoints ─────────────────────────────────────────────────────────────────

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    user_id: Optional[uuid.UUID] = None,
    partner_id: Optional[uuid.UUID] = None,
    plan_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
    date_from: Optional[_dt.date] = Query(default=None),
    date_to: Optional[_dt.date] = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
):
    """Admins see everything; clients only their own bookings. Ordered by date, then time."""
    svc = AppointmentService(session, config)
    items = await svc.list_appointments(
        actor,
        user_id=user_id,
        partner_id=partner_id,
        plan_id=plan_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=limit,
    )
    return [appointment_to_schema(a) for a in items]


# Registered before /{appointment_id} so "availability" is not parsed as a UUID
@router.get("/availability", response_model=AvailabilityResponse)
async def availability(
    date: _dt.date,
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
):
    slots = await AppointmentService(session, config).available_slots(date)
    return AvailabilityResponse(date=date, slots=[rules.format_time(t) for t in slots])


@router.post("", response_model=AppointmentResponse, status_code=201)
async def book(
    body: BookRequest,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
    evolution: EvolutionConfig = Depends(get_evolution_config),
):
    """Self-serve booking for the caller, or an admin booking for any client."""
    user_id = body.user_id or actor.user_id
    if user_id is None:
        raise ValidationError("user_id is required", details={"field": "user_id"})
    ensure_owner(actor, user_id)
    source = rules.SOURCE_ADMIN if actor.is_admin else rules.SOURCE_SELF_SERVE

    notes = {}
    if body.notes:
        notes["text"] = body.notes
    if body.price_cents is not None:
        notes["price_cents"] = body.price_cents
    if body.plan_label:
        notes["plan"] = body.plan_label

    appt = await AppointmentService(session, config).book(
        user_id=user_id,
        service_slug=body.service_slug,
        service_title=body.service_title,
        date=body.appointment_date,
        time=slot_time(body.appointment_time),
        source=source,
        partner_id=body.partner_id if actor.is_admin else None,
        plan_id=body.plan_id,
        session_number=body.session_number,
        notes=notes,
    )
    await notify_after_commit(session, evolution, "booked", [appt])
    return appointment_to_schema(appt)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    appt = await AppointmentService(session).get_appointment(appointment_id, actor)
    return appointment_to_schema(appt)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel(
    appointment_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
    evolution: EvolutionConfig = Depends(get_evolution_config),
):
    appt, outcome = await AppointmentService(session).cancel(appointment_id, actor)
    if outcome == "ok":
        await notify_after_commit(session, evolution, "cancelled", [appt])
    return appointment_to_schema(appt)


@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
async def confirm(
    appointment_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
    evolution: EvolutionConfig = Depends(get_evolution_config),
):
    appt = await AppointmentService(session).confirm(appointment_id, actor)
    await notify_after_commit(session, evolution, "confirmed", [appt])
    return appointment_to_schema(appt)


@router.post("/{appointment_id}/complete", response_model=CompleteSessionResponse)
async def complete_session(
    appointment_id: uuid.UUID,
    actor: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    appt, plan = await AppointmentService(session).complete_session(appointment_id, actor)
    return CompleteSessionResponse(
        appointment=appointment_to_schema(appt),
        plan_completed_sessions=plan.completed_sessions if plan else None,
        plan_status=plan.status if plan else None,
    )


@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
async def reschedule(
    appointment_id: uuid.UUID,
    body: RescheduleRequest,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
    evolution: EvolutionConfig = Depends(get_evolution_config),
):
    appt = await AppointmentService(session, config).reschedule(
        appointment_id, body.appointment_date, slot_time(body.appointment_time), actor
    )
    await notify_after_commit(session, evolution, "rescheduled", [appt])
    return appointment_to_schema(appt)


@router.put("/{appointment_id}/price", response_model=AppointmentResponse)
async def mark_price(
    appointment_id: uuid.UUID,
    body: PriceMarkRequest,
    actor: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    appt = await AppointmentService(session).mark_price(
        appointment_id,
        body.price_cents,
        body.plan_label,
        actor,
        original_price_cents=body.original_price_cents,
    )
    return appointment_to_schema(appt)


@router.put("/{appointment_id}/partner", response_model=AppointmentResponse)
async def assign_partner(
    appointment_id: uuid.UUID,
    body: PartnerAssignRequest,
    actor: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    appt = await AppointmentService(session).assign_partner(appointment_id, body.partner_id, actor)
    return appointment_to_schema(appt)


@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: uuid.UUID,
    actor: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    await AppointmentService(session).delete(appointment_id, actor)
