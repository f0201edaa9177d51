"""AppointmentService: booking, lifecycle transitions and slot availability."""
from __future__ import annotations

import datetime as _dt
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.config.booking import BookingConfig
from salonbook.core.exceptions import (
    NotFoundError,
    SessionClaimedError,
    SlotTakenError,
    ValidationError,
)
from salonbook.infra.database.models.appointment import SESSION_INDEX, SLOT_INDEX, Appointment
from salonbook.infra.database.models.plan import Plan
from salonbook.infra.database.repositories.appointment import AppointmentRepository
from salonbook.infra.database.repositories.partner import PartnerRepository
from salonbook.infra.database.repositories.plan import PlanRepository
from salonbook.ledger import booking as rules
from salonbook.ledger import plans as plan_rules
from salonbook.ledger.notes import merge_notes
from salonbook.services.access import Actor, ensure_owner, require_admin

logger = logging.getLogger(__name__)

_GUARDS = (SLOT_INDEX, SESSION_INDEX)


def _slot_taken(date: _dt.date, time: _dt.time) -> SlotTakenError:
    return SlotTakenError(
        f"{date.isoformat()} {rules.format_time(time)} is already booked",
        details={"date": date.isoformat(), "time": rules.format_time(time)},
    )


def _session_claimed(plan_id: UUID, session_number: int) -> SessionClaimedError:
    return SessionClaimedError(
        f"Session {session_number} of plan {plan_id} is already scheduled",
        details={"plan_id": str(plan_id), "session_number": session_number},
    )


def _raise_for(violation: Optional[str], data: Mapping[str, Any]) -> None:
    if violation == SLOT_INDEX:
        raise _slot_taken(data["appointment_date"], data["appointment_time"])
    if violation == SESSION_INDEX:
        raise _session_claimed(data["plan_id"], data["session_number"])


class AppointmentService:
    def __init__(self, session: AsyncSession, config: Optional[BookingConfig] = None) -> None:
        self._repo = AppointmentRepository(session)
        self._plans = PlanRepository(session)
        self._partners = PartnerRepository(session)
        self._config = config or BookingConfig()

    async def get_appointment(self, id: UUID, actor: Optional[Actor] = None) -> Appointment:
        appt = await self._repo.get_by_id(id)
        if appt is None:
            raise NotFoundError(f"Appointment {id} not found", details={"appointment_id": str(id)})
        if actor is not None:
            ensure_owner(actor, appt.user_id)
        return appt

    async def _resolve_plan_session(
        self,
        plan_id: Optional[UUID],
        session_number: Optional[int],
        *,
        user_id: UUID,
        service_slug: str,
        exclude_id: Optional[UUID] = None,
    ) -> Tuple[Optional[Plan], Optional[int]]:
        if plan_id is None:
            if session_number is not None:
                raise ValidationError(
                    "session_number requires plan_id", details={"field": "session_number"}
                )
            return None, None
        plan = await self._plans.get_by_id(plan_id)
        if plan is None:
            raise NotFoundError(f"Plan {plan_id} not found", details={"plan_id": str(plan_id)})
        if plan.user_id != user_id:
            raise ValidationError(
                f"Plan {plan_id} belongs to another client",
                details={"plan_id": str(plan_id), "field": "plan_id"},
            )
        if plan.service_slug != service_slug:
            raise ValidationError(
                f"Plan {plan_id} is for {plan.service_slug}, not {service_slug}",
                details={"plan_id": str(plan_id), "field": "service_slug"},
            )
        claimed = await self._repo.claimed_sessions(plan_id, exclude_id=exclude_id)
        if session_number is None:
            session_number = plan_rules.next_session_number(plan.total_sessions, claimed)
            if session_number is None:
                raise ValidationError(
                    f"All {plan.total_sessions} sessions of plan {plan_id} are already scheduled",
                    details={"plan_id": str(plan_id)},
                )
            return plan, session_number
        plan_rules.check_session_number(session_number, plan.total_sessions)
        if session_number in claimed:
            raise _session_claimed(plan_id, session_number)
        return plan, session_number

    async def book(
        self,
        *,
        user_id: UUID,
        service_slug: str,
        service_title: str,
        date: _dt.date,
        time: _dt.time,
        source: str = rules.SOURCE_SELF_SERVE,
        partner_id: Optional[UUID] = None,
        plan_id: Optional[UUID] = None,
        session_number: Optional[int] = None,
        notes: Union[str, Mapping[str, Any], None] = None,
        now: Optional[_dt.datetime] = None,
    ) -> Appointment:
        """Create a booking on a free slot.

        Self-serve bookings start ``pending`` and must lie inside the advance
        window; admin and counter-sale bookings start ``confirmed``.
        *notes* may be free text or a dict merged into the notes payload.
        """
        rules.validate_slot(
            date, time, self._config,
            self_serve=source == rules.SOURCE_SELF_SERVE,
            now=now,
        )
        if partner_id is not None and not await self._partners.exists(partner_id):
            raise NotFoundError(f"Partner {partner_id} not found", details={"partner_id": str(partner_id)})
        _, session_number = await self._resolve_plan_session(
            plan_id, session_number, user_id=user_id, service_slug=service_slug
        )

        if await self._repo.find_active_at(date, time) is not None:
            raise _slot_taken(date, time)

        if isinstance(notes, Mapping):
            notes = merge_notes(None, notes)
        data = {
            "user_id": user_id,
            "service_slug": service_slug,
            "service_title": service_title,
            "appointment_date": date,
            "appointment_time": time,
            "status": rules.initial_status(source),
            "partner_id": partner_id,
            "plan_id": plan_id,
            "session_number": session_number,
            "notes": notes or None,
            "reminder_sent": False,
        }
        appt, violation = await self._repo.create_guarded(data, _GUARDS)
        _raise_for(violation, data)
        logger.info(
            "AppointmentService: booked %s %s %s for user %s (source=%s status=%s)",
            appt.id, date, rules.format_time(time), user_id, source, appt.status,
            extra={"event": "booked", "appointment_id": str(appt.id), "plan_id": str(plan_id) if plan_id else None},
        )
        return appt

    async def _transition(self, appt: Appointment, target: str) -> Appointment:
        rules.check_transition(appt.status, target)
        previous = appt.status
        appt = await self._repo.apply(appt, {"status": target})
        logger.info(
            "AppointmentService: %s %s -> %s",
            appt.id, previous, target,
            extra={"event": target, "appointment_id": str(appt.id)},
        )
        return appt

    async def cancel(self, id: UUID, actor: Actor) -> Tuple[Appointment, str]:
        """Returns (appointment, outcome) where outcome is "ok" | "already_cancelled".

        Plan counters are not touched; the slot and session number become free.
        """
        appt = await self.get_appointment(id, actor)
        if appt.status == rules.CANCELLED:
            return appt, "already_cancelled"
        return await self._transition(appt, rules.CANCELLED), "ok"

    async def confirm(self, id: UUID, actor: Actor) -> Appointment:
        appt = await self.get_appointment(id, actor)
        return await self._transition(appt, rules.CONFIRMED)

    async def complete_session(self, id: UUID, actor: Actor) -> Tuple[Appointment, Optional[Plan]]:
        """Mark a confirmed appointment done and count it on its plan, if any."""
        require_admin(actor)
        appt = await self.get_appointment(id)
        appt = await self._transition(appt, rules.COMPLETED)
        plan = None
        if appt.plan_id is not None:
            plan = await self._plans.get_for_update(appt.plan_id)
            if plan is None:
                logger.warning(
                    "AppointmentService: appointment %s references missing plan %s",
                    appt.id, appt.plan_id,
                )
            else:
                completed, status = plan_rules.adjust_completed(
                    plan.completed_sessions, plan.total_sessions, 1
                )
                plan = await self._plans.apply(plan, {"completed_sessions": completed, "status": status})
        return appt, plan

    async def reschedule(
        self,
        id: UUID,
        new_date: _dt.date,
        new_time: _dt.time,
        actor: Actor,
        *,
        now: Optional[_dt.datetime] = None,
    ) -> Appointment:
        """Move the booking in place. Plan link, session number and notes survive."""
        appt = await self.get_appointment(id, actor)
        if appt.status not in (rules.PENDING, rules.CONFIRMED):
            raise ValidationError(
                f"Cannot reschedule a {appt.status} appointment",
                details={"status": appt.status},
            )
        rules.validate_slot(new_date, new_time, self._config, self_serve=not actor.is_admin, now=now)
        if await self._repo.find_active_at(new_date, new_time, exclude_id=appt.id) is not None:
            raise _slot_taken(new_date, new_time)

        data = {
            "appointment_date": new_date,
            "appointment_time": new_time,
            "notes": merge_notes(appt.notes, {"rescheduled": True}),
            "reminder_sent": False,
        }
        violation = await self._repo.apply_guarded(appt, data, _GUARDS)
        if violation is not None:
            _raise_for(violation, {**data, "plan_id": appt.plan_id, "session_number": appt.session_number})
        logger.info(
            "AppointmentService: rescheduled %s to %s %s",
            appt.id, new_date, rules.format_time(new_time),
            extra={"event": "rescheduled", "appointment_id": str(appt.id)},
        )
        return appt

    async def delete(self, id: UUID, actor: Actor) -> None:
        require_admin(actor)
        if not await self._repo.delete(id):
            raise NotFoundError(f"Appointment {id} not found", details={"appointment_id": str(id)})
        logger.info("AppointmentService: deleted %s", id, extra={"appointment_id": str(id)})

    async def mark_price(
        self,
        id: UUID,
        price_cents: int,
        plan_label: Optional[str],
        actor: Actor,
        *,
        original_price_cents: Optional[int] = None,
    ) -> Appointment:
        """Store the price charged for this booking in its notes."""
        require_admin(actor)
        if isinstance(price_cents, bool) or not isinstance(price_cents, int) or price_cents < 0:
            raise ValidationError("price_cents must be a non-negative integer", details={"field": "price_cents"})
        appt = await self.get_appointment(id)
        patch: Dict[str, Any] = {"price_cents": price_cents}
        if plan_label:
            patch["plan"] = plan_label
        if original_price_cents is not None and original_price_cents != price_cents:
            patch["original_price_cents"] = original_price_cents
            patch["custom_price"] = True
        return await self._repo.apply(appt, {"notes": merge_notes(appt.notes, patch)})

    async def assign_partner(self, id: UUID, partner_id: Optional[UUID], actor: Actor) -> Appointment:
        require_admin(actor)
        appt = await self.get_appointment(id)
        if partner_id is not None and not await self._partners.exists(partner_id):
            raise NotFoundError(f"Partner {partner_id} not found", details={"partner_id": str(partner_id)})
        appt = await self._repo.apply(appt, {"partner_id": partner_id})
        logger.info(
            "AppointmentService: %s partner=%s", appt.id, partner_id,
            extra={"appointment_id": str(appt.id), "partner_id": str(partner_id) if partner_id else None},
        )
        return appt

    async def available_slots(self, date: _dt.date) -> List[_dt.time]:
        taken = await self._repo.taken_times(date)
        return rules.free_slots(rules.slot_grid(self._config), taken)

    async def cleanup_stale_pending(
        self,
        max_age_minutes: Optional[int] = None,
        *,
        now: Optional[_dt.datetime] = None,
    ) -> List[Appointment]:
        """Cancel pending bookings that were never confirmed."""
        minutes = max_age_minutes if max_age_minutes is not None else self._config.stale_pending_minutes
        if minutes < 1:
            raise ValidationError("max_age_minutes must be >= 1", details={"field": "max_age_minutes"})
        now = now or _dt.datetime.now(_dt.timezone.utc)
        stale = await self._repo.stale_pending(now - _dt.timedelta(minutes=minutes))
        stale = [await self._transition(appt, rules.CANCELLED) for appt in stale]
        if stale:
            logger.info("AppointmentService: cancelled %d stale pending appointment(s)", len(stale))
        return stale

    async def list_appointments(
        self,
        actor: Actor,
        *,
        user_id: Optional[UUID] = None,
        partner_id: Optional[UUID] = None,
        plan_id: Optional[UUID] = None,
        status: Optional[str] = None,
        date_from: Optional[_dt.date] = None,
        date_to: Optional[_dt.date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Appointment]:
        if not actor.is_admin:
            if actor.user_id is None:
                require_admin(actor)
            user_id = actor.user_id
        if status and status not in rules.STATUSES:
            raise ValidationError(f"Unknown status {status!r}", details={"field": "status"})
        return await self._repo.list_all(
            user_id=user_id,
            partner_id=partner_id,
            plan_id=plan_id,
            status=status,
            date_from=date_from,
            date_to=date_to,
            skip=skip,
            limit=limit,
        )
