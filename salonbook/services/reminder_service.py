"""ReminderService: WhatsApp reminder about an hour before each confirmed session."""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.config.booking import BookingConfig
from salonbook.config.evolution import EvolutionConfig
from salonbook.core.exceptions import RemoteFailure
from salonbook.infra.database.repositories.appointment import AppointmentRepository
from salonbook.infra.database.repositories.profile import ProfileRepository
from salonbook.integrations.evolution import EvolutionClient
from salonbook.ledger.booking import format_time
from salonbook.services.notification_service import format_date_br

logger = logging.getLogger(__name__)

WINDOW_START = _dt.timedelta(minutes=45)
WINDOW_END = _dt.timedelta(minutes=75)


@dataclass(frozen=True)
class ReminderOutcome:
    appointment_id: str
    phone: Optional[str]
    success: bool
    reason: Optional[str] = None


def render_reminder(template: str, *, name: str, service: str, date: _dt.date, time: _dt.time) -> str:
    return (
        template.replace("{nome}", name)
        .replace("{servico}", service)
        .replace("{data}", format_date_br(date))
        .replace("{hora}", format_time(time))
    )


def reminder_window(now: _dt.datetime) -> Optional[tuple]:
    """(date, first time, last time) of bookings due a reminder, or None past midnight."""
    start = now + WINDOW_START
    if start.date() != now.date():
        return None
    end = now + WINDOW_END
    last = end.time() if end.date() == now.date() else _dt.time(23, 59, 59)
    return now.date(), start.time().replace(tzinfo=None), last.replace(tzinfo=None)


class ReminderService:
    def __init__(
        self,
        session: AsyncSession,
        booking: BookingConfig,
        evolution: EvolutionConfig,
        client: Optional[EvolutionClient] = None,
    ) -> None:
        self._repo = AppointmentRepository(session)
        self._profiles = ProfileRepository(session)
        self._booking = booking
        self._evolution = evolution
        self._client = client

    async def run(self, now: Optional[_dt.datetime] = None) -> List[ReminderOutcome]:
        if not (self._evolution.can_notify and self._evolution.reminder_enabled):
            logger.debug("ReminderService: reminders disabled")
            return []
        now = (now or self._booking.now()).astimezone(self._booking.tz)
        window = reminder_window(now)
        if window is None:
            return []
        due = await self._repo.due_reminders(*window)
        if not due:
            return []

        client = self._client or EvolutionClient(self._evolution)
        profiles = await self._profiles.by_users(a.user_id for a in due)
        outcomes: List[ReminderOutcome] = []
        for appt in due:
            profile = profiles.get(appt.user_id)
            if profile is None or not profile.phone:
                logger.info("ReminderService: skipping %s, client has no phone", appt.id)
                outcomes.append(ReminderOutcome(str(appt.id), None, False, "no_phone"))
                continue
            text = render_reminder(
                self._evolution.reminder_text,
                name=profile.full_name or "Cliente",
                service=appt.service_title,
                date=appt.appointment_date,
                time=appt.appointment_time,
            )
            try:
                number = await client.send_text(profile.phone, text)
            except RemoteFailure as exc:
                logger.warning(
                    "ReminderService: reminder for %s failed: %s", appt.id, exc,
                    extra={"event": "reminder_failed", "appointment_id": str(appt.id)},
                )
                outcomes.append(ReminderOutcome(str(appt.id), profile.phone, False, exc.code))
                continue
            await self._repo.apply(appt, {"reminder_sent": True})
            outcomes.append(ReminderOutcome(str(appt.id), number, True))
        logger.info(
            "ReminderService: %d/%d reminder(s) sent",
            sum(1 for o in outcomes if o.success), len(outcomes),
        )
        return outcomes
