"""NotificationService: WhatsApp messages for appointment events.

Messages are built inside the request (profiles and partners are read with the
request session) and sent afterwards by a detached task, so a slow or failing
Evolution API never delays or fails the booking itself.

Events fired
------------
- ``booked``       admins, assigned partner
- ``confirmed``    admins, assigned partner, client
- ``cancelled``    admins, assigned partner, client
- ``rescheduled``  admins, assigned partner, client
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.config.evolution import EvolutionConfig
from salonbook.core.exceptions import ConfigurationError, RemoteFailure
from salonbook.infra.database.repositories.partner import PartnerRepository
from salonbook.infra.database.repositories.profile import ProfileRepository
from salonbook.integrations.evolution import EvolutionClient
from salonbook.ledger.booking import format_time

logger = logging.getLogger(__name__)

EVENT_BOOKED = "booked"
EVENT_CONFIRMED = "confirmed"
EVENT_CANCELLED = "cancelled"
EVENT_RESCHEDULED = "rescheduled"

_STAFF_TITLES = {
    EVENT_BOOKED: "📋 *Novo Agendamento*",
    EVENT_CONFIRMED: "✅ *Agendamento Confirmado*",
    EVENT_CANCELLED: "❌ *Agendamento Cancelado*",
    EVENT_RESCHEDULED: "🔄 *Agendamento Reagendado*",
}
_PARTNER_TITLES = {
    EVENT_BOOKED: "📋 *Agendamento Atribuído a Você*",
}
_CLIENT_TITLES = {
    EVENT_CONFIRMED: "✅ *Seu agendamento está confirmado!*",
    EVENT_CANCELLED: "❌ *Seu agendamento foi cancelado*",
    EVENT_RESCHEDULED: "🔄 *Seu agendamento foi reagendado*",
}

# Strong refs so detached sends are not garbage-collected mid-flight
_pending: Set[asyncio.Task] = set()


@dataclass(frozen=True)
class OutboundMessage:
    phone: str
    text: str
    audience: str
    appointment_id: str


def format_date_br(value) -> str:
    return value.strftime("%d/%m/%Y")


def render_message(title: str, client_name: str, appointment, signature: str) -> str:
    return (
        f"{title}\n\n"
        f"👤 *Cliente:* {client_name}\n"
        f"💆 *Serviço:* {appointment.service_title}\n"
        f"📅 *Data:* {format_date_br(appointment.appointment_date)}\n"
        f"🕐 *Horário:* {format_time(appointment.appointment_time)}\n\n"
        f"_{signature}_"
    )


class NotificationService:
    def __init__(self, session: AsyncSession, config: EvolutionConfig) -> None:
        self._profiles = ProfileRepository(session)
        self._partners = PartnerRepository(session)
        self._config = config

    async def prepare(self, event: str, appointments: Iterable) -> List[OutboundMessage]:
        """Build every message *event* produces. Empty when notifications are off."""
        appointments = list(appointments)
        if not appointments or not self._config.can_notify:
            return []
        if event not in _STAFF_TITLES:
            raise ValueError(f"unknown notification event {event!r}")

        profiles = await self._profiles.by_users(a.user_id for a in appointments)
        partner_phones: Dict[object, Optional[str]] = {}
        for partner_id in {a.partner_id for a in appointments if a.partner_id}:
            partner = await self._partners.get_by_id(partner_id)
            partner_phones[partner_id] = partner.phone if partner else None

        signature = self._config.clinic_name
        messages: List[OutboundMessage] = []
        for appt in appointments:
            profile = profiles.get(appt.user_id)
            client_name = (profile.full_name if profile else None) or "Cliente"
            appt_id = str(appt.id)

            staff_text = render_message(_STAFF_TITLES[event], client_name, appt, signature)
            for phone in self._config.admin_phones:
                messages.append(OutboundMessage(phone, staff_text, "admin", appt_id))

            partner_phone = partner_phones.get(appt.partner_id)
            if partner_phone:
                title = _PARTNER_TITLES.get(event, _STAFF_TITLES[event])
                messages.append(
                    OutboundMessage(
                        partner_phone, render_message(title, client_name, appt, signature), "partner", appt_id
                    )
                )

            client_title = _CLIENT_TITLES.get(event)
            if client_title and profile is not None and profile.phone:
                messages.append(
                    OutboundMessage(
                        profile.phone,
                        render_message(client_title, client_name, appt, signature),
                        "client",
                        appt_id,
                    )
                )
        return messages


async def deliver(messages: List[OutboundMessage], config: EvolutionConfig) -> int:
    """Send *messages*. Never raises; returns how many went out."""
    if not messages:
        return 0
    try:
        client = EvolutionClient(config)
    except ConfigurationError as exc:
        logger.warning("NotificationService: client unavailable: %s", exc)
        return 0
    sent = 0
    for msg in messages:
        try:
            await client.send_text(msg.phone, msg.text)
            sent += 1
        except RemoteFailure as exc:
            logger.warning(
                "NotificationService: %s message for %s failed: %s",
                msg.audience, msg.appointment_id, exc,
                extra={"event": "notify_failed", "appointment_id": msg.appointment_id},
            )
        except Exception:
            logger.exception(
                "NotificationService: unexpected error sending %s message for %s",
                msg.audience, msg.appointment_id,
            )
    return sent


def schedule(messages: List[OutboundMessage], config: EvolutionConfig) -> Optional[asyncio.Task]:
    """Fire-and-forget delivery on the running loop."""
    if not messages:
        return None
    task = asyncio.create_task(deliver(messages, config))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task
