"""PricingService: price table lookups, admin price edits and commissions."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.core.exceptions import NotFoundError, ValidationError
from salonbook.infra.database.models.service_price import ServicePrice
from salonbook.infra.database.repositories.appointment import AppointmentRepository
from salonbook.infra.database.repositories.partner import PartnerRepository
from salonbook.infra.database.repositories.plan import PlanRepository
from salonbook.infra.database.repositories.service_price import ServicePriceRepository
from salonbook.ledger import pricing
from salonbook.ledger.notes import BookingNotes

logger = logging.getLogger(__name__)


class PricingService:
    def __init__(self, session: AsyncSession) -> None:
        self._repo = ServicePriceRepository(session)
        self._appointments = AppointmentRepository(session)
        self._partners = PartnerRepository(session)
        self._plans = PlanRepository(session)

    async def price_for(self, service_slug: str, plan_name: Optional[str]) -> Optional[pricing.PriceQuote]:
        rows = await self._repo.for_service(service_slug)
        quote = pricing.resolve_price(rows, service_slug, plan_name)
        if quote is not None and quote.fallback:
            logger.info(
                "PricingService: no %r tier for %s, using cheapest tier %r",
                plan_name, service_slug, quote.plan_name,
            )
        return quote

    async def list_prices(self, service_slug: Optional[str] = None) -> List[ServicePrice]:
        return await self._repo.list_all(service_slug)

    async def upsert_price(
        self,
        *,
        service_slug: str,
        plan_name: str,
        sessions: int,
        price_per_session_cents: int,
    ) -> Tuple[ServicePrice, bool]:
        """Create or update one tier. The total is always per-session x sessions."""
        if not service_slug or not (plan_name or "").strip():
            raise ValidationError("service_slug and plan_name are required")
        total = pricing.total_for(price_per_session_cents, sessions)
        row, created = await self._repo.upsert(
            {"service_slug": service_slug, "plan_name": plan_name.strip()},
            {
                "sessions": sessions,
                "price_per_session_cents": price_per_session_cents,
                "total_price_cents": total,
            },
        )
        logger.info(
            "PricingService: %s %s/%s = %s",
            "created" if created else "updated", service_slug, row.plan_name,
            pricing.format_cents(total),
        )
        return row, created

    async def delete_price(self, price_id: UUID) -> None:
        if not await self._repo.delete(price_id):
            raise NotFoundError(f"Price {price_id} not found")

    async def session_price(self, appointment) -> int:
        notes = BookingNotes.parse(appointment.notes)
        if notes.price_cents is not None:
            return notes.price_cents
        plan_name = None
        if not notes.plan and appointment.plan_id is not None:
            plan = await self._plans.get_by_id(appointment.plan_id)
            plan_name = plan.plan_name if plan is not None else None
        quote = await self.price_for(appointment.service_slug, pricing.tier_label(notes, plan_name))
        return pricing.session_price_cents(notes, quote)

    async def commission_for(self, partner_id: UUID, appointment_id: UUID) -> int:
        partner = await self._partners.get_by_id(partner_id)
        if partner is None:
            raise NotFoundError(f"Partner {partner_id} not found")
        appt = await self._appointments.get_by_id(appointment_id)
        if appt is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        if not pricing.earns_commission(appt.status, appt.partner_id, partner.id):
            return 0
        price = await self.session_price(appt)
        return pricing.commission_cents(price, float(partner.commission_pct or 0))
