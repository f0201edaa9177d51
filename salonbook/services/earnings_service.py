"""EarningsService: monthly partner totals and partner payouts."""
from __future__ import annotations

import datetime as _dt
import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.core.exceptions import NotFoundError, ValidationError
from salonbook.infra.database.models.payment import PartnerPayment
from salonbook.infra.database.repositories.appointment import AppointmentRepository
from salonbook.infra.database.repositories.partner import PartnerRepository
from salonbook.infra.database.repositories.payment import PartnerPaymentRepository
from salonbook.infra.database.repositories.plan import PlanRepository
from salonbook.infra.database.repositories.service_price import ServicePriceRepository
from salonbook.ledger import earnings, pricing

logger = logging.getLogger(__name__)


class EarningsService:
    def __init__(self, session: AsyncSession) -> None:
        self._appointments = AppointmentRepository(session)
        self._partners = PartnerRepository(session)
        self._payments = PartnerPaymentRepository(session)
        self._prices = ServicePriceRepository(session)
        self._plans = PlanRepository(session)

    async def partner_earnings(
        self, month: str, partner_id: Optional[UUID] = None
    ) -> List[earnings.PartnerEarnings]:
        """Recompute every partner's totals for *month* from the raw rows."""
        start, end = earnings.month_bounds(month)
        if partner_id is not None:
            partner = await self._partners.get_by_id(partner_id)
            if partner is None:
                raise NotFoundError(f"Partner {partner_id} not found")
            partners = [partner]
        else:
            partners = await self._partners.list_all()

        appointments = await self._appointments.for_month(start, end)
        payments = await self._payments.list_all(partner_id=partner_id, reference_month=month)
        rows = await self._prices.list_all()
        plans = await self._plans.get_many(a.plan_id for a in appointments)
        plan_names = {p.id: p.plan_name for p in plans}
        quotes: Dict[Tuple[str, Optional[str]], Optional[pricing.PriceQuote]] = {}

        def quote_for(slug: str, plan: Optional[str]) -> Optional[pricing.PriceQuote]:
            key = (slug, plan)
            if key not in quotes:
                quotes[key] = pricing.resolve_price(rows, slug, plan)
            return quotes[key]

        return earnings.earnings_report(
            partners, month, appointments, payments, quote_for, plan_names
        )

    async def list_payments(
        self, *, partner_id: Optional[UUID] = None, month: Optional[str] = None
    ) -> List[PartnerPayment]:
        if month:
            earnings.month_bounds(month)
        return await self._payments.list_all(partner_id=partner_id, reference_month=month)

    async def record_payment(
        self,
        *,
        partner_id: UUID,
        type: str,
        amount_cents: int,
        reference_month: str,
        description: Optional[str] = None,
        paid_at: Optional[_dt.date] = None,
    ) -> PartnerPayment:
        if type not in earnings.PAYMENT_TYPES:
            raise ValidationError(
                f"type must be one of {list(earnings.PAYMENT_TYPES)}", details={"field": "type"}
            )
        if amount_cents <= 0:
            raise ValidationError("amount_cents must be positive", details={"field": "amount_cents"})
        earnings.month_bounds(reference_month)
        if not await self._partners.exists(partner_id):
            raise NotFoundError(f"Partner {partner_id} not found")
        payment = await self._payments.create(
            {
                "partner_id": partner_id,
                "type": type,
                "amount_cents": amount_cents,
                "reference_month": reference_month,
                "description": description,
                "paid_at": paid_at or _dt.date.today(),
            }
        )
        logger.info(
            "EarningsService: %s %s to partner %s for %s",
            type, pricing.format_cents(amount_cents), partner_id, reference_month,
            extra={"event": "partner_payment", "partner_id": str(partner_id)},
        )
        return payment

    async def delete_payment(self, payment_id: UUID) -> None:
        if not await self._payments.delete(payment_id):
            raise NotFoundError(f"Partner payment {payment_id} not found")
