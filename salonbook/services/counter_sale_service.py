"""CounterSaleService: walk-in sales registered by an admin at the front desk.

A sale holds one or more items. A ``plan`` item opens a Plan and books its
first session; a ``single`` item books one unlinked session. Items take
consecutive slots starting at the chosen time. Every booking is confirmed and
carries the price charged. A paid Payment closes the sale when its total is
positive. Everything runs in the caller's transaction.
"""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.config.booking import BookingConfig
from salonbook.core.exceptions import ValidationError
from salonbook.infra.database.models.appointment import Appointment
from salonbook.infra.database.models.payment import Payment
from salonbook.infra.database.models.plan import Plan
from salonbook.infra.database.repositories.payment import PaymentRepository
from salonbook.infra.database.repositories.service_price import ServicePriceRepository
from salonbook.ledger import booking as rules
from salonbook.ledger import pricing
from salonbook.services.access import Actor, require_admin
from salonbook.services.appointment_service import AppointmentService
from salonbook.services.plan_service import PlanService

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("dinheiro", "pix", "credito", "debito", "outro")
ITEM_PLAN = "plan"
ITEM_SINGLE = "single"


@dataclass(frozen=True)
class SaleItem:
    service_slug: str
    service_title: str
    kind: str = ITEM_SINGLE
    plan_name: Optional[str] = None
    price_cents: Optional[int] = None
    """Overrides the table price (whole item) when set."""


@dataclass
class SaleResult:
    plans: List[Plan] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)
    payment: Optional[Payment] = None
    total_cents: int = 0


class CounterSaleService:
    def __init__(self, session: AsyncSession, config: Optional[BookingConfig] = None) -> None:
        self._config = config or BookingConfig()
        self._appointments = AppointmentService(session, self._config)
        self._plans = PlanService(session)
        self._prices = ServicePriceRepository(session)
        self._payments = PaymentRepository(session)

    async def _quote(self, item: SaleItem) -> pricing.PriceQuote:
        rows = await self._prices.for_service(item.service_slug)
        if item.kind == ITEM_SINGLE and not item.plan_name:
            singles = [r for r in rows if r.sessions == 1]
            quote = pricing.resolve_price(singles or rows, item.service_slug, None)
        else:
            quote = pricing.resolve_price(rows, item.service_slug, item.plan_name)
        if quote is None:
            raise ValidationError(
                f"No price configured for {item.service_slug}",
                details={"service_slug": item.service_slug},
            )
        if item.kind == ITEM_PLAN and quote.fallback:
            raise ValidationError(
                f"No {item.plan_name!r} plan for {item.service_slug}",
                details={"service_slug": item.service_slug, "plan_name": item.plan_name},
            )
        return quote

    def _slots_from(self, start: _dt.time, count: int) -> List[_dt.time]:
        grid = rules.slot_grid(self._config)
        if start not in grid:
            raise ValidationError(f"{rules.format_time(start)} is not a bookable time", details={"field": "time"})
        idx = grid.index(start)
        slots = grid[idx : idx + count]
        if len(slots) < count:
            raise ValidationError(
                f"Not enough slots after {rules.format_time(start)} for {count} item(s)",
                details={"field": "time"},
            )
        return slots

    async def register_sale(
        self,
        actor: Actor,
        *,
        user_id: UUID,
        items: Sequence[SaleItem],
        date: _dt.date,
        time: _dt.time,
        payment_method: str,
        partner_id: Optional[UUID] = None,
        notes: Optional[str] = None,
    ) -> SaleResult:
        require_admin(actor)
        if not items:
            raise ValidationError("A sale needs at least one item", details={"field": "items"})
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                f"payment_method must be one of {list(PAYMENT_METHODS)}",
                details={"field": "payment_method"},
            )
        for item in items:
            if item.kind not in (ITEM_PLAN, ITEM_SINGLE):
                raise ValidationError(f"Unknown item kind {item.kind!r}", details={"field": "kind"})
            if item.price_cents is not None and item.price_cents < 0:
                raise ValidationError("price_cents must not be negative", details={"field": "price_cents"})

        result = SaleResult()
        lines: List[Dict[str, Any]] = []
        for item, slot in zip(items, self._slots_from(time, len(items))):
            quote = await self._quote(item)
            item_total = item.price_cents if item.price_cents is not None else quote.total_cents
            if item.kind == ITEM_PLAN:
                per_session = item_total // quote.sessions
            else:
                per_session = item_total
            snapshot: Dict[str, Any] = {"price_cents": per_session, "plan": quote.plan_name}
            if item.price_cents is not None and item.price_cents != quote.total_cents:
                snapshot["custom_price"] = True
                snapshot["original_price_cents"] = quote.per_session_cents
            if notes:
                snapshot["text"] = notes

            plan = None
            if item.kind == ITEM_PLAN:
                plan = await self._plans.create_plan(
                    user_id=user_id,
                    service_slug=item.service_slug,
                    service_title=item.service_title,
                    plan_name=quote.plan_name,
                    total_sessions=quote.sessions,
                    created_by="admin",
                    created_by_user_id=actor.user_id,
                )
                result.plans.append(plan)
            appt = await self._appointments.book(
                user_id=user_id,
                service_slug=item.service_slug,
                service_title=item.service_title,
                date=date,
                time=slot,
                source=rules.SOURCE_COUNTER,
                partner_id=partner_id,
                plan_id=plan.id if plan else None,
                session_number=1 if plan else None,
                notes=snapshot,
            )
            result.appointments.append(appt)
            result.total_cents += item_total
            lines.append(
                {
                    "service_slug": item.service_slug,
                    "service_title": item.service_title,
                    "kind": item.kind,
                    "plan_name": quote.plan_name,
                    "sessions": quote.sessions if plan else 1,
                    "price_cents": item_total,
                    "appointment_id": str(appt.id),
                    "plan_id": str(plan.id) if plan else None,
                }
            )

        if result.total_cents > 0:
            result.payment = await self._payments.create(
                {
                    "user_id": user_id,
                    "appointment_id": result.appointments[0].id,
                    "method": payment_method,
                    "amount_cents": result.total_cents,
                    "status": "paid",
                    "meta": {"source": "counter_sale", "items": lines},
                }
            )
        logger.info(
            "CounterSaleService: sale for user %s: %d item(s), %s via %s",
            user_id, len(items), pricing.format_cents(result.total_cents), payment_method,
            extra={"event": "counter_sale", "user_id": str(user_id)},
        )
        return result
