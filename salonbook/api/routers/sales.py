"""Counter sales API: register a walk-in sale in one transaction."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.api.dependencies import (
    get_admin,
    get_booking_config,
    get_evolution_config,
    get_session,
)
from salonbook.api.routers.appointments import appointment_to_schema, notify_after_commit, slot_time
from salonbook.api.routers.plans import plan_to_schema
from salonbook.api.schemas.sales import SaleRequest, SaleResponse
from salonbook.config import BookingConfig, EvolutionConfig
from salonbook.ledger.pricing import format_cents
from salonbook.services.access import Actor
from salonbook.services.counter_sale_service import CounterSaleService, SaleItem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["sales"])


@router.post("", response_model=SaleResponse, status_code=201)
async def register_sale(
    body: SaleRequest,
    actor: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
    evolution: EvolutionConfig = Depends(get_evolution_config),
):
    items = [SaleItem(**item.model_dump()) for item in body.items]
    result = await CounterSaleService(session, config).register_sale(
        actor,
        user_id=body.user_id,
        items=items,
        date=body.appointment_date,
        time=slot_time(body.appointment_time),
        payment_method=body.payment_method,
        partner_id=body.partner_id,
        notes=body.notes,
    )
    await notify_after_commit(session, evolution, "booked", result.appointments)
    return SaleResponse(
        plans=[plan_to_schema(p) for p in result.plans],
        appointments=[appointment_to_schema(a) for a in result.appointments],
        payment_id=result.payment.id if result.payment else None,
        total_cents=result.total_cents,
        total_formatted=format_cents(result.total_cents),
    )
