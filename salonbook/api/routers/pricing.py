"""Pricing API: price table, quotes and commissions."""
from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.api.dependencies import get_admin, get_session
from salonbook.api.schemas.pricing import (
    CommissionResponse,
    PriceResponse,
    PriceUpsertRequest,
    QuoteResponse,
)
from salonbook.core.exceptions import NotFoundError, ValidationError
from salonbook.ledger.pricing import format_cents, parse_brl
from salonbook.services.access import Actor
from salonbook.services.pricing_service import PricingService

router = APIRouter(prefix="/pricing", tags=["pricing"])


def _to_schema(row) -> PriceResponse:
    return PriceResponse(
        id=row.id,
        service_slug=row.service_slug,
        plan_name=row.plan_name,
        sessions=row.sessions,
        price_per_session_cents=row.price_per_session_cents,
        total_price_cents=row.total_price_cents,
        total_formatted=format_cents(row.total_price_cents),
    )


@router.get("/prices", response_model=List[PriceResponse])
async def list_prices(
    service_slug: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    return [_to_schema(r) for r in await PricingService(session).list_prices(service_slug)]


@router.get("/quote", response_model=QuoteResponse)
async def quote(
    service_slug: str,
    plan_name: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    """Exact tier when it exists, else the cheapest tier of the service (``fallback``)."""
    q = await PricingService(session).price_for(service_slug, plan_name)
    if q is None:
        raise NotFoundError(f"No prices for {service_slug}", details={"service_slug": service_slug})
    return QuoteResponse(
        service_slug=q.service_slug,
        plan_name=q.plan_name,
        sessions=q.sessions,
        per_session_cents=q.per_session_cents,
        total_cents=q.total_cents,
        fallback=q.fallback,
        per_session_formatted=format_cents(q.per_session_cents),
        total_formatted=format_cents(q.total_cents),
    )


@router.put("/prices", response_model=PriceResponse)
async def upsert_price(
    body: PriceUpsertRequest,
    _: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    cents = body.price_per_session_cents
    if cents is None:
        if body.price_per_session is None:
            raise ValidationError("price_per_session_cents or price_per_session is required")
        cents = parse_brl(body.price_per_session)
    row, _created = await PricingService(session).upsert_price(
        service_slug=body.service_slug,
        plan_name=body.plan_name,
        sessions=body.sessions,
        price_per_session_cents=cents,
    )
    return _to_schema(row)


@router.delete("/prices/{price_id}", status_code=204)
async def delete_price(
    price_id: uuid.UUID,
    _: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    await PricingService(session).delete_price(price_id)


@router.get("/commission", response_model=CommissionResponse)
async def commission(
    partner_id: uuid.UUID,
    appointment_id: uuid.UUID,
    _: Actor = Depends(get_admin),
    session: AsyncSession = Depends(get_session),
):
    cents = await PricingService(session).commission_for(partner_id, appointment_id)
    return CommissionResponse(
        partner_id=partner_id,
        appointment_id=appointment_id,
        commission_cents=cents,
        commission_formatted=format_cents(cents),
    )
