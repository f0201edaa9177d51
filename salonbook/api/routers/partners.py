"""Partners API: partner records, monthly earnings and payouts (admin only)."""
from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.api.dependencies import get_admin, get_session
from salonbook.api.schemas.partners import (
    EarningsResponse,
    PartnerCreateRequest,
    PartnerPaymentCreateRequest,
    PartnerPaymentResponse,
    PartnerResponse,
    PartnerUpdateRequest,
)
from salonbook.ledger.pricing import format_cents
from salonbook.services.earnings_service import EarningsService
from salonbook.services.partner_service import PartnerService

router = APIRouter(prefix="/partners", tags=["partners"], dependencies=[Depends(get_admin)])


def _to_schema(p) -> PartnerResponse:
    return PartnerResponse(
        id=p.id,
        user_id=p.user_id,
        full_name=p.full_name,
        phone=p.phone,
        commission_pct=float(p.commission_pct or 0),
        salary_cents=p.salary_cents or 0,
        is_active=p.is_active,
        work_days=list(p.work_days or []),
        work_start=p.work_start,
        work_end=p.work_end,
    )


def _earnings_schema(e) -> EarningsResponse:
    return EarningsResponse(
        partner_id=e.partner_id,
        full_name=e.full_name,
        month=e.month,
        sessions=e.sessions,
        commission_cents=e.commission_cents,
        salary_cents=e.salary_cents,
        paid_cents=e.paid_cents,
        balance_cents=e.balance_cents,
        balance_formatted=format_cents(e.balance_cents),
    )


@router.get("", response_model=List[PartnerResponse])
async def list_partners(
    active_only: bool = False,
    session: AsyncSession = Depends(get_session),
):
    return [_to_schema(p) for p in await PartnerService(session).list_partners(active_only=active_only)]


@router.post("", response_model=PartnerResponse, status_code=201)
async def create_partner(
    body: PartnerCreateRequest,
    session: AsyncSession = Depends(get_session),
):
    return _to_schema(await PartnerService(session).create_partner(body.model_dump()))


# Registered before /{partner_id} so "earnings" is not parsed as a UUID
@router.get("/earnings", response_model=List[EarningsResponse])
async def earnings(
    month: str,
    partner_id: Optional[uuid.UUID] = None,
    session: AsyncSession = Depends(get_session),
):
    """Recomputed from appointments, prices and payouts on every call."""
    rows = await EarningsService(session).partner_earnings(month, partner_id)
    return [_earnings_schema(e) for e in rows]


@router.get("/payments", response_model=List[PartnerPaymentResponse])
async def list_payments(
    partner_id: Optional[uuid.UUID] = None,
    month: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    return await EarningsService(session).list_payments(partner_id=partner_id, month=month)


@router.delete("/payments/{payment_id}", status_code=204)
async def delete_payment(
    payment_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    await EarningsService(session).delete_payment(payment_id)


@router.get("/{partner_id}", response_model=PartnerResponse)
async def get_partner(
    partner_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    return _to_schema(await PartnerService(session).get_partner(partner_id))


@router.patch("/{partner_id}", response_model=PartnerResponse)
async def update_partner(
    partner_id: uuid.UUID,
    body: PartnerUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    data = body.model_dump(exclude_unset=True)
    return _to_schema(await PartnerService(session).update_partner(partner_id, data))


@router.post("/{partner_id}/payments", response_model=PartnerPaymentResponse, status_code=201)
async def record_payment(
    partner_id: uuid.UUID,
    body: PartnerPaymentCreateRequest,
    session: AsyncSession = Depends(get_session),
):
    return await EarningsService(session).record_payment(
        partner_id=partner_id,
        type=body.type,
        amount_cents=body.amount_cents,
        reference_month=body.reference_month,
        description=body.description,
        paid_at=body.paid_at,
    )
