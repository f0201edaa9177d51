"""Payment and PartnerPayment repositories."""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from salonbook.infra.database.models.payment import PartnerPayment, Payment
from salonbook.infra.database.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    model = Payment


class PartnerPaymentRepository(BaseRepository[PartnerPayment]):
    model = PartnerPayment

    async def list_all(
        self,
        *,
        partner_id: Optional[UUID] = None,
        reference_month: Optional[str] = None,
    ) -> List[PartnerPayment]:
        stmt = select(PartnerPayment).order_by(PartnerPayment.paid_at.desc())
        if partner_id is not None:
            stmt = stmt.where(PartnerPayment.partner_id == partner_id)
        if reference_month:
            stmt = stmt.where(PartnerPayment.reference_month == reference_month)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
