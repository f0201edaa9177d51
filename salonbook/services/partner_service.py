"""PartnerService: partner records."""
from __future__ import annotations

import logging
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.core.exceptions import NotFoundError, ValidationError
from salonbook.infra.database.models.partner import Partner
from salonbook.infra.database.repositories.partner import PartnerRepository

logger = logging.getLogger(__name__)


def _check(data: Dict[str, Any]) -> None:
    pct = data.get("commission_pct")
    if pct is not None and not 0 <= float(pct) <= 100:
        raise ValidationError("commission_pct must be between 0 and 100", details={"field": "commission_pct"})
    salary = data.get("salary_cents")
    if salary is not None and salary < 0:
        raise ValidationError("salary_cents must not be negative", details={"field": "salary_cents"})
    days = data.get("work_days")
    if days is not None and any(d not in range(1, 8) for d in days):
        raise ValidationError("work_days must hold ISO weekdays 1..7", details={"field": "work_days"})


class PartnerService:
    def __init__(self, session: AsyncSession) -> None:
        self._repo = PartnerRepository(session)

    async def list_partners(self, *, active_only: bool = False) -> List[Partner]:
        return await self._repo.list_all(active_only=active_only)

    async def get_partner(self, partner_id: UUID) -> Partner:
        partner = await self._repo.get_by_id(partner_id)
        if partner is None:
            raise NotFoundError(f"Partner {partner_id} not found", details={"partner_id": str(partner_id)})
        return partner

    async def create_partner(self, data: Dict[str, Any]) -> Partner:
        if not (data.get("full_name") or "").strip():
            raise ValidationError("full_name is required", details={"field": "full_name"})
        _check(data)
        partner = await self._repo.create(data)
        logger.info("PartnerService: created partner %s (%s)", partner.id, partner.full_name)
        return partner

    async def update_partner(self, partner_id: UUID, data: Dict[str, Any]) -> Partner:
        _check(data)
        partner = await self.get_partner(partner_id)
        return await self._repo.apply(partner, data)
