"""ServicePrice repository."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from salonbook.infra.database.models.service_price import ServicePrice
from salonbook.infra.database.repositories.base import BaseRepository


class ServicePriceRepository(BaseRepository[ServicePrice]):
    model = ServicePrice

    async def for_service(self, service_slug: str) -> List[ServicePrice]:
        stmt = (
            select(ServicePrice)
            .where(ServicePrice.service_slug == service_slug)
            .order_by(ServicePrice.total_price_cents)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self, service_slug: Optional[str] = None) -> List[ServicePrice]:
        stmt = select(ServicePrice).order_by(ServicePrice.service_slug, ServicePrice.sessions)
        if service_slug:
            stmt = stmt.where(ServicePrice.service_slug == service_slug)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
