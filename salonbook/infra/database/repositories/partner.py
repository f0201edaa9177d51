"""Partner repository."""
from __future__ import annotations

from typing import List

from sqlalchemy import select

from salonbook.infra.database.models.partner import Partner
from salonbook.infra.database.repositories.base import BaseRepository


class PartnerRepository(BaseRepository[Partner]):
    model = Partner

    async def list_all(self, *, active_only: bool = False) -> List[Partner]:
        stmt = select(Partner).order_by(Partner.full_name)
        if active_only:
            stmt = stmt.where(Partner.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
