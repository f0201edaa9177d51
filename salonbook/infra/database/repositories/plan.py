"""Plan repository."""
from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select

from salonbook.infra.database.models.plan import Plan
from salonbook.infra.database.repositories.base import BaseRepository


class PlanRepository(BaseRepository[Plan]):
    model = Plan

    async def get_for_update(self, id: UUID) -> Optional[Plan]:
        """Row-locked read so concurrent counter adjustments serialize."""
        stmt = select(Plan).where(Plan.id == id).with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_plans(
        self,
        *,
        user_id: Optional[UUID] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Plan]:
        stmt = select(Plan).order_by(Plan.created_at.desc())
        if user_id is not None:
            stmt = stmt.where(Plan.user_id == user_id)
        if status:
            stmt = stmt.where(Plan.status == status)
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_many(self, ids: Iterable[UUID]) -> List[Plan]:
        wanted = {i for i in ids if i is not None}
        if not wanted:
            return []
        result = await self.session.execute(select(Plan).where(Plan.id.in_(wanted)))
        return list(result.scalars().all())
