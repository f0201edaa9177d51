"""ClientProfile repository."""
from __future__ import annotations

from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy import select

from salonbook.infra.database.models.profile import ClientProfile
from salonbook.infra.database.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[ClientProfile]):
    model = ClientProfile

    async def get_by_user(self, user_id: UUID) -> Optional[ClientProfile]:
        stmt = select(ClientProfile).where(ClientProfile.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def by_users(self, user_ids: Iterable[UUID]) -> Dict[UUID, ClientProfile]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        stmt = select(ClientProfile).where(ClientProfile.user_id.in_(ids))
        result = await self.session.execute(stmt)
        return {p.user_id: p for p in result.scalars().all()}
