"""FastAPI dependency providers."""
from __future__ import annotations

import hmac
from collections.abc import AsyncGenerator
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.config import BookingConfig, EvolutionConfig
from salonbook.core.exceptions import ValidationError
from salonbook.services.access import Actor, require_admin


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a transactional AsyncSession from the app-level session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_actor(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
    x_api_key: Optional[str] = Header(default=None),
) -> Actor:
    """Caller from X-User-Id; a matching X-Api-Key adds the admin capability."""
    user_id = None
    if x_user_id:
        try:
            user_id = UUID(x_user_id.strip())
        except ValueError:
            raise ValidationError("X-User-Id must be a UUID", details={"header": "X-User-Id"})
    admin_key = getattr(request.app.state, "admin_api_key", None)
    is_admin = bool(admin_key and x_api_key and hmac.compare_digest(admin_key, x_api_key))
    return Actor(user_id=user_id, is_admin=is_admin)


def get_admin(actor: Actor = Depends(get_actor)) -> Actor:
    require_admin(actor)
    return actor


def get_booking_config(request: Request) -> BookingConfig:
    return getattr(request.app.state, "booking_config", None) or BookingConfig()


def get_evolution_config(request: Request) -> EvolutionConfig:
    return getattr(request.app.state, "evolution_config", None) or EvolutionConfig()
