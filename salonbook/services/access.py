"""Caller identity and the two capability checks every service uses."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from salonbook.core.exceptions import ForbiddenError


@dataclass(frozen=True)
class Actor:
    user_id: Optional[UUID] = None
    is_admin: bool = False


SYSTEM = Actor(is_admin=True)


def require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise ForbiddenError("Admin access required")


def ensure_owner(actor: Actor, owner_id: Optional[UUID]) -> None:
    """Admins pass; anyone else must own the record."""
    if actor.is_admin:
        return
    if actor.user_id is None or actor.user_id != owner_id:
        raise ForbiddenError("Not allowed to access this record")
