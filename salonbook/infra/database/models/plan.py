"""Plan ORM model: a client's multi-session treatment package."""
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from salonbook.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Plan(Base, TimestampMixin):
    __tablename__ = "client_plans"
    __table_args__ = (
        CheckConstraint("total_sessions >= 1", name="ck_client_plans_total_positive"),
        CheckConstraint(
            "completed_sessions >= 0 AND completed_sessions <= total_sessions",
            name="ck_client_plans_completed_range",
        ),
        Index("ix_client_plans_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    service_slug: Mapped[str] = mapped_column(String(128), nullable=False)
    service_title: Mapped[str] = mapped_column(Text, nullable=False)
    plan_name: Mapped[str] = mapped_column(String(64), nullable=False)
    """Tier label, e.g. Essencial / Premium / VIP."""

    total_sessions: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_sessions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    # active | completed

    created_by: Mapped[str] = mapped_column(String(32), nullable=False, default="auto")
    created_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"Plan(id={self.id!r}, service_slug={self.service_slug!r}, "
            f"completed={self.completed_sessions}/{self.total_sessions})"
        )
