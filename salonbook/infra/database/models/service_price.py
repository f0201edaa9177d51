"""Price table: one row per (service, plan tier)."""
from __future__ import annotations

import uuid

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from salonbook.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class ServicePrice(Base, TimestampMixin):
    __tablename__ = "service_prices"
    __table_args__ = (
        UniqueConstraint("service_slug", "plan_name", name="uq_service_prices_slug_plan"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    service_slug: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    plan_name: Mapped[str] = mapped_column(String(64), nullable=False)
    sessions: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price_per_session_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"ServicePrice({self.service_slug!r}, {self.plan_name!r}, {self.total_price_cents})"
