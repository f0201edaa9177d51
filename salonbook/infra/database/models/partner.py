"""Partner ORM model: a professional who performs sessions and earns commission."""
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from salonbook.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Partner(Base, TimestampMixin):
    __tablename__ = "partners"

    id: Mapped[uuid.UUID] = _uuid_pk()
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    commission_pct: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=0)
    salary_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    work_days: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    """ISO weekdays, 1 = Monday."""

    work_start: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    work_end: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    def __repr__(self) -> str:
        return f"Partner(id={self.id!r}, full_name={self.full_name!r})"
