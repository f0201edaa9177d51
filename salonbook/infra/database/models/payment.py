"""Money movements: client payments and partner payouts."""
from __future__ import annotations

import datetime as _dt
import uuid
from typing import Any, Optional

from sqlalchemy import CheckConstraint, Date, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from salonbook.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Payment(Base, TimestampMixin):
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = _uuid_pk()
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    appointment_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    method: Mapped[str] = mapped_column(String(32), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    # "metadata" is reserved on declarative classes
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", JSONB, nullable=False, default=dict)


class PartnerPayment(Base, TimestampMixin):
    __tablename__ = "partner_payments"
    __table_args__ = (
        CheckConstraint(
            "type IN ('salary', 'commission', 'bonus', 'deduction')",
            name="ck_partner_payments_type",
        ),
        Index("ix_partner_payments_partner_month", "partner_id", "reference_month"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    partner_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    reference_month: Mapped[str] = mapped_column(String(7), nullable=False)
    """YYYY-MM"""

    paid_at: Mapped[_dt.date] = mapped_column(Date, nullable=False, default=_dt.date.today)
