"""Appointment ORM model."""
from __future__ import annotations

import datetime as _dt
import uuid
from typing import Optional

from sqlalchemy import Boolean, Date, Index, Integer, String, Text, Time, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from salonbook.infra.database.models.base import Base, TimestampMixin, _uuid_pk

SLOT_INDEX = "uq_appointments_active_slot"
SESSION_INDEX = "uq_appointments_active_plan_session"


class Appointment(Base, TimestampMixin):
    """One booked time slot. Optionally one numbered session of a Plan."""

    __tablename__ = "appointments"
    __table_args__ = (
        # One active booking per slot and per plan session; cancelled rows free both
        Index(
            SLOT_INDEX,
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
        ),
        Index(
            SESSION_INDEX,
            "plan_id",
            "session_number",
            unique=True,
            postgresql_where=text("status <> 'cancelled' AND plan_id IS NOT NULL"),
        ),
        Index("ix_appointments_user_id", "user_id"),
        Index("ix_appointments_partner_id", "partner_id"),
        Index("ix_appointments_date", "appointment_date"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    service_slug: Mapped[str] = mapped_column(String(128), nullable=False)
    service_title: Mapped[str] = mapped_column(Text, nullable=False)
    appointment_date: Mapped[_dt.date] = mapped_column(Date, nullable=False)
    appointment_time: Mapped[_dt.time] = mapped_column(Time, nullable=False)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    # pending | confirmed | cancelled | completed

    partner_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    # No FK: deleting a plan leaves plan_id dangling
    plan_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    session_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reminder_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return (
            f"Appointment(id={self.id!r}, date={self.appointment_date}, "
            f"time={self.appointment_time}, status={self.status!r})"
        )
