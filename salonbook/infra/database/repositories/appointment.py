"""Appointment repository."""
from __future__ import annotations

import datetime as _dt
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from salonbook.infra.database.models.appointment import Appointment
from salonbook.infra.database.repositories.base import BaseRepository


class AppointmentRepository(BaseRepository[Appointment]):
    model = Appointment

    async def list_all(
        self,
        *,
        user_id: Optional[UUID] = None,
        partner_id: Optional[UUID] = None,
        plan_id: Optional[UUID] = None,
        status: Optional[str] = None,
        date_from: Optional[_dt.date] = None,
        date_to: Optional[_dt.date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Appointment]:
        stmt = select(Appointment).order_by(
            Appointment.appointment_date, Appointment.appointment_time
        )
        if user_id is not None:
            stmt = stmt.where(Appointment.user_id == user_id)
        if partner_id is not None:
            stmt = stmt.where(Appointment.partner_id == partner_id)
        if plan_id is not None:
            stmt = stmt.where(Appointment.plan_id == plan_id)
        if status:
            stmt = stmt.where(Appointment.status == status)
        if date_from:
            stmt = stmt.where(Appointment.appointment_date >= date_from)
        if date_to:
            stmt = stmt.where(Appointment.appointment_date <= date_to)
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_active_at(
        self, date: _dt.date, time: _dt.time, *, exclude_id: Optional[UUID] = None
    ) -> Optional[Appointment]:
        stmt = select(Appointment).where(
            Appointment.appointment_date == date,
            Appointment.appointment_time == time,
            Appointment.status != "cancelled",
        )
        if exclude_id is not None:
            stmt = stmt.where(Appointment.id != exclude_id)
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def taken_times(self, date: _dt.date) -> List[_dt.time]:
        stmt = select(Appointment.appointment_time).where(
            Appointment.appointment_date == date,
            Appointment.status != "cancelled",
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def claimed_sessions(
        self, plan_id: UUID, *, exclude_id: Optional[UUID] = None
    ) -> List[int]:
        stmt = select(Appointment.session_number).where(
            Appointment.plan_id == plan_id,
            Appointment.session_number.is_not(None),
            Appointment.status != "cancelled",
        )
        if exclude_id is not None:
            stmt = stmt.where(Appointment.id != exclude_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def stale_pending(self, created_before: _dt.datetime) -> List[Appointment]:
        stmt = select(Appointment).where(
            Appointment.status == "pending",
            Appointment.created_at < created_before,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def due_reminders(self, date: _dt.date, start: _dt.time, end: _dt.time) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(
                Appointment.appointment_date == date,
                Appointment.status == "confirmed",
                Appointment.reminder_sent.is_(False),
                Appointment.appointment_time >= start,
                Appointment.appointment_time <= end,
            )
            .order_by(Appointment.appointment_time)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def for_month(self, start: _dt.date, end: _dt.date) -> List[Appointment]:
        """Attributed appointments in [start, end)."""
        stmt = select(Appointment).where(
            Appointment.appointment_date >= start,
            Appointment.appointment_date < end,
            Appointment.partner_id.is_not(None),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
