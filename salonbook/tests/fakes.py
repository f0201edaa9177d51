"""In-memory repositories shared by the service tests.

The appointment fake reproduces the two partial unique indexes (active slot,
active plan session) so guarded writes behave as they do on PostgreSQL.
"""
from __future__ import annotations

import datetime as _dt
from types import SimpleNamespace
from typing import Dict, List, Optional
from unittest.mock import MagicMock
from uuid import uuid4

from salonbook.config.booking import BookingConfig
from salonbook.infra.database.models.appointment import SESSION_INDEX, SLOT_INDEX
from salonbook.services.appointment_service import AppointmentService
from salonbook.services.plan_service import PlanService


def _row(data) -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), created_at=_dt.datetime.now(_dt.timezone.utc), **data)


class Store:
    def __init__(self) -> None:
        self.plans: Dict = {}
        self.appointments: Dict = {}
        self.partners: Dict = {}
        self.prices: List = []
        self.payments: List = []


class FakeRepo:
    def __init__(self, store: Store) -> None:
        self.store = store

    async def apply(self, instance, data):
        for k, v in data.items():
            setattr(instance, k, v)
        return instance


class FakePlanRepo(FakeRepo):
    async def create(self, data):
        plan = _row(data)
        self.store.plans[plan.id] = plan
        return plan

    async def get_by_id(self, id):
        return self.store.plans.get(id)

    get_for_update = get_by_id

    async def get_many(self, ids):
        return [self.store.plans[i] for i in set(ids) if i in self.store.plans]

    async def delete(self, id):
        return self.store.plans.pop(id, None) is not None

    async def list_plans(self, *, user_id=None, status=None, skip=0, limit=100):
        rows = [p for p in self.store.plans.values() if user_id is None or p.user_id == user_id]
        return sorted(rows, key=lambda p: p.created_at, reverse=True)[skip : skip + limit]


class FakeAppointmentRepo(FakeRepo):
    def _active(self, exclude_id=None):
        return [
            a for a in self.store.appointments.values()
            if a.status != "cancelled" and a.id != exclude_id
        ]

    def _violation(self, row) -> Optional[str]:
        if row.status == "cancelled":
            return None
        for other in self._active(exclude_id=row.id):
            if (other.appointment_date, other.appointment_time) == (row.appointment_date, row.appointment_time):
                return SLOT_INDEX
            if row.plan_id is not None and (other.plan_id, other.session_number) == (row.plan_id, row.session_number):
                return SESSION_INDEX
        return None

    async def get_by_id(self, id):
        return self.store.appointments.get(id)

    async def claimed_sessions(self, plan_id, *, exclude_id=None):
        return [a.session_number for a in self._active(exclude_id) if a.plan_id == plan_id and a.session_number]

    async def find_active_at(self, date, time, *, exclude_id=None):
        for a in self._active(exclude_id):
            if a.appointment_date == date and a.appointment_time == time:
                return a
        return None

    async def taken_times(self, date):
        return [a.appointment_time for a in self._active() if a.appointment_date == date]

    async def create_guarded(self, data, constraints):
        row = _row(data)
        violation = self._violation(row)
        if violation:
            return None, violation
        self.store.appointments[row.id] = row
        return row, None

    async def apply_guarded(self, instance, data, constraints):
        before = dict(vars(instance))
        await self.apply(instance, data)
        violation = self._violation(instance)
        if violation:
            vars(instance).update(before)
        return violation

    async def delete(self, id):
        return self.store.appointments.pop(id, None) is not None

    async def stale_pending(self, created_before):
        return [
            a for a in self.store.appointments.values()
            if a.status == "pending" and a.created_at < created_before
        ]

    async def due_reminders(self, date, start, end):
        return [
            a for a in self.store.appointments.values()
            if a.status == "confirmed" and not a.reminder_sent
            and a.appointment_date == date and start <= a.appointment_time <= end
        ]

    async def for_month(self, start, end):
        return [
            a for a in self.store.appointments.values()
            if a.partner_id is not None and start <= a.appointment_date < end
        ]

    async def list_all(self, *, user_id=None, **_filters):
        rows = [a for a in self.store.appointments.values() if user_id is None or a.user_id == user_id]
        return sorted(rows, key=lambda a: (a.appointment_date, a.appointment_time))


class FakePartnerRepo(FakeRepo):
    def add(self, **data):
        partner = _row({"is_active": True, "salary_cents": 0, "commission_pct": 0, **data})
        self.store.partners[partner.id] = partner
        return partner

    async def exists(self, id):
        return id in self.store.partners

    async def get_by_id(self, id):
        return self.store.partners.get(id)

    async def list_all(self, *, active_only=False):
        return [p for p in self.store.partners.values() if p.is_active or not active_only]


class FakePriceRepo(FakeRepo):
    def add(self, service_slug, plan_name, sessions, per_session):
        row = _row(
            {
                "service_slug": service_slug,
                "plan_name": plan_name,
                "sessions": sessions,
                "price_per_session_cents": per_session,
                "total_price_cents": per_session * sessions,
            }
        )
        self.store.prices.append(row)
        return row

    async def for_service(self, service_slug):
        return [r for r in self.store.prices if r.service_slug == service_slug]

    async def list_all(self, service_slug=None):
        return [r for r in self.store.prices if service_slug is None or r.service_slug == service_slug]

    async def upsert(self, lookup, values):
        for row in self.store.prices:
            if all(getattr(row, k) == v for k, v in lookup.items()):
                vars(row).update(values)
                return row, False
        row = _row({**lookup, **values})
        self.store.prices.append(row)
        return row, True

    async def delete(self, id):
        before = len(self.store.prices)
        self.store.prices = [r for r in self.store.prices if r.id != id]
        return len(self.store.prices) != before


class FakePaymentRepo(FakeRepo):
    async def create(self, data):
        row = _row(data)
        self.store.payments.append(row)
        return row


def wire_booking(config: Optional[BookingConfig] = None):
    """Return (store, AppointmentService, PlanService) sharing one store."""
    store = Store()
    appts = AppointmentService(MagicMock(), config or BookingConfig())
    appts._repo = FakeAppointmentRepo(store)
    appts._plans = FakePlanRepo(store)
    appts._partners = FakePartnerRepo(store)
    plans = PlanService(MagicMock())
    plans._repo = appts._plans
    plans._appointments = appts._repo
    return store, appts, plans


class FakePartnerPaymentRepo(FakeRepo):
    def __init__(self, store: Store) -> None:
        super().__init__(store)
        self.rows: List = []

    async def create(self, data):
        row = _row(data)
        self.rows.append(row)
        return row

    async def list_all(self, *, partner_id=None, reference_month=None):
        return [
            r for r in self.rows
            if (partner_id is None or r.partner_id == partner_id)
            and (reference_month is None or r.reference_month == reference_month)
        ]

    async def delete(self, id):
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.id != id]
        return len(self.rows) != before
