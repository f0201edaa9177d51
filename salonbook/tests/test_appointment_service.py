"""AppointmentService and PlanService against in-memory repositories."""
from __future__ import annotations

import asyncio
import datetime as _dt
import json
import unittest
from unittest.mock import MagicMock
from uuid import uuid4
from zoneinfo import ZoneInfo

from salonbook.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    SessionClaimedError,
    SlotTakenError,
    ValidationError,
)
from salonbook.ledger.booking import SOURCE_ADMIN
from salonbook.services.access import Actor
from salonbook.tests.fakes import wire_booking

_TZ = ZoneInfo("America/Sao_Paulo")
NOW = _dt.datetime(2025, 3, 10, 9, 0, tzinfo=_TZ)
DAY = _dt.date(2025, 3, 12)
ADMIN = Actor(user_id=uuid4(), is_admin=True)


def _run(coro):
    return asyncio.run(coro)


class TestBooking(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.svc, self.plans = wire_booking()
        self.client = Actor(user_id=uuid4())

    def _book(self, time=_dt.time(10, 0), **kwargs):
        params = dict(
            user_id=self.client.user_id,
            service_slug="botox",
            service_title="Botox",
            date=DAY,
            time=time,
            now=NOW,
        )
        params.update(kwargs)
        return _run(self.svc.book(**params))

    def test_self_serve_starts_pending_admin_confirmed(self) -> None:
        self.assertEqual(self._book().status, "pending")
        self.assertEqual(self._book(time=_dt.time(11, 0), source=SOURCE_ADMIN).status, "confirmed")

    def test_second_booking_on_same_slot_rejected(self) -> None:
        self._book()
        with self.assertRaises(SlotTakenError) as ctx:
            self._book(user_id=uuid4())
        self.assertEqual(ctx.exception.http_status, 409)

    def test_slot_free_again_after_cancel(self) -> None:
        first = self._book()
        _, outcome = _run(self.svc.cancel(first.id, self.client))
        self.assertEqual(outcome, "ok")
        second = self._book(user_id=uuid4())
        self.assertEqual(second.appointment_time, _dt.time(10, 0))

    def test_guarded_insert_maps_race_to_slot_taken(self) -> None:
        self._book()
        # Pre-check misses the row, the index still rejects it
        self.svc._repo.find_active_at = MagicMock(side_effect=lambda *a, **k: asyncio.sleep(0, result=None))
        with self.assertRaises(SlotTakenError):
            self._book(user_id=uuid4())

    def test_off_grid_time_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self._book(time=_dt.time(10, 10))

    def test_unknown_partner(self) -> None:
        with self.assertRaises(NotFoundError):
            self._book(partner_id=uuid4(), source=SOURCE_ADMIN)

    def test_session_number_requires_plan(self) -> None:
        with self.assertRaises(ValidationError):
            self._book(session_number=1)

    def test_available_slots(self) -> None:
        self._book()
        slots = _run(self.svc.available_slots(DAY))
        self.assertNotIn(_dt.time(10, 0), slots)
        self.assertIn(_dt.time(10, 30), slots)

    def test_cancel_twice_is_noop(self) -> None:
        appt = self._book()
        _run(self.svc.cancel(appt.id, self.client))
        again, outcome = _run(self.svc.cancel(appt.id, self.client))
        self.assertEqual(outcome, "already_cancelled")
        self.assertEqual(again.status, "cancelled")

    def test_client_cannot_touch_others_booking(self) -> None:
        appt = self._book()
        with self.assertRaises(ForbiddenError):
            _run(self.svc.cancel(appt.id, Actor(user_id=uuid4())))

    def test_delete_requires_admin(self) -> None:
        appt = self._book()
        with self.assertRaises(ForbiddenError):
            _run(self.svc.delete(appt.id, self.client))
        _run(self.svc.delete(appt.id, ADMIN))
        self.assertNotIn(appt.id, self.store.appointments)

    def test_confirm_then_confirm_again_rejected(self) -> None:
        appt = self._book()
        self.assertEqual(_run(self.svc.confirm(appt.id, self.client)).status, "confirmed")
        with self.assertRaises(ValidationError):
            _run(self.svc.confirm(appt.id, self.client))

    def test_mark_price_merges_into_notes(self) -> None:
        appt = self._book(notes="trazer exames")
        _run(self.svc.mark_price(appt.id, 15000, "Essencial", ADMIN))
        notes = json.loads(appt.notes)
        self.assertEqual(notes, {"text": "trazer exames", "price_cents": 15000, "plan": "Essencial"})

    def test_assign_and_clear_partner(self) -> None:
        partner_id = self.svc._partners.add(full_name="Ana").id
        appt = self._book()
        self.assertEqual(_run(self.svc.assign_partner(appt.id, partner_id, ADMIN)).partner_id, partner_id)
        self.assertIsNone(_run(self.svc.assign_partner(appt.id, None, ADMIN)).partner_id)

    def test_cleanup_stale_pending(self) -> None:
        old = self._book()
        old.created_at = _dt.datetime.now(_dt.timezone.utc) - _dt.timedelta(hours=2)
        fresh = self._book(time=_dt.time(11, 0))
        confirmed = self._book(time=_dt.time(12, 0), source=SOURCE_ADMIN)
        confirmed.created_at = old.created_at
        with self.assertLogs("salonbook.services.appointment_service", level="INFO") as logs:
            cancelled = _run(self.svc.cleanup_stale_pending(30))
        self.assertEqual([a.id for a in cancelled], [old.id])
        events = [(getattr(r, "event", None), getattr(r, "appointment_id", None)) for r in logs.records]
        self.assertIn(("cancelled", str(old.id)), events)
        self.assertEqual(old.status, "cancelled")
        self.assertEqual(fresh.status, "pending")
        self.assertEqual(confirmed.status, "confirmed")

    def test_list_scoped_to_client(self) -> None:
        self._book()
        self._book(time=_dt.time(11, 0), user_id=uuid4(), source=SOURCE_ADMIN)
        self.assertEqual(len(_run(self.svc.list_appointments(self.client))), 1)
        self.assertEqual(len(_run(self.svc.list_appointments(ADMIN))), 2)


class TestPlanSessions(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.svc, self.plans = wire_booking()
        self.user_id = uuid4()
        self.plan = _run(
            self.plans.create_plan(
                user_id=self.user_id,
                service_slug="drenagem-linfatica",
                service_title="Drenagem Linfática",
                plan_name="Essencial",
                total_sessions=5,
                created_by="admin",
            )
        )

    def _book_session(self, n, time):
        return _run(
            self.svc.book(
                user_id=self.user_id,
                service_slug="drenagem-linfatica",
                service_title="Drenagem Linfática",
                date=DAY,
                time=time,
                source=SOURCE_ADMIN,
                plan_id=self.plan.id,
                session_number=n,
            )
        )

    def test_cancelled_session_becomes_bookable_again(self) -> None:
        self._book_session(1, _dt.time(9, 0))
        second = self._book_session(2, _dt.time(10, 0))
        with self.assertRaises(SessionClaimedError):
            self._book_session(2, _dt.time(11, 0))

        _run(self.svc.cancel(second.id, ADMIN))

        self.assertEqual(_run(self.plans.next_session_number(self.plan)), 2)
        rebooked = self._book_session(2, _dt.time(11, 0))
        self.assertEqual(rebooked.session_number, 2)
        self.assertEqual(self.plan.completed_sessions, 0)
        self.assertEqual(self.plan.status, "active")

    def test_session_number_out_of_range(self) -> None:
        with self.assertRaises(ValidationError):
            self._book_session(6, _dt.time(9, 0))
        with self.assertRaises(ValidationError):
            self._book_session(0, _dt.time(9, 0))

    def test_plan_without_number_takes_next_free(self) -> None:
        self._book_session(1, _dt.time(9, 0))
        appt = self._book_session(None, _dt.time(10, 0))
        self.assertEqual(appt.session_number, 2)

    def test_unknown_plan(self) -> None:
        with self.assertRaises(NotFoundError):
            _run(
                self.svc.book(
                    user_id=self.user_id, service_slug="x", service_title="X",
                    date=DAY, time=_dt.time(9, 0), source=SOURCE_ADMIN, plan_id=uuid4(),
                )
            )

    def test_plan_of_another_client_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            _run(
                self.svc.book(
                    user_id=uuid4(), service_slug="drenagem-linfatica", service_title="Drenagem Linfática",
                    date=DAY, time=_dt.time(9, 0), source=SOURCE_ADMIN, plan_id=self.plan.id,
                )
            )
        self.assertEqual(ctx.exception.details["field"], "plan_id")
        self.assertEqual(self.store.appointments, {})
        self.assertEqual(_run(self.plans.next_session_number(self.plan)), 1)

    def test_plan_for_another_service_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            _run(
                self.svc.book(
                    user_id=self.user_id, service_slug="botox", service_title="Botox",
                    date=DAY, time=_dt.time(9, 0), source=SOURCE_ADMIN, plan_id=self.plan.id,
                )
            )
        self.assertEqual(ctx.exception.details["field"], "service_slug")
        self.assertEqual(self.store.appointments, {})

    def test_reschedule_keeps_plan_link_and_notes(self) -> None:
        appt = self._book_session(3, _dt.time(9, 0))
        _run(self.svc.mark_price(appt.id, 15000, "Essencial", ADMIN))

        moved = _run(self.svc.reschedule(appt.id, _dt.date(2025, 3, 14), _dt.time(15, 30), ADMIN))

        self.assertEqual(moved.appointment_date, _dt.date(2025, 3, 14))
        self.assertEqual(moved.appointment_time, _dt.time(15, 30))
        self.assertEqual(moved.plan_id, self.plan.id)
        self.assertEqual(moved.session_number, 3)
        notes = json.loads(moved.notes)
        self.assertTrue(notes["rescheduled"])
        self.assertEqual(notes["price_cents"], 15000)
        self.assertEqual(notes["plan"], "Essencial")

    def test_reschedule_onto_taken_slot(self) -> None:
        self._book_session(1, _dt.time(9, 0))
        appt = self._book_session(2, _dt.time(10, 0))
        with self.assertRaises(SlotTakenError):
            _run(self.svc.reschedule(appt.id, DAY, _dt.time(9, 0), ADMIN))
        self.assertEqual(appt.appointment_time, _dt.time(10, 0))

    def test_reschedule_cancelled_rejected(self) -> None:
        appt = self._book_session(1, _dt.time(9, 0))
        _run(self.svc.cancel(appt.id, ADMIN))
        with self.assertRaises(ValidationError):
            _run(self.svc.reschedule(appt.id, DAY, _dt.time(11, 0), ADMIN))

    def test_complete_session_counts_on_plan(self) -> None:
        appt = self._book_session(1, _dt.time(9, 0))
        done, plan = _run(self.svc.complete_session(appt.id, ADMIN))
        self.assertEqual(done.status, "completed")
        self.assertEqual(plan.completed_sessions, 1)
        with self.assertRaises(ValidationError):
            _run(self.svc.complete_session(appt.id, ADMIN))
        self.assertEqual(self.plan.completed_sessions, 1)

    def test_complete_last_session_completes_plan(self) -> None:
        self.plan.completed_sessions = 4
        appt = self._book_session(5, _dt.time(9, 0))
        _, plan = _run(self.svc.complete_session(appt.id, ADMIN))
        self.assertEqual((plan.completed_sessions, plan.status), (5, "completed"))

    def test_deleting_plan_leaves_appointments(self) -> None:
        appt = self._book_session(1, _dt.time(9, 0))
        _run(self.plans.delete_plan(self.plan.id))
        self.assertEqual(self.store.appointments[appt.id].plan_id, self.plan.id)
        with self.assertRaises(NotFoundError):
            _run(self.plans.delete_plan(self.plan.id))
