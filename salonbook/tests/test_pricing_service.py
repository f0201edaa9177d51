import asyncio
import datetime as _dt
import json
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

from salonbook.core.exceptions import NotFoundError, ValidationError
from salonbook.services.earnings_service import EarningsService
from salonbook.services.pricing_service import PricingService
from salonbook.tests.fakes import (
    FakeAppointmentRepo,
    FakePartnerPaymentRepo,
    FakePartnerRepo,
    FakePlanRepo,
    FakePriceRepo,
    Store,
)


def _run(coro):
    return asyncio.run(coro)


def _appt(store, *, partner_id, day, status="confirmed", notes=None, slug="drenagem-linfatica", plan_id=None):
    appt = SimpleNamespace(
        id=uuid4(),
        user_id=uuid4(),
        service_slug=slug,
        appointment_date=day,
        appointment_time=_dt.time(10, 0),
        status=status,
        partner_id=partner_id,
        plan_id=plan_id,
        session_number=2 if plan_id else None,
        notes=json.dumps(notes) if notes else None,
        reminder_sent=False,
    )
    store.appointments[appt.id] = appt
    return appt


class _Base(unittest.TestCase):
    def setUp(self) -> None:
        self.store = Store()
        self.prices = FakePriceRepo(self.store)
        self.prices.add("drenagem-linfatica", "Avulsa", 1, 18000)
        self.prices.add("drenagem-linfatica", "Essencial", 5, 15000)
        self.partners = FakePartnerRepo(self.store)
        self.partner = self.partners.add(full_name="Ana Souza", commission_pct=10, salary_cents=200000)
        self.appointments = FakeAppointmentRepo(self.store)
        self.plans = FakePlanRepo(self.store)

    def _vip_plan(self):
        self.prices.add("drenagem-linfatica", "VIP", 20, 11000)
        return _run(
            self.plans.create(
                {
                    "user_id": uuid4(),
                    "service_slug": "drenagem-linfatica",
                    "plan_name": "VIP",
                    "total_sessions": 20,
                    "completed_sessions": 1,
                    "status": "active",
                }
            )
        )


class TestPricingService(_Base):
    def setUp(self) -> None:
        super().setUp()
        self.svc = PricingService(MagicMock())
        self.svc._repo = self.prices
        self.svc._partners = self.partners
        self.svc._appointments = self.appointments
        self.svc._plans = self.plans

    def test_price_for_exact_and_fallback(self) -> None:
        exact = _run(self.svc.price_for("drenagem-linfatica", "essencial"))
        self.assertEqual((exact.plan_name, exact.per_session_cents, exact.fallback), ("Essencial", 15000, False))
        fallback = _run(self.svc.price_for("drenagem-linfatica", "Premium"))
        self.assertEqual((fallback.plan_name, fallback.fallback), ("Avulsa", True))
        self.assertIsNone(_run(self.svc.price_for("peeling", None)))

    def test_upsert_computes_total(self) -> None:
        row, created = _run(
            self.svc.upsert_price(
                service_slug="drenagem-linfatica", plan_name="Essencial", sessions=10,
                price_per_session_cents=14000,
            )
        )
        self.assertFalse(created)
        self.assertEqual((row.sessions, row.total_price_cents), (10, 140000))

        row, created = _run(
            self.svc.upsert_price(
                service_slug="botox", plan_name=" Avulsa ", sessions=1, price_per_session_cents=50000,
            )
        )
        self.assertTrue(created)
        self.assertEqual(row.plan_name, "Avulsa")

    def test_upsert_rejects_bad_input(self) -> None:
        with self.assertRaises(ValidationError):
            _run(self.svc.upsert_price(service_slug="botox", plan_name="x", sessions=0, price_per_session_cents=1))
        with self.assertRaises(ValidationError):
            _run(self.svc.upsert_price(service_slug="botox", plan_name=" ", sessions=1, price_per_session_cents=1))

    def test_delete_missing_price(self) -> None:
        with self.assertRaises(NotFoundError):
            _run(self.svc.delete_price(uuid4()))

    def test_session_price_prefers_snapshot(self) -> None:
        day = _dt.date(2025, 3, 5)
        snap = _appt(self.store, partner_id=None, day=day, notes={"price_cents": 12000, "plan": "Essencial"})
        table = _appt(self.store, partner_id=None, day=day, notes={"plan": "Essencial"})
        self.assertEqual(_run(self.svc.session_price(snap)), 12000)
        self.assertEqual(_run(self.svc.session_price(table)), 15000)

    def test_commission_for(self) -> None:
        day = _dt.date(2025, 3, 5)
        mine = _appt(self.store, partner_id=self.partner.id, day=day, notes={"price_cents": 12345})
        pending = _appt(self.store, partner_id=self.partner.id, day=day, status="pending")
        other = _appt(self.store, partner_id=uuid4(), day=day, notes={"price_cents": 10000})
        self.assertEqual(_run(self.svc.commission_for(self.partner.id, mine.id)), 1235)
        self.assertEqual(_run(self.svc.commission_for(self.partner.id, pending.id)), 0)
        self.assertEqual(_run(self.svc.commission_for(self.partner.id, other.id)), 0)
        with self.assertRaises(NotFoundError):
            _run(self.svc.commission_for(uuid4(), mine.id))

    def test_plan_session_without_snapshot_uses_plan_tier(self) -> None:
        plan = self._vip_plan()
        appt = _appt(self.store, partner_id=self.partner.id, day=_dt.date(2025, 3, 5), plan_id=plan.id)
        self.assertEqual(_run(self.svc.session_price(appt)), 11000)
        self.assertEqual(_run(self.svc.commission_for(self.partner.id, appt.id)), 1100)

        labelled = _appt(
            self.store, partner_id=None, day=_dt.date(2025, 3, 5), plan_id=plan.id, notes={"plan": "Essencial"}
        )
        self.assertEqual(_run(self.svc.session_price(labelled)), 15000)


class TestEarningsService(_Base):
    def setUp(self) -> None:
        super().setUp()
        self.svc = EarningsService(MagicMock())
        self.svc._appointments = self.appointments
        self.svc._partners = self.partners
        self.svc._prices = self.prices
        self.svc._plans = self.plans
        self.svc._payments = FakePartnerPaymentRepo(self.store)

    def test_monthly_totals(self) -> None:
        pid = self.partner.id
        _appt(self.store, partner_id=pid, day=_dt.date(2025, 3, 3), notes={"price_cents": 15000})
        _appt(self.store, partner_id=pid, day=_dt.date(2025, 3, 31), status="completed")
        _appt(self.store, partner_id=pid, day=_dt.date(2025, 3, 10), status="cancelled", notes={"price_cents": 99900})
        _appt(self.store, partner_id=pid, day=_dt.date(2025, 4, 1), notes={"price_cents": 99900})
        _run(self.svc.record_payment(partner_id=pid, type="commission", amount_cents=1000, reference_month="2025-03"))
        _run(self.svc.record_payment(partner_id=pid, type="deduction", amount_cents=500, reference_month="2025-03"))
        _run(self.svc.record_payment(partner_id=pid, type="salary", amount_cents=200000, reference_month="2025-02"))

        [report] = _run(self.svc.partner_earnings("2025-03", pid))

        self.assertEqual(report.sessions, 2)
        # 10% of the 150,00 snapshot plus 10% of the cheapest tier (180,00)
        self.assertEqual(report.commission_cents, 1500 + 1800)
        self.assertEqual(report.paid_cents, 500)
        self.assertEqual(report.balance_cents, 200000 + 3300 - 500)

    def test_plan_sessions_priced_at_plan_tier(self) -> None:
        plan = self._vip_plan()
        _appt(self.store, partner_id=self.partner.id, day=_dt.date(2025, 3, 5), plan_id=plan.id)
        _appt(self.store, partner_id=self.partner.id, day=_dt.date(2025, 3, 12), plan_id=uuid4())

        [report] = _run(self.svc.partner_earnings("2025-03", self.partner.id))

        # VIP tier (110,00) for the live plan, cheapest tier (180,00) for the deleted one
        self.assertEqual(report.sessions, 2)
        self.assertEqual(report.commission_cents, 1100 + 1800)

    def test_report_covers_every_partner(self) -> None:
        self.partners.add(full_name="Bia Lima", commission_pct=0, salary_cents=0)
        reports = _run(self.svc.partner_earnings("2025-03"))
        self.assertEqual(sorted(r.full_name for r in reports), ["Ana Souza", "Bia Lima"])

    def test_bad_month(self) -> None:
        with self.assertRaises(ValidationError):
            _run(self.svc.partner_earnings("2025-13"))

    def test_record_payment_validation(self) -> None:
        pid = self.partner.id
        with self.assertRaises(ValidationError):
            _run(self.svc.record_payment(partner_id=pid, type="tip", amount_cents=100, reference_month="2025-03"))
        with self.assertRaises(ValidationError):
            _run(self.svc.record_payment(partner_id=pid, type="bonus", amount_cents=0, reference_month="2025-03"))
        with self.assertRaises(NotFoundError):
            _run(self.svc.record_payment(partner_id=uuid4(), type="bonus", amount_cents=100, reference_month="2025-03"))

    def test_delete_payment(self) -> None:
        payment = _run(
            self.svc.record_payment(partner_id=self.partner.id, type="bonus", amount_cents=100, reference_month="2025-03")
        )
        _run(self.svc.delete_payment(payment.id))
        self.assertEqual(_run(self.svc.list_payments(partner_id=self.partner.id)), [])
        with self.assertRaises(NotFoundError):
            _run(self.svc.delete_payment(payment.id))
