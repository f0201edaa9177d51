import asyncio
import datetime as _dt
import json
import unittest
from unittest.mock import MagicMock
from uuid import uuid4

from salonbook.config.booking import BookingConfig
from salonbook.core.exceptions import ForbiddenError, SlotTakenError, ValidationError
from salonbook.ledger.booking import SOURCE_ADMIN
from salonbook.services.access import Actor
from salonbook.services.counter_sale_service import (
    ITEM_PLAN,
    ITEM_SINGLE,
    CounterSaleService,
    SaleItem,
)
from salonbook.tests.fakes import FakePaymentRepo, FakePriceRepo, wire_booking

DAY = _dt.date(2025, 3, 12)
ADMIN = Actor(user_id=uuid4(), is_admin=True)

DRENAGEM = SaleItem("drenagem-linfatica", "Drenagem Linfática", kind=ITEM_PLAN, plan_name="Essencial")
BOTOX = SaleItem("botox", "Botox", kind=ITEM_SINGLE)


def _run(coro):
    return asyncio.run(coro)


class TestCounterSale(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.appts, self.plans = wire_booking()
        self.svc = CounterSaleService(MagicMock(), BookingConfig())
        self.svc._appointments = self.appts
        self.svc._plans = self.plans
        prices = FakePriceRepo(self.store)
        prices.add("drenagem-linfatica", "Avulsa", 1, 18000)
        prices.add("drenagem-linfatica", "Essencial", 5, 15000)
        prices.add("botox", "Avulsa", 1, 50000)
        prices.add("botox", "Retoque", 2, 45000)
        self.svc._prices = prices
        self.svc._payments = FakePaymentRepo(self.store)
        self.user_id = uuid4()

    def _sell(self, items, time=_dt.time(10, 0), actor=ADMIN, **kwargs):
        params = dict(
            user_id=self.user_id, items=items, date=DAY, time=time, payment_method="pix",
        )
        params.update(kwargs)
        return _run(self.svc.register_sale(actor, **params))

    def test_plan_and_single_item_sale(self) -> None:
        result = self._sell([DRENAGEM, BOTOX])

        self.assertEqual(len(result.plans), 1)
        plan = result.plans[0]
        self.assertEqual((plan.plan_name, plan.total_sessions, plan.completed_sessions), ("Essencial", 5, 0))
        self.assertEqual(plan.created_by, "admin")

        first, second = result.appointments
        self.assertEqual((first.appointment_time, first.plan_id, first.session_number), (_dt.time(10, 0), plan.id, 1))
        self.assertEqual((second.appointment_time, second.plan_id), (_dt.time(10, 30), None))
        self.assertEqual({first.status, second.status}, {"confirmed"})
        self.assertEqual(json.loads(first.notes), {"price_cents": 15000, "plan": "Essencial"})
        self.assertEqual(json.loads(second.notes), {"price_cents": 50000, "plan": "Avulsa"})

        self.assertEqual(result.total_cents, 75000 + 50000)
        payment = result.payment
        self.assertEqual((payment.amount_cents, payment.method, payment.status), (125000, "pix", "paid"))
        self.assertEqual(payment.meta["source"], "counter_sale")
        self.assertEqual([line["kind"] for line in payment.meta["items"]], ["plan", "single"])

    def test_custom_price_is_recorded(self) -> None:
        item = SaleItem("botox", "Botox", price_cents=40000)
        result = self._sell([item], notes="cliente antiga")
        notes = json.loads(result.appointments[0].notes)
        self.assertEqual(notes["price_cents"], 40000)
        self.assertTrue(notes["custom_price"])
        self.assertEqual(notes["original_price_cents"], 50000)
        self.assertEqual(notes["text"], "cliente antiga")

    def test_free_sale_records_no_payment(self) -> None:
        result = self._sell([SaleItem("botox", "Botox", price_cents=0)])
        self.assertIsNone(result.payment)
        self.assertEqual(self.store.payments, [])

    def test_unknown_plan_tier_rejected(self) -> None:
        item = SaleItem("drenagem-linfatica", "Drenagem", kind=ITEM_PLAN, plan_name="Premium")
        with self.assertRaises(ValidationError):
            self._sell([item])
        self.assertEqual(self.store.plans, {})

    def test_service_without_prices(self) -> None:
        with self.assertRaises(ValidationError):
            self._sell([SaleItem("peeling", "Peeling")])

    def test_requires_admin(self) -> None:
        with self.assertRaises(ForbiddenError):
            self._sell([BOTOX], actor=Actor(user_id=self.user_id))

    def test_bad_payment_method(self) -> None:
        with self.assertRaises(ValidationError):
            self._sell([BOTOX], payment_method="cheque")

    def test_empty_sale(self) -> None:
        with self.assertRaises(ValidationError):
            self._sell([])

    def test_items_past_closing_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self._sell([BOTOX, BOTOX], time=_dt.time(18, 0))

    def test_taken_slot_aborts_sale(self) -> None:
        _run(
            self.appts.book(
                user_id=uuid4(), service_slug="botox", service_title="Botox",
                date=DAY, time=_dt.time(10, 30), source=SOURCE_ADMIN,
            )
        )
        with self.assertRaises(SlotTakenError):
            self._sell([BOTOX, BOTOX])
        self.assertEqual(self.store.payments, [])
