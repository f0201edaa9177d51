"""Unit tests for the slot grid and appointment transitions."""
from __future__ import annotations

import datetime as _dt
import unittest
from zoneinfo import ZoneInfo

from salonbook.config.booking import BookingConfig
from salonbook.core.exceptions import ValidationError
from salonbook.ledger.booking import (
    CANCELLED,
    COMPLETED,
    CONFIRMED,
    PENDING,
    SOURCE_ADMIN,
    SOURCE_COUNTER,
    SOURCE_SELF_SERVE,
    check_transition,
    free_slots,
    initial_status,
    parse_time,
    slot_grid,
    validate_slot,
)

_TZ = ZoneInfo("America/Sao_Paulo")


class TestSlotGrid(unittest.TestCase):
    def test_default_grid_is_half_hourly(self) -> None:
        grid = slot_grid(BookingConfig())
        self.assertEqual(grid[0], _dt.time(8, 0))
        self.assertEqual(grid[1], _dt.time(8, 30))
        self.assertEqual(grid[-1], _dt.time(18, 0))
        self.assertEqual(len(grid), 21)

    def test_hourly_grid(self) -> None:
        grid = slot_grid(BookingConfig(slot_minutes=60))
        self.assertEqual(len(grid), 11)

    def test_free_slots_excludes_taken(self) -> None:
        grid = slot_grid(BookingConfig(slot_minutes=60))
        free = free_slots(grid, [_dt.time(9, 0), _dt.time(10, 0)])
        self.assertNotIn(_dt.time(9, 0), free)
        self.assertIn(_dt.time(11, 0), free)
        self.assertEqual(len(free), 9)

    def test_parse_time(self) -> None:
        self.assertEqual(parse_time("09:30"), _dt.time(9, 30))
        self.assertEqual(parse_time("09:30:00"), _dt.time(9, 30))
        self.assertIsNone(parse_time("9h30"))


class TestValidateSlot(unittest.TestCase):
    def setUp(self) -> None:
        self.config = BookingConfig()
        self.now = _dt.datetime(2025, 3, 10, 10, 15, tzinfo=_TZ)

    def test_off_grid_time_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            validate_slot(_dt.date(2025, 3, 11), _dt.time(9, 15), self.config, self_serve=False)
        with self.assertRaises(ValidationError):
            validate_slot(_dt.date(2025, 3, 11), _dt.time(19, 0), self.config, self_serve=False)

    def test_self_serve_past_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            validate_slot(_dt.date(2025, 3, 10), _dt.time(10, 0), self.config, self_serve=True, now=self.now)
        with self.assertRaises(ValidationError):
            validate_slot(_dt.date(2025, 3, 9), _dt.time(14, 0), self.config, self_serve=True, now=self.now)

    def test_self_serve_later_today_allowed(self) -> None:
        validate_slot(_dt.date(2025, 3, 10), _dt.time(10, 30), self.config, self_serve=True, now=self.now)

    def test_self_serve_beyond_window_rejected(self) -> None:
        far = self.now.date() + _dt.timedelta(days=61)
        with self.assertRaises(ValidationError):
            validate_slot(far, _dt.time(10, 0), self.config, self_serve=True, now=self.now)

    def test_admin_may_book_past(self) -> None:
        validate_slot(_dt.date(2025, 3, 1), _dt.time(10, 0), self.config, self_serve=False, now=self.now)


class TestTransitions(unittest.TestCase):
    def test_initial_status(self) -> None:
        self.assertEqual(initial_status(SOURCE_SELF_SERVE), PENDING)
        self.assertEqual(initial_status(SOURCE_ADMIN), CONFIRMED)
        self.assertEqual(initial_status(SOURCE_COUNTER), CONFIRMED)

    def test_allowed(self) -> None:
        for current, target in (
            (PENDING, CONFIRMED),
            (PENDING, CANCELLED),
            (CONFIRMED, CANCELLED),
            (CONFIRMED, COMPLETED),
        ):
            check_transition(current, target)

    def test_rejected(self) -> None:
        for current, target in (
            (PENDING, COMPLETED),
            (CANCELLED, CONFIRMED),
            (COMPLETED, CANCELLED),
            (CONFIRMED, PENDING),
            (PENDING, "done"),
        ):
            with self.assertRaises(ValidationError):
                check_transition(current, target)
