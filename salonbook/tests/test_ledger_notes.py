"""Unit tests for the booking notes payload."""
from __future__ import annotations

import json
import unittest

from salonbook.ledger.notes import BookingNotes, merge_notes, parse_notes, serialize_notes


class TestParseNotes(unittest.TestCase):
    def test_empty_and_none(self) -> None:
        self.assertEqual(parse_notes(None), {})
        self.assertEqual(parse_notes("   "), {})

    def test_malformed_json_kept_as_text(self) -> None:
        self.assertEqual(parse_notes('{"price_cents": 50'), {"text": '{"price_cents": 50'})

    def test_json_array_kept_as_text(self) -> None:
        self.assertEqual(parse_notes("[1, 2]"), {"text": "[1, 2]"})

    def test_plain_text_round_trips(self) -> None:
        raw = "Cliente prefere a sala 2"
        self.assertEqual(serialize_notes(parse_notes(raw)), raw)


class TestMergeNotes(unittest.TestCase):
    def test_disjoint_merges_commute(self) -> None:
        a = merge_notes(merge_notes(None, {"rescheduled": True}), {"price_cents": 5000})
        b = merge_notes(merge_notes(None, {"price_cents": 5000}), {"rescheduled": True})
        self.assertEqual(json.loads(a), json.loads(b))
        self.assertEqual(a, b)

    def test_merge_is_idempotent(self) -> None:
        once = merge_notes('{"plan": "VIP"}', {"rescheduled": True})
        twice = merge_notes(once, {"rescheduled": True})
        self.assertEqual(once, twice)

    def test_merge_keeps_existing_keys(self) -> None:
        merged = json.loads(merge_notes('{"price_cents": 15000, "plan": "Essencial"}', {"rescheduled": True}))
        self.assertEqual(merged, {"price_cents": 15000, "plan": "Essencial", "rescheduled": True})

    def test_merge_onto_plain_text_keeps_text(self) -> None:
        merged = json.loads(merge_notes("trazer exames", {"price_cents": 100}))
        self.assertEqual(merged, {"text": "trazer exames", "price_cents": 100})

    def test_merge_onto_malformed_does_not_raise(self) -> None:
        merged = json.loads(merge_notes("{broken", {"rescheduled": True}))
        self.assertTrue(merged["rescheduled"])


class TestBookingNotes(unittest.TestCase):
    def test_defaults_for_absent_fields(self) -> None:
        notes = BookingNotes.parse(None)
        self.assertIsNone(notes.price_cents)
        self.assertFalse(notes.rescheduled)
        self.assertEqual(notes.extra, {})

    def test_typed_fields_and_unknown_keys(self) -> None:
        raw = json.dumps({"price_cents": "15000", "plan": "VIP", "rescheduled": "true", "source": "checkout"})
        notes = BookingNotes.parse(raw)
        self.assertEqual(notes.price_cents, 15000)
        self.assertEqual(notes.plan, "VIP")
        self.assertTrue(notes.rescheduled)
        self.assertEqual(notes.extra, {"source": "checkout"})

    def test_bad_price_falls_back_to_none(self) -> None:
        self.assertIsNone(BookingNotes.parse('{"price_cents": "abc"}').price_cents)

    def test_serialize_round_trip(self) -> None:
        notes = BookingNotes(price_cents=1000, plan="Premium", rescheduled=True, extra={"k": 1})
        self.assertEqual(BookingNotes.parse(notes.serialize()), notes)
