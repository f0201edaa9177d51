"""
salonbook.ledger – booking rules with no I/O.

plans: plan counters. booking: statuses and slot grid. notes: the notes payload.
pricing: price resolution and commissions. earnings: monthly partner totals.
"""
from salonbook.ledger.booking import (
    ACTIVE_STATUSES,
    CANCELLED,
    COMPLETED,
    CONFIRMED,
    PENDING,
    check_transition,
    free_slots,
    slot_grid,
    validate_slot,
)
from salonbook.ledger.earnings import PartnerEarnings, month_bounds, partner_earnings
from salonbook.ledger.notes import BookingNotes, merge_notes, parse_notes
from salonbook.ledger.plans import PlanProgress, adjust_completed, next_session_number, plan_progress
from salonbook.ledger.pricing import PriceQuote, commission_cents, format_cents, parse_brl, resolve_price

__all__ = [
    "ACTIVE_STATUSES",
    "CANCELLED",
    "COMPLETED",
    "CONFIRMED",
    "PENDING",
    "check_transition",
    "free_slots",
    "slot_grid",
    "validate_slot",
    "PartnerEarnings",
    "month_bounds",
    "partner_earnings",
    "BookingNotes",
    "merge_notes",
    "parse_notes",
    "PlanProgress",
    "adjust_completed",
    "next_session_number",
    "plan_progress",
    "PriceQuote",
    "commission_cents",
    "format_cents",
    "parse_brl",
    "resolve_price",
]
