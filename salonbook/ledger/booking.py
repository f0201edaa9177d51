"""Appointment statuses, transitions and the bookable slot grid."""
from __future__ import annotations

import datetime as _dt
from typing import TYPE_CHECKING, Iterable, List, Optional

from salonbook.core.exceptions import ValidationError

if TYPE_CHECKING:
    from salonbook.config.booking import BookingConfig

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"
COMPLETED = "completed"

STATUSES = frozenset({PENDING, CONFIRMED, CANCELLED, COMPLETED})
# Statuses that hold a slot / session number
ACTIVE_STATUSES = (PENDING, CONFIRMED, COMPLETED)

_TRANSITIONS = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({CANCELLED, COMPLETED}),
    CANCELLED: frozenset(),
    COMPLETED: frozenset(),
}

SOURCE_SELF_SERVE = "self_serve"
SOURCE_ADMIN = "admin"
SOURCE_COUNTER = "counter_sale"


def initial_status(source: str) -> str:
    """Self-serve bookings wait for checkout; admin and counter sales are confirmed."""
    return PENDING if source == SOURCE_SELF_SERVE else CONFIRMED


def check_transition(current: str, target: str) -> None:
    if target not in STATUSES:
        raise ValidationError(
            f"Unknown status {target!r}. Use one of: {sorted(STATUSES)}",
            details={"field": "status"},
        )
    if target not in _TRANSITIONS.get(current, frozenset()):
        raise ValidationError(
            f"Cannot move appointment from {current!r} to {target!r}",
            details={"from": current, "to": target},
        )


def parse_time(s: str) -> Optional[_dt.time]:
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return _dt.datetime.strptime(s.strip(), fmt).time()
        except ValueError:
            continue
    return None


def format_time(t: _dt.time) -> str:
    return t.strftime("%H:%M")


def slot_grid(config: "BookingConfig") -> List[_dt.time]:
    """All bookable start times for one day."""
    anchor = _dt.date(2000, 1, 1)
    current = _dt.datetime.combine(anchor, config.first_slot)
    last = _dt.datetime.combine(anchor, config.last_slot)
    step = _dt.timedelta(minutes=config.slot_minutes)
    slots: List[_dt.time] = []
    while current <= last:
        slots.append(current.time())
        current += step
    return slots


def free_slots(grid: Iterable[_dt.time], taken: Iterable[_dt.time]) -> List[_dt.time]:
    held = set(taken)
    return [t for t in grid if t not in held]


def validate_slot(
    date: _dt.date,
    time: _dt.time,
    config: "BookingConfig",
    *,
    self_serve: bool,
    now: Optional[_dt.datetime] = None,
) -> None:
    """Reject times off the grid; self-serve also rejects past and far-future slots."""
    if time.replace(second=0, microsecond=0) != time or time not in slot_grid(config):
        raise ValidationError(
            f"{format_time(time)} is not a bookable time",
            details={"field": "time", "slot_minutes": config.slot_minutes},
        )
    if not self_serve:
        return
    now = now or config.now()
    today = now.date()
    if date < today or (date == today and time <= now.time().replace(tzinfo=None)):
        raise ValidationError("Cannot book a slot in the past", details={"field": "date"})
    if date > today + _dt.timedelta(days=config.max_advance_days):
        raise ValidationError(
            f"Bookings are open up to {config.max_advance_days} days ahead",
            details={"field": "date"},
        )
