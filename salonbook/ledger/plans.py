"""Plan counters: pure functions over (completed_sessions, total_sessions).

Every write to a plan's counters goes through these helpers so the invariant
``0 <= completed <= total`` and ``status == completed  <=>  completed == total``
holds after any sequence of adjustments or admin edits.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from salonbook.core.exceptions import ValidationError

PLAN_ACTIVE = "active"
PLAN_COMPLETED = "completed"


def validate_total_sessions(total: object) -> int:
    if isinstance(total, bool) or not isinstance(total, int) or total < 1:
        raise ValidationError(
            f"total_sessions must be an integer >= 1, got {total!r}",
            details={"field": "total_sessions"},
        )
    return total


def clamp_completed(completed: int, total: int) -> int:
    return max(0, min(total, completed))


def derive_status(completed: int, total: int) -> str:
    return PLAN_COMPLETED if completed >= total else PLAN_ACTIVE


def adjust_completed(completed: int, total: int, delta: int) -> Tuple[int, str]:
    """Apply *delta* and clamp. Out-of-range deltas are not errors."""
    new_completed = clamp_completed(completed + delta, total)
    return new_completed, derive_status(new_completed, total)


def normalise_counters(completed: int, total: int) -> Tuple[int, str]:
    """Re-validate counters after a free-form admin edit."""
    total = validate_total_sessions(total)
    new_completed = clamp_completed(completed, total)
    return new_completed, derive_status(new_completed, total)


@dataclass(frozen=True)
class PlanProgress:
    completed: int
    total: int
    remaining: int
    percent: int


def plan_progress(completed: int, total: int) -> PlanProgress:
    completed = clamp_completed(completed, total)
    percent = round(completed * 100 / total) if total else 0
    return PlanProgress(
        completed=completed,
        total=total,
        remaining=total - completed,
        percent=percent,
    )


def check_session_number(session_number: int, total: int) -> int:
    if isinstance(session_number, bool) or not isinstance(session_number, int):
        raise ValidationError("session_number must be an integer", details={"field": "session_number"})
    if not 1 <= session_number <= total:
        raise ValidationError(
            f"session_number must be between 1 and {total}, got {session_number}",
            details={"field": "session_number", "total_sessions": total},
        )
    return session_number


def next_session_number(total: int, claimed: Iterable[Optional[int]]) -> Optional[int]:
    """Lowest session number in 1..total not yet claimed, or None when all are."""
    taken = {n for n in claimed if n is not None}
    for n in range(1, total + 1):
        if n not in taken:
            return n
    return None
