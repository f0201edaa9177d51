"""
salonbook.config.booking – booking calendar rules.

Env vars: BOOKING_OPEN, BOOKING_CLOSE, BOOKING_SLOT_MINUTES, BOOKING_MAX_ADVANCE_DAYS,
BOOKING_STALE_PENDING_MINUTES, CLINIC_TZ.
"""
from __future__ import annotations

import datetime as _dt
import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from salonbook.core.exceptions import ConfigurationError


def _parse_hhmm(value: str, name: str) -> _dt.time:
    try:
        return _dt.datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be HH:MM, got {value!r}", cause=exc)


@dataclass(frozen=True)
class BookingConfig:
    """Opening hours and slot grid shared by every booking flow.

    ``last_slot`` is the start time of the last bookable slot, not closing time.
    """

    first_slot: _dt.time = _dt.time(8, 0)
    last_slot: _dt.time = _dt.time(18, 0)
    slot_minutes: int = 30
    max_advance_days: int = 60
    """Self-serve bookings may not be further ahead than this."""

    stale_pending_minutes: int = 30
    """Self-serve pending bookings older than this are cancelled by the cleanup task."""

    timezone: str = "America/Sao_Paulo"

    def __post_init__(self) -> None:
        if self.first_slot > self.last_slot:
            raise ConfigurationError("BOOKING_OPEN must not be later than BOOKING_CLOSE")
        if not isinstance(self.slot_minutes, int) or not 5 <= self.slot_minutes <= 240:
            raise ConfigurationError(
                f"slot_minutes must be an integer in 5..240, got {self.slot_minutes!r}"
            )
        if self.max_advance_days < 1:
            raise ConfigurationError("max_advance_days must be >= 1")
        if self.stale_pending_minutes < 1:
            raise ConfigurationError("stale_pending_minutes must be >= 1")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown timezone {self.timezone!r}", cause=exc)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def now(self) -> _dt.datetime:
        """Current wall-clock time at the clinic."""
        return _dt.datetime.now(self.tz)

    @classmethod
    def from_env(cls, **overrides: object) -> BookingConfig:
        def _get(attr: str, var: str, default: str) -> str:
            v = overrides.get(attr)
            return str(v) if v is not None else os.environ.get(var, default)

        return cls(
            first_slot=_parse_hhmm(_get("first_slot", "BOOKING_OPEN", "08:00"), "BOOKING_OPEN"),
            last_slot=_parse_hhmm(_get("last_slot", "BOOKING_CLOSE", "18:00"), "BOOKING_CLOSE"),
            slot_minutes=int(_get("slot_minutes", "BOOKING_SLOT_MINUTES", "30")),
            max_advance_days=int(_get("max_advance_days", "BOOKING_MAX_ADVANCE_DAYS", "60")),
            stale_pending_minutes=int(
                _get("stale_pending_minutes", "BOOKING_STALE_PENDING_MINUTES", "30")
            ),
            timezone=_get("timezone", "CLINIC_TZ", "America/Sao_Paulo"),
        )


def load_booking_config(**overrides: object) -> BookingConfig:
    return BookingConfig.from_env(**overrides)
