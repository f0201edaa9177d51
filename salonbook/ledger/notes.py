"""Booking notes: a structured record stored in the appointment ``notes`` column.

The column is plain text for backward compatibility. Older rows hold either
free text typed at the counter or a JSON object such as
``{"price_cents": 75000, "plan": "Essencial"}``. Reading never raises:

- empty / NULL            → no fields set
- JSON object             → known keys typed, unknown keys kept in ``extra``
- anything else           → kept verbatim as ``text``

Writes always parse the current value first and shallow-merge the patch, so a
reschedule marker never wipes a stored price snapshot (and vice versa).
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

_KNOWN_KEYS = (
    "price_cents",
    "plan",
    "rescheduled",
    "original_price_cents",
    "custom_price",
    "text",
)


def parse_notes(raw: Optional[str]) -> Dict[str, Any]:
    """Return the notes payload as a dict; malformed content never raises."""
    if raw is None:
        return {}
    stripped = raw.strip()
    if not stripped:
        return {}
    try:
        data = json.loads(stripped)
    except ValueError:
        return {"text": raw}
    if isinstance(data, dict):
        return data
    return {"text": raw}


def serialize_notes(data: Mapping[str, Any]) -> Optional[str]:
    clean = {k: v for k, v in data.items() if v is not None}
    if not clean:
        return None
    # Plain text notes stay plain text
    if set(clean) == {"text"} and isinstance(clean["text"], str):
        return clean["text"]
    return json.dumps(clean, ensure_ascii=False, sort_keys=True)


def merge_notes(raw: Optional[str], patch: Mapping[str, Any]) -> Optional[str]:
    """Parse *raw*, shallow-merge *patch* on top, serialize."""
    merged = parse_notes(raw)
    merged.update(patch)
    return serialize_notes(merged)


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


@dataclass(frozen=True)
class BookingNotes:
    """Typed view of the notes payload. Absent fields take the defaults below."""

    price_cents: Optional[int] = None
    plan: Optional[str] = None
    rescheduled: bool = False
    original_price_cents: Optional[int] = None
    custom_price: bool = False
    text: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, raw: Optional[str]) -> BookingNotes:
        data = parse_notes(raw)
        plan = data.get("plan")
        text = data.get("text")
        return cls(
            price_cents=_as_int(data.get("price_cents")),
            plan=str(plan) if plan not in (None, "") else None,
            rescheduled=_as_bool(data.get("rescheduled", False)),
            original_price_cents=_as_int(data.get("original_price_cents")),
            custom_price=_as_bool(data.get("custom_price", False)),
            text=str(text) if text not in (None, "") else None,
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        if self.price_cents is not None:
            out["price_cents"] = self.price_cents
        if self.plan is not None:
            out["plan"] = self.plan
        if self.rescheduled:
            out["rescheduled"] = True
        if self.original_price_cents is not None:
            out["original_price_cents"] = self.original_price_cents
        if self.custom_price:
            out["custom_price"] = True
        if self.text is not None:
            out["text"] = self.text
        return out

    def serialize(self) -> Optional[str]:
        return serialize_notes(self.to_dict())
