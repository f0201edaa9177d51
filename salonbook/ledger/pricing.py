"""Price resolution, commissions and BRL formatting."""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional, Protocol

from salonbook.core.exceptions import ValidationError
from salonbook.ledger.booking import COMPLETED, CONFIRMED
from salonbook.ledger.notes import BookingNotes


class PriceRow(Protocol):
    service_slug: str
    plan_name: str
    sessions: int
    price_per_session_cents: int
    total_price_cents: int


@dataclass(frozen=True)
class PriceQuote:
    service_slug: str
    plan_name: str
    sessions: int
    per_session_cents: int
    total_cents: int
    fallback: bool = False


def _quote(row: PriceRow, *, fallback: bool) -> PriceQuote:
    return PriceQuote(
        service_slug=row.service_slug,
        plan_name=row.plan_name,
        sessions=row.sessions,
        per_session_cents=row.price_per_session_cents,
        total_cents=row.total_price_cents,
        fallback=fallback,
    )


def resolve_price(
    rows: Iterable[PriceRow], service_slug: str, plan_name: Optional[str]
) -> Optional[PriceQuote]:
    """Exact (slug, plan) match, else the cheapest tier of the service.

    Plan names compare case-insensitively. Ties on total go to the lower
    per-session price.
    """
    candidates = [r for r in rows if r.service_slug == service_slug]
    if not candidates:
        return None
    wanted = (plan_name or "").strip().lower()
    if wanted:
        for row in candidates:
            if row.plan_name.strip().lower() == wanted:
                return _quote(row, fallback=False)
    cheapest = min(candidates, key=lambda r: (r.total_price_cents, r.price_per_session_cents))
    return _quote(cheapest, fallback=True)


def total_for(per_session_cents: int, sessions: int) -> int:
    if per_session_cents < 0:
        raise ValidationError("price must not be negative", details={"field": "price_per_session_cents"})
    if sessions < 1:
        raise ValidationError("sessions must be >= 1", details={"field": "sessions"})
    return per_session_cents * sessions


def tier_label(notes: BookingNotes, plan_name: Optional[str] = None) -> Optional[str]:
    """Tier to price a booking at: the notes label, else its plan's tier."""
    return notes.plan or plan_name or None


def session_price_cents(notes: BookingNotes, quote: Optional[PriceQuote]) -> int:
    """Price snapshot stored on the booking wins over the price table."""
    if notes.price_cents is not None:
        return notes.price_cents
    if quote is not None:
        return quote.per_session_cents
    return 0


def commission_cents(session_price: int, commission_pct: float) -> int:
    """``round(price * pct / 100)``, halves rounded up."""
    try:
        pct = Decimal(str(commission_pct))
    except InvalidOperation as exc:
        raise ValidationError(f"invalid commission percentage {commission_pct!r}", cause=exc)
    value = Decimal(session_price) * pct / Decimal(100)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def earns_commission(status: str, appointment_partner_id: object, partner_id: object) -> bool:
    return (
        appointment_partner_id is not None
        and appointment_partner_id == partner_id
        and status in (CONFIRMED, COMPLETED)
    )


def format_cents(cents: int) -> str:
    """12345 -> 'R$ 123,45'; thousands separated by dots."""
    sign = "-" if cents < 0 else ""
    reais, centavos = divmod(abs(int(cents)), 100)
    grouped = f"{reais:,}".replace(",", ".")
    return f"{sign}R$ {grouped},{centavos:02d}"


_BRL_RE = re.compile(r"^-?\d+(?:[.,]\d+)*$")


def parse_brl(text: str) -> int:
    """'R$ 1.300,00' / '1300' / '150,5' -> cents."""
    cleaned = (text or "").replace("R$", "").replace("\u00a0", "").replace(" ", "").strip()
    if not cleaned or not _BRL_RE.match(cleaned):
        raise ValidationError(f"not a BRL amount: {text!r}", details={"field": "price"})
    if "," in cleaned:
        whole, _, frac = cleaned.rpartition(",")
        whole = whole.replace(".", "")
    elif cleaned.count(".") == 1 and len(cleaned.rpartition(".")[2]) <= 2:
        whole, _, frac = cleaned.partition(".")
    else:
        whole, frac = cleaned.replace(".", ""), ""
    if "," in whole or len(frac) > 2:
        raise ValidationError(f"not a BRL amount: {text!r}", details={"field": "price"})
    amount = Decimal(f"{whole or '0'}.{frac or '0'}")
    return int((amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
