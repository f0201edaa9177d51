"""Monthly partner earnings, recomputed from raw rows on every call."""
from __future__ import annotations

import datetime as _dt
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

from salonbook.core.exceptions import ValidationError
from salonbook.ledger.notes import BookingNotes
from salonbook.ledger.pricing import (
    PriceQuote,
    commission_cents,
    earns_commission,
    session_price_cents,
    tier_label,
)

PAYMENT_TYPES = ("salary", "commission", "bonus", "deduction")

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def month_bounds(month: str) -> Tuple[_dt.date, _dt.date]:
    """'2025-03' -> (2025-03-01, 2025-04-01); end is exclusive."""
    m = _MONTH_RE.match(month or "")
    if not m or not 1 <= int(m.group(2)) <= 12:
        raise ValidationError(f"month must be YYYY-MM, got {month!r}", details={"field": "month"})
    year, mon = int(m.group(1)), int(m.group(2))
    start = _dt.date(year, mon, 1)
    end = _dt.date(year + 1, 1, 1) if mon == 12 else _dt.date(year, mon + 1, 1)
    return start, end


def signed_amount(payment_type: str, amount_cents: int) -> int:
    return -amount_cents if payment_type == "deduction" else amount_cents


@dataclass(frozen=True)
class PartnerEarnings:
    partner_id: object
    full_name: str
    month: str
    sessions: int
    commission_cents: int
    salary_cents: int
    paid_cents: int

    @property
    def balance_cents(self) -> int:
        return self.salary_cents + self.commission_cents - self.paid_cents


def partner_earnings(
    partner,
    month: str,
    appointments: Iterable,
    payments: Iterable,
    quote_for: Callable[[str, Optional[str]], Optional[PriceQuote]],
    plan_names: Optional[Mapping[object, str]] = None,
) -> PartnerEarnings:
    """Earnings of one partner for *month*.

    *appointments* and *payments* may hold rows of any partner or month; only
    the matching ones count. *quote_for(slug, plan)* resolves the table price
    when a booking carries no price snapshot. *plan_names* maps plan ids to their
    tier so unsnapshotted plan sessions price at that tier.
    """
    start, end = month_bounds(month)
    sessions = 0
    commission = 0
    for appt in appointments:
        if not (start <= appt.appointment_date < end):
            continue
        if not earns_commission(appt.status, appt.partner_id, partner.id):
            continue
        notes = BookingNotes.parse(appt.notes)
        label = tier_label(notes, (plan_names or {}).get(appt.plan_id))
        price = session_price_cents(notes, quote_for(appt.service_slug, label))
        sessions += 1
        commission += commission_cents(price, float(partner.commission_pct or 0))

    paid = sum(
        signed_amount(p.type, p.amount_cents)
        for p in payments
        if p.partner_id == partner.id and p.reference_month == month
    )
    return PartnerEarnings(
        partner_id=partner.id,
        full_name=partner.full_name,
        month=month,
        sessions=sessions,
        commission_cents=commission,
        salary_cents=partner.salary_cents or 0,
        paid_cents=paid,
    )


def earnings_report(
    partners, month: str, appointments, payments, quote_for, plan_names=None
) -> List[PartnerEarnings]:
    appointments = list(appointments)
    payments = list(payments)
    return [
        partner_earnings(p, month, appointments, payments, quote_for, plan_names)
        for p in partners
    ]
