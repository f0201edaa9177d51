"""Pydantic v2 schemas for the Pricing API."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PriceResponse(BaseModel):
    id: UUID
    service_slug: str
    plan_name: str
    sessions: int
    price_per_session_cents: int
    total_price_cents: int
    total_formatted: str


class PriceUpsertRequest(BaseModel):
    service_slug: str = Field(..., min_length=1, max_length=128)
    plan_name: str = Field(..., min_length=1, max_length=64)
    sessions: int = Field(..., ge=1)
    price_per_session_cents: Optional[int] = Field(default=None, ge=0)
    price_per_session: Optional[str] = None
    """BRL text such as "R$ 150,00"; used when cents are not given."""


class QuoteResponse(BaseModel):
    service_slug: str
    plan_name: str
    sessions: int
    per_session_cents: int
    total_cents: int
    fallback: bool
    per_session_formatted: str
    total_formatted: str


class CommissionResponse(BaseModel):
    partner_id: UUID
    appointment_id: UUID
    commission_cents: int
    commission_formatted: str
