"""Pydantic v2 schemas for the Partners API."""
from __future__ import annotations

import datetime as _dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PartnerResponse(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    full_name: str
    phone: Optional[str] = None
    commission_pct: float
    salary_cents: int
    is_active: bool
    work_days: List[int] = Field(default_factory=list)
    work_start: Optional[str] = None
    work_end: Optional[str] = None


class PartnerCreateRequest(BaseModel):
    full_name: str = Field(..., min_length=1)
    user_id: Optional[UUID] = None
    phone: Optional[str] = None
    commission_pct: float = Field(default=0, ge=0, le=100)
    salary_cents: int = Field(default=0, ge=0)
    is_active: bool = True
    work_days: List[int] = Field(default_factory=list)
    work_start: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    work_end: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")


class PartnerUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    commission_pct: Optional[float] = Field(default=None, ge=0, le=100)
    salary_cents: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    work_days: Optional[List[int]] = None
    work_start: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    work_end: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")


class EarningsResponse(BaseModel):
    partner_id: UUID
    full_name: str
    month: str
    sessions: int
    commission_cents: int
    salary_cents: int
    paid_cents: int
    balance_cents: int
    balance_formatted: str


class PartnerPaymentResponse(BaseModel):
    id: UUID
    partner_id: UUID
    type: str
    description: Optional[str] = None
    amount_cents: int
    reference_month: str
    paid_at: _dt.date

    model_config = {"from_attributes": True}


class PartnerPaymentCreateRequest(BaseModel):
    type: str = Field(..., pattern="^(salary|commission|bonus|deduction)$")
    amount_cents: int = Field(..., gt=0)
    reference_month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    description: Optional[str] = None
    paid_at: Optional[_dt.date] = None
