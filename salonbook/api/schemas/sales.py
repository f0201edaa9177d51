"""Pydantic v2 schemas for the counter sales API."""
from __future__ import annotations

import datetime as _dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from salonbook.api.schemas.appointments import AppointmentResponse
from salonbook.api.schemas.plans import PlanResponse


class SaleItemRequest(BaseModel):
    service_slug: str = Field(..., min_length=1)
    service_title: str = Field(..., min_length=1)
    kind: str = Field(default="single", pattern="^(plan|single)$")
    plan_name: Optional[str] = None
    price_cents: Optional[int] = Field(default=None, ge=0)


class SaleRequest(BaseModel):
    user_id: UUID
    items: List[SaleItemRequest] = Field(..., min_length=1)
    appointment_date: _dt.date
    appointment_time: str
    payment_method: str
    partner_id: Optional[UUID] = None
    notes: Optional[str] = None


class SaleResponse(BaseModel):
    plans: List[PlanResponse]
    appointments: List[AppointmentResponse]
    payment_id: Optional[UUID] = None
    total_cents: int
    total_formatted: str
