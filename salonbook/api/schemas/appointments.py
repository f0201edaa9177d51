"""Pydantic v2 schemas for the Appointments API."""
from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AppointmentResponse(BaseModel):
    id: UUID
    user_id: UUID
    service_slug: str
    service_title: str
    appointment_date: _dt.date
    appointment_time: str
    status: str
    partner_id: Optional[UUID] = None
    plan_id: Optional[UUID] = None
    session_number: Optional[int] = None
    notes: Dict[str, Any] = Field(default_factory=dict)
    rescheduled: bool = False
    price_cents: Optional[int] = None
    reminder_sent: bool = False
    created_at: Optional[_dt.datetime] = None
    updated_at: Optional[_dt.datetime] = None


class BookRequest(BaseModel):
    user_id: Optional[UUID] = None
    """Only admins may book for someone else."""

    service_slug: str = Field(..., min_length=1, max_length=128)
    service_title: str = Field(..., min_length=1)
    appointment_date: _dt.date
    appointment_time: str = Field(..., description="HH:MM")
    partner_id: Optional[UUID] = None
    plan_id: Optional[UUID] = None
    session_number: Optional[int] = None
    notes: Optional[str] = None
    price_cents: Optional[int] = Field(default=None, ge=0)
    plan_label: Optional[str] = None


class RescheduleRequest(BaseModel):
    appointment_date: _dt.date
    appointment_time: str = Field(..., description="HH:MM")


class PriceMarkRequest(BaseModel):
    price_cents: int = Field(..., ge=0)
    plan_label: Optional[str] = None
    original_price_cents: Optional[int] = Field(default=None, ge=0)


class PartnerAssignRequest(BaseModel):
    partner_id: Optional[UUID] = None


class CompleteSessionResponse(BaseModel):
    appointment: AppointmentResponse
    plan_completed_sessions: Optional[int] = None
    plan_status: Optional[str] = None


class AvailabilityResponse(BaseModel):
    date: _dt.date
    slots: List[str]
