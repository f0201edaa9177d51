"""Pydantic v2 schemas for the Plans API."""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PlanResponse(BaseModel):
    id: UUID
    user_id: UUID
    service_slug: str
    service_title: str
    plan_name: str
    total_sessions: int
    completed_sessions: int
    status: str
    created_by: str
    created_by_user_id: Optional[UUID] = None
    notes: Optional[str] = None
    remaining_sessions: int
    progress_percent: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PlanCreateRequest(BaseModel):
    user_id: Optional[UUID] = None
    """Admins create plans for any client; clients only for themselves."""

    service_slug: str = Field(..., min_length=1, max_length=128)
    service_title: str = Field(..., min_length=1)
    plan_name: str = Field(..., min_length=1, max_length=64)
    total_sessions: int
    notes: Optional[str] = None


class PlanUpdateRequest(BaseModel):
    service_slug: Optional[str] = Field(default=None, min_length=1, max_length=128)
    service_title: Optional[str] = None
    plan_name: Optional[str] = Field(default=None, min_length=1, max_length=64)
    total_sessions: Optional[int] = None
    completed_sessions: Optional[int] = None
    notes: Optional[str] = None


class PlanAdjustRequest(BaseModel):
    delta: int


class NextSessionResponse(BaseModel):
    plan_id: UUID
    session_number: Optional[int] = None
