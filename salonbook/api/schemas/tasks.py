"""Pydantic v2 schemas for the scheduled tasks API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class ReminderItem(BaseModel):
    appointment_id: str
    phone: Optional[str] = None
    success: bool
    reason: Optional[str] = None


class ReminderRunResponse(BaseModel):
    reminders_sent: int
    results: List[ReminderItem]


class CleanupResponse(BaseModel):
    cancelled: int
    appointment_ids: List[str]
