"""
salonbook exception system.

Usage:
    from salonbook.core.exceptions import SlotTakenError, ValidationError

    raise ValidationError("total_sessions must be >= 1", details={"field": "total_sessions"})
    raise SlotTakenError("Slot 2026-03-02 10:00 is taken", details={"date": "2026-03-02", "time": "10:00"})
"""
from salonbook.core.exceptions.base import SalonbookError, exception_factory
from salonbook.core.exceptions.errors import (
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    RemoteFailure,
    SessionClaimedError,
    SlotTakenError,
    ValidationError,
)

__all__ = [
    "SalonbookError",
    "exception_factory",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "SlotTakenError",
    "SessionClaimedError",
    "ExternalServiceError",
    "RemoteFailure",
]
