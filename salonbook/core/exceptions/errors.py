"""
Built-in exception types. Add new ones here or via exception_factory().
"""
from __future__ import annotations

from salonbook.core.exceptions.base import SalonbookError, exception_factory


class ConfigurationError(SalonbookError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(SalonbookError):
    """Malformed input or a forbidden state transition."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(SalonbookError):
    """Plan, appointment or other record identifier does not resolve."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class ForbiddenError(SalonbookError):
    """Caller lacks the admin capability required by the operation."""

    default_code = "FORBIDDEN"
    default_http_status = 403


class ConflictError(SalonbookError):
    """Resource state conflict (duplicate, already claimed)."""

    default_code = "CONFLICT"
    default_http_status = 409


class SlotTakenError(ConflictError):
    """A non-cancelled appointment already holds the requested date/time slot."""

    default_code = "SLOT_TAKEN"


class SessionClaimedError(ConflictError):
    """A non-cancelled appointment already claims this plan session number."""

    default_code = "SESSION_CLAIMED"


class ExternalServiceError(SalonbookError):
    """External service (database, WhatsApp gateway) failed."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    default_http_status = 502


# Opaque: the core never subdivides backend or network failures.
RemoteFailure = exception_factory(
    "RemoteFailure",
    code="REMOTE_FAILURE",
    http_status=502,
    base=ExternalServiceError,
)
