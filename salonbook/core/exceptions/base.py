"""
SalonbookError: the one exception family raised by the ledger, services and
repositories.

A subclass fixes ``default_code`` and ``default_http_status``; the API error
handler turns any instance into ``{"detail", "code", "details"}`` with that
status. ``cause`` keeps the underlying driver or network error for logs only.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Type


class SalonbookError(Exception):
    default_code: str = "ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.http_status = http_status or self.default_http_status
        self.details: Dict[str, Any] = dict(details or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Public body for API responses. ``cause`` is never included."""
        body: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


def exception_factory(
    name: str,
    *,
    code: Optional[str] = None,
    http_status: int = 500,
    base: Type[SalonbookError] = SalonbookError,
) -> Type[SalonbookError]:
    """Declare a leaf error type in one line.

        RemoteFailure = exception_factory("RemoteFailure", http_status=502, base=ExternalServiceError)
    """
    return type(
        name,
        (base,),
        {
            "default_code": code or name.upper(),
            "default_http_status": http_status,
            "__doc__": f"{name} ({code or name.upper()}).",
        },
    )
