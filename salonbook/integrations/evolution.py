"""Evolution API client: outbound WhatsApp text messages."""
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Optional

import httpx

from salonbook.core.exceptions import ConfigurationError, RemoteFailure

if TYPE_CHECKING:
    from salonbook.config import EvolutionConfig

logger = logging.getLogger(__name__)

_SEND_PATH = "/message/sendText/{instance}"
_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str) -> Optional[str]:
    """Digits only, Brazilian country code prepended when missing. None when empty."""
    digits = _NON_DIGITS.sub("", phone or "")
    if not digits:
        return None
    return digits if digits.startswith("55") else f"55{digits}"


class EvolutionClient:
    def __init__(self, config: "EvolutionConfig", *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        if not config.is_configured:
            raise ConfigurationError("Evolution API is not configured")
        self._url = config.api_url.rstrip("/") + _SEND_PATH.format(instance=config.instance_name)
        self._headers = {
            "apikey": config.api_key,
            "Content-Type": "application/json",
        }
        self._timeout = config.timeout
        self._transport = transport

    async def send_text(self, phone: str, text: str) -> str:
        """Send *text* to *phone*. Returns the normalized number; raises RemoteFailure."""
        number = normalize_phone(phone)
        if number is None:
            raise RemoteFailure("Cannot send WhatsApp message without a phone number")
        payload = {"number": number, "text": text}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(self._url, headers=self._headers, json=payload)
        except httpx.HTTPError as exc:
            raise RemoteFailure(
                f"Evolution API unreachable: {exc.__class__.__name__}",
                details={"number": number},
                cause=exc,
            )
        if resp.status_code not in (200, 201):
            raise RemoteFailure(
                f"Evolution API send failed with status {resp.status_code}",
                details={"number": number, "status": resp.status_code, "body": resp.text[:500]},
            )
        logger.info("EvolutionClient: message sent to %s", number)
        return number
