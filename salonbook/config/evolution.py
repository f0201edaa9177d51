"""
salonbook.config.evolution – WhatsApp notifications through the Evolution API.

Env vars: EVOLUTION_ENABLED, EVOLUTION_NOTIFICATIONS_ENABLED, EVOLUTION_API_URL,
EVOLUTION_API_KEY, EVOLUTION_INSTANCE_NAME, EVOLUTION_TIMEOUT, ADMIN_PHONES,
WHATSAPP_REMINDER_ENABLED, WHATSAPP_REMINDER_TEXT, CLINIC_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from salonbook.core.exceptions import ConfigurationError

DEFAULT_REMINDER_TEXT = (
    "Olá {nome}! 🔔 Lembrete: você tem um agendamento de *{servico}* hoje às *{hora}*. "
    "Te esperamos! 💖"
)


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(x.strip() for x in (value or "").split(",") if x.strip())


@dataclass(frozen=True)
class EvolutionConfig:
    enabled: bool = False
    notifications_enabled: bool = False
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    instance_name: Optional[str] = None
    timeout: int = 15
    admin_phones: Tuple[str, ...] = field(default_factory=tuple)
    reminder_enabled: bool = False
    reminder_text: str = DEFAULT_REMINDER_TEXT
    clinic_name: str = "Rosa de Lis — Estética Avançada"

    def __post_init__(self) -> None:
        if self.api_url and not self.api_url.startswith(("http://", "https://")):
            raise ConfigurationError("EVOLUTION_API_URL must start with http:// or https://")
        if not isinstance(self.timeout, int) or self.timeout < 1:
            raise ConfigurationError(f"timeout must be a positive integer, got {self.timeout!r}")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_key and self.instance_name)

    @property
    def can_notify(self) -> bool:
        """Both switches on and credentials present."""
        return self.enabled and self.notifications_enabled and self.is_configured

    @classmethod
    def from_env(cls, **overrides: object) -> EvolutionConfig:
        def _get(attr: str, var: str, default: str = "") -> str:
            v = overrides.get(attr)
            return str(v) if v is not None else os.environ.get(var, default)

        api_url = _get("api_url", "EVOLUTION_API_URL").strip().rstrip("/") or None
        return cls(
            enabled=_flag(_get("enabled", "EVOLUTION_ENABLED")),
            notifications_enabled=_flag(
                _get("notifications_enabled", "EVOLUTION_NOTIFICATIONS_ENABLED")
            ),
            api_url=api_url,
            api_key=_get("api_key", "EVOLUTION_API_KEY").strip() or None,
            instance_name=_get("instance_name", "EVOLUTION_INSTANCE_NAME").strip() or None,
            timeout=int(_get("timeout", "EVOLUTION_TIMEOUT", "15")),
            admin_phones=_split_csv(_get("admin_phones", "ADMIN_PHONES")),
            reminder_enabled=_flag(_get("reminder_enabled", "WHATSAPP_REMINDER_ENABLED")),
            reminder_text=_get("reminder_text", "WHATSAPP_REMINDER_TEXT") or DEFAULT_REMINDER_TEXT,
            clinic_name=_get("clinic_name", "CLINIC_NAME") or "Rosa de Lis — Estética Avançada",
        )


def load_evolution_config(**overrides: object) -> EvolutionConfig:
    return EvolutionConfig.from_env(**overrides)
