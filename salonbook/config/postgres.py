"""
salonbook.config.postgres – where the booking database lives and how the pool behaves.

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT,
DB_POOL_RECYCLE, DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

from salonbook.core.exceptions import ConfigurationError

_SCHEMES = ("postgresql", "postgres", "postgresql+asyncpg")
_SAFE_DBNAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class PostgresConfig:
    url: str = "postgresql://localhost/salonbook"
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800
    """Seconds before a pooled connection is replaced."""

    echo: bool = False
    application_name: str = "salonbook-api"

    def __post_init__(self) -> None:
        scheme = urlsplit(self.url.strip()).scheme if self.url else ""
        if scheme not in _SCHEMES:
            raise ConfigurationError(
                f"DATABASE_URL must use one of {', '.join(s + '://' for s in _SCHEMES)}"
            )
        for name, floor in (("pool_size", 1), ("max_overflow", 0), ("pool_timeout", 1), ("pool_recycle", 1)):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < floor:
                raise ConfigurationError(f"{name} must be an integer >= {floor}, got {value!r}")
        if not self.application_name.strip():
            raise ConfigurationError("DB_APPLICATION_NAME must not be empty")

    @property
    def async_url(self) -> str:
        """Same DSN on the asyncpg driver."""
        parts = urlsplit(self.url.strip())
        return urlunsplit(parts._replace(scheme="postgresql+asyncpg"))

    @property
    def database_name(self) -> str:
        return urlsplit(self.url.strip()).path.strip("/") or "postgres"

    @property
    def has_safe_name(self) -> bool:
        """True when the database name can be quoted into CREATE DATABASE."""
        return bool(_SAFE_DBNAME.match(self.database_name))

    @property
    def maintenance_url(self) -> str:
        """Plain asyncpg DSN of the ``postgres`` database on the same server."""
        parts = urlsplit(self.url.strip())
        return urlunsplit(parts._replace(scheme="postgresql", path="/postgres"))

    @classmethod
    def from_env(cls, **overrides: object) -> PostgresConfig:
        def _get(attr: str, var: str, default: str) -> str:
            v = overrides.get(attr)
            return str(v) if v is not None else os.environ.get(var, default)

        return cls(
            url=_get("url", "DATABASE_URL", cls.url).strip(),
            pool_size=int(_get("pool_size", "DB_POOL_SIZE", "10")),
            max_overflow=int(_get("max_overflow", "DB_MAX_OVERFLOW", "20")),
            pool_timeout=int(_get("pool_timeout", "DB_POOL_TIMEOUT", "30")),
            pool_recycle=int(_get("pool_recycle", "DB_POOL_RECYCLE", "1800")),
            echo=_get("echo", "DB_ECHO", "").strip().lower() in ("1", "true", "yes"),
            application_name=_get("application_name", "DB_APPLICATION_NAME", "salonbook-api"),
        )


def load_postgres_config(**overrides: object) -> PostgresConfig:
    return PostgresConfig.from_env(**overrides)
