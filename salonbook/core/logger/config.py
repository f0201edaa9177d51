"""
LoggerConfig: where salonbook logs go and how loud they are.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class LoggerConfig:
    """Console always human-readable; the optional file sink is JSON lines.

    ``quiet`` names third-party loggers held at WARNING so request traffic
    does not bury booking events. ``sql_echo`` lifts ``sqlalchemy.engine``
    back to INFO for debugging queries.
    """

    level: str = "INFO"
    log_dir: Optional[str] = None
    log_file_basename: str = "salonbook"
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    console: bool = True
    sql_echo: bool = False
    quiet: Tuple[str, ...] = field(
        default=("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")
    )

    @property
    def file_path(self) -> Optional[str]:
        if not (self.log_dir and self.log_dir.strip()):
            return None
        return os.path.join(self.log_dir, f"{self.log_file_basename}.log")

    @classmethod
    def from_env(cls) -> LoggerConfig:
        """LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES, LOG_BACKUP_COUNT, LOG_CONSOLE, LOG_SQL."""
        return cls(
            level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
            log_dir=os.environ.get("LOG_DIR") or None,
            log_file_basename=os.environ.get("LOG_FILE_BASENAME", "salonbook"),
            max_bytes=int(os.environ.get("LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            backup_count=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
            console=_env_flag("LOG_CONSOLE", True),
            sql_echo=_env_flag("LOG_SQL", False),
        )
