"""
configure(): attach handlers to the ``salonbook`` logger once at startup.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from salonbook.core.logger.config import LoggerConfig
from salonbook.core.logger.formatters import JsonFormatter, PlainConsoleFormatter

ROOT = "salonbook"


def _file_handler(config: LoggerConfig, root: logging.Logger) -> Optional[logging.Handler]:
    path = config.file_path
    if path is None:
        return None
    try:
        os.makedirs(config.log_dir, exist_ok=True)
    except OSError as exc:
        root.warning("Log dir %s unusable (%s); file logging off", config.log_dir, exc)
        return None
    handler = RotatingFileHandler(
        path, maxBytes=config.max_bytes, backupCount=config.backup_count, encoding="utf-8"
    )
    handler.setFormatter(JsonFormatter())
    return handler


def configure(config: Optional[LoggerConfig] = None) -> logging.Logger:
    """Idempotent: calling again replaces the handlers instead of stacking them."""
    config = config or LoggerConfig.from_env()
    level = logging.getLevelName(config.level)
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger(ROOT)
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if config.console:
        console = logging.StreamHandler()
        console.setFormatter(PlainConsoleFormatter())
        root.addHandler(console)
    file_handler = _file_handler(config, root)
    if file_handler is not None:
        root.addHandler(file_handler)
    root.propagate = not root.handlers

    for name in config.quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
    if config.sql_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    return root
