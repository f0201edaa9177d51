"""
Formatters. Both render the booking context passed through ``extra=``:

    logger.info("booked %s", appt.id, extra={"event": "booked", "appointment_id": str(appt.id)})
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

CONTEXT_KEYS = ("event", "appointment_id", "plan_id", "partner_id", "user_id")


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: getattr(record, key)
        for key in CONTEXT_KEYS
        if getattr(record, key, None) is not None
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line, context under ``"context"``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        context = record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class PlainConsoleFormatter(logging.Formatter):
    """``2025-03-10 14:00:00 INFO salonbook.x | message [event=booked appointment_id=...]``"""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        tail = " ".join(f"{k}={v}" for k, v in context.items())
        head, sep, rest = line.partition("\n")
        return f"{head} [{tail}]{sep}{rest}"
