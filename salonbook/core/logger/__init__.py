"""
salonbook logger: readable console lines plus an optional rotating JSON file.

Call configure() once (API lifespan, scripts). Modules then use
``logging.getLogger(__name__)`` and pass booking identifiers via ``extra=``.
"""
from salonbook.core.logger.config import LoggerConfig
from salonbook.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from salonbook.core.logger.setup import configure

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
]
