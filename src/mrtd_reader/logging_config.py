"""
Logging setup for the MRTD reader.

Every record is stamped with the service name. ``json`` output writes one object per line and
copies the reader's context keys (passport id, session state, data group) when a call site passes
them through ``extra``. Access keys and raw MRZ lines are only ever logged at DEBUG.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(service_name)s] %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = "INFO"
LOG_OFF_LEVEL = "OFF"
JSON_FORMAT = "json"

QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")

# LogRecord attribute -> JSON key
_RECORD_FIELDS = {
    "levelname": "level",
    "name": "logger",
    "module": "module",
    "funcName": "function",
    "lineno": "line",
}
CONTEXT_KEYS = ("passport_id", "session_state", "data_group")


class ServiceNameFilter(logging.Filter):
    """Stamp every record with the service name."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        return True


class ReaderJSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": getattr(record, "service_name", "unknown"),
            "message": record.getMessage(),
        }
        entry.update({key: getattr(record, attr) for attr, key in _RECORD_FIELDS.items()})
        entry.update({key: getattr(record, key) for key in CONTEXT_KEYS if hasattr(record, key)})

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _resolve(explicit: str | None, env_var: str, default: str) -> str:
    return explicit or os.environ.get(env_var) or default


def build_handler(service_name: str, log_format: str = DEFAULT_LOG_FORMAT) -> logging.Handler:
    """Stdout handler using ``log_format`` (a ``logging`` format string, or ``json``)."""
    handler = logging.StreamHandler(sys.stdout)
    if log_format.lower() == JSON_FORMAT:
        handler.setFormatter(ReaderJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(log_format))
    handler.addFilter(ServiceNameFilter(service_name))
    return handler


def setup_logging(
    service_name: str = "mrtd-reader",
    log_level_env_var: str = "MRTD_LOG_LEVEL",
    log_format_env_var: str = "MRTD_LOG_FORMAT",
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure the root logger for the reader.

    Explicit ``log_level``/``log_format`` arguments win over the environment.

    Args:
        service_name: Name stamped on every record
        log_level_env_var: Environment variable holding the level name
        log_format_env_var: Environment variable holding the format
        log_level: Level name, or ``OFF`` to silence everything
        log_format: A ``logging`` format string, or ``json``
    """
    level_name = _resolve(log_level, log_level_env_var, DEFAULT_LOG_LEVEL).upper()

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if level_name == LOG_OFF_LEVEL:
        root_logger.setLevel(logging.CRITICAL + 1)
        return

    level = logging.getLevelName(level_name)
    root_logger.setLevel(level if isinstance(level, int) else logging.INFO)
    root_logger.addHandler(
        build_handler(service_name, _resolve(log_format, log_format_env_var, DEFAULT_LOG_FORMAT))
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured for %s at %s", service_name, level_name)
