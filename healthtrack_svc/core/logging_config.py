"""
Structured JSON logging configuration.

Every log line is a single JSON object so the service can be shipped to
Loki/CloudWatch without parsing. Request ids are carried in a ContextVar set
by LoggingMiddleware, so service and repository code never passes them around.

Log Structure (JSON):
{
    "timestamp": "2025-01-15T10:30:00.123Z",
    "level": "INFO",
    "logger": "services.statistics_service",
    "message": "Statistics computed",
    "request_id": "abc12345",
    "extra": {"user_id": 3, "measurement_type": "glucose"}
}

Free-text measurement notes are health data and never reach the log output:
any extra field listed in REDACTED_FIELDS is replaced before formatting.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

APP_LOGGERS = ("core", "api", "services", "repositories", "models")
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

REDACTED_FIELDS = frozenset({"notes", "email"})
REDACTED = "[redacted]"

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Attributes set on every LogRecord; anything else arrived via extra={...}
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def clear_request_id() -> None:
    request_id_var.set(None)


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = {}
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRS or key.startswith("_"):
            continue
        fields[key] = REDACTED if key in REDACTED_FIELDS and value else value
    return fields


class JSONFormatter(logging.Formatter):
    """Compact single-line JSON with millisecond UTC timestamps."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.strftime("%Y-%m-%dT%H:%M:%S.") + f"{created.microsecond // 1000:03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        extra = _extra_fields(record)
        if extra:
            entry["extra"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """
    Route the application and uvicorn loggers through one stdout handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines when True, a human-readable format otherwise
    """
    level = level.upper()

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for name in APP_LOGGERS + UVICORN_LOGGERS:
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.propagate = True
        if name in APP_LOGGERS:
            logger.setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"level": level, "format": "json" if json_format else "text"}
    )
