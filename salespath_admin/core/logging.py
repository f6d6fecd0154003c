"""
Logging for the admin backend.

Everything logs under the "salespath" logger. Production emits one JSON
object per line; other environments get a single readable line. The
request id set by RequestIdMiddleware is attached to every record.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Optional

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Structured fields copied from `extra=` into JSON output when present
_EXTRA_FIELDS = (
    "path",
    "method",
    "status",
    "latency_bucket",
    "error_code",
    "business_id",
    "business_count",
    "actor_id",
    "event_type",
)

# (upper bound in ms, label); anything slower is ">=1000ms"
_LATENCY_BUCKETS = (
    (10, "<10ms"),
    (100, "10-100ms"),
    (500, "100-500ms"),
    (1000, "500-1000ms"),
)

_EXTRA_VALUE_LIMIT = 500


def get_request_id() -> Optional[str]:
    return request_id_ctx_var.get()


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    """Coarse latency label so log aggregation can group by it."""
    if latency_ms is None:
        return "unknown"
    for upper, label in _LATENCY_BUCKETS:
        if latency_ms < upper:
            return label
    return ">=1000ms"


def _utc_timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": _utc_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(
            (field, getattr(record, field))
            for field in _EXTRA_FIELDS
            if getattr(record, field, None) is not None
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PrettyFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "request_id", None)
        line = f"{_utc_timestamp(record)} {record.levelname} [{record.name}]"
        if rid:
            line += f" [rid={rid}]"
        line += f" {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(env: str = "development") -> None:
    """Install the stdout handler on the "salespath" logger (JSON in production)."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if env.lower() == "production" else PrettyFormatter())
    handler.addFilter(RequestIdFilter())

    logger = logging.getLogger("salespath")
    logger.setLevel(logging.INFO)
    logger.handlers = [handler]
    logger.propagate = True


def _truncate(value) -> str:
    text = str(value)
    if len(text) <= _EXTRA_VALUE_LIMIT:
        return text
    return text[:_EXTRA_VALUE_LIMIT] + "...<truncated>"


def log_event(
    level: str,
    msg: str,
    *,
    actor_id: Optional[str] = None,
    business_id: Optional[str] = None,
    event_type: Optional[str] = None,
    extra: Optional[Dict[str, object]] = None,
):
    """Audit-style event on the "salespath" logger; extra values are truncated."""
    fields = {"actor_id": actor_id, "business_id": business_id, "event_type": event_type}
    for key, value in (extra or {}).items():
        fields[key] = _truncate(value)
    logger = logging.getLogger("salespath")
    log_fn = getattr(logger, level, logger.info)
    log_fn(msg, extra=fields)
