"""JSON logging for the catalog service.

Every record leaves the process as one JSON object. Credentials are masked
and client addresses are replaced by a short digest before formatting, so
admission and auth events can be correlated per client without storing
the address itself.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from catalog_api.core.config import LogSettings, settings

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"

# Credential material carried in headers, payloads or auth events
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "x-api-key",
        "x-api-token",
        "api_key",
        "authorization",
        "credential",
        "access_token",
        "token",
        "password",
        "password_hash",
        "cookie",
    }
)

# Client addresses; logged as a fingerprint instead of the raw value
CLIENT_KEYS_DEFAULT: frozenset[str] = frozenset(
    {"client_id", "client_ip", "remote_addr", "x-forwarded-for"}
)

# Attributes every LogRecord carries, plus those set during formatting
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def set_request_id(request_id: str | None) -> None:
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set(None)


def fingerprint(value: str) -> str:
    """Short SHA-256 digest for logging identifiers without exposing them."""

    return hashlib.sha256(value.encode()).hexdigest()[:16]


class SensitiveDataFilter(logging.Filter):
    """Mask credentials and fingerprint client addresses on a record.

    Keys are matched case-insensitively at any nesting depth inside the
    record's extras. Credential values become ``[REDACTED]``; client address
    values become ``fingerprint(value)``. Already-masked values are left
    alone so a record that passes through two handlers is not hashed twice.
    """

    def __init__(
        self,
        sensitive_keys: Iterable[str] | None = None,
        client_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__()
        self.sensitive_keys = {k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT)}
        self.client_keys = {k.lower() for k in (client_keys or CLIENT_KEYS_DEFAULT)}

    def scrub(self, key: str, value: Any) -> Any:
        lowered = key.lower()
        if lowered in self.sensitive_keys:
            return REDACTED
        if lowered in self.client_keys and isinstance(value, str):
            return value if value.startswith("fp:") else f"fp:{fingerprint(value)}"
        if isinstance(value, Mapping):
            return {k: self.scrub(str(k), v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(self.scrub("", v) for v in value)
        return value

    def filter(self, record: LogRecord) -> bool:
        for key, value in extras(record).items():
            setattr(record, key, self.scrub(key, value))
        return True


class RequestIdFilter(logging.Filter):
    """Attach request_id from context when absent on the record."""

    def filter(self, record: LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            request_id = get_request_id()
            if request_id:
                record.request_id = request_id
        return True


def extras(record: LogRecord) -> dict[str, Any]:
    """Fields passed through ``extra=`` (or set by filters) on a record."""

    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record: event name, level, logger, request id, extras."""

    def format(self, record: LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id
        payload.update(extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/catalog_api.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        file_path,
        maxBytes=log_settings.max_bytes,
        backupCount=log_settings.backup_count,
        encoding="utf-8",
    )


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install the JSON handler on the root logger.

    Filters run in order: the request id is attached first, then extras are
    scrubbed, so the formatter only ever sees masked values.
    """

    cfg = log_settings or settings.log

    handler = _build_handler(cfg)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))

    # uvicorn installs its own handlers; stop its records reaching root twice
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.access").propagate = False
