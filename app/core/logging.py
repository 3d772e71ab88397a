"""Structured logging for the API.

Every record leaves the process as one JSON object carrying the request id
of the HTTP request that produced it. Before formatting, structured fields
are scrubbed: credential-like keys (backend keys, session tokens, cookies,
dossier login data) are replaced with ``[REDACTED]`` and JWTs embedded in
free-text values are masked.

Configuration comes from ``LOG_*`` settings (see ``LogSettings``).
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from app.core.config import LogSettings, settings

REDACTED = "[REDACTED]"

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        # backend and provider credentials
        "apikey",
        "api_key",
        "llm_api_key",
        "anon_key",
        "service_role_key",
        "secret",
        "base_url",
        # caller sessions
        "authorization",
        "cookie",
        "set-cookie",
        "token",
        "access_token",
        "refresh_token",
        "password",
        "signed_url",
        # LLM payloads
        "prompt",
        "completion",
        # dossier section holding applicant-system logins
        "application_system",
    }
)

# Any key ending like this is treated as sensitive too.
_SENSITIVE_SUFFIXES = ("_token", "_secret", "_password")

_JWT = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]*")

# LogRecord attributes that are not structured payload.
_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    }
)


def set_request_id(request_id: str | None) -> None:
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set(None)


def fingerprint(value: str) -> str:
    """Short, stable, non-reversible id for tokens, user keys and addresses.

    Lets log lines be correlated without exposing the value itself.
    """

    return hashlib.sha256(value.encode()).hexdigest()[:16]


def is_sensitive_key(key: str, sensitive_keys: Iterable[str] = SENSITIVE_KEYS_DEFAULT) -> bool:
    lowered = key.lower()
    return lowered in sensitive_keys or lowered.endswith(_SENSITIVE_SUFFIXES)


def redact(value: Any, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT) -> Any:
    """Return ``value`` with sensitive entries masked, recursing into containers.

    Examples:
        >>> redact({"user_id": "u1", "headers": {"apikey": "k"}})
        {'user_id': 'u1', 'headers': {'apikey': '[REDACTED]'}}
        >>> redact("rejected eyJhbGci.eyJzdWIi.sig")
        'rejected [REDACTED]'
    """

    if isinstance(value, Mapping):
        return {
            k: REDACTED if is_sensitive_key(str(k), sensitive_keys) else redact(v, sensitive_keys)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(redact(v, sensitive_keys) for v in value)
    if isinstance(value, str) and "eyJ" in value:
        return _JWT.sub(REDACTED, value)
    return value


def record_fields(record: LogRecord, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT) -> dict[str, Any]:
    """Structured (``extra=``) fields of a record, already redacted."""

    return {
        key: REDACTED if is_sensitive_key(key, sensitive_keys) else redact(value, sensitive_keys)
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class RequestIdFilter(logging.Filter):
    """Attach the current request id to records that lack one."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, "request_id", None) is None:
            request_id = get_request_id()
            if request_id:
                record.request_id = request_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Redact structured fields in place so every formatter sees safe values."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(sensitive_keys or SENSITIVE_KEYS_DEFAULT)

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        for key, value in record_fields(record, self.sensitive_keys).items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record; Japanese text is kept readable."""

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        ensure_ascii: bool = False,
    ) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(sensitive_keys or SENSITIVE_KEYS_DEFAULT)
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id

        payload.update(record_fields(record, self.sensitive_keys))

        if record.exc_info:
            payload["exception"] = redact(self.formatException(record.exc_info), self.sensitive_keys)

        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/app.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes:
        return RotatingFileHandler(
            file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(file_path, encoding="utf-8")


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install the JSON (or plain) handler on the root logger.

    Args:
        log_settings: Optional log settings; defaults to global settings if omitted.
    """

    cfg = log_settings or settings.log
    level = getattr(logging, cfg.level.upper(), logging.INFO)

    handler = _build_handler(cfg)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())

    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # uvicorn installs its own handlers
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.access").propagate = False

    # httpx logs every backend call (including signed storage paths) at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
