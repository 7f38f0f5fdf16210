"""
Logging configuration for asrun-ingest.

structlog renders one JSON object per event through the stdlib logging
handlers. Secrets never reach the renderer: database credentials, AWS keys and
presigned-URL signatures are masked by ``redact_secrets``.
"""

import logging
import re
from typing import Any

import structlog

from .settings import settings

REDACTED = "***REDACTED***"

# Event keys whose whole value is replaced
_SECRET_KEY_PARTS = (
    "password",
    "secret",
    "token",
    "api_key",
    "database_url",
    "connection_string",
    "aws_access_key_id",
    "authorization",
)

# (pattern, replacement) applied to string values
_SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"://[^:/@\s]+:[^@\s]+@"), "://***@"),  # user:password@host
    (re.compile(r"(?i)(X-Amz-(?:Signature|Credential|Security-Token))=[^&\s]+"), r"\1=***"),
    (re.compile(r"(?i)\b(token|password)=[^&\s]+"), r"\1=***"),
]


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        for pattern, replacement in _SECRET_PATTERNS:
            value = pattern.sub(replacement, value)
        return value
    if isinstance(value, dict):
        return {k: _redact_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact_value(item) for item in value]
    return value


def redact_secrets(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: mask secret-looking keys and credentials embedded in values."""
    for key in list(event_dict):
        if any(part in key.lower() for part in _SECRET_KEY_PARTS):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _redact_value(event_dict[key])
    return event_dict


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for JSON logging at ``level`` (default ``LOG_LEVEL``)."""
    logging.basicConfig(format="%(message)s", level=(level or settings.log_level).upper())
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            redact_secrets,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger bound with the service name and deployment environment."""
    return structlog.get_logger(name).bind(service="asrun-ingest", env=settings.env)
