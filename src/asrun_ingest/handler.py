"""
Event-driven entry point: one upload event carrying a batch of log objects.

Returns a status/body response. Per-file problems are reported inside the
body; only an unreadable event or an unavailable catalog fails the whole
invocation.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from .domain.interfaces import ObjectStore
from .infra.logging import configure_logging, get_logger
from .infra.object_store import S3ObjectStore
from .infra.uow import SessionFactory
from .usecases.ingest_orchestrator import IngestionOrchestrator
from .usecases.s3_event import file_refs_from_event

logger = structlog.get_logger(__name__)


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {"statusCode": status_code, "body": json.dumps(body)}


def handle_event(
    event: Any,
    *,
    object_store: ObjectStore | None = None,
    session_factory: SessionFactory | None = None,
) -> dict[str, Any]:
    try:
        refs = file_refs_from_event(event)
        logger.info("event_received", files=len(refs))
        orchestrator = IngestionOrchestrator(object_store or S3ObjectStore(), session_factory)
        summary = orchestrator.ingest_batch(refs)
    except Exception as exc:
        logger.exception("event_failed", error=str(exc))
        return _response(500, {"success": False, "error": str(exc) or type(exc).__name__})
    return _response(200, summary.to_dict())


def handler(event: Any, context: Any = None) -> dict[str, Any]:
    configure_logging()
    get_logger(__name__).info("invocation_started", request_id=getattr(context, "aws_request_id", None))
    return handle_event(event)
