"""Upload events: S3-style notification payloads to log file references."""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote_plus

from ..infra.exceptions import InvalidEventError
from .ingest_orchestrator import LogFileRef


def file_refs_from_event(event: Any) -> list[LogFileRef]:
    """Extract ``(bucket, key)`` for every record; keys are URL-decoded (``+`` is a space).

    Raises InvalidEventError when the payload has no readable records.
    """
    if not isinstance(event, dict):
        raise InvalidEventError("event must be a mapping")
    records = event.get("Records")
    if not isinstance(records, list):
        raise InvalidEventError("event has no Records list")

    refs: list[LogFileRef] = []
    for position, record in enumerate(records):
        try:
            s3 = record["s3"]
            bucket = s3["bucket"]["name"]
            key = s3["object"]["key"]
        except (KeyError, TypeError) as exc:
            raise InvalidEventError(f"record {position} is missing s3 bucket/key") from exc
        if not isinstance(bucket, str) or not isinstance(key, str) or not key:
            raise InvalidEventError(f"record {position} has an invalid s3 bucket/key")
        refs.append(LogFileRef(bucket=bucket, key=unquote_plus(key)))
    return refs
