"""
Custom exceptions for asrun-ingest operations.

Line-level decode problems are recovered inside the decoder; file-level
problems are recorded in the ingestion summary; only an unreadable event is
fatal to a whole invocation.
"""


class AsRunIngestError(Exception):
    """Base exception for all asrun-ingest errors."""

    pass


class ValidationError(AsRunIngestError):
    """Raised when validation fails."""

    pass


class LogDecodeError(AsRunIngestError):
    """Raised when a single log line cannot be decoded."""

    def __init__(self, line_number: int, message: str) -> None:
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number


class FilenameError(AsRunIngestError):
    """Raised when a log filename is unrecognized or names an unsupported region/channel."""

    pass


class InvalidEventError(AsRunIngestError):
    """Raised when an ingestion event payload cannot be read at all."""

    pass


class NotFoundError(AsRunIngestError):
    """Raised when a requested record does not exist."""

    pass


class ProgramNotFoundError(NotFoundError):
    pass


class DayNotFoundError(NotFoundError):
    pass


class BroadcastNotFoundError(NotFoundError):
    pass


class PersistenceError(AsRunIngestError):
    """Raised when the broadcast store fails (timeout, constraint violation)."""

    pass


class ObjectStoreError(AsRunIngestError):
    """Raised when a log object cannot be fetched."""

    pass
