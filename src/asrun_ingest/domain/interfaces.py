"""Collaborator interfaces for object storage, clip extraction and analysis launch."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ObjectStore(ABC):
    """Read access to uploaded log objects."""

    @abstractmethod
    def get_object(self, bucket: str, key: str) -> bytes:
        """
        Fetch the raw bytes of an object.

        Raises:
            ObjectStoreError: if the object cannot be read
        """
        raise NotImplementedError


class ClipExtractor(ABC):
    """Produces a video clip for a resolved stream window and returns its object key."""

    @abstractmethod
    def extract_clip(self, stream_url: str, start: datetime, duration_seconds: int) -> str:
        raise NotImplementedError


class PipelineLauncher(ABC):
    """Starts downstream analysis of one broadcast."""

    @abstractmethod
    def launch(self, broadcast_id: str) -> str:
        """Launch the analysis job for ``broadcast_id`` and return the job identifier."""
        raise NotImplementedError
