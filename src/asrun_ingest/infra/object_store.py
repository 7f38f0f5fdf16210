"""Object stores for uploaded log files: S3 (boto3) and a local directory."""

from __future__ import annotations

from pathlib import Path

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from ..domain.interfaces import ObjectStore
from .exceptions import ObjectStoreError
from .settings import settings

logger = structlog.get_logger(__name__)


class S3ObjectStore(ObjectStore):
    def __init__(self, client=None, region_name: str | None = None) -> None:
        self._client = client or boto3.client("s3", region_name=region_name or settings.aws_region)

    def get_object(self, bucket: str, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code")
            raise ObjectStoreError(f"s3://{bucket}/{key}: {error_code or exc}") from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(f"s3://{bucket}/{key}: {exc}") from exc


class LocalObjectStore(ObjectStore):
    """Reads objects from the filesystem; ``bucket`` is a directory (empty means CWD or absolute key)."""

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root) if root else None

    def _path(self, bucket: str, key: str) -> Path:
        path = Path(key)
        if path.is_absolute():
            return path
        base = self.root or Path.cwd()
        return base / bucket / key if bucket else base / key

    def get_object(self, bucket: str, key: str) -> bytes:
        path = self._path(bucket, key)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ObjectStoreError(f"{path}: {exc}") from exc
