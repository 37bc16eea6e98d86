"""
Object storage abstraction for S3-compatible buckets and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError


class StorageError(Exception):
    """Raised when the object store rejects an upload or removal."""


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def upload_bytes(
        self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None
    ) -> None:
        ...

    def public_url(self, bucket: str, path: str) -> str:
        ...

    def remove(self, bucket: str, paths: list[str]) -> None:
        ...

    def get_bytes(self, bucket: str, path: str) -> bytes:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def upload_bytes(
        self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None
    ) -> None:
        self.stored_objects[(bucket, path)] = bytes(data)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/{bucket}/{path}"

    def remove(self, bucket: str, paths: list[str]) -> None:
        for path in paths:
            self.stored_objects.pop((bucket, path), None)

    def get_bytes(self, bucket: str, path: str) -> bytes:
        stored = self.stored_objects.get((bucket, path))
        if stored is None:
            raise FileNotFoundError(f"{bucket}/{path}")
        return stored


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client. Logical buckets map one-to-one onto S3 buckets.

    Leave ``endpoint`` empty for AWS S3; set it for other S3-compatible stores.
    Empty keys defer to the default boto3 credential chain.
    """

    endpoint: str = ""
    region: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    public_base_url: str = ""

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "path" if self.endpoint else "auto"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def upload_bytes(
        self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None
    ) -> None:
        try:
            self._client.put_object(
                Bucket=bucket,
                Key=path,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Upload of {bucket}/{path} failed: {exc}") from exc

    def public_url(self, bucket: str, path: str) -> str:
        base = (self.public_base_url or self.endpoint).rstrip("/")
        if base:
            return f"{base}/{bucket}/{path}"
        if self.region:
            return f"https://{bucket}.s3.{self.region}.amazonaws.com/{path}"
        return f"https://{bucket}.s3.amazonaws.com/{path}"

    def remove(self, bucket: str, paths: list[str]) -> None:
        if not paths:
            return
        try:
            self._client.delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": path} for path in paths]},
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Removal from {bucket} failed: {exc}") from exc

    def get_bytes(self, bucket: str, path: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=bucket, Key=path)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise FileNotFoundError(f"{bucket}/{path}") from exc
            raise StorageError(f"Download of {bucket}/{path} failed: {exc}") from exc
        return response["Body"].read()
