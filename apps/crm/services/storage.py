"""Blob storage backends for uploaded files.

The rest of the app only needs two things from storage: store bytes under a
key and get back a durable public URL, and refuse early when the backend is not
configured.
"""

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

import boto3
import httpx
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from apps.crm.config import Settings
from apps.crm.core.errors import UnavailableError


class StorageError(RuntimeError):
    pass


class Storage:
    def missing_config(self) -> list[str]:
        """Names of settings that must be filled in before this backend works."""
        return []

    def ensure_configured(self) -> None:
        missing = self.missing_config()
        if missing:
            raise UnavailableError(
                f"File storage is not configured. Missing settings: {', '.join(missing)}"
            )

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        """Store ``data`` under ``key`` and return its public URL."""
        raise NotImplementedError


@dataclass(frozen=True)
class LocalStorage(Storage):
    """Files on local disk, served by the API under ``/files``."""

    root: Path
    public_base_url: str

    def _path(self, key: str) -> Path:
        safe_key = key.lstrip("/").replace("\\", "/")
        return self.root / safe_key

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        p = self._path(key)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Local write failed: {e}") from e
        return f"{self.public_base_url.rstrip('/')}/files/{quote(key)}"


@dataclass(frozen=True)
class S3Storage(Storage):
    """Any S3-compatible object store (AWS, DigitalOcean Spaces, MinIO)."""

    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str
    public_base_url: str
    timeout: float

    def missing_config(self) -> list[str]:
        required = {
            "S3_BUCKET": self.bucket,
            "S3_ACCESS_KEY_ID": self.access_key_id,
            "S3_SECRET_ACCESS_KEY": self.secret_access_key,
        }
        return [name for name, value in required.items() if not value]

    def _client(self):
        return boto3.client(
            "s3",
            endpoint_url=f"https://{self.endpoint}" if self.endpoint else None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=Config(
                connect_timeout=self.timeout,
                read_timeout=self.timeout,
                retries={"max_attempts": 1},
            ),
        )

    def _public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quote(key)}"
        if self.endpoint:
            return f"https://{self.bucket}.{self.endpoint}/{quote(key)}"
        return f"https://{self.bucket}.s3.amazonaws.com/{quote(key)}"

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        extra: dict[str, object] = {"ACL": "public-read"}
        if content_type:
            extra["ContentType"] = content_type
        try:
            self._client().put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"S3 upload failed: {e}") from e
        return self._public_url(key)


@dataclass(frozen=True)
class VercelBlobStorage(Storage):
    """Vercel Blob store, addressed through its HTTP API."""

    token: str
    api_url: str
    timeout: float

    def missing_config(self) -> list[str]:
        return [] if self.token else ["BLOB_READ_WRITE_TOKEN"]

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        headers = {
            "authorization": f"Bearer {self.token}",
            "x-api-version": "7",
            "x-add-random-suffix": "0",
        }
        if content_type:
            headers["x-content-type"] = content_type
        try:
            response = httpx.put(
                f"{self.api_url.rstrip('/')}/{quote(key)}",
                content=data,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageError(f"Blob upload failed: {e}") from e
        try:
            return response.json()["url"]
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Unexpected blob API response: {e}") from e


def storage_from_settings(settings: Settings) -> Storage:
    backend = settings.storage_backend
    if backend == "s3":
        return S3Storage(
            endpoint=settings.s3_endpoint.strip(),
            region=settings.s3_region.strip(),
            bucket=settings.s3_bucket.strip(),
            access_key_id=settings.s3_access_key_id.strip(),
            secret_access_key=settings.s3_secret_access_key.strip(),
            public_base_url=settings.s3_public_base_url.strip(),
            timeout=settings.storage_timeout_seconds,
        )
    if backend == "vercel_blob":
        return VercelBlobStorage(
            token=settings.blob_read_write_token.strip(),
            api_url=settings.blob_api_url.strip(),
            timeout=settings.storage_timeout_seconds,
        )
    # default local
    return LocalStorage(root=Path(settings.upload_dir), public_base_url=settings.public_base_url)
