"""
Blob storage for video binaries. Two backends with the same surface (put / delete / public_url):
- S3BlobStorage: any S3-compatible store (Cloudflare R2, MinIO, Backblaze B2) through boto3.
- LocalBlobStorage: files under upload_dir, served by the app at /uploads.
The S3 backend is used when settings.s3_bucket is set.
"""
import logging
import shutil
from pathlib import Path
from typing import BinaryIO

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from app.config import get_settings

logger = logging.getLogger(__name__)

LOCAL_URL_PREFIX = "/uploads"


class BlobStorageError(Exception):
    """Write or delete against the blob store failed."""


class S3BlobStorage:
    def __init__(self, client, bucket: str, public_url: str):
        self._s3 = client
        self.bucket = bucket
        self._public_url = public_url.rstrip("/")

    def public_url(self, key: str) -> str:
        return f"{self._public_url}/{key}"

    def put(self, key: str, fileobj: BinaryIO, content_type: str) -> str:
        """Upload and return the public URL. Multipart upload is handled by boto3 for large files."""
        try:
            self._s3.upload_fileobj(
                fileobj,
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type, "CacheControl": "public, max-age=31536000, immutable"},
            )
        except (BotoCoreError, ClientError) as e:
            raise BlobStorageError(f"Upload of {key} failed: {e}") from e
        logger.info("Stored blob s3://%s/%s", self.bucket, key)
        return self.public_url(key)

    def delete(self, key: str) -> None:
        try:
            self._s3.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise BlobStorageError(f"Delete of {key} failed: {e}") from e
        logger.info("Deleted blob s3://%s/%s", self.bucket, key)


class LocalBlobStorage:
    def __init__(self, root: Path, base_url: str = LOCAL_URL_PREFIX):
        self.root = root
        self._base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        """Resolve key under root. Raise if the key escapes the root (path traversal)."""
        base = self.root.resolve()
        full = (base / key).resolve()
        try:
            full.relative_to(base)
        except ValueError as e:
            raise BlobStorageError(f"Invalid blob key: {key}") from e
        return full

    def public_url(self, key: str) -> str:
        return f"{self._base_url}/{key}"

    def put(self, key: str, fileobj: BinaryIO, content_type: str) -> str:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as f:
                shutil.copyfileobj(fileobj, f)
        except OSError as e:
            raise BlobStorageError(f"Write of {key} failed: {e}") from e
        logger.info("Stored blob %s", path)
        return self.public_url(key)

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise BlobStorageError(f"Delete of {key} failed: {e}") from e
        logger.info("Deleted blob %s", path)


def local_upload_dir() -> Path:
    settings = get_settings()
    if settings.upload_dir:
        return Path(settings.upload_dir)
    return Path(__file__).resolve().parent.parent.parent / "uploads"


def get_s3_client():
    settings = get_settings()
    session = boto3.session.Session()
    return session.client(
        "s3",
        region_name=settings.s3_region or None,
        endpoint_url=settings.s3_endpoint_url or None,
        aws_access_key_id=settings.s3_access_key_id or None,
        aws_secret_access_key=settings.s3_secret_access_key or None,
        config=BotoConfig(s3={"addressing_style": "path"}, retries={"total_max_attempts": 1}),
    )


_blob_storage: S3BlobStorage | LocalBlobStorage | None = None


def get_blob_storage() -> S3BlobStorage | LocalBlobStorage:
    """FastAPI dependency: process-wide blob storage chosen from settings."""
    global _blob_storage
    if _blob_storage is not None:
        return _blob_storage
    settings = get_settings()
    if settings.s3_bucket:
        public_url = settings.s3_public_url or f"{settings.s3_endpoint_url.rstrip('/')}/{settings.s3_bucket}"
        _blob_storage = S3BlobStorage(get_s3_client(), settings.s3_bucket, public_url)
    else:
        base_url = settings.public_base_url.rstrip("/") + LOCAL_URL_PREFIX if settings.public_base_url else LOCAL_URL_PREFIX
        _blob_storage = LocalBlobStorage(local_upload_dir(), base_url)
    return _blob_storage
