"""
Upload pipeline: validate -> write blob -> insert video row.

Validation (title, content type, size, category) happens before any storage write.
The blob write and the row insert are two separate steps; if the insert fails the blob is
deleted again (compensating delete) so no orphaned objects are left behind. If that delete
also fails the orphan key is logged and the original error propagates.
"""
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from fastapi import UploadFile, status
from sqlalchemy.orm import Session

from app.models.category import Category
from app.models.video import Video
from app.services.blob_storage import BlobStorageError
from app.services.catalog import create_video

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {".mp4", ".mov", ".webm", ".ogg", ".m4v", ".mkv"}
# Browsers sometimes send these for .mov/.mp4; fall back to the extension then
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}
KEY_PREFIX = "videos"


class UploadRejected(Exception):
    """Upload failed validation; nothing was written to storage."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


@dataclass
class StoredBlob:
    key: str
    url: str
    content_type: str
    size: int


def normalized_content_type(content_type: str | None) -> str:
    return (content_type or "").split(";")[0].strip().lower()


def _extension(filename: str | None) -> str:
    ext = Path(filename or "").suffix.lower()
    if not ext or len(ext) > 10:
        return ".mp4"
    return ext


def is_video(content_type: str, filename: str | None) -> bool:
    if content_type.startswith("video/"):
        return True
    return content_type in GENERIC_CONTENT_TYPES and Path(filename or "").suffix.lower() in VIDEO_EXTENSIONS


def stream_size(fileobj: BinaryIO) -> int:
    """Size of a seekable upload without reading it into memory. Leaves the position at 0."""
    fileobj.seek(0, 2)
    size = fileobj.tell()
    fileobj.seek(0)
    return size


def generate_key(filename: str | None, now_ms: int | None = None) -> str:
    """videos/<epoch ms>-<random>.<ext>"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{KEY_PREFIX}/{now_ms}-{secrets.token_hex(4)}{_extension(filename)}"


def validate_video_file(file: UploadFile, max_bytes: int) -> tuple[str, int]:
    """Content type first, then size. Returns (content_type, size)."""
    if not file or not file.filename:
        raise UploadRejected(status.HTTP_400_BAD_REQUEST, "No file uploaded")
    content_type = normalized_content_type(file.content_type)
    if not is_video(content_type, file.filename):
        raise UploadRejected(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            f"File must be a video (e.g. video/mp4), got {content_type or 'unknown type'}",
        )
    size = stream_size(file.file)
    if size > max_bytes:
        raise UploadRejected(
            status.HTTP_413_CONTENT_TOO_LARGE,
            f"File is too large ({size} bytes); limit is {max_bytes} bytes",
        )
    if not content_type.startswith("video/"):
        content_type = "video/quicktime" if file.filename.lower().endswith(".mov") else "video/mp4"
    return content_type, size


def store_video_file(file: UploadFile, storage, max_bytes: int) -> StoredBlob:
    """Validate then write to blob storage. Raises UploadRejected before any write."""
    content_type, size = validate_video_file(file, max_bytes)
    key = generate_key(file.filename)
    url = storage.put(key, file.file, content_type)
    return StoredBlob(key=key, url=url, content_type=content_type, size=size)


def save_video_upload(
    file: UploadFile,
    storage,
    db: Session,
    *,
    title: str,
    max_bytes: int,
    category_id: str | None = None,
    duration: str | None = None,
) -> Video:
    """Full pipeline. Commits the row; on insert failure removes the blob and re-raises."""
    title = (title or "").strip()
    if not title:
        raise UploadRejected(status.HTTP_400_BAD_REQUEST, "Title is required")
    category_id = (category_id or "").strip() or None
    if category_id and db.query(Category).filter(Category.id == category_id).first() is None:
        raise UploadRejected(status.HTTP_404_NOT_FOUND, "Category not found")

    blob = store_video_file(file, storage, max_bytes)
    try:
        video = create_video(
            db,
            title=title,
            url=blob.url,
            category_id=category_id,
            duration=(duration or "").strip() or None,
            storage_key=blob.key,
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Video row insert failed; removing uploaded blob %s", blob.key)
        try:
            storage.delete(blob.key)
        except BlobStorageError:
            logger.exception("Compensating delete failed; orphaned blob %s", blob.key)
        raise
    db.refresh(video)
    logger.info("Video %s uploaded (%d bytes) as %s", video.id, blob.size, blob.key)
    return video
