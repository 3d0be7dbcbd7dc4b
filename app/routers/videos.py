"""
Feed videos: public listing, admin create / upload / delete.
Binaries live in blob storage (see app/services/blob_storage.py); rows keep the public URL.
"""
import logging
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.orm import Session
from app.auth import get_current_admin
from app.config import get_settings
from app.database import get_db
from app.models.video import Video
from app.schemas.video import VideoCreate, VideoResponse
from app.services.blob_storage import BlobStorageError, get_blob_storage
from app.services.catalog import create_video, list_videos as query_videos
from app.services.video_upload import UploadRejected, save_video_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["videos"])


@router.get("", response_model=list[VideoResponse])
def list_videos(
    category_id: str | None = Query(None, alias="categoryId"),
    db: Session = Depends(get_db),
):
    """All videos (optionally one category), by display order then newest first."""
    return query_videos(db, category_id)


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(video_id: str, db: Session = Depends(get_db)):
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    return video


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def create_video_row(
    body: VideoCreate,
    _admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Admin: record a video whose file is already stored (URL from POST /api/upload)."""
    title = body.title.strip()
    url = body.url.strip()
    if not title or not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title and URL are required")
    try:
        video = create_video(
            db,
            title=title,
            url=url,
            category_id=(body.category_id or "").strip() or None,
            duration=(body.duration or "").strip() or None,
        )
    except LookupError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    db.commit()
    db.refresh(video)
    logger.info("Video %s created: %s", video.id, video.url)
    return video


@router.post("/upload", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def upload_video(
    video: UploadFile = File(...),
    title: str = Form(""),
    category_id: str | None = Form(None, alias="categoryId"),
    duration: str | None = Form(None),
    _admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage=Depends(get_blob_storage),
):
    """Admin: upload a video file and create its row in one request."""
    try:
        return save_video_upload(
            video,
            storage,
            db,
            title=title,
            category_id=category_id,
            duration=duration,
            max_bytes=get_settings().max_upload_bytes,
        )
    except UploadRejected as e:
        logger.info("Upload rejected: %s", e.detail)
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except BlobStorageError:
        logger.exception("Blob write failed for upload %r", video.filename)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to upload video")


def _delete_video(video_id: str, db: Session, storage) -> Response:
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    storage_key = video.storage_key
    db.delete(video)
    db.commit()
    logger.info("Video %s deleted", video_id)
    if storage_key:
        # Row is already gone; a failed blob delete only leaves an unreferenced object.
        try:
            storage.delete(storage_key)
        except BlobStorageError:
            logger.exception("Blob %s of deleted video %s was not removed", storage_key, video_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_video(
    video_id: str,
    _admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage=Depends(get_blob_storage),
):
    return _delete_video(video_id, db, storage)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_video_by_query(
    video_id: str | None = Query(None, alias="id"),
    _admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage=Depends(get_blob_storage),
):
    """Same as DELETE /api/videos/{id}; kept for clients that send ?id=."""
    if not video_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Video ID required")
    return _delete_video(video_id, db, storage)
