"""Admin: store a video file and get its public URL back. The row is created separately (POST /api/videos)."""
import logging
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from app.auth import get_current_admin
from app.config import get_settings
from app.schemas.video import UploadResponse
from app.services.blob_storage import BlobStorageError, get_blob_storage
from app.services.video_upload import UploadRejected, store_video_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("", response_model=UploadResponse)
def upload_file(
    file: UploadFile = File(...),
    _admin: str = Depends(get_current_admin),
    storage=Depends(get_blob_storage),
):
    try:
        blob = store_video_file(file, storage, get_settings().max_upload_bytes)
    except UploadRejected as e:
        logger.info("Upload rejected: %s", e.detail)
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except BlobStorageError:
        logger.exception("Blob write failed for %r", file.filename)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to upload video")
    logger.info("Upload successful: %s", blob.url)
    return UploadResponse(url=blob.url)
