"""
Uploads router: photo evidence for issues.

  POST /upload  (multipart field "photo") → {ok, filename, mime, size, url}

The response is exactly the attachment reference POST /issues expects.
Validation:
  - Only JPEG, PNG, WebP accepted
  - Max settings.max_upload_bytes (5 MB by default)

The handler is a plain def: FastAPI runs it in its threadpool, so the file
read and the disk write stay off the event loop.
"""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from civic_tracker.config import Settings, get_settings
from civic_tracker.core.dependencies import get_current_user
from civic_tracker.schemas.auth import CurrentUser
from civic_tracker.schemas.issue import UploadResponse
from civic_tracker.services.upload_service import ALLOWED_CONTENT_TYPES, save_photo

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
def upload_photo(
    photo: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
    current_user: CurrentUser = Depends(get_current_user),
):
    if photo.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only JPG/PNG/WebP images allowed",
        )

    contents = photo.file.read()
    if len(contents) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
        )

    filename = save_photo(settings, contents, photo.content_type)
    return UploadResponse(
        filename=filename,
        mime=photo.content_type,
        size=len(contents),
        url=f"/uploads/{filename}",
    )
