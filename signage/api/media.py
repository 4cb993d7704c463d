import logging

from fastapi import APIRouter, UploadFile, File, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from signage.db import get_db
from signage.models.media import Media
from signage.models.user import User
from signage.schemas.media import MediaOut
from signage.services.auth import get_current_user
from signage.services.storage import resolve_path, save_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/media", tags=["media"])


@router.post("/upload", response_model=MediaOut)
def upload_media(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        filename, media_type, size = save_file(file)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    media = Media(
        name=(file.filename or "").strip() or filename,
        type=media_type,
        filename=filename,
        file_size=size,
        mime_type=(file.content_type or "application/octet-stream")[:50],
        client_id=user.id,
    )
    db.add(media)
    db.commit()
    db.refresh(media)
    logger.info("Media %s uploaded (%s, %d bytes)", media.id, media_type, size)
    return media


@router.get("", response_model=list[MediaOut])
def list_media(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(Media)
        .filter(Media.client_id == user.id)
        .order_by(Media.created_at.desc())
        .all()
    )


@router.get("/file/{media_id}")
def media_file(media_id: str, db: Session = Depends(get_db)):
    media = db.get(Media, media_id)
    if not media:
        raise HTTPException(status_code=404, detail="Media not found")
    path = resolve_path(media.filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, media_type=media.mime_type)
