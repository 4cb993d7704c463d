import os
import secrets
import time
from fastapi import UploadFile

MEDIA_DIR = os.getenv("SIGNAGE_MEDIA_DIR", "storage/media")
MAX_UPLOAD_BYTES = int(os.getenv("SIGNAGE_MAX_UPLOAD_BYTES", str(100 * 1024 * 1024)))
ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
ALLOWED_VIDEO_EXTENSIONS = {".mp4", ".webm", ".mkv", ".mov"}
_CHUNK_SIZE = 1024 * 1024


def ensure_storage() -> None:
    os.makedirs(MEDIA_DIR, exist_ok=True)


def media_type_for(content_type: str | None) -> str:
    mime = (content_type or "").strip().lower()
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    raise ValueError("Unsupported media type. Upload an image or a video.")


def _validate_extension(media_type: str, filename: str) -> str:
    _, ext = os.path.splitext(filename.lower())
    if media_type == "image" and ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValueError("Unsupported image format. Use JPG/JPEG/PNG/WEBP/GIF.")
    if media_type == "video" and ext not in ALLOWED_VIDEO_EXTENSIONS:
        raise ValueError("Unsupported video format. Use MP4/WEBM/MKV/MOV.")
    return ext


def save_file(file: UploadFile) -> tuple[str, str, int]:
    """Store an upload and return ``(stored_filename, media_type, size)``."""
    ensure_storage()
    media_type = media_type_for(file.content_type)
    original = os.path.basename((file.filename or "").strip()) or "upload.bin"
    ext = _validate_extension(media_type, original)
    stored_filename = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
    path = os.path.join(MEDIA_DIR, stored_filename)

    size = 0
    try:
        with open(path, "wb") as f:
            while True:
                chunk = file.file.read(_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > MAX_UPLOAD_BYTES:
                    raise ValueError(f"File exceeds the {MAX_UPLOAD_BYTES // (1024 * 1024)} MB upload limit.")
                f.write(chunk)
        if size == 0:
            raise ValueError("Empty files cannot be uploaded.")
    except ValueError:
        os.remove(path)
        raise
    return stored_filename, media_type, size


def resolve_path(filename: str) -> str | None:
    # Stored names never contain directories; anything else is not ours.
    if not filename or os.path.basename(filename) != filename:
        return None
    path = os.path.join(MEDIA_DIR, filename)
    if not os.path.isfile(path):
        return None
    return path
