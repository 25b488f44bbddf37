"""
Photo storage on local disk.

Files land in settings.upload_dir under a generated name and are served
read-only from /uploads. Nothing is written to the database here: the
returned metadata goes back to the client, which attaches it to an issue
when filing it.
"""
import logging
import secrets
import time
from pathlib import Path

from civic_tracker.config import Settings

logger = logging.getLogger(__name__)

# content type → file extension
ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


def ensure_upload_dir(settings: Settings) -> Path:
    path = Path(settings.upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_filename(content_type: str) -> str:
    """<epoch millis>-<6 random chars><ext>, e.g. 1760781234567-k3f9qa.png"""
    ext = ALLOWED_CONTENT_TYPES.get(content_type, ".jpg")
    return f"{int(time.time() * 1000)}-{secrets.token_hex(3)}{ext}"


def save_photo(settings: Settings, contents: bytes, content_type: str) -> str:
    """Write the bytes to the upload directory and return the stored filename."""
    filename = generate_filename(content_type)
    (ensure_upload_dir(settings) / filename).write_bytes(contents)
    logger.info(f"Stored upload {filename} ({len(contents)} bytes, {content_type})")
    return filename
