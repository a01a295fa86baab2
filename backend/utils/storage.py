# utils/storage.py
import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile

from config import settings

logger = logging.getLogger(__name__)

# Sub-directory of the content store holding product pictures
IMAGE_DIR = "products/images"
ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg"}
ALLOWED_CONTENT_TYPES = {"image/png", "image/jpeg", "image/jpg"}


def storage_root() -> Path:
    return Path(settings.STORAGE_DIR)


def _extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def save_image(file: UploadFile) -> str:
    """Validate an uploaded product image and persist it in the content store.

    Returns the path relative to the store root; that is what goes on the row.
    """
    ext = _extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS or file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=422, detail="The img must be a file of type: png, jpg, jpeg.")

    max_bytes = settings.MAX_IMAGE_SIZE_KB * 1024
    try:
        data = file.file.read(max_bytes + 1)
    finally:
        file.file.close()
    if not data:
        raise HTTPException(status_code=422, detail="The img file is empty.")
    if len(data) > max_bytes:
        raise HTTPException(status_code=422, detail=f"The img may not be greater than {settings.MAX_IMAGE_SIZE_KB} kilobytes.")

    relative = f"{IMAGE_DIR}/{uuid.uuid4().hex}.{ext}"
    target = storage_root() / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    logger.info("Stored product image %s (%d bytes)", relative, len(data))
    return relative


def delete_image(relative: Optional[str]) -> None:
    """Remove a stored image; unknown paths and paths outside the store are ignored."""
    if not relative:
        return
    root = storage_root().resolve()
    target = (root / relative).resolve()
    if root not in target.parents:
        logger.warning("Refusing to delete %s outside the content store", relative)
        return
    try:
        target.unlink(missing_ok=True)
    except OSError:
        # The row is already updated; a leftover file is not worth failing the request
        logger.exception("Could not remove image %s", relative)
