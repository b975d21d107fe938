"""Persistence of uploaded product images."""

import logging
import uuid
from pathlib import Path
from typing import Optional

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from src.catalog.errors import ProductValidationError

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"


def ensure_uploads_dir(uploads_dir: str) -> Path:
    """Create the uploads directory if it does not exist yet."""
    path = Path(uploads_dir)
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created uploads directory at {path.resolve()}")
    return path


async def save_upload(upload: UploadFile, uploads_dir: str) -> str:
    """
    Write an uploaded image to the uploads directory.

    Args:
        upload: The multipart file part.
        uploads_dir: Directory served under /uploads.

    Returns:
        The URL path the image is served from, e.g. /uploads/3f2a....png.

    Raises:
        ProductValidationError: If the upload is not an image.
    """
    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        raise ProductValidationError({"image": "Only image uploads are allowed"})

    suffix = Path(upload.filename or "").suffix.lower()
    filename = f"{uuid.uuid4().hex}{suffix}"
    target = ensure_uploads_dir(uploads_dir) / filename

    data = await upload.read()
    await run_in_threadpool(target.write_bytes, data)
    logger.info(f"Saved upload '{upload.filename}' as {target} ({len(data)} bytes)")

    return f"{UPLOADS_URL_PREFIX}/{filename}"


async def discard_upload(image_url: Optional[str], uploads_dir: str) -> None:
    """Remove an image written by save_upload; no-op for None."""
    if not image_url:
        return
    target = Path(uploads_dir) / image_url.rsplit("/", 1)[-1]
    await run_in_threadpool(target.unlink, missing_ok=True)
    logger.info(f"Discarded upload {target}")
