"""
Single-image multipart upload handling for food detection
"""

import logging
from pathlib import Path
from typing import Tuple
from uuid import UUID

import anyio
from fastapi import UploadFile

from app.config import settings
from app.exceptions import PayloadTooLargeError, ServiceValidationError
from core.utils import storage

logger = logging.getLogger("protein_tracker.upload")

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
}


def validate_file(file: UploadFile) -> None:
    """Reject missing files and unsupported content types"""
    if file is None or not file.filename:
        raise ServiceValidationError("No image file provided")
    if file.content_type not in ALLOWED_MIME_TYPES:
        raise ServiceValidationError(
            "Only image files (JPEG, PNG, WebP) are allowed",
            details={"content_type": file.content_type},
        )


def max_size_label() -> str:
    return f"{settings.max_file_size // (1024 * 1024)}MB"


async def store_food_image(file: UploadFile, user_id: UUID) -> Tuple[Path, str]:
    """
    Validate and persist an uploaded food image.

    Returns:
        (path on disk, public URL)

    Raises:
        ServiceValidationError: missing file or unsupported type
        PayloadTooLargeError: larger than ``settings.max_file_size``
    """
    validate_file(file)

    # One byte past the limit marks an oversize upload
    content = await file.read(settings.max_file_size + 1)
    if len(content) > settings.max_file_size:
        logger.warning(
            f"upload_rejected user_id={user_id} reason=too_large "
            f"limit={settings.max_file_size}"
        )
        raise PayloadTooLargeError(
            f"File size too large. Maximum size is {max_size_label()}"
        )
    if not content:
        raise ServiceValidationError("Uploaded file is empty")

    return await anyio.to_thread.run_sync(
        storage.save_food_image, content, file.filename, user_id
    )
