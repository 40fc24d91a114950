"""
Local file storage for uploaded food images
"""

import logging
import os
import re
import time
from pathlib import Path
from typing import Optional, Tuple
from uuid import UUID

from app.config import settings

logger = logging.getLogger("protein_tracker.storage")

FOOD_IMAGES_SUBDIR = "food-images"


def food_images_dir() -> Path:
    """Directory holding food images, created on first use"""
    directory = Path(settings.upload_dir) / FOOD_IMAGES_SUBDIR
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def build_filename(original_filename: str, user_id: UUID, timestamp_ms: Optional[int] = None) -> str:
    """<timestamp>-<userId>-<slug><ext>; the slug keeps only [a-z0-9]"""
    base, ext = os.path.splitext(os.path.basename(original_filename or "image"))
    slug = re.sub(r"[^a-z0-9]", "-", base.lower()) or "image"
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"{timestamp_ms}-{user_id}-{slug}{ext.lower()}"


def public_url(filename: str) -> str:
    return f"{settings.public_base_url()}/uploads/{FOOD_IMAGES_SUBDIR}/{filename}"


def save_food_image(content: bytes, original_filename: str, user_id: UUID) -> Tuple[Path, str]:
    """Write the image and return (path on disk, public URL)"""
    filename = build_filename(original_filename, user_id)
    path = food_images_dir() / filename
    path.write_bytes(content)
    logger.info(f"image_stored user_id={user_id} file={filename} bytes={len(content)}")
    return path, public_url(filename)


def path_for_url(url: str) -> Path:
    """Map a stored image URL back to its file"""
    return Path(settings.upload_dir) / FOOD_IMAGES_SUBDIR / os.path.basename(url)


def delete_file(path: Path) -> None:
    """Remove a stored file; a file that is already gone is not an error"""
    Path(path).unlink(missing_ok=True)
    logger.info(f"image_deleted file={Path(path).name}")
