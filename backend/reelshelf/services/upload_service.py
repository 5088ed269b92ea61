"""Profile picture and avatar uploads."""

import time
from pathlib import Path
from sqlalchemy.orm import Session
from typing import Dict, Any

from reelshelf.config import settings
from reelshelf.models.user import User
from reelshelf.services.errors import ValidationFailedError
from reelshelf.services.logging_service import logger
from reelshelf.utils.validators import sanitize_filename

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/svg+xml")
PROFILE_SUBDIR = "profiles"


def format_size_limit(max_bytes: int) -> str:
    """Render a byte limit the way it is shown to users, e.g. 1MB or 500KB."""
    if max_bytes % (1024 * 1024) == 0:
        return f"{max_bytes // (1024 * 1024)}MB"
    if max_bytes % 1024 == 0:
        return f"{max_bytes // 1024}KB"
    return f"{max_bytes} bytes"


class UploadService:
    """Service for storing user images on local disk."""

    @staticmethod
    def limit_for(flow: str) -> int:
        """
        Size limit of an upload flow.

        Args:
            flow: "profile_picture" or "avatar"

        Returns:
            Maximum size in bytes
        """
        if flow == "avatar":
            return settings.AVATAR_MAX_BYTES
        return settings.PROFILE_PICTURE_MAX_BYTES

    @staticmethod
    def validate_image(content_type: str, size: int, max_bytes: int) -> None:
        """
        Check type and size of an uploaded image.

        Raises:
            ValidationFailedError: Unsupported type or file too large
        """
        if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
            raise ValidationFailedError("File must be JPG, PNG, or SVG")

        if size > max_bytes:
            raise ValidationFailedError(f"File size must be less than {format_size_limit(max_bytes)}")

    @staticmethod
    def save_profile_picture(
        db: Session,
        user: User,
        filename: str,
        content_type: str,
        data: bytes,
        flow: str = "profile_picture"
    ) -> Dict[str, Any]:
        """
        Validate, store and attach a profile picture.

        Args:
            db: Database session
            user: Owner of the picture
            filename: Client-supplied file name
            content_type: Client-supplied MIME type
            data: File contents
            flow: "profile_picture" (1MB limit) or "avatar" (500KB limit)

        Returns:
            {"url", "filename", "size"}
        """
        if not data:
            raise ValidationFailedError("No file received")

        UploadService.validate_image(content_type, len(data), UploadService.limit_for(flow))

        stored_name = f"{user.id}_{int(time.time() * 1000)}_{sanitize_filename(filename)}"
        upload_dir = Path(settings.UPLOAD_DIR) / PROFILE_SUBDIR
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / stored_name).write_bytes(data)

        url = f"/uploads/{PROFILE_SUBDIR}/{stored_name}"
        user.profile_picture = url
        db.commit()

        logger.info("Profile picture uploaded", user_id=str(user.id), flow=flow, size=len(data))
        return {"url": url, "filename": stored_name, "size": len(data)}
