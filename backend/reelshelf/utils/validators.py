"""Input validation utilities."""

import math
import os
import re
from typing import Optional, Tuple
from urllib.parse import urlsplit

MEDIA_TYPES = ("movie", "tv", "game")
MIN_RATING = 0.5
MAX_RATING = 5.0

DEFAULT_REDIRECT_PATH = "/profile"
SIGN_IN_PATHS = ("/auth/signin", "/login", "/signin")


def validate_email(email: str) -> Tuple[bool, str]:
    """
    Validate email address format.

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or len(email) > 255:
        return False, "Email address is required and must be less than 255 characters"

    # Basic email regex pattern
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

    if not re.match(pattern, email):
        return False, "Invalid email address format"

    return True, ""


def validate_username(username: str) -> Tuple[bool, str]:
    """
    Validate username format.

    Requirements:
    - 3-50 characters
    - Alphanumeric and underscores only
    - Must start with a letter

    Args:
        username: Username to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not username:
        return False, "Username is required"

    if len(username) < 3:
        return False, "Username must be at least 3 characters long"

    if len(username) > 50:
        return False, "Username must be less than 50 characters"

    if not username[0].isalpha():
        return False, "Username must start with a letter"

    if not re.match(r'^[a-zA-Z0-9_]+$', username):
        return False, "Username can only contain letters, numbers, and underscores"

    return True, ""


def validate_media_type(media_type: Optional[str]) -> Tuple[bool, str]:
    """
    Validate a media type tag.

    Args:
        media_type: One of "movie", "tv", "game"

    Returns:
        Tuple of (is_valid, error_message)
    """
    if media_type not in MEDIA_TYPES:
        return False, "Invalid media type. Must be movie, tv, or game"
    return True, ""


def validate_rating(rating) -> Tuple[bool, str]:
    """
    Validate a star rating.

    Args:
        rating: Rating value, must lie in [0.5, 5.0]

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        return False, "Rating must be a number"

    if not math.isfinite(rating) or rating < MIN_RATING or rating > MAX_RATING:
        return False, f"Rating must be between {MIN_RATING} and {MAX_RATING}"

    return True, ""


def sanitize_input(text: str, max_length: int = 1000) -> str:
    """
    Sanitize user input by removing potentially dangerous characters.

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Remove null bytes
    text = text.replace('\x00', '')

    # Trim to max length
    if len(text) > max_length:
        text = text[:max_length]

    # Strip leading/trailing whitespace
    text = text.strip()

    return text


def sanitize_filename(filename: str) -> str:
    """
    Reduce an uploaded file name to a safe basename.

    Path components are dropped and anything other than letters, digits,
    dots, dashes and underscores becomes an underscore.
    """
    name = os.path.basename((filename or "").replace("\\", "/"))
    name = re.sub(r"[^a-zA-Z0-9._-]", "_", name)
    name = name.lstrip(".")
    return name or "upload"


def safe_redirect_path(target: Optional[str], default: str = DEFAULT_REDIRECT_PATH) -> str:
    """
    Accept a client-supplied post-auth redirect target only if it is safe.

    Safe targets are same-site relative paths that do not point back at a
    sign-in page. Everything else falls back to `default`.

    Args:
        target: Requested redirect path
        default: Fallback path

    Returns:
        Path to redirect to
    """
    if not target or not target.startswith("/") or target.startswith("//"):
        return default

    if "\\" in target:
        return default

    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return default

    path = parts.path.rstrip("/") or "/"
    if any(path == p or path.startswith(p + "/") for p in SIGN_IN_PATHS):
        return default

    return target
