"""Password hashing and JWT helpers."""

import bcrypt
import jwt
from datetime import datetime, timedelta
from typing import Optional, Tuple
import uuid

from reelshelf.config import settings

LINK_STATE_PURPOSE = "platform_link"


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain text password

    Returns:
        bcrypt hash as a string
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plain text password against a stored bcrypt hash.

    Args:
        plain_password: Password supplied by the user
        hashed_password: Stored hash

    Returns:
        True if the password matches
    """
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def validate_password_strength(password: str) -> Tuple[bool, str]:
    """
    Validate password requirements.

    Args:
        password: Password to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password or len(password) < 6:
        return False, "Password must be at least 6 characters"

    # bcrypt only considers the first 72 bytes
    if len(password.encode("utf-8")) > 72:
        return False, "Password must be at most 72 bytes"

    return True, ""


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to encode (expects "sub")
        expires_delta: Custom lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    # jti keeps tokens issued within the same second distinct
    to_encode.update({"exp": expire, "iat": now, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode and verify a JWT access token.

    Args:
        token: Encoded JWT

    Returns:
        Claims dict, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def create_link_state(user_id: str, return_path: str = "/profile") -> str:
    """
    Create a short-lived state token for third-party account linking.

    The token travels through the provider's redirect and identifies the
    user when the callback arrives without a bearer header.
    """
    expire = datetime.utcnow() + timedelta(minutes=settings.LINK_STATE_EXPIRE_MINUTES)
    payload = {
        "sub": user_id,
        "purpose": LINK_STATE_PURPOSE,
        "return_path": return_path,
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_link_state(state: str) -> Optional[dict]:
    """Decode a link state token. Returns None when invalid, expired or of another purpose."""
    try:
        payload = jwt.decode(state, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None

    if payload.get("purpose") != LINK_STATE_PURPOSE:
        return None
    return payload
