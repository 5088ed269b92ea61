"""Authentication dependencies for protected routes."""

from fastapi import Depends, HTTPException, status, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from reelshelf.database import get_db
from reelshelf.models.user import User
from reelshelf.services.auth_service import AuthService
from reelshelf.services.error_tracking import error_tracker
from reelshelf.utils.security import decode_access_token

# HTTP Bearer token scheme
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user.

    Usage in routes:
        @router.get("/protected")
        def protected_route(current_user: User = Depends(get_current_user)):
            return {"user": current_user.username}

    Args:
        credentials: HTTP Authorization header with Bearer token
        db: Database session

    Returns:
        Current user

    Raises:
        HTTPException: If authentication fails
    """
    token = credentials.credentials

    payload = decode_access_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Token must also belong to a live session
    user, error = AuthService.validate_session(db, token)
    if error or not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error or "Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    error_tracker.set_user_context(str(user.id))
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Dependency to get the current active user.

    Raises:
        HTTPException: If user is inactive
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )
    return current_user


def get_optional_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Dependency to optionally get the current user.

    Returns None if no valid authentication is provided.
    Used by public routes that personalize their output (is_liked,
    is_following, private list access).

    Args:
        authorization: Optional Authorization header
        db: Database session

    Returns:
        Current user or None
    """
    if not authorization:
        return None

    try:
        scheme, token = authorization.split()
    except ValueError:
        return None
    if scheme.lower() != "bearer":
        return None

    if not decode_access_token(token):
        return None

    user, _ = AuthService.validate_session(db, token)
    return user
