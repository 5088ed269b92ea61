"""User profile, favorites, search and public profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from reelshelf.database import get_db
from reelshelf.models.schemas import (
    UserResponse,
    UserUpdate,
    UserSummary,
    PasswordChange,
    Token,
    FavoritesUpdate,
    FavoritesResponse,
    PublicProfileResponse,
    MessageResponse
)
from reelshelf.models.list_schemas import ListSummaryResponse
from reelshelf.models.platform_schemas import ActivityEntry
from reelshelf.models.review_schemas import ReviewResponse
from reelshelf.models.user import User
from reelshelf.services.auth_service import AuthService
from reelshelf.services.favorites_service import FavoritesService
from reelshelf.services.list_service import ListService
from reelshelf.services.platform_service import PlatformService
from reelshelf.services.review_service import ReviewService
from reelshelf.services.social_service import SocialService
from reelshelf.middleware.auth import get_current_active_user, get_optional_user, security

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_active_user)):
    """Get the caller's own profile."""
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=Token)
async def update_profile(
    update: UserUpdate,
    credentials=Depends(security),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update username, email, bio or profile picture.

    The old session is replaced so the returned token carries the
    updated username.

    Returns:
        Fresh access token and the updated user
    """
    user, error = AuthService.update_profile(db, current_user, update)
    if error:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error
        )

    access_token = AuthService.refresh_user_session(db, user, credentials.credentials)

    return Token(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )


@router.put("/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Change the caller's password."""
    success, error = AuthService.change_password(db, current_user, data.current_password, data.new_password)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error
        )

    return MessageResponse(message="Password updated successfully")


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete the caller's account with all reviews, lists and connections."""
    AuthService.delete_account(db, current_user)
    return MessageResponse(message="Account deleted")


# ============================================
# Favorites
# ============================================

@router.get("/favorites", response_model=FavoritesResponse)
async def get_favorites(current_user: User = Depends(get_current_active_user)):
    """Get the caller's favorite movies, TV shows and games."""
    return FavoritesService.get_favorites(current_user)


@router.put("/favorites/{kind}", response_model=FavoritesResponse)
async def update_favorites(
    kind: str,
    data: FavoritesUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Replace the caller's favorites of one kind.

    Args:
        kind: movies, tv_shows or games
        data: Up to five entries
    """
    return FavoritesService.update_favorites(db, current_user, kind, data.entries)


# ============================================
# Discovery
# ============================================

@router.get("/search", response_model=List[UserSummary])
async def search_users(
    q: str = Query("", max_length=100),
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Search users by username. Queries shorter than two characters return nothing."""
    return SocialService.search_users(db, current_user, q)


@router.get("/{user_id}/activity", response_model=List[ActivityEntry])
async def get_activity(
    user_id: UUID,
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db)
):
    """Recently played games across the user's linked platforms."""
    return PlatformService.recent_activity(db, user_id, limit=limit)


@router.get("/{user_id}/reviews", response_model=List[ReviewResponse])
async def get_user_reviews(
    user_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Reviews written by a user."""
    return ReviewService.list_user_reviews(db, user_id, viewer=current_user)


@router.get("/{user_id}/lists", response_model=List[ListSummaryResponse])
async def get_user_lists(
    user_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """A user's lists. Private lists are only included for their owner."""
    return ListService.list_public_lists(db, user_id, viewer=current_user)


@router.get("/{username}", response_model=PublicProfileResponse)
async def get_public_profile(
    username: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Public profile by username."""
    return SocialService.public_profile(db, username, viewer=current_user)
