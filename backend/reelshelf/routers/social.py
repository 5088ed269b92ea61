"""Follow and friend endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from reelshelf.database import get_db
from reelshelf.models.schemas import FollowListResponse, FriendEntry, UserSummary, MessageResponse
from reelshelf.models.user import User
from reelshelf.services.social_service import SocialService
from reelshelf.middleware.auth import get_current_active_user

router = APIRouter()


@router.post("/follow/{user_id}", response_model=UserSummary, status_code=status.HTTP_201_CREATED)
async def follow_user(
    user_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Follow a user."""
    return SocialService.follow(db, current_user, user_id)


@router.delete("/follow/{user_id}", response_model=MessageResponse)
async def unfollow_user(
    user_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Stop following a user."""
    SocialService.unfollow(db, current_user, user_id)
    return MessageResponse(message="Unfollowed")


@router.get("/followers/{user_id}", response_model=FollowListResponse)
async def get_followers(user_id: UUID, db: Session = Depends(get_db)):
    """A user's followers with count."""
    return SocialService.list_followers(db, user_id)


@router.get("/following/{user_id}", response_model=FollowListResponse)
async def get_following(user_id: UUID, db: Session = Depends(get_db)):
    """Users a user follows, with count."""
    return SocialService.list_following(db, user_id)


@router.get("/friends", response_model=List[FriendEntry])
async def get_friends(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """The caller's friends with their review and list counts."""
    return SocialService.list_friends(db, current_user)


@router.post("/friends/{user_id}", response_model=UserSummary, status_code=status.HTTP_201_CREATED)
async def add_friend(
    user_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Add a friend."""
    return SocialService.add_friend(db, current_user, user_id)


@router.delete("/friends/{user_id}", response_model=MessageResponse)
async def remove_friend(
    user_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Remove a friend in both directions."""
    SocialService.remove_friend(db, current_user, user_id)
    return MessageResponse(message="Friend removed")
