"""Review, like and comment endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from reelshelf.database import get_db
from reelshelf.models.review_schemas import (
    ReviewCreate,
    ReviewUpdate,
    ReviewResponse,
    CommentCreate,
    CommentResponse,
    LikeResponse,
    MediaStatusResponse
)
from reelshelf.models.schemas import MessageResponse
from reelshelf.models.user import User
from reelshelf.services.review_service import ReviewService
from reelshelf.middleware.auth import get_current_active_user, get_optional_user

router = APIRouter()


@router.get("", response_model=List[ReviewResponse])
async def list_reviews(
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Latest 50 reviews across all users."""
    return ReviewService.list_reviews(db, viewer=current_user)


@router.post("", response_model=ReviewResponse)
async def create_or_update_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Review a title.

    A second review of the same title by the same user updates the
    existing review.
    """
    return ReviewService.create_or_update_review(db, current_user, data)


@router.get("/mine", response_model=List[ReviewResponse])
async def list_my_reviews(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """The caller's reviews, newest first."""
    return ReviewService.list_user_reviews(db, current_user.id, viewer=current_user)


@router.get("/status/{media_type}/{external_id}", response_model=MediaStatusResponse)
async def media_status(
    media_type: str,
    external_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Whether the caller reviewed a title and which lists contain it."""
    return ReviewService.media_status(db, current_user, media_type, external_id)


@router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(
    review_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Get one review."""
    return ReviewService.get_review(db, review_id, viewer=current_user)


@router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: UUID,
    data: ReviewUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Edit a review. Author only."""
    return ReviewService.update_review(db, current_user, review_id, data)


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete a review. Author only."""
    ReviewService.delete_review(db, current_user, review_id)
    return MessageResponse(message="Review deleted")


@router.post("/{review_id}/like", response_model=LikeResponse)
async def toggle_like(
    review_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Like a review, or remove the like if already liked."""
    return ReviewService.toggle_like(db, current_user, review_id)


@router.get("/{review_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    review_id: UUID,
    db: Session = Depends(get_db)
):
    """Comments on a review, oldest first."""
    return ReviewService.list_comments(db, review_id)


@router.post("/{review_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    review_id: UUID,
    data: CommentCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Comment on a review."""
    return ReviewService.add_comment(db, current_user, review_id, data.content)
