"""Pydantic schemas for reviews, likes and comments."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from reelshelf.models.schemas import UserSummary


class ReviewCreate(BaseModel):
    """
    Schema for creating or updating the caller's review of a title.

    Presence and rating range are checked by the service so that missing
    fields are reported as 400 with a readable message.
    """
    media_type: Optional[str] = None
    media_id: Optional[str] = Field(None, max_length=100)
    media_title: Optional[str] = Field(None, max_length=500)
    media_year: Optional[int] = None
    media_poster: Optional[str] = Field(None, max_length=1000)
    rating: Optional[float] = None
    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None


class ReviewUpdate(BaseModel):
    """Schema for editing a review by id."""
    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None
    rating: Optional[float] = None


class CommentCreate(BaseModel):
    """Schema for commenting on a review."""
    content: Optional[str] = Field(None, max_length=2000)


class CommentResponse(BaseModel):
    """Comment on a review."""
    id: UUID
    content: str
    created_at: datetime
    user: UserSummary


class MediaSummary(BaseModel):
    """Compact title reference."""
    id: str
    media_type: str
    title: str
    year: Optional[int] = None
    poster_url: Optional[str] = None


class ReviewResponse(BaseModel):
    """Review with author, title, like and comment data."""
    id: UUID
    rating: float
    title: Optional[str] = None
    content: str
    created_at: datetime
    updated_at: datetime
    user: UserSummary
    media: MediaSummary
    likes_count: int
    is_liked: bool
    comments: List[CommentResponse] = []


class LikeResponse(BaseModel):
    """Result of toggling a like."""
    liked: bool
    likes_count: int


class MediaStatusResponse(BaseModel):
    """Whether the caller reviewed or listed a title."""
    reviewed: bool
    rating: Optional[float] = None
    review_id: Optional[UUID] = None
    in_list: bool
    list_ids: List[UUID] = []
