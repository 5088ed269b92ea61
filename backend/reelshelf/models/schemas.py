"""Pydantic schemas for request/response validation."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime
from uuid import UUID


# ============================================
# User Schemas
# ============================================

class UserBase(BaseModel):
    """Base user schema."""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)


class UserCreate(UserBase):
    """Schema for user registration."""
    password: str = Field(..., min_length=6)

    @field_validator('username')
    @classmethod
    def username_alphanumeric(cls, v):
        """Validate username is alphanumeric with underscores."""
        if not v[0].isalpha():
            raise ValueError('Username must start with a letter')
        if not all(c.isalnum() or c == '_' for c in v):
            raise ValueError('Username can only contain letters, numbers, and underscores')
        return v


class UserLogin(BaseModel):
    """Schema for user login. `username` also accepts an email address."""
    username: str
    password: str


class UserResponse(UserBase):
    """Schema for user response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class UserUpdate(BaseModel):
    """Schema for updating user profile."""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(None, max_length=500)
    profile_picture: Optional[str] = Field(None, max_length=500)


class PasswordChange(BaseModel):
    """Schema for password change."""
    current_password: str
    new_password: str


class UserSummary(BaseModel):
    """Public fields shown wherever another user is referenced."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None


# ============================================
# Authentication Schemas
# ============================================

class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============================================
# Favorites Schemas
# ============================================

class FavoriteEntry(BaseModel):
    """A favorite title, keyed by its external catalog id."""
    id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=500)
    year: Optional[str] = None
    poster_url: Optional[str] = None


class FavoritesUpdate(BaseModel):
    """Replacement favorites for one kind."""
    entries: List[FavoriteEntry]


class FavoritesResponse(BaseModel):
    """All favorites of a user."""
    movies: List[FavoriteEntry] = []
    tv_shows: List[FavoriteEntry] = []
    games: List[FavoriteEntry] = []


# ============================================
# Social Schemas
# ============================================

class FollowUserEntry(UserSummary):
    """User in a followers/following listing."""
    followed_at: Optional[datetime] = None


class FollowListResponse(BaseModel):
    """Followers or following of a user."""
    users: List[FollowUserEntry]
    count: int


class FriendEntry(UserSummary):
    """Friend with activity counts."""
    review_count: int = 0
    list_count: int = 0


class PublicConnection(BaseModel):
    """Platform connection as shown on a public profile (no tokens)."""
    platform_type: str
    platform_user_id: Optional[str] = None
    games_count: int = 0
    last_synced_at: Optional[datetime] = None


class PublicProfileResponse(BaseModel):
    """Public profile of a user."""
    id: UUID
    username: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    joined_at: datetime
    followers_count: int
    following_count: int
    review_count: int
    is_following: bool
    is_current_user: bool
    connections: List[PublicConnection] = []


class SiteSearchMovie(BaseModel):
    """Catalogued title match in the site search."""
    id: str
    media_type: str
    title: str
    year: Optional[int] = None
    poster_url: Optional[str] = None


class SiteSearchResponse(BaseModel):
    """Users and titles matching a site-wide search."""
    users: List[UserSummary]
    movies: List[SiteSearchMovie]


# ============================================
# Upload Schemas
# ============================================

class UploadResponse(BaseModel):
    """Stored upload."""
    url: str
    filename: str
    size: int


# ============================================
# Generic Response Schemas
# ============================================

class MessageResponse(BaseModel):
    """Generic message response."""
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Generic error response."""
    detail: str
    error_id: Optional[str] = None
