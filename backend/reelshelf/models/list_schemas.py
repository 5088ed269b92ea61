"""Pydantic schemas for lists and the Watch Later list."""

from pydantic import AliasChoices, BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime
from uuid import UUID


# ============================================
# List Item Schemas
# ============================================

class ListItemCreate(BaseModel):
    """Schema for adding a title to a list."""
    item_type: str = Field(..., pattern="^(movie|tv|game)$")
    external_id: str = Field(..., min_length=1, max_length=100)
    item_name: str = Field(..., min_length=1, max_length=500)
    item_cover: Optional[str] = Field(None, max_length=1000)
    item_year: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=2000)


class ListItemResponse(BaseModel):
    """Schema for a list entry."""
    id: UUID
    position: int
    notes: Optional[str] = None
    item_type: str
    external_id: str
    title: str
    year: Optional[int] = None
    poster_url: Optional[str] = None
    created_at: datetime


class ReorderRequest(BaseModel):
    """Complete new order of a list, as item ids. Also accepts the camelCase `itemIds` key."""
    item_ids: List[UUID] = Field(..., validation_alias=AliasChoices("item_ids", "itemIds"))


# ============================================
# List Schemas
# ============================================

class ListCreate(BaseModel):
    """Schema for creating a list."""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    media_type: Optional[str] = None
    is_public: bool = True
    items: List[ListItemCreate] = []


class ListUpdate(BaseModel):
    """Schema for updating list metadata."""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    is_public: Optional[bool] = None


class ListResponse(BaseModel):
    """Schema for a list with its items."""
    id: UUID
    user_id: UUID
    title: str
    description: Optional[str] = None
    is_public: bool
    item_count: int
    created_at: datetime
    updated_at: datetime
    items: List[ListItemResponse] = []


class ListSummaryResponse(BaseModel):
    """Schema for a list without its items."""
    id: UUID
    user_id: UUID
    title: str
    description: Optional[str] = None
    is_public: bool
    item_count: int
    created_at: datetime
    updated_at: datetime


# ============================================
# Watch Later Schemas
# ============================================

class WatchLaterAdd(ListItemCreate):
    """Schema for adding to Watch Later. Priority is stored in the item notes."""
    priority: Literal["low", "medium", "high"] = "medium"


class WatchLaterItemResponse(BaseModel):
    """Watch Later entry."""
    id: UUID
    item_type: str
    external_id: str
    title: str
    year: Optional[int] = None
    poster_url: Optional[str] = None
    priority: str
    notes: Optional[str] = None
    added_at: datetime
