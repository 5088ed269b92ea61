"""Pydantic schemas for wishlists."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class WishlistAdd(BaseModel):
    """
    Schema for adding a title to a wishlist.

    Id and name are checked by the service so a missing value is a 400.
    """
    item_id: Optional[str] = Field(None, max_length=100)
    item_name: Optional[str] = Field(None, max_length=500)
    item_cover: Optional[str] = Field(None, max_length=1000)
    item_year: Optional[int] = None


class WishlistItemResponse(BaseModel):
    """Wishlist entry."""
    id: UUID
    item_type: str
    item_id: str
    item_name: str
    item_cover: Optional[str] = None
    item_year: Optional[int] = None
    added_at: datetime


class WishlistCheckResponse(BaseModel):
    in_wishlist: bool


class WishlistRemoveResponse(BaseModel):
    removed: bool
