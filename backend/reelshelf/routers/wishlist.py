"""Wishlist endpoints, one wishlist per media type."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from reelshelf.database import get_db
from reelshelf.models.user import User
from reelshelf.models.wishlist_schemas import (
    WishlistAdd,
    WishlistItemResponse,
    WishlistCheckResponse,
    WishlistRemoveResponse
)
from reelshelf.services.wishlist_service import WishlistService
from reelshelf.middleware.auth import get_current_active_user

router = APIRouter()


@router.get("/{media_type}", response_model=List[WishlistItemResponse])
async def get_wishlist(
    media_type: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get the caller's movie, tv or game wishlist, newest first."""
    return WishlistService.get_wishlist(db, current_user, media_type)


@router.post("/{media_type}", response_model=WishlistItemResponse, status_code=status.HTTP_201_CREATED)
async def add_to_wishlist(
    media_type: str,
    data: WishlistAdd,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Add a title to a wishlist. A title can be wishlisted once."""
    return WishlistService.add_item(db, current_user, media_type, data)


@router.get("/{media_type}/check", response_model=WishlistCheckResponse)
async def check_wishlist(
    media_type: str,
    item_id: str = Query(..., min_length=1, max_length=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Whether a title is on the caller's wishlist."""
    return WishlistCheckResponse(
        in_wishlist=WishlistService.is_wishlisted(db, current_user, media_type, item_id)
    )


@router.delete("/{media_type}/{item_id}", response_model=WishlistRemoveResponse)
async def remove_from_wishlist(
    media_type: str,
    item_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Remove a title from a wishlist."""
    return WishlistRemoveResponse(
        removed=WishlistService.remove_item(db, current_user, media_type, item_id)
    )
