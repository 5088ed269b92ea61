"""Watch Later endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from reelshelf.database import get_db
from reelshelf.models.list_schemas import WatchLaterAdd, WatchLaterItemResponse
from reelshelf.models.schemas import MessageResponse
from reelshelf.models.user import User
from reelshelf.services.list_service import ListService
from reelshelf.middleware.auth import get_current_active_user

router = APIRouter()


@router.get("", response_model=List[WatchLaterItemResponse])
async def get_watch_later(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get the caller's Watch Later items."""
    return ListService.get_watch_later(db, current_user)


@router.post("", response_model=WatchLaterItemResponse, status_code=status.HTTP_201_CREATED)
async def add_to_watch_later(
    data: WatchLaterAdd,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Add a title with a priority (low, medium, high)."""
    return ListService.add_to_watch_later(db, current_user, data)


@router.delete("/{item_id}", response_model=MessageResponse)
async def remove_from_watch_later(
    item_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Remove an item from Watch Later."""
    ListService.remove_from_watch_later(db, current_user, item_id)
    return MessageResponse(message="Removed from Watch Later")
