"""List endpoints: CRUD, items and reordering."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from reelshelf.database import get_db
from reelshelf.models.list_schemas import (
    ListCreate,
    ListUpdate,
    ListResponse,
    ListSummaryResponse,
    ListItemCreate,
    ListItemResponse,
    ReorderRequest
)
from reelshelf.models.schemas import MessageResponse
from reelshelf.models.user import User
from reelshelf.services.list_service import ListService
from reelshelf.middleware.auth import get_current_active_user, get_optional_user

router = APIRouter()


@router.get("", response_model=List[ListSummaryResponse])
async def get_my_lists(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get the caller's lists, most recently updated first."""
    return ListService.list_my_lists(db, current_user)


@router.post("", response_model=ListResponse, status_code=status.HTTP_201_CREATED)
async def create_list(
    data: ListCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create a list.

    Initial items, if any, are stored at positions 1..n in the same
    transaction.
    """
    return ListService.create_list(db, current_user, data)


@router.get("/{list_id}", response_model=ListResponse)
async def get_list(
    list_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Get a list with its ordered items. Private lists are owner-only."""
    return ListService.get_list(db, list_id, viewer=current_user)


@router.put("/{list_id}", response_model=ListResponse)
async def update_list(
    list_id: UUID,
    data: ListUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Update a list's title, description or visibility."""
    return ListService.update_list(db, current_user, list_id, data)


@router.delete("/{list_id}", response_model=MessageResponse)
async def delete_list(
    list_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete a list and its items."""
    ListService.delete_list(db, current_user, list_id)
    return MessageResponse(message="List deleted")


@router.post("/{list_id}/items", response_model=ListItemResponse, status_code=status.HTTP_201_CREATED)
async def add_item(
    list_id: UUID,
    item: ListItemCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Append a title to the end of a list."""
    return ListService.add_item(db, current_user, list_id, item)


@router.delete("/{list_id}/items/{item_id}", response_model=ListResponse)
async def remove_item(
    list_id: UUID,
    item_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Remove an item. Remaining items are renumbered 1..n."""
    return ListService.remove_item(db, current_user, list_id, item_id)


@router.put("/{list_id}/reorder", response_model=ListResponse)
@router.post("/{list_id}/reorder", response_model=ListResponse)
async def reorder_items(
    list_id: UUID,
    data: ReorderRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Reorder a list.

    Args:
        data: Every item id of the list, in the new order
    """
    return ListService.reorder_items(db, current_user, list_id, data.item_ids)
