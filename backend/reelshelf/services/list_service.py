"""Custom ranked lists and the Watch Later list."""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from reelshelf.models.media_list import MediaList, ListItem, WATCH_LATER_TITLE
from reelshelf.models.user import User
from reelshelf.models.list_schemas import ListCreate, ListUpdate, ListItemCreate, WatchLaterAdd
from reelshelf.services.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from reelshelf.services.logging_service import logger
from reelshelf.services.media_service import MediaService
from reelshelf.utils.validators import validate_media_type, sanitize_input

WATCH_LATER_DESCRIPTION = "Movies, TV shows, and games to watch/play later"
PRIORITY_PREFIX = "priority:"


def serialize_item(item: ListItem) -> Dict[str, Any]:
    """Flatten a list item and its title."""
    media = item.media
    return {
        "id": item.id,
        "position": item.position,
        "notes": item.notes,
        "item_type": media.media_type,
        "external_id": media.external_id,
        "title": media.title,
        "year": media.release_year,
        "poster_url": media.poster_url,
        "created_at": item.created_at,
    }


def serialize_list(media_list: MediaList, include_items: bool = True) -> Dict[str, Any]:
    """Flatten a list, optionally with its ordered items."""
    items = sorted(media_list.items, key=lambda i: i.position)
    data = {
        "id": media_list.id,
        "user_id": media_list.user_id,
        "title": media_list.title,
        "description": media_list.description,
        "is_public": media_list.is_public,
        "item_count": len(items),
        "created_at": media_list.created_at,
        "updated_at": media_list.updated_at,
    }
    if include_items:
        data["items"] = [serialize_item(i) for i in items]
    return data


class ListService:
    """Service for list operations. Mutations are owner-only."""

    @staticmethod
    def _get_list(db: Session, list_id: UUID) -> MediaList:
        media_list = db.query(MediaList).filter(MediaList.id == list_id).first()
        if not media_list:
            raise NotFoundError("List not found")
        return media_list

    @staticmethod
    def _get_owned_list(db: Session, user: User, list_id: UUID) -> MediaList:
        media_list = ListService._get_list(db, list_id)
        if media_list.user_id != user.id:
            raise PermissionDeniedError("You do not have permission to modify this list")
        return media_list

    @staticmethod
    def _resequence(media_list: MediaList) -> None:
        for index, item in enumerate(sorted(media_list.items, key=lambda i: i.position), start=1):
            item.position = index

    @staticmethod
    def _touch(media_list: MediaList) -> None:
        media_list.updated_at = datetime.utcnow()

    @staticmethod
    def _append_item(db: Session, media_list: MediaList, item_data: ListItemCreate, notes: Optional[str] = None) -> ListItem:
        media = MediaService.find_or_create(
            db,
            media_type=item_data.item_type,
            external_id=item_data.external_id,
            title=item_data.item_name,
            year=item_data.item_year,
            poster_url=item_data.item_cover
        )

        if any(existing.media_id == media.id for existing in media_list.items):
            raise ValidationFailedError("Item already in list")

        next_position = max((i.position for i in media_list.items), default=0) + 1
        item = ListItem(
            media_list=media_list,
            media=media,
            position=next_position,
            notes=notes if notes is not None else sanitize_input(item_data.notes or "", max_length=2000) or None
        )
        db.add(item)
        db.flush()
        return item

    @staticmethod
    def list_my_lists(db: Session, user: User) -> List[Dict[str, Any]]:
        """
        Get the caller's lists, most recently updated first.

        Args:
            db: Database session
            user: Current user

        Returns:
            Serialized lists without items
        """
        lists = db.query(MediaList).filter(
            MediaList.user_id == user.id
        ).order_by(MediaList.updated_at.desc()).all()

        return [serialize_list(l, include_items=False) for l in lists]

    @staticmethod
    def list_public_lists(db: Session, owner_id: UUID, viewer: Optional[User] = None) -> List[Dict[str, Any]]:
        """
        Get another user's lists. Private lists are only shown to their owner.

        Args:
            db: Database session
            owner_id: User whose lists are requested
            viewer: Current user, if any

        Returns:
            Serialized lists without items
        """
        query = db.query(MediaList).filter(MediaList.user_id == owner_id)
        if not viewer or viewer.id != owner_id:
            query = query.filter(MediaList.is_public.is_(True))

        return [serialize_list(l, include_items=False) for l in query.order_by(MediaList.updated_at.desc()).all()]

    @staticmethod
    def create_list(db: Session, user: User, data: ListCreate) -> Dict[str, Any]:
        """
        Create a list, optionally with initial items.

        Args:
            db: Database session
            user: Owner
            data: Title, description, visibility and initial items

        Returns:
            Serialized list with items

        Raises:
            ValidationFailedError: Empty title, bad media type or duplicate item
        """
        title = sanitize_input(data.title or "", max_length=200)
        if not title:
            raise ValidationFailedError("Title is required")

        if data.media_type is not None:
            is_valid, error = validate_media_type(data.media_type)
            if not is_valid:
                raise ValidationFailedError(error)

        try:
            media_list = MediaList(
                user_id=user.id,
                title=title,
                description=sanitize_input(data.description or "", max_length=2000) or None,
                is_public=data.is_public
            )
            db.add(media_list)
            db.flush()

            for item_data in data.items:
                ListService._append_item(db, media_list, item_data)

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(media_list)
        logger.info("List created", list_id=str(media_list.id), user_id=str(user.id), items=len(data.items))
        return serialize_list(media_list)

    @staticmethod
    def get_list(db: Session, list_id: UUID, viewer: Optional[User] = None) -> Dict[str, Any]:
        """
        Get a list with its ordered items.

        Args:
            db: Database session
            list_id: List id
            viewer: Current user, if any

        Returns:
            Serialized list with items

        Raises:
            NotFoundError: Unknown list
            PermissionDeniedError: Private list of another user
        """
        media_list = ListService._get_list(db, list_id)
        if not media_list.is_public and (viewer is None or viewer.id != media_list.user_id):
            raise PermissionDeniedError("This list is private")
        return serialize_list(media_list)

    @staticmethod
    def update_list(db: Session, user: User, list_id: UUID, data: ListUpdate) -> Dict[str, Any]:
        """
        Update list title, description or visibility.

        Args:
            db: Database session
            user: Current user (must own the list)
            list_id: List id
            data: Fields to change

        Returns:
            Serialized list with items
        """
        media_list = ListService._get_owned_list(db, user, list_id)
        fields = data.model_dump(exclude_unset=True)

        if "title" in fields:
            title = sanitize_input(fields["title"] or "", max_length=200)
            if not title:
                raise ValidationFailedError("Title is required")
            media_list.title = title

        if "description" in fields:
            media_list.description = sanitize_input(fields["description"] or "", max_length=2000) or None

        if fields.get("is_public") is not None:
            media_list.is_public = fields["is_public"]

        ListService._touch(media_list)
        db.commit()
        db.refresh(media_list)
        return serialize_list(media_list)

    @staticmethod
    def delete_list(db: Session, user: User, list_id: UUID) -> None:
        """
        Delete a list and its items.

        Args:
            db: Database session
            user: Current user (must own the list)
            list_id: List id
        """
        media_list = ListService._get_owned_list(db, user, list_id)
        db.delete(media_list)
        db.commit()
        logger.info("List deleted", list_id=str(list_id), user_id=str(user.id))

    @staticmethod
    def add_item(db: Session, user: User, list_id: UUID, item_data: ListItemCreate) -> Dict[str, Any]:
        """
        Append a title to the end of a list.

        Args:
            db: Database session
            user: Current user (must own the list)
            list_id: List id
            item_data: Title reference and notes

        Returns:
            Serialized new item

        Raises:
            ValidationFailedError: Title already in the list
        """
        media_list = ListService._get_owned_list(db, user, list_id)

        try:
            item = ListService._append_item(db, media_list, item_data)
            ListService._touch(media_list)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(item)
        return serialize_item(item)

    @staticmethod
    def remove_item(db: Session, user: User, list_id: UUID, item_id: UUID) -> Dict[str, Any]:
        """
        Remove an item and close the gap in positions.

        Args:
            db: Database session
            user: Current user (must own the list)
            list_id: List id
            item_id: Item id

        Returns:
            Serialized list with the remaining items at positions 1..n

        Raises:
            NotFoundError: Item is not in this list
        """
        media_list = ListService._get_owned_list(db, user, list_id)
        item = next((i for i in media_list.items if i.id == item_id), None)
        if not item:
            raise NotFoundError("Item not found in this list")

        media_list.items.remove(item)
        ListService._resequence(media_list)
        ListService._touch(media_list)
        db.commit()

        db.refresh(media_list)
        return serialize_list(media_list)

    @staticmethod
    def reorder_items(db: Session, user: User, list_id: UUID, item_ids: List[UUID]) -> Dict[str, Any]:
        """
        Persist a new order for a list.

        Each item's position becomes its index in `item_ids` plus one. Either
        every position is written or none is.

        Args:
            db: Database session
            user: Current user (must own the list)
            list_id: List id
            item_ids: Every item id of the list, in the new order

        Returns:
            Serialized list with items in the new order

        Raises:
            PermissionDeniedError: An id is not an item of this list
            ValidationFailedError: Duplicate ids, or ids missing from the order
        """
        media_list = ListService._get_owned_list(db, user, list_id)
        items_by_id = {item.id: item for item in media_list.items}

        foreign = [item_id for item_id in item_ids if item_id not in items_by_id]
        if foreign:
            logger.warning(
                "Reorder rejected: foreign item ids",
                list_id=str(list_id),
                user_id=str(user.id),
                item_ids=[str(i) for i in foreign]
            )
            raise PermissionDeniedError("One or more items do not belong to this list")

        if len(set(item_ids)) != len(item_ids):
            raise ValidationFailedError("Duplicate item ids in reorder request")

        if len(item_ids) != len(items_by_id):
            raise ValidationFailedError("Reorder request must include every item of the list")

        try:
            for index, item_id in enumerate(item_ids, start=1):
                items_by_id[item_id].position = index
            ListService._touch(media_list)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(media_list)
        return serialize_list(media_list)

    # ============================================
    # Watch Later
    # ============================================

    @staticmethod
    def _find_watch_later(db: Session, user: User) -> Optional[MediaList]:
        return db.query(MediaList).filter(
            MediaList.user_id == user.id,
            MediaList.title == WATCH_LATER_TITLE
        ).order_by(MediaList.created_at).first()

    @staticmethod
    def _serialize_watch_later_item(item: ListItem) -> Dict[str, Any]:
        priority, notes = parse_priority_notes(item.notes)
        media = item.media
        return {
            "id": item.id,
            "item_type": media.media_type,
            "external_id": media.external_id,
            "title": media.title,
            "year": media.release_year,
            "poster_url": media.poster_url,
            "priority": priority,
            "notes": notes,
            "added_at": item.created_at,
        }

    @staticmethod
    def get_watch_later(db: Session, user: User) -> List[Dict[str, Any]]:
        """
        Get the caller's Watch Later items in list order.

        Returns:
            Items, or an empty list when the user has no Watch Later list
        """
        media_list = ListService._find_watch_later(db, user)
        if not media_list:
            return []
        return [
            ListService._serialize_watch_later_item(i)
            for i in sorted(media_list.items, key=lambda i: i.position)
        ]

    @staticmethod
    def add_to_watch_later(db: Session, user: User, data: WatchLaterAdd) -> Dict[str, Any]:
        """
        Add a title to Watch Later, creating the private list on first use.

        Args:
            db: Database session
            user: Current user
            data: Title reference, priority and notes

        Returns:
            Serialized Watch Later item
        """
        try:
            media_list = ListService._find_watch_later(db, user)
            if not media_list:
                media_list = MediaList(
                    user_id=user.id,
                    title=WATCH_LATER_TITLE,
                    description=WATCH_LATER_DESCRIPTION,
                    is_public=False
                )
                db.add(media_list)
                db.flush()

            notes = format_priority_notes(data.priority, sanitize_input(data.notes or "", max_length=2000))
            item = ListService._append_item(db, media_list, data, notes=notes)
            ListService._touch(media_list)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(item)
        return ListService._serialize_watch_later_item(item)

    @staticmethod
    def remove_from_watch_later(db: Session, user: User, item_id: UUID) -> None:
        """Remove an item from the caller's Watch Later list."""
        media_list = ListService._find_watch_later(db, user)
        if not media_list:
            raise NotFoundError("Item not found in Watch Later")
        ListService.remove_item(db, user, media_list.id, item_id)


def format_priority_notes(priority: str, notes: Optional[str] = None) -> str:
    """Encode a Watch Later priority into item notes."""
    text = f"{PRIORITY_PREFIX}{priority}"
    if notes:
        text += f"\n{notes}"
    return text


def parse_priority_notes(raw: Optional[str]) -> tuple:
    """
    Split item notes into (priority, remaining notes).

    Notes without a priority line default to "medium".
    """
    if not raw:
        return "medium", None

    first, _, rest = raw.partition("\n")
    if first.startswith(PRIORITY_PREFIX):
        priority = first[len(PRIORITY_PREFIX):].strip()
        if priority not in ("low", "medium", "high"):
            priority = "medium"
        return priority, rest or None

    return "medium", raw
