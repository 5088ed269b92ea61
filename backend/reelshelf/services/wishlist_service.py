"""Per-type wishlists (movies, TV shows, games)."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional

from reelshelf.models.media import Media
from reelshelf.models.user import User
from reelshelf.models.wishlist import WishlistItem
from reelshelf.models.wishlist_schemas import WishlistAdd
from reelshelf.services.errors import ValidationFailedError
from reelshelf.services.logging_service import logger
from reelshelf.services.media_service import MediaService
from reelshelf.utils.validators import validate_media_type

KIND_LABELS = {"movie": "Movie", "tv": "TV show", "game": "Game"}


def _check_type(media_type: str) -> str:
    is_valid, error = validate_media_type(media_type)
    if not is_valid:
        raise ValidationFailedError(error)
    return media_type


def serialize_wishlist_item(item: WishlistItem) -> Dict[str, Any]:
    media = item.media
    return {
        "id": item.id,
        "item_type": media.media_type,
        "item_id": media.external_id,
        "item_name": media.title,
        "item_cover": media.poster_url,
        "item_year": media.release_year,
        "added_at": item.created_at,
    }


class WishlistService:
    """Service for the caller's wishlists."""

    @staticmethod
    def _find(db: Session, user: User, media_type: str, item_id: str) -> Optional[WishlistItem]:
        return db.query(WishlistItem).join(Media).filter(
            WishlistItem.user_id == user.id,
            Media.media_type == media_type,
            Media.external_id == str(item_id)
        ).first()

    @staticmethod
    def get_wishlist(db: Session, user: User, media_type: str) -> List[Dict[str, Any]]:
        """Wishlist entries of one media type, newest first."""
        _check_type(media_type)
        items = db.query(WishlistItem).join(Media).filter(
            WishlistItem.user_id == user.id,
            Media.media_type == media_type
        ).order_by(WishlistItem.created_at.desc()).all()
        return [serialize_wishlist_item(item) for item in items]

    @staticmethod
    def add_item(db: Session, user: User, media_type: str, data: WishlistAdd) -> Dict[str, Any]:
        """
        Add a title to the caller's wishlist.

        Args:
            db: Database session
            user: Current user
            media_type: movie, tv or game
            data: Title reference

        Returns:
            Serialized wishlist entry

        Raises:
            ValidationFailedError: Missing id or name, or the title is already wishlisted
        """
        _check_type(media_type)
        if not (data.item_id or "").strip() or not (data.item_name or "").strip():
            raise ValidationFailedError("item_id and item_name are required")

        already = f"{KIND_LABELS[media_type]} already in wishlist"
        if WishlistService._find(db, user, media_type, data.item_id.strip()):
            raise ValidationFailedError(already)

        try:
            media = MediaService.find_or_create(
                db,
                media_type=media_type,
                external_id=data.item_id,
                title=data.item_name,
                year=data.item_year,
                poster_url=data.item_cover
            )
            item = WishlistItem(user_id=user.id, media_id=media.id)
            db.add(item)
            db.commit()
        except IntegrityError:
            # Concurrent add of the same title
            db.rollback()
            raise ValidationFailedError(already)

        db.refresh(item)
        logger.info("Wishlist item added", user_id=str(user.id), media_type=media_type, item_id=media.external_id)
        return serialize_wishlist_item(item)

    @staticmethod
    def is_wishlisted(db: Session, user: User, media_type: str, item_id: str) -> bool:
        _check_type(media_type)
        return WishlistService._find(db, user, media_type, item_id) is not None

    @staticmethod
    def remove_item(db: Session, user: User, media_type: str, item_id: str) -> bool:
        """
        Remove a title from the caller's wishlist.

        Removing a title that is not wishlisted is not an error.

        Returns:
            True if an entry was removed
        """
        _check_type(media_type)
        item = WishlistService._find(db, user, media_type, item_id)
        if not item:
            return False

        db.delete(item)
        db.commit()
        return True
