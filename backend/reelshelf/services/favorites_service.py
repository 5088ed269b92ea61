"""Per-user favorite movies, TV shows and games."""

from sqlalchemy.orm import Session
from typing import Any, Dict, List

from reelshelf.models.user import User
from reelshelf.models.schemas import FavoriteEntry
from reelshelf.services.errors import ValidationFailedError

MAX_FAVORITES = 5

# API kind -> User column
FAVORITE_COLUMNS = {
    "movies": "favorite_movies",
    "tv_shows": "favorite_tv_shows",
    "games": "favorite_games",
}


class FavoritesService:
    """Service for favorites, stored as JSON arrays on the user row."""

    @staticmethod
    def get_favorites(user: User) -> Dict[str, List[Dict[str, Any]]]:
        """
        Get all favorites of a user.

        Returns:
            {"movies": [...], "tv_shows": [...], "games": [...]}
        """
        return {kind: list(getattr(user, column) or []) for kind, column in FAVORITE_COLUMNS.items()}

    @staticmethod
    def update_favorites(db: Session, user: User, kind: str, entries: List[FavoriteEntry]) -> Dict[str, List[Dict[str, Any]]]:
        """
        Replace the favorites of one kind.

        Args:
            db: Database session
            user: Current user
            kind: movies, tv_shows or games
            entries: New favorites, at most five, unique by id

        Returns:
            All favorites after the update

        Raises:
            ValidationFailedError: Unknown kind, too many entries or duplicate ids
        """
        column = FAVORITE_COLUMNS.get(kind)
        if not column:
            raise ValidationFailedError("Invalid favorites type. Must be movies, tv_shows, or games")

        label = kind.replace("_", " ")
        if len(entries) > MAX_FAVORITES:
            raise ValidationFailedError(f"Maximum {MAX_FAVORITES} favorite {label} allowed")

        ids = [entry.id for entry in entries]
        if len(set(ids)) != len(ids):
            raise ValidationFailedError(f"Duplicate favorite {label} are not allowed")

        # Assign a new list so SQLAlchemy sees the JSON change
        setattr(user, column, [entry.model_dump() for entry in entries])
        db.commit()
        db.refresh(user)

        return FavoritesService.get_favorites(user)
