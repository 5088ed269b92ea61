"""Lookup and lazy creation of catalogued titles."""

from sqlalchemy.orm import Session
from typing import Optional

from reelshelf.models.media import Media
from reelshelf.services.errors import ValidationFailedError
from reelshelf.utils.validators import validate_media_type, sanitize_input


class MediaService:
    """Service for Media rows keyed by (media_type, external_id)."""

    @staticmethod
    def get(db: Session, media_type: str, external_id: str) -> Optional[Media]:
        """
        Find a title by its external id.

        Args:
            db: Database session
            media_type: movie, tv or game
            external_id: Catalog id

        Returns:
            Media or None
        """
        return db.query(Media).filter(
            Media.media_type == media_type,
            Media.external_id == str(external_id)
        ).first()

    @staticmethod
    def find_or_create(
        db: Session,
        media_type: str,
        external_id: str,
        title: str,
        year: Optional[int] = None,
        poster_url: Optional[str] = None
    ) -> Media:
        """
        Return the Media row for a title, creating it on first use.

        Missing year and poster on an existing row are filled in from the
        supplied values. The row is flushed, not committed.

        Args:
            db: Database session
            media_type: movie, tv or game
            external_id: Catalog id
            title: Display title
            year: Release year
            poster_url: Poster or cover URL

        Returns:
            Media row

        Raises:
            ValidationFailedError: On an unknown media type or empty id/title
        """
        is_valid, error = validate_media_type(media_type)
        if not is_valid:
            raise ValidationFailedError(error)

        external_id = sanitize_input(str(external_id or ""), max_length=100)
        title = sanitize_input(title or "", max_length=500)
        if not external_id:
            raise ValidationFailedError("Media id is required")
        if not title:
            raise ValidationFailedError("Media title is required")

        media = MediaService.get(db, media_type, external_id)
        if media:
            if media.release_year is None and year:
                media.release_year = year
            if not media.poster_url and poster_url:
                media.poster_url = poster_url
            return media

        media = Media(
            media_type=media_type,
            external_id=external_id,
            title=title,
            release_year=year,
            poster_url=poster_url or None
        )
        db.add(media)
        db.flush()
        return media
