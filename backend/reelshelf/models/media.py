"""Catalogued media titles (movies, TV shows and video games)."""

from sqlalchemy import Column, String, Integer, DateTime, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
import uuid

from reelshelf.database import Base


class MediaType(str, enum.Enum):
    """Kind of a catalogued title."""

    MOVIE = "movie"
    TV = "tv"
    GAME = "game"


class Media(Base):
    """
    A movie, TV show or video game known to the service.

    Rows are created lazily the first time a title is reviewed or listed and
    are keyed by the external catalog id (IMDb id for movies and TV, IGDB or
    RAWG id for games).
    """

    __tablename__ = "media"
    __table_args__ = (
        UniqueConstraint("media_type", "external_id", name="uq_media_type_external_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    media_type = Column(String(10), nullable=False, index=True)
    external_id = Column(String(100), nullable=False, index=True)

    title = Column(String(500), nullable=False, index=True)
    release_year = Column(Integer, nullable=True)
    poster_url = Column(String(1000), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    reviews = relationship("Review", back_populates="media", cascade="all, delete-orphan")
    list_items = relationship("ListItem", back_populates="media", cascade="all, delete-orphan")
    wishlist_items = relationship("WishlistItem", back_populates="media", cascade="all, delete-orphan")

    def summary(self) -> dict:
        """Compact representation embedded in review and list payloads."""
        return {
            "id": self.external_id,
            "media_type": self.media_type,
            "title": self.title,
            "year": self.release_year,
            "poster_url": self.poster_url,
        }

    def __repr__(self):
        return f"<Media(type={self.media_type}, external_id={self.external_id}, title={self.title})>"
