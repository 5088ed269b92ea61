"""Per-user wishlists of movies, TV shows and games."""

from sqlalchemy import Column, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from reelshelf.database import Base


class WishlistItem(Base):
    """
    A title a user wants to watch or play.

    The wishlist is split by the title's media type; a title appears at most
    once per user.
    """

    __tablename__ = "wishlist_items"
    __table_args__ = (
        UniqueConstraint("user_id", "media_id", name="uq_wishlist_user_media"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    media_id = Column(Uuid, ForeignKey("media.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="wishlist_items")
    media = relationship("Media", back_populates="wishlist_items")

    def __repr__(self):
        return f"<WishlistItem(user_id={self.user_id}, media_id={self.media_id})>"
