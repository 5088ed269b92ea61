"""Custom ranked lists."""

from sqlalchemy import Column, String, Boolean, Integer, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from reelshelf.database import Base

WATCH_LATER_TITLE = "Watch Later"


class MediaList(Base):
    """A user-curated, ordered list of titles."""

    __tablename__ = "lists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="lists")
    items = relationship(
        "ListItem",
        back_populates="media_list",
        cascade="all, delete-orphan",
        order_by="ListItem.position"
    )

    def __repr__(self):
        return f"<MediaList(id={self.id}, title={self.title}, user_id={self.user_id})>"


class ListItem(Base):
    """
    Entry of a list.

    `position` is 1-based and contiguous within a list.
    """

    __tablename__ = "list_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    list_id = Column(Uuid, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False, index=True)
    media_id = Column(Uuid, ForeignKey("media.id", ondelete="CASCADE"), nullable=False, index=True)

    position = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    media_list = relationship("MediaList", back_populates="items")
    media = relationship("Media", back_populates="list_items")

    def __repr__(self):
        return f"<ListItem(id={self.id}, list_id={self.list_id}, position={self.position})>"
