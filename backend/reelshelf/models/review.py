"""Review, like and comment models."""

from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from reelshelf.database import Base


class Review(Base):
    """A user's star rating and write-up of one title."""

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "media_id", name="uq_reviews_user_media"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    media_id = Column(Uuid, ForeignKey("media.id", ondelete="CASCADE"), nullable=False, index=True)

    rating = Column(Float, nullable=False)
    title = Column(String(200), nullable=True)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="reviews")
    media = relationship("Media", back_populates="reviews")
    likes = relationship("ReviewLike", back_populates="review", cascade="all, delete-orphan")
    comments = relationship(
        "ReviewComment",
        back_populates="review",
        cascade="all, delete-orphan",
        order_by="ReviewComment.created_at"
    )

    def __repr__(self):
        return f"<Review(id={self.id}, user_id={self.user_id}, rating={self.rating})>"


class ReviewLike(Base):
    """One user's like of a review."""

    __tablename__ = "review_likes"
    __table_args__ = (
        UniqueConstraint("user_id", "review_id", name="uq_review_likes_user_review"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    review_id = Column(Uuid, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="review_likes")
    review = relationship("Review", back_populates="likes")


class ReviewComment(Base):
    """Comment left on a review."""

    __tablename__ = "review_comments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    review_id = Column(Uuid, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="review_comments")
    review = relationship("Review", back_populates="comments")
