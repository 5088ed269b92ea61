"""Reviews, likes and comments."""

from sqlalchemy.orm import Session, selectinload
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from reelshelf.models.media_list import MediaList, ListItem
from reelshelf.models.review import Review, ReviewLike, ReviewComment
from reelshelf.models.user import User
from reelshelf.models.review_schemas import ReviewCreate, ReviewUpdate
from reelshelf.services.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from reelshelf.services.logging_service import logger
from reelshelf.services.media_service import MediaService
from reelshelf.utils.validators import validate_media_type, validate_rating, sanitize_input

LATEST_REVIEWS_LIMIT = 50


def _user_summary(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "profile_picture": user.profile_picture,
        "bio": user.bio,
    }


def serialize_comment(comment: ReviewComment) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "content": comment.content,
        "created_at": comment.created_at,
        "user": _user_summary(comment.user),
    }


def serialize_review(review: Review, viewer: Optional[User] = None) -> Dict[str, Any]:
    """
    Denormalize a review for API responses.

    Args:
        review: Review row
        viewer: Current user, used for is_liked

    Returns:
        Review dict with author, title, like count and comments
    """
    return {
        "id": review.id,
        "rating": review.rating,
        "title": review.title,
        "content": review.content,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
        "user": _user_summary(review.user),
        "media": review.media.summary(),
        "likes_count": len(review.likes),
        "is_liked": bool(viewer) and any(like.user_id == viewer.id for like in review.likes),
        "comments": [serialize_comment(c) for c in review.comments],
    }


class ReviewService:
    """Service for review operations."""

    @staticmethod
    def _base_query(db: Session):
        return db.query(Review).options(
            selectinload(Review.user),
            selectinload(Review.media),
            selectinload(Review.likes),
            selectinload(Review.comments).selectinload(ReviewComment.user),
        )

    @staticmethod
    def _get_review(db: Session, review_id: UUID) -> Review:
        review = db.query(Review).filter(Review.id == review_id).first()
        if not review:
            raise NotFoundError("Review not found")
        return review

    @staticmethod
    def _check_rating(rating: Any) -> float:
        is_valid, error = validate_rating(rating)
        if not is_valid:
            raise ValidationFailedError(error)
        return float(rating)

    @staticmethod
    def create_or_update_review(db: Session, user: User, data: ReviewCreate) -> Dict[str, Any]:
        """
        Create the caller's review of a title, or update it if one exists.

        A user has at most one review per title.

        Args:
            db: Database session
            user: Author
            data: Title reference, rating, content and optional headline

        Returns:
            Serialized review

        Raises:
            ValidationFailedError: Missing fields, bad media type or rating out of range
        """
        content = sanitize_input(data.content or "", max_length=10000)
        missing = [
            name for name, value in (
                ("media_type", data.media_type),
                ("media_id", data.media_id),
                ("media_title", data.media_title),
                ("rating", data.rating),
                ("content", content),
            )
            if value in (None, "")
        ]
        if missing:
            raise ValidationFailedError(f"Missing required fields: {', '.join(missing)}")

        is_valid, error = validate_media_type(data.media_type)
        if not is_valid:
            raise ValidationFailedError(error)

        rating = ReviewService._check_rating(data.rating)
        title = sanitize_input(data.title or "", max_length=200) or None

        try:
            media = MediaService.find_or_create(
                db,
                media_type=data.media_type,
                external_id=data.media_id,
                title=data.media_title,
                year=data.media_year,
                poster_url=data.media_poster
            )

            review = db.query(Review).filter(
                Review.user_id == user.id,
                Review.media_id == media.id
            ).first()

            if review:
                review.rating = rating
                review.content = content
                review.title = title
                review.updated_at = datetime.utcnow()
                action = "updated"
            else:
                review = Review(
                    user_id=user.id,
                    media_id=media.id,
                    rating=rating,
                    title=title,
                    content=content
                )
                db.add(review)
                action = "created"

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(review)
        logger.info(
            f"Review {action}",
            review_id=str(review.id),
            user_id=str(user.id),
            media_type=data.media_type,
            media_id=data.media_id
        )
        return serialize_review(review, user)

    @staticmethod
    def list_reviews(db: Session, viewer: Optional[User] = None, limit: int = LATEST_REVIEWS_LIMIT) -> List[Dict[str, Any]]:
        """
        Get the latest reviews across all users.

        Args:
            db: Database session
            viewer: Current user, if any
            limit: Maximum number of reviews

        Returns:
            Serialized reviews, newest first
        """
        reviews = ReviewService._base_query(db).order_by(Review.created_at.desc()).limit(limit).all()
        return [serialize_review(r, viewer) for r in reviews]

    @staticmethod
    def list_user_reviews(db: Session, user_id: UUID, viewer: Optional[User] = None) -> List[Dict[str, Any]]:
        """
        Get all reviews written by one user.

        Args:
            db: Database session
            user_id: Author id
            viewer: Current user, if any

        Returns:
            Serialized reviews, newest first
        """
        reviews = ReviewService._base_query(db).filter(
            Review.user_id == user_id
        ).order_by(Review.created_at.desc()).all()
        return [serialize_review(r, viewer) for r in reviews]

    @staticmethod
    def get_review(db: Session, review_id: UUID, viewer: Optional[User] = None) -> Dict[str, Any]:
        """Get one review. Raises NotFoundError if missing."""
        return serialize_review(ReviewService._get_review(db, review_id), viewer)

    @staticmethod
    def update_review(db: Session, user: User, review_id: UUID, data: ReviewUpdate) -> Dict[str, Any]:
        """
        Edit a review by id.

        Args:
            db: Database session
            user: Current user (must be the author)
            review_id: Review id
            data: Fields to change

        Returns:
            Serialized review
        """
        review = ReviewService._get_review(db, review_id)
        if review.user_id != user.id:
            raise PermissionDeniedError("You can only edit your own reviews")

        fields = data.model_dump(exclude_unset=True)

        if fields.get("rating") is not None:
            review.rating = ReviewService._check_rating(fields["rating"])

        if "content" in fields:
            content = sanitize_input(fields["content"] or "", max_length=10000)
            if not content:
                raise ValidationFailedError("Content cannot be empty")
            review.content = content

        if "title" in fields:
            review.title = sanitize_input(fields["title"] or "", max_length=200) or None

        review.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(review)
        return serialize_review(review, user)

    @staticmethod
    def delete_review(db: Session, user: User, review_id: UUID) -> None:
        """
        Delete a review with its likes and comments.

        Args:
            db: Database session
            user: Current user (must be the author)
            review_id: Review id
        """
        review = ReviewService._get_review(db, review_id)
        if review.user_id != user.id:
            raise PermissionDeniedError("You can only delete your own reviews")

        db.delete(review)
        db.commit()
        logger.info("Review deleted", review_id=str(review_id), user_id=str(user.id))

    @staticmethod
    def toggle_like(db: Session, user: User, review_id: UUID) -> Dict[str, Any]:
        """
        Like a review, or remove the like if it is already liked.

        Args:
            db: Database session
            user: Current user
            review_id: Review id

        Returns:
            {"liked": bool, "likes_count": int}
        """
        review = ReviewService._get_review(db, review_id)

        existing = db.query(ReviewLike).filter(
            ReviewLike.user_id == user.id,
            ReviewLike.review_id == review.id
        ).first()

        if existing:
            db.delete(existing)
            liked = False
        else:
            db.add(ReviewLike(user_id=user.id, review_id=review.id))
            liked = True

        db.commit()
        likes_count = db.query(ReviewLike).filter(ReviewLike.review_id == review.id).count()

        return {"liked": liked, "likes_count": likes_count}

    @staticmethod
    def add_comment(db: Session, user: User, review_id: UUID, content: Optional[str]) -> Dict[str, Any]:
        """
        Comment on a review.

        Args:
            db: Database session
            user: Commenter
            review_id: Review id
            content: Comment text (trimmed, must not be empty)

        Returns:
            Serialized comment
        """
        text = sanitize_input(content or "", max_length=2000)
        if not text:
            raise ValidationFailedError("Comment content is required")

        review = ReviewService._get_review(db, review_id)

        comment = ReviewComment(user_id=user.id, review_id=review.id, content=text)
        db.add(comment)
        db.commit()
        db.refresh(comment)

        return serialize_comment(comment)

    @staticmethod
    def list_comments(db: Session, review_id: UUID) -> List[Dict[str, Any]]:
        """Get a review's comments, oldest first."""
        review = ReviewService._get_review(db, review_id)
        return [serialize_comment(c) for c in review.comments]

    @staticmethod
    def media_status(db: Session, user: User, media_type: str, external_id: str) -> Dict[str, Any]:
        """
        Report whether the caller reviewed a title and which of their lists contain it.

        Args:
            db: Database session
            user: Current user
            media_type: movie, tv or game
            external_id: Catalog id

        Returns:
            Status dict
        """
        is_valid, error = validate_media_type(media_type)
        if not is_valid:
            raise ValidationFailedError(error)

        status = {"reviewed": False, "rating": None, "review_id": None, "in_list": False, "list_ids": []}

        media = MediaService.get(db, media_type, external_id)
        if not media:
            return status

        review = db.query(Review).filter(Review.user_id == user.id, Review.media_id == media.id).first()
        if review:
            status.update(reviewed=True, rating=review.rating, review_id=review.id)

        list_ids = [
            row[0] for row in db.query(ListItem.list_id).join(MediaList).filter(
                MediaList.user_id == user.id,
                ListItem.media_id == media.id
            ).distinct().all()
        ]
        status.update(in_list=bool(list_ids), list_ids=list_ids)

        return status
