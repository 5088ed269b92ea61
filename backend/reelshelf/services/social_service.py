"""Follow graph, friends, user search and public profiles."""

from sqlalchemy import func, or_, and_
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from uuid import UUID

from reelshelf.models.media import Media, MediaType
from reelshelf.models.media_list import MediaList
from reelshelf.models.platform import PlatformConnection
from reelshelf.models.review import Review
from reelshelf.models.user import User, UserFollow
from reelshelf.services.errors import NotFoundError, ValidationFailedError
from reelshelf.services.logging_service import logger

MIN_SEARCH_LENGTH = 2
USER_SEARCH_LIMIT = 20
SITE_SEARCH_LIMIT = 10


def _summary(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "profile_picture": user.profile_picture,
        "bio": user.bio,
    }


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SocialService:
    """Service for social graph operations."""

    @staticmethod
    def _get_user(db: Session, user_id: UUID) -> User:
        target = db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
        if not target:
            raise NotFoundError("User not found")
        return target

    @staticmethod
    def _edge(db: Session, follower_id: UUID, followed_id: UUID) -> Optional[UserFollow]:
        return db.query(UserFollow).filter(
            UserFollow.follower_id == follower_id,
            UserFollow.followed_id == followed_id
        ).first()

    @staticmethod
    def is_following(db: Session, follower_id: UUID, followed_id: UUID) -> bool:
        return SocialService._edge(db, follower_id, followed_id) is not None

    @staticmethod
    def follow(db: Session, user: User, target_id: UUID) -> Dict[str, Any]:
        """
        Follow another user.

        Args:
            db: Database session
            user: Follower
            target_id: User to follow

        Returns:
            Summary of the followed user

        Raises:
            ValidationFailedError: Self-follow or already following
            NotFoundError: Unknown target
        """
        if user.id == target_id:
            raise ValidationFailedError("You cannot follow yourself")

        target = SocialService._get_user(db, target_id)

        if SocialService.is_following(db, user.id, target.id):
            raise ValidationFailedError("Already following this user")

        db.add(UserFollow(follower_id=user.id, followed_id=target.id))
        db.commit()

        logger.info("User followed", follower_id=str(user.id), followed_id=str(target.id))
        return _summary(target)

    @staticmethod
    def unfollow(db: Session, user: User, target_id: UUID) -> None:
        """
        Stop following a user.

        Raises:
            NotFoundError: Not following that user
        """
        edge = SocialService._edge(db, user.id, target_id)
        if not edge:
            raise NotFoundError("You are not following this user")

        db.delete(edge)
        db.commit()

    @staticmethod
    def list_followers(db: Session, user_id: UUID) -> Dict[str, Any]:
        """
        Get a user's followers.

        Returns:
            {"users": [...], "count": int}
        """
        SocialService._get_user(db, user_id)
        rows = db.query(User, UserFollow.created_at).join(
            UserFollow, UserFollow.follower_id == User.id
        ).filter(UserFollow.followed_id == user_id).order_by(UserFollow.created_at.desc()).all()

        users = [dict(_summary(u), followed_at=created_at) for u, created_at in rows]
        return {"users": users, "count": len(users)}

    @staticmethod
    def list_following(db: Session, user_id: UUID) -> Dict[str, Any]:
        """
        Get the users someone follows.

        Returns:
            {"users": [...], "count": int}
        """
        SocialService._get_user(db, user_id)
        rows = db.query(User, UserFollow.created_at).join(
            UserFollow, UserFollow.followed_id == User.id
        ).filter(UserFollow.follower_id == user_id).order_by(UserFollow.created_at.desc()).all()

        users = [dict(_summary(u), followed_at=created_at) for u, created_at in rows]
        return {"users": users, "count": len(users)}

    @staticmethod
    def add_friend(db: Session, user: User, friend_id: UUID) -> Dict[str, Any]:
        """Add a friend. Friendship is recorded as a follow edge."""
        return SocialService.follow(db, user, friend_id)

    @staticmethod
    def remove_friend(db: Session, user: User, friend_id: UUID) -> int:
        """
        Remove a friendship in both directions.

        Returns:
            Number of follow edges removed
        """
        edges = db.query(UserFollow).filter(
            or_(
                and_(UserFollow.follower_id == user.id, UserFollow.followed_id == friend_id),
                and_(UserFollow.follower_id == friend_id, UserFollow.followed_id == user.id),
            )
        ).all()

        if not edges:
            raise NotFoundError("Friend not found")

        for edge in edges:
            db.delete(edge)
        db.commit()
        return len(edges)

    @staticmethod
    def list_friends(db: Session, user: User) -> List[Dict[str, Any]]:
        """
        Get the users the caller follows, with their review and list counts.

        Returns:
            Friend dicts ordered by username
        """
        friends = db.query(User).join(
            UserFollow, UserFollow.followed_id == User.id
        ).filter(UserFollow.follower_id == user.id).order_by(User.username).all()

        if not friends:
            return []

        ids = [f.id for f in friends]
        review_counts = dict(
            db.query(Review.user_id, func.count(Review.id)).filter(Review.user_id.in_(ids)).group_by(Review.user_id).all()
        )
        list_counts = dict(
            db.query(MediaList.user_id, func.count(MediaList.id)).filter(MediaList.user_id.in_(ids)).group_by(MediaList.user_id).all()
        )

        return [
            dict(_summary(f), review_count=review_counts.get(f.id, 0), list_count=list_counts.get(f.id, 0))
            for f in friends
        ]

    @staticmethod
    def search_users(db: Session, user: Optional[User], query: str) -> List[Dict[str, Any]]:
        """
        Case-insensitive username search.

        Args:
            db: Database session
            user: Current user (excluded from results)
            query: Substring to match, at least two characters

        Returns:
            Up to 20 user summaries
        """
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_LENGTH:
            return []

        q = db.query(User).filter(
            User.is_active.is_(True),
            func.lower(User.username).like(f"%{_escape_like(query.lower())}%", escape="\\")
        )
        if user:
            q = q.filter(User.id != user.id)

        return [_summary(u) for u in q.order_by(User.username).limit(USER_SEARCH_LIMIT).all()]

    @staticmethod
    def public_profile(db: Session, username: str, viewer: Optional[User] = None) -> Dict[str, Any]:
        """
        Build a user's public profile.

        Args:
            db: Database session
            username: Profile owner
            viewer: Current user, if any

        Returns:
            Profile dict with counts, follow state and platform connections
        """
        target = db.query(User).filter(User.username == username, User.is_active.is_(True)).first()
        if not target:
            raise NotFoundError("User not found")

        followers_count = db.query(func.count(UserFollow.id)).filter(UserFollow.followed_id == target.id).scalar()
        following_count = db.query(func.count(UserFollow.id)).filter(UserFollow.follower_id == target.id).scalar()
        review_count = db.query(func.count(Review.id)).filter(Review.user_id == target.id).scalar()

        connections = db.query(PlatformConnection).filter(PlatformConnection.user_id == target.id).all()

        return {
            "id": target.id,
            "username": target.username,
            "bio": target.bio,
            "profile_picture": target.profile_picture,
            "joined_at": target.created_at,
            "followers_count": followers_count or 0,
            "following_count": following_count or 0,
            "review_count": review_count or 0,
            "is_following": bool(viewer) and viewer.id != target.id and SocialService.is_following(db, viewer.id, target.id),
            "is_current_user": bool(viewer) and viewer.id == target.id,
            "connections": [
                {
                    "platform_type": c.platform_type,
                    "platform_user_id": c.platform_user_id,
                    "games_count": len(c.games_data or []),
                    "last_synced_at": c.last_synced_at,
                }
                for c in connections
            ],
        }

    @staticmethod
    def site_search(db: Session, query: str) -> Dict[str, Any]:
        """
        Search users and catalogued movies by substring.

        Args:
            db: Database session
            query: Search string, at least two characters

        Returns:
            {"users": [...], "movies": [...]} with at most 10 of each
        """
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_LENGTH:
            return {"users": [], "movies": []}

        pattern = f"%{_escape_like(query.lower())}%"

        users = db.query(User).filter(
            User.is_active.is_(True),
            func.lower(User.username).like(pattern, escape="\\")
        ).order_by(User.username).limit(SITE_SEARCH_LIMIT).all()

        movies = db.query(Media).filter(
            Media.media_type == MediaType.MOVIE.value,
            func.lower(Media.title).like(pattern, escape="\\")
        ).order_by(Media.title).limit(SITE_SEARCH_LIMIT).all()

        return {
            "users": [_summary(u) for u in users],
            "movies": [m.summary() for m in movies],
        }
