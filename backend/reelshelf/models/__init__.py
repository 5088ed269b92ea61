"""Database models."""

from reelshelf.models.user import User, UserSession, UserFollow
from reelshelf.models.media import Media, MediaType
from reelshelf.models.review import Review, ReviewLike, ReviewComment
from reelshelf.models.media_list import MediaList, ListItem
from reelshelf.models.platform import PlatformConnection
from reelshelf.models.wishlist import WishlistItem

__all__ = [
    "User",
    "UserSession",
    "UserFollow",
    "Media",
    "MediaType",
    "Review",
    "ReviewLike",
    "ReviewComment",
    "MediaList",
    "ListItem",
    "PlatformConnection",
    "WishlistItem",
]
