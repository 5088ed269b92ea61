"""API routers."""

from reelshelf.routers import (
    auth,
    users,
    uploads,
    lists,
    watchlater,
    wishlist,
    reviews,
    social,
    catalog,
    search,
    platforms,
    health
)

__all__ = [
    "auth",
    "users",
    "uploads",
    "lists",
    "watchlater",
    "wishlist",
    "reviews",
    "social",
    "catalog",
    "search",
    "platforms",
    "health"
]
