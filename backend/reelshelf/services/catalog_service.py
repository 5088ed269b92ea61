"""Read-only proxies to the movie, TV and game catalogs, with Redis caching."""

import hashlib
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from reelshelf.config import settings
from reelshelf.platforms.hltb.hltb_api import HLTBAPI
from reelshelf.platforms.igdb.igdb_api import IGDBAPI
from reelshelf.platforms.omdb.omdb_api import OMDBAPI
from reelshelf.platforms.rawg.rawg_api import RAWGAPI
from reelshelf.services.errors import NotFoundError, ServiceError, UpstreamServiceError, ValidationFailedError
from reelshelf.services.logging_service import logger, app_metrics
from reelshelf.services.redis_service import catalog_cache

OMDB_KINDS = {"movie": "movie", "tv": "series"}

# OMDB has no popularity or genre index; browsing runs keyword searches
POPULAR_SEED_TERMS = {
    "movie": ("2024", "2023", "action", "adventure", "love"),
    "tv": ("2024", "2023", "series", "drama", "comedy"),
}
GENRE_SEARCH_PAGES = 3

TRENDING_QUERIES = {"movie": "avengers", "tv": "game"}
TRENDING_SIZE = 12


def _cache_key(*parts: Any) -> str:
    raw = ":".join(str(p) for p in parts)
    return hashlib.sha1(raw.lower().encode()).hexdigest()


def _cached(key: str, producer: Callable[[], Any]) -> Any:
    """Return a cached value, or produce and cache it. Works uncached without Redis."""
    cached = catalog_cache.get(key)
    if cached is not None:
        app_metrics.increment_cache(hit=True)
        return cached

    app_metrics.increment_cache(hit=False)
    value = producer()
    catalog_cache.set(key, value, ttl=settings.CATALOG_CACHE_TTL_SECONDS)
    return value


def _require_query(query: Optional[str]) -> str:
    query = (query or "").strip()
    if not query:
        raise ValidationFailedError("Search query is required")
    return query


def _check_kind(kind: str) -> str:
    if kind not in OMDB_KINDS:
        raise ValidationFailedError("Invalid kind. Must be movie or tv")
    return OMDB_KINDS[kind]


def _collect_titles(terms, kind: str, limit: int, pages: int = 1) -> List[Dict[str, Any]]:
    """
    Run OMDB searches and merge titles that have a poster, deduplicated by
    IMDb id, until `limit` titles are found. A failing search term is skipped.
    """
    api = OMDBAPI(settings.OMDB_API_KEY)
    media_kind = _check_kind(kind)
    titles: Dict[str, Dict[str, Any]] = {}

    for term in terms:
        for page in range(1, pages + 1):
            try:
                results = api.search(term, media_kind=media_kind, page=page)["results"]
            except (NotFoundError, UpstreamServiceError) as e:
                logger.warning("OMDB browse search failed", term=term, page=page, error=e.message)
                break

            for title in results:
                if title["poster_url"] and title["imdb_id"] not in titles:
                    titles[title["imdb_id"]] = title

            if len(titles) >= limit:
                return list(titles.values())[:limit]

    return list(titles.values())[:limit]


class CatalogService:
    """Service for external catalog lookups."""

    @staticmethod
    def search_titles(query: str, kind: str = "movie", page: int = 1) -> Dict[str, Any]:
        """
        Search OMDB for movies or TV series.

        Args:
            query: Title search string
            kind: "movie" or "tv"
            page: 1-based page

        Returns:
            {"results": [...], "total_results": int, "page": int}
        """
        query = _require_query(query)
        media_kind = _check_kind(kind)

        def produce():
            return OMDBAPI(settings.OMDB_API_KEY).search(query, media_kind=media_kind, page=page)

        return _cached(_cache_key("omdb", "search", kind, query, page), produce)

    @staticmethod
    def popular_titles(kind: str = "movie", limit: int = 20) -> List[Dict[str, Any]]:
        """Movies or TV series with posters gathered from a fixed set of seed searches."""
        _check_kind(kind)
        return _cached(
            _cache_key("omdb", "popular", kind, limit),
            lambda: _collect_titles(POPULAR_SEED_TERMS[kind], kind, limit)
        )

    @staticmethod
    def titles_by_genre(genre: str, kind: str = "movie", limit: int = 20) -> List[Dict[str, Any]]:
        """
        Movies or TV series matching a genre keyword.

        OMDB cannot filter by genre, so the genre is used as the search term
        over the first few result pages.
        """
        genre = _require_query(genre)
        _check_kind(kind)
        return _cached(
            _cache_key("omdb", "genre", kind, genre, limit),
            lambda: _collect_titles((genre,), kind, limit, pages=GENRE_SEARCH_PAGES)
        )

    @staticmethod
    def get_title(imdb_id: str) -> Dict[str, Any]:
        """Get OMDB details by IMDb id."""
        return _cached(
            _cache_key("omdb", "id", imdb_id),
            lambda: OMDBAPI(settings.OMDB_API_KEY).get_by_id(imdb_id)
        )

    @staticmethod
    def search_games(query: str, limit: int = 24) -> List[Dict[str, Any]]:
        """Search IGDB games, sorted by rating then name."""
        query = _require_query(query)
        return _cached(
            _cache_key("igdb", "search", query, limit),
            lambda: IGDBAPI(settings.TWITCH_CLIENT_ID, settings.TWITCH_CLIENT_SECRET).search_games(query, limit=limit)
        )

    @staticmethod
    def get_game(game_id: int) -> Dict[str, Any]:
        """Get IGDB game details."""
        return _cached(
            _cache_key("igdb", "id", game_id),
            lambda: IGDBAPI(settings.TWITCH_CLIENT_ID, settings.TWITCH_CLIENT_SECRET).get_game(game_id)
        )

    @staticmethod
    def popular_games(limit: int = 20) -> List[Dict[str, Any]]:
        """Get highly rated IGDB games."""
        return _cached(
            _cache_key("igdb", "popular", limit),
            lambda: IGDBAPI(settings.TWITCH_CLIENT_ID, settings.TWITCH_CLIENT_SECRET).get_popular_games(limit=limit)
        )

    @staticmethod
    def games_by_genre(genre: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Best rated IGDB games of a genre."""
        genre = _require_query(genre)
        return _cached(
            _cache_key("igdb", "genre", genre, limit),
            lambda: IGDBAPI(settings.TWITCH_CLIENT_ID, settings.TWITCH_CLIENT_SECRET).get_games_by_genre(
                genre, limit=limit
            )
        )

    @staticmethod
    def trending() -> Dict[str, Any]:
        """
        Trending movies, TV shows and games for the home page.

        Each section is fetched independently; a section whose catalog is
        unconfigured or failing comes back empty. Only a complete result is
        cached, for TRENDING_CACHE_TTL_SECONDS (two days by default).

        Returns:
            {"movies": [...], "tv_shows": [...], "games": [...], "last_updated": str}
        """
        key = _cache_key("trending")
        cached = catalog_cache.get(key)
        if cached is not None:
            app_metrics.increment_cache(hit=True)
            return cached

        app_metrics.increment_cache(hit=False)

        fetchers = (
            ("movies", lambda: OMDBAPI(settings.OMDB_API_KEY).search(
                TRENDING_QUERIES["movie"], media_kind=OMDB_KINDS["movie"]
            )["results"][:TRENDING_SIZE]),
            ("tv_shows", lambda: OMDBAPI(settings.OMDB_API_KEY).search(
                TRENDING_QUERIES["tv"], media_kind=OMDB_KINDS["tv"]
            )["results"][:TRENDING_SIZE]),
            ("games", lambda: RAWGAPI(settings.RAWG_API_KEY).get_games(
                ordering="-added", page_size=TRENDING_SIZE
            )),
        )

        result: Dict[str, Any] = {}
        complete = True
        for section, fetch in fetchers:
            try:
                result[section] = fetch()
            except ServiceError as e:
                logger.warning("Trending section unavailable", section=section, error=e.message)
                result[section] = []
                complete = False

        result["last_updated"] = datetime.utcnow().isoformat()
        if complete:
            catalog_cache.set(key, result, ttl=settings.TRENDING_CACHE_TTL_SECONDS)
        return result

    @staticmethod
    def rawg_search(query: str) -> List[Dict[str, Any]]:
        """Search RAWG games."""
        query = _require_query(query)
        return _cached(_cache_key("rawg", "search", query), lambda: RAWGAPI(settings.RAWG_API_KEY).search_games(query))

    @staticmethod
    def rawg_game(id_or_slug: str) -> Dict[str, Any]:
        """Get a RAWG game by id or slug."""
        return _cached(_cache_key("rawg", "game", id_or_slug), lambda: RAWGAPI(settings.RAWG_API_KEY).get_game(id_or_slug))

    @staticmethod
    def rawg_platforms() -> List[Dict[str, Any]]:
        """List RAWG platforms."""
        return _cached(_cache_key("rawg", "platforms"), lambda: RAWGAPI(settings.RAWG_API_KEY).get_platforms())

    @staticmethod
    def completion_times(game_name: str) -> Dict[str, Any]:
        """
        Look up HowLongToBeat completion times.

        Never fails: when no data is available the result carries
        data=None and a message.

        Args:
            game_name: Game title

        Returns:
            {"data": dict or None, "message": str or None}
        """
        game_name = _require_query(game_name)

        cached = catalog_cache.get(_cache_key("hltb", game_name))
        if cached is not None:
            app_metrics.increment_cache(hit=True)
            return {"data": cached, "message": None}

        app_metrics.increment_cache(hit=False)
        data = HLTBAPI().get_best_match(game_name)
        if data is None:
            return {
                "data": None,
                "message": "HowLongToBeat data is currently unavailable for this game"
            }

        catalog_cache.set(_cache_key("hltb", game_name), data, ttl=settings.CATALOG_CACHE_TTL_SECONDS)
        return {"data": data, "message": None}
