"""Movie, TV and game catalog endpoints."""

from fastapi import APIRouter, Query
from typing import Any, Dict, List

from reelshelf.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/trending")
def trending() -> Dict[str, Any]:
    """Trending movies, TV shows and games. Cached for two days."""
    return CatalogService.trending()


@router.get("/movies/search")
def search_movies(
    q: str = Query(..., min_length=1, max_length=200),
    page: int = Query(1, ge=1, le=100)
) -> Dict[str, Any]:
    """Search movies on OMDB."""
    return CatalogService.search_titles(q, kind="movie", page=page)


@router.get("/movies/popular")
def popular_movies(limit: int = Query(20, ge=1, le=50)) -> List[Dict[str, Any]]:
    return CatalogService.popular_titles(kind="movie", limit=limit)


@router.get("/movies/genre")
def movies_by_genre(
    genre: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(20, ge=1, le=50)
) -> List[Dict[str, Any]]:
    return CatalogService.titles_by_genre(genre, kind="movie", limit=limit)


@router.get("/movies/{imdb_id}")
def get_movie(imdb_id: str) -> Dict[str, Any]:
    """Movie details by IMDb id."""
    return CatalogService.get_title(imdb_id)


@router.get("/tv/search")
def search_tv(
    q: str = Query(..., min_length=1, max_length=200),
    page: int = Query(1, ge=1, le=100)
) -> Dict[str, Any]:
    """Search TV series on OMDB."""
    return CatalogService.search_titles(q, kind="tv", page=page)


@router.get("/tv/popular")
def popular_tv(limit: int = Query(20, ge=1, le=50)) -> List[Dict[str, Any]]:
    return CatalogService.popular_titles(kind="tv", limit=limit)


@router.get("/tv/genre")
def tv_by_genre(
    genre: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(20, ge=1, le=50)
) -> List[Dict[str, Any]]:
    return CatalogService.titles_by_genre(genre, kind="tv", limit=limit)


@router.get("/tv/{imdb_id}")
def get_tv_show(imdb_id: str) -> Dict[str, Any]:
    """TV series details by IMDb id."""
    return CatalogService.get_title(imdb_id)


@router.get("/games/search")
def search_games(
    q: str = Query(..., min_length=1, max_length=200),
    limit: int = Query(24, ge=1, le=50)
) -> List[Dict[str, Any]]:
    """Search IGDB games, best rated first."""
    return CatalogService.search_games(q, limit=limit)


@router.get("/games/popular")
def popular_games(limit: int = Query(20, ge=1, le=50)) -> List[Dict[str, Any]]:
    """Highly rated IGDB games."""
    return CatalogService.popular_games(limit=limit)


@router.get("/games/genre")
def games_by_genre(
    genre: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(20, ge=1, le=50)
) -> List[Dict[str, Any]]:
    """Best rated IGDB games of a genre."""
    return CatalogService.games_by_genre(genre, limit=limit)


@router.get("/games/{game_id}")
def get_game(game_id: int) -> Dict[str, Any]:
    """IGDB game details."""
    return CatalogService.get_game(game_id)


@router.get("/rawg/search")
def rawg_search(q: str = Query(..., min_length=1, max_length=200)) -> List[Dict[str, Any]]:
    """Search RAWG games."""
    return CatalogService.rawg_search(q)


@router.get("/rawg/platforms")
def rawg_platforms() -> List[Dict[str, Any]]:
    """RAWG platform list."""
    return CatalogService.rawg_platforms()


@router.get("/rawg/games/{id_or_slug}")
def rawg_game(id_or_slug: str) -> Dict[str, Any]:
    """RAWG game by numeric id or slug."""
    return CatalogService.rawg_game(id_or_slug)


@router.get("/hltb")
def completion_times(game: str = Query(..., min_length=1, max_length=200)) -> Dict[str, Any]:
    """
    HowLongToBeat completion times for a game.

    Always 200; `data` is null when nothing could be retrieved.
    """
    return CatalogService.completion_times(game)
