"""
TMDB client: movies and TV series
"""
import logging
from typing import Optional, Dict, Any, List

from services.base_client import CatalogClient, build_item, names_of, clean_str, positive, year_prefix
from services.search_sort import sort_search_results
from settings import get_setting

logger = logging.getLogger("main")

TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w200"
DEFAULT_EPISODE_MINUTES = 45
SEARCH_LIMIT = 20


def resolve_key(api_key: Optional[str] = None) -> Optional[str]:
    return api_key or get_setting("providers", "tmdb_api_key")


def poster_url(path: Optional[str]) -> Optional[str]:
    return f"{TMDB_IMAGE_BASE}{path}" if path else None


class TMDBClient(CatalogClient):
    """Client for TMDB API v3"""

    provider = "tmdb"
    base_url = TMDB_BASE_URL

    def get_movie(self, movie_id: str, api_key: str) -> Optional[Dict]:
        return self.get_json(f"/movie/{movie_id}", params={"api_key": api_key})

    def get_tv(self, tv_id: str, api_key: str) -> Optional[Dict]:
        return self.get_json(f"/tv/{tv_id}", params={"api_key": api_key})

    def get_tv_season(self, tv_id: str, season: int, api_key: str) -> Optional[Dict]:
        return self.get_json(f"/tv/{tv_id}/season/{season}", params={"api_key": api_key})

    def search(self, kind: str, query: str, api_key: str) -> Optional[Dict]:
        return self.get_json(f"/search/{kind}", params={"api_key": api_key, "query": query})


client = TMDBClient()


def get_movie_by_id(movie_id: str, api_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    key = resolve_key(api_key)
    if not key:
        return None
    data = client.get_movie(movie_id, key)
    if not isinstance(data, dict):
        return None

    spoken_languages = [
        l.get("english_name") or l.get("name")
        for l in data.get("spoken_languages") or []
        if isinstance(l, dict) and (l.get("english_name") or l.get("name"))
    ]
    vote_average = data.get("vote_average")
    return build_item(
        data.get("id", movie_id),
        data.get("title"),
        image=poster_url(data.get("poster_path")),
        year=year_prefix(data.get("release_date")),
        itemSource="tmdb",
        runtimeMinutes=positive(data.get("runtime")),
        description=clean_str(data.get("overview")),
        tagline=clean_str(data.get("tagline")),
        score=positive(vote_average),
        genres=names_of(data.get("genres")),
        releaseDate=clean_str(data.get("release_date")),
        status=clean_str(data.get("status")),
        productionCountries=names_of(data.get("production_countries")),
        spokenLanguages=spoken_languages or None,
    )


def get_tv_by_id(tv_id: str, api_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    key = resolve_key(api_key)
    if not key:
        return None
    data = client.get_tv(tv_id, key)
    if not isinstance(data, dict):
        return None

    episodes = data.get("number_of_episodes") or 0
    run_times = [t for t in data.get("episode_run_time") or [] if isinstance(t, (int, float)) and t > 0]
    average_minutes = sum(run_times) / len(run_times) if run_times else DEFAULT_EPISODE_MINUTES
    runtime_minutes = round(episodes * average_minutes) if episodes > 0 else None

    return build_item(
        data.get("id", tv_id),
        data.get("name"),
        image=poster_url(data.get("poster_path")),
        year=year_prefix(data.get("first_air_date")),
        itemSource="tmdb",
        runtimeMinutes=runtime_minutes,
        description=clean_str(data.get("overview")),
        tagline=clean_str(data.get("tagline")),
        score=positive(data.get("vote_average")),
        genres=names_of(data.get("genres")),
        episodesCount=positive(episodes),
        seasonsCount=positive(data.get("number_of_seasons")),
        releaseDate=clean_str(data.get("first_air_date")),
        status=clean_str(data.get("status")),
        networks=names_of(data.get("networks")),
    )


def get_tv_season_episodes(tv_id: str, season: int, api_key: Optional[str] = None) -> List[int]:
    """Sorted episode numbers of one season, for progress pickers"""
    key = resolve_key(api_key)
    if not key:
        return []
    data = client.get_tv_season(tv_id, season, key)
    if not isinstance(data, dict):
        return []
    numbers = [
        ep.get("episode_number")
        for ep in data.get("episodes") or []
        if isinstance(ep, dict)
        and isinstance(ep.get("episode_number"), int)
        and ep.get("episode_number") >= 0
    ]
    return sorted(numbers)


def _search(kind: str, title_field: str, date_field: str, query: str, api_key, sort) -> List[Dict[str, Any]]:
    key = resolve_key(api_key)
    if not key:
        return []
    data = client.search(kind, query, key)
    if not isinstance(data, dict):
        return []
    results = [
        build_item(
            item.get("id"),
            item.get(title_field),
            image=poster_url(item.get("poster_path")),
            year=year_prefix(item.get(date_field)),
        )
        for item in (data.get("results") or [])[:SEARCH_LIMIT]
    ]
    return sort_search_results(results, sort)


def search_movies(query: str, api_key: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    return _search("movie", "title", "release_date", query, api_key, sort)


def search_tv(query: str, api_key: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    return _search("tv", "name", "first_air_date", query, api_key, sort)
