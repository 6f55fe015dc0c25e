"""
RAWG client: video games
"""
import logging
from typing import Optional, Dict, Any, List

from services.base_client import CatalogClient, build_item, names_of, clean_str, positive, year_prefix
from settings import get_setting

logger = logging.getLogger("main")

# API Configuration
RAWG_BASE_URL = "https://api.rawg.io/api"
SEARCH_PAGE_SIZE = 20

# our sort value -> RAWG `ordering`
RAWG_ORDERING = {
    "released_desc": "-released",
    "released_asc": "released",
    "rating_desc": "-rating",
    "name_asc": "name",
    "name_desc": "-name",
}


def resolve_key(api_key: Optional[str] = None) -> Optional[str]:
    return api_key or get_setting("providers", "rawg_api_key")


def rawg_ordering(sort: Optional[str]) -> Optional[str]:
    if not sort or sort == "relevance":
        return None
    return RAWG_ORDERING.get(sort)


class RAWGClient(CatalogClient):
    """Client for RAWG API"""

    provider = "rawg"
    base_url = RAWG_BASE_URL

    def search_games(self, title: str, api_key: str, ordering: Optional[str] = None) -> Optional[Dict]:
        """Search for games by title"""
        params = {
            "key": api_key,
            "search": title,
            "page_size": SEARCH_PAGE_SIZE,
        }
        if ordering:
            params["ordering"] = ordering
        return self.get_json("/games", params=params)

    def get_game_details(self, rawg_id: str, api_key: str) -> Optional[Dict]:
        """Get detailed game information by RAWG ID"""
        return self.get_json(f"/games/{rawg_id}", params={"key": api_key})


client = RAWGClient()


def get_game_by_id(game_id: str, api_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    key = resolve_key(api_key)
    if not key:
        return None
    data = client.get_game_details(game_id, key)
    if not isinstance(data, dict):
        return None

    metacritic = positive(data.get("metacritic"))
    platforms = [
        p["platform"]["name"]
        for p in data.get("platforms") or []
        if isinstance(p, dict) and isinstance(p.get("platform"), dict) and p["platform"].get("name")
    ]
    esrb = data.get("esrb_rating") if isinstance(data.get("esrb_rating"), dict) else {}
    return build_item(
        data.get("id", game_id),
        data.get("name"),
        image=data.get("background_image"),
        year=year_prefix(data.get("released")),
        itemSource="rawg",
        timeToBeatHours=positive(data.get("playtime")),
        description=clean_str(data.get("description_raw") or data.get("description")),
        genres=names_of(data.get("genres")),
        score=metacritic / 10 if metacritic else None,
        platforms=platforms or None,
        releaseDate=clean_str(data.get("released")),
        developers=names_of(data.get("developers")),
        publishers=names_of(data.get("publishers")),
        esrbRating=clean_str(esrb.get("name")),
        tags=names_of(data.get("tags")),
    )


def search_games(query: str, api_key: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    key = resolve_key(api_key)
    if not key:
        return []
    data = client.search_games(query, key, ordering=rawg_ordering(sort))
    if not isinstance(data, dict):
        return []

    results = data.get("results", [])
    if not results:
        logger.warning(f"No RAWG results for '{query}'")
    return [
        build_item(
            item.get("id"),
            item.get("name"),
            image=item.get("background_image"),
            year=year_prefix(item.get("released")),
            timeToBeatHours=positive(item.get("playtime")),
        )
        for item in results
    ]
