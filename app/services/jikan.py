"""
Jikan (MyAnimeList) client: anime and manga, no key required
"""
from typing import Optional, Dict, Any, List

from services.base_client import CatalogClient, build_item, names_of, clean_str, positive, year_prefix

JIKAN_BASE_URL = "https://api.jikan.moe/v4"
SEARCH_LIMIT = 20
SYNOPSIS_MAX_LENGTH = 2000

# our sort value -> (order_by, sort)
JIKAN_ORDER = {
    "title_asc": ("title", "asc"),
    "title_desc": ("title", "desc"),
    "score_desc": ("score", "desc"),
    "start_date_desc": ("start_date", "desc"),
    "start_date_asc": ("start_date", "asc"),
}


def jikan_order_params(sort: Optional[str]) -> Dict[str, str]:
    if not sort or sort not in JIKAN_ORDER:
        return {}
    order_by, direction = JIKAN_ORDER[sort]
    return {"order_by": order_by, "sort": direction}


def _image(entry: Dict) -> Optional[str]:
    images = entry.get("images") or {}
    return (images.get("jpg") or {}).get("image_url")


def _published_year(entry: Dict) -> Optional[str]:
    published = entry.get("published") or {}
    return year_prefix(published.get("from"))


class JikanClient(CatalogClient):
    """Client for the Jikan v4 REST API"""

    provider = "jikan"
    base_url = JIKAN_BASE_URL

    def get_entry(self, kind: str, mal_id: str) -> Optional[Dict]:
        data = self.get_json(f"/{kind}/{mal_id}")
        if not isinstance(data, dict) or not isinstance(data.get("data"), dict):
            return None
        return data["data"]

    def search(self, kind: str, query: str, sort: Optional[str] = None) -> List[Dict]:
        params = {"q": query, "limit": SEARCH_LIMIT}
        params.update(jikan_order_params(sort))
        data = self.get_json(f"/{kind}", params=params)
        if not isinstance(data, dict):
            return []
        return [d for d in data.get("data") or [] if isinstance(d, dict)]


client = JikanClient()


def get_anime_by_id(anime_id: str, api_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    d = client.get_entry("anime", anime_id)
    if d is None:
        return None
    return build_item(
        d.get("mal_id", anime_id),
        d.get("title"),
        image=_image(d),
        year=d.get("year"),
        itemSource="jikan",
        description=clean_str(d.get("synopsis"), max_length=SYNOPSIS_MAX_LENGTH),
        score=positive(d.get("score")),
        contentRating=clean_str(d.get("rating")),
        episodesCount=positive(d.get("episodes")),
        genres=names_of(d.get("genres")),
        studios=names_of(d.get("studios")),
        themes=names_of(d.get("themes")),
        duration=clean_str(d.get("duration")),
        status=clean_str(d.get("status")),
    )


def get_manga_by_id(manga_id: str, api_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    d = client.get_entry("manga", manga_id)
    if d is None:
        return None
    serialization = names_of(d.get("serializations"))
    if not serialization and isinstance(d.get("serialization"), dict):
        serialization = [d["serialization"].get("name")] if d["serialization"].get("name") else None
    return build_item(
        d.get("mal_id", manga_id),
        d.get("title"),
        image=_image(d),
        year=_published_year(d),
        itemSource="jikan",
        description=clean_str(d.get("synopsis"), max_length=SYNOPSIS_MAX_LENGTH),
        score=positive(d.get("score")),
        chaptersCount=positive(d.get("chapters")),
        volumesCount=positive(d.get("volumes")),
        genres=names_of(d.get("genres")),
        authors=names_of(d.get("authors")),
        serialization=clean_str(serialization[0]) if serialization else None,
        status=clean_str(d.get("status")),
    )


def search_anime(query: str, api_key: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    return [
        build_item(item.get("mal_id"), item.get("title"), image=_image(item), year=item.get("year"))
        for item in client.search("anime", query, sort)
    ]


def search_manga(query: str, api_key: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    return [
        build_item(item.get("mal_id"), item.get("title"), image=_image(item), year=_published_year(item))
        for item in client.search("manga", query, sort)
    ]
