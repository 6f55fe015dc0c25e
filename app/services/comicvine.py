"""
Comic Vine client: comic volumes
"""
import re
from typing import Optional, Dict, Any, List

from services.base_client import CatalogClient, build_item, clean_str, positive
from services.search_sort import sort_search_results
from settings import get_setting

COMICVINE_BASE_URL = "https://comicvine.gamespot.com/api"
VOLUME_PREFIX = "4050-"
SEARCH_LIMIT = 20

_TAGS = re.compile(r"<[^>]+>")


def resolve_key(api_key: Optional[str] = None) -> Optional[str]:
    key = api_key or get_setting("providers", "comicvine_api_key")
    return key.strip() if isinstance(key, str) and key.strip() else None


class ComicVineClient(CatalogClient):
    """Client for the Comic Vine API; responses are valid only with status_code 1"""

    provider = "comicvine"
    base_url = COMICVINE_BASE_URL

    def _get_results(self, path: str, api_key: str, params: Optional[Dict] = None):
        query = {"api_key": api_key, "format": "json"}
        if params:
            query.update(params)
        data = self.get_json(path, params=query)
        if not isinstance(data, dict) or data.get("status_code") != 1:
            return None
        return data.get("results")

    def get_volume(self, volume_id: str, api_key: str):
        volume_id = volume_id[len(VOLUME_PREFIX):] if volume_id.startswith(VOLUME_PREFIX) else volume_id
        return self._get_results(f"/volume/{VOLUME_PREFIX}{volume_id}/", api_key)

    def search_volumes(self, query: str, api_key: str):
        return self._get_results(
            "/search/", api_key, params={"query": query, "resources": "volume", "limit": SEARCH_LIMIT}
        )


client = ComicVineClient()


def get_volume_by_id(volume_id: str, api_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    key = resolve_key(api_key)
    if not key:
        return None
    d = client.get_volume(volume_id, key)
    if not isinstance(d, dict):
        return None
    image = d.get("image") or {}
    publisher = d.get("publisher") if isinstance(d.get("publisher"), dict) else {}
    description = d.get("deck") or (_TAGS.sub("", d["description"]) if isinstance(d.get("description"), str) else None)
    return build_item(
        d.get("id", volume_id),
        d.get("name"),
        image=image.get("medium_url"),
        year=d.get("start_year"),
        itemSource="comicvine",
        description=clean_str(description, max_length=2000),
        publisher=clean_str(publisher.get("name")),
        issuesCount=positive(d.get("count_of_issues")),
    )


def search_comics(query: str, api_key: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    key = resolve_key(api_key)
    if not key:
        return []
    found = client.search_volumes(query, key)
    if not isinstance(found, list):
        return []
    results = []
    for item in found[:SEARCH_LIMIT]:
        image = item.get("image") or {}
        results.append(
            build_item(
                item.get("id"),
                item.get("name"),
                image=image.get("medium_url") or image.get("small_url"),
                year=item.get("start_year"),
            )
        )
    return sort_search_results(results, sort)
