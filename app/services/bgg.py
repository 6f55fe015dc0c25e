"""
BoardGameGeek XML API 2 client
"""
import logging
import xml.etree.ElementTree as ET
from typing import Optional, Dict, Any, List

from services.base_client import CatalogClient, build_item, clean_str, positive
from services.search_sort import sort_search_results
from settings import get_setting

logger = logging.getLogger("main")

BGG_BASE_URL = "https://boardgamegeek.com/xmlapi2"
SEARCH_LIMIT = 20


def resolve_token(api_token: Optional[str] = None) -> Optional[str]:
    return api_token or get_setting("providers", "bgg_api_token")


def _parse(xml_text: Optional[str]):
    if not xml_text:
        return None
    try:
        return ET.fromstring(xml_text)
    except ET.ParseError as e:
        logger.warning(f"BGG returned malformed XML: {e}")
        return None


def _int_value(item, tag) -> Optional[int]:
    node = item.find(tag)
    if node is None:
        return None
    try:
        return int(node.get("value"))
    except (TypeError, ValueError):
        return None


def _primary_name(item) -> str:
    names = item.findall("name")
    primary = next((n for n in names if n.get("type") == "primary"), names[0] if names else None)
    if primary is None:
        return "Unknown"
    return primary.get("value") or (primary.text or "").strip() or "Unknown"


def _links(item, link_type) -> Optional[List[str]]:
    values = [l.get("value") for l in item.findall("link") if l.get("type") == link_type and l.get("value")]
    return values or None


def _thing_to_item(item, detailed: bool = False) -> Dict[str, Any]:
    year_node = item.find("yearpublished")
    year = year_node.get("value") if year_node is not None else None
    image = (item.findtext("image") or "").strip() or None
    if not detailed:
        return build_item(item.get("id"), _primary_name(item), image=image, year=year)
    return build_item(
        item.get("id"),
        _primary_name(item),
        image=image,
        year=year,
        itemSource="bgg",
        description=clean_str(item.findtext("description"), max_length=2000),
        playersMin=positive(_int_value(item, "minplayers")),
        playersMax=positive(_int_value(item, "maxplayers")),
        playingTimeMinutes=positive(_int_value(item, "playingtime")),
        minAge=positive(_int_value(item, "minage")),
        categories=_links(item, "boardgamecategory"),
        mechanics=_links(item, "boardgamemechanic"),
        authors=_links(item, "boardgamedesigner"),
        publisher=(_links(item, "boardgamepublisher") or [None])[0],
    )


class BGGClient(CatalogClient):
    """Client for the BGG XML API; every call carries the bearer token"""

    provider = "bgg"
    base_url = BGG_BASE_URL

    def _auth_headers(self, token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def thing(self, ids: str, token: str):
        return _parse(self.get_text("/thing", params={"id": ids}, headers=self._auth_headers(token)))

    def search(self, query: str, token: str):
        return _parse(
            self.get_text("/search", params={"query": query, "type": "boardgame"}, headers=self._auth_headers(token))
        )


client = BGGClient()


def get_board_game_by_id(game_id: str, api_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
    token = resolve_token(api_token)
    if not token:
        return None
    root = client.thing(game_id, token)
    if root is None:
        return None
    items = root.findall("item")
    if len(items) != 1:
        return None
    return _thing_to_item(items[0], detailed=True)


def search_board_games(query: str, api_token: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    """Search ids first, then fetch names, years and images with a single thing call"""
    token = resolve_token(api_token)
    if not token:
        return []
    root = client.search(query, token)
    if root is None:
        return []
    ids = [item.get("id") for item in root.findall("item") if item.get("id")][:SEARCH_LIMIT]
    if not ids:
        return []
    things = client.thing(",".join(ids), token)
    if things is None:
        return []
    results = [_thing_to_item(item) for item in things.findall("item")]
    return sort_search_results(results, sort)
