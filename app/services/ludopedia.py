"""
Ludopedia client: board games (Brazilian catalog), bearer token auth
"""
import re
from typing import Optional, Dict, Any, List

from services.base_client import CatalogClient, build_item, clean_str, positive
from services.search_sort import sort_search_results
from settings import get_setting

LUDOPEDIA_BASE_URL = "https://ludopedia.com.br/api/v1"
SEARCH_ROWS = 20

_TAGS = re.compile(r"<[^>]+>")


def resolve_token(api_token: Optional[str] = None) -> Optional[str]:
    return api_token or get_setting("providers", "ludopedia_api_token")


def _named(entries, key) -> Optional[List[str]]:
    # lists come back either as plain strings or as {"nm_...": "..."} objects
    if not isinstance(entries, list):
        return None
    values = []
    for entry in entries:
        value = entry if isinstance(entry, str) else (entry.get(key) if isinstance(entry, dict) else None)
        if value:
            values.append(value)
    return values or None


def _image(raw: Dict) -> Optional[str]:
    return clean_str(raw.get("thumb") or raw.get("url_imagem"))


def _year(raw: Dict) -> Optional[str]:
    value = raw.get("ano_publicacao")
    return str(value)[:4] if value is not None else None


def map_jogo_to_item(raw: Dict[str, Any]) -> Dict[str, Any]:
    description = raw.get("descricao")
    if isinstance(description, str):
        description = clean_str(_TAGS.sub("", description), max_length=2000)
    players_min = raw.get("qt_jogadores_min", raw.get("qt_min_jogadores"))
    players_max = raw.get("qt_jogadores_max", raw.get("qt_max_jogadores"))
    playing_time = raw.get("vl_tempo_jogo", raw.get("tempo_jogo"))
    return build_item(
        raw.get("id_jogo") if raw.get("id_jogo") is not None else "",
        raw.get("nm_jogo"),
        image=_image(raw),
        year=_year(raw),
        itemSource="ludopedia",
        description=description,
        playersMin=positive(players_min),
        playersMax=positive(players_max),
        playingTimeMinutes=positive(playing_time),
        minAge=positive(raw.get("idade_minima")),
        categories=_named(raw.get("categorias"), "nm_categoria"),
        mechanics=_named(raw.get("mecanicas"), "nm_mecanica"),
        authors=_named(raw.get("designers"), "nm_profissional"),
    )


class LudopediaClient(CatalogClient):
    """Client for Ludopedia API v1"""

    provider = "ludopedia"
    base_url = LUDOPEDIA_BASE_URL

    def _headers(self, token: str) -> Dict[str, str]:
        return {"Accept": "application/json", "Authorization": f"Bearer {token}"}

    def get_jogo(self, jogo_id: str, token: str) -> Optional[Dict]:
        return self.get_json(f"/jogos/{jogo_id}", headers=self._headers(token))

    def search_jogos(self, query: str, token: str) -> Optional[Dict]:
        params = {"search": query, "tp_jogo": "b", "rows": SEARCH_ROWS, "page": 1}
        return self.get_json("/jogos", params=params, headers=self._headers(token))


client = LudopediaClient()


def get_board_game_by_id(game_id: str, api_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
    token = resolve_token(api_token)
    if not token:
        return None
    data = client.get_jogo(game_id, token)
    if not isinstance(data, dict):
        return None
    return map_jogo_to_item(data)


def search_board_games(query: str, api_token: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    token = resolve_token(api_token)
    if not token:
        return []
    term = (query or "").strip()
    if not term:
        return []
    data = client.search_jogos(term, token)
    if not isinstance(data, dict):
        return []
    jogos = data.get("jogos") or data.get("itens") or data.get("resultados") or []
    results = [
        build_item(item.get("id_jogo") if item.get("id_jogo") is not None else "", item.get("nm_jogo"),
                   image=_image(item), year=_year(item))
        for item in jogos[:SEARCH_ROWS]
        if isinstance(item, dict)
    ]
    return sort_search_results(results, sort)
