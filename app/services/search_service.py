"""
Search Service - routes a catalog search to the right provider and meters keyless use
"""
import threading
import structlog
from typing import Dict, Any, Optional, Tuple

from constants import FREE_SEARCH_LIMIT
from metrics import free_searches_total
from settings import get_setting
from services import tmdb, rawg, open_library, jikan, bgg, ludopedia, comicvine
from services.api_key_meta import api_key_prompt

logger = structlog.get_logger("search")

# media types whose catalogs need no key
KEYLESS_SEARCHERS = {
    "books": open_library.search_books,
    "anime": jikan.search_anime,
    "manga": jikan.search_manga,
}

KEYED_SEARCHERS = {
    "movies": ("tmdb", tmdb.search_movies),
    "tv": ("tmdb", tmdb.search_tv),
    "games": ("rawg", rawg.search_games),
    "comics": ("comicvine", comicvine.search_comics),
}

BOARD_GAME_SEARCHERS = {
    "bgg": bgg.search_board_games,
    "ludopedia": ludopedia.search_board_games,
}


class FreeSearchTracker:
    """Process-local count of keyless searches per requester and category"""

    def __init__(self):
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def usage(self, key: str) -> int:
        with self._lock:
            return self._counts.get(key, 0)

    def try_consume(self, key: str, limit: int) -> Tuple[bool, int]:
        """Count one search unless the limit is already reached. Returns (allowed, used)."""
        with self._lock:
            used = self._counts.get(key, 0)
            if used >= limit:
                return False, used
            self._counts[key] = used + 1
            return True, used + 1

    def clear(self):
        with self._lock:
            self._counts.clear()


free_search_tracker = FreeSearchTracker()


def free_search_key(requester_id: str, media_type: str, board_provider: str) -> str:
    suffix = f"-{board_provider}" if media_type == "boardgames" else ""
    return f"{requester_id}-{media_type}{suffix}"


def resolve_board_provider(requested: Optional[str], user) -> str:
    if requested in BOARD_GAME_SEARCHERS:
        return requested
    if user is not None and user.board_game_provider == "ludopedia":
        return "ludopedia"
    return "bgg"


def run_search(
    media_type: str,
    query: str,
    sort: Optional[str],
    user=None,
    requester_id: str = "anon",
    board_provider: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Run a search and build the response body.

    Keyless requesters get FREE_SEARCH_LIMIT searches per category served with the
    server key; logged-in users without a key, and anyone past the limit, also get
    the key prompt fields.
    """
    if media_type in KEYLESS_SEARCHERS:
        return {"results": KEYLESS_SEARCHERS[media_type](query, sort=sort)}

    if media_type == "boardgames":
        provider = resolve_board_provider(board_provider, user)
        searcher = BOARD_GAME_SEARCHERS[provider]
    else:
        provider, searcher = KEYED_SEARCHERS[media_type]

    user_key = user.get_api_key(provider) if user is not None else None
    has_key = bool(user_key)
    if provider == "comicvine" and not has_key:
        has_key = bool(get_setting("providers", "comicvine_api_key"))

    if has_key:
        return {"results": searcher(query, user_key, sort=sort)}

    limit = get_setting("limits", "free_search_limit", FREE_SEARCH_LIMIT)
    counter_key = free_search_key(requester_id, media_type, provider)
    allowed, used = free_search_tracker.try_consume(counter_key, limit)
    if not allowed:
        free_searches_total.labels(category=media_type, status="limit_reached").inc()
        logger.info("free_search_limit_reached", category=media_type, provider=provider)
        out = {"results": []}
        out.update(api_key_prompt(provider))
        out.update({"freeSearchUsed": limit, "freeSearchLimit": limit, "freeSearchLimitReached": True})
        return out

    free_searches_total.labels(category=media_type, status="served").inc()
    out = {"results": searcher(query, None, sort=sort)}
    reached = used >= limit
    if user is not None or reached:
        out.update(api_key_prompt(provider))
    out["freeSearchUsed"] = used
    out["freeSearchLimit"] = limit
    if reached:
        out["freeSearchLimitReached"] = True
    return out
