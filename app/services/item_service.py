"""
Item Service - one catalog item with every user's log of it
"""
import structlog
from typing import Dict, Any, Optional, List

from media_types import BOARD_GAME_PROVIDERS
from repositories.log_repository import LogRepository
from services import tmdb, rawg, open_library, jikan, bgg, ludopedia, comicvine
from services.base_client import ProviderAPIException, build_item
from services.stats_service import round_hours
from utils import isoformat_utc

logger = structlog.get_logger("items")

# media type -> (api key name, fetcher)
ITEM_FETCHERS = {
    "movies": ("tmdb", tmdb.get_movie_by_id),
    "tv": ("tmdb", tmdb.get_tv_by_id),
    "games": ("rawg", rawg.get_game_by_id),
    "books": (None, open_library.get_book_by_id),
    "anime": (None, jikan.get_anime_by_id),
    "manga": (None, jikan.get_manga_by_id),
    "comics": ("comicvine", comicvine.get_volume_by_id),
}

BOARD_GAME_FETCHERS = {
    "bgg": bgg.get_board_game_by_id,
    "ludopedia": ludopedia.get_board_game_by_id,
}


def _user_key(user, name):
    if user is None or name is None:
        return None
    return user.get_api_key(name)


def resolve_item_board_source(requested, logs, user) -> str:
    """?source= wins, then the source any log was saved with, then the user's provider"""
    if requested in BOARD_GAME_PROVIDERS:
        return requested
    for log in logs:
        if log.board_game_source in BOARD_GAME_PROVIDERS:
            return log.board_game_source
    if user is not None:
        return user.effective_board_game_provider
    return "bgg"


def fetch_item(media_type: str, external_id: str, user=None, logs=None, source=None) -> Optional[Dict[str, Any]]:
    """Catalog detail of an item; provider failures are logged and read as 'no item'"""
    try:
        if media_type == "boardgames":
            provider = resolve_item_board_source(source, logs or [], user)
            return BOARD_GAME_FETCHERS[provider](external_id, _user_key(user, provider))
        key_name, fetcher = ITEM_FETCHERS[media_type]
        return fetcher(external_id, _user_key(user, key_name))
    except ProviderAPIException as e:
        logger.error("item_fetch_failed", media_type=media_type, external_id=external_id, error=str(e))
        return None


def review_dict(log, author) -> Dict[str, Any]:
    return {
        "id": log.id,
        "userId": log.user_id,
        "username": author.username if author is not None else None,
        "grade": log.grade,
        "review": log.review,
        "listType": log.list_type,
        "status": log.status,
        "season": log.season,
        "episode": log.episode,
        "chapter": log.chapter,
        "volume": log.volume,
        "startedAt": isoformat_utc(log.started_at),
        "completedAt": isoformat_utc(log.completed_at),
        "contentHours": log.content_hours,
        "createdAt": isoformat_utc(log.created_at),
    }


def mean_grade(logs) -> Optional[float]:
    grades = [log.grade for log in logs if log.grade is not None]
    if not grades:
        return None
    return round_hours(sum(grades) / len(grades))


def get_item_page(media_type: str, external_id: str, user=None, source=None) -> Optional[Dict[str, Any]]:
    """
    {item, reviews, meanGrade} for an item, or None when neither the catalog
    nor any log knows it. Logs alone are enough to build a fallback item.
    """
    rows = LogRepository.list_for_item(media_type, external_id)
    logs: List = [log for log, _ in rows]

    item = fetch_item(media_type, external_id, user=user, logs=logs, source=source)
    if item is None and not logs:
        return None

    if item is None:
        latest = logs[0]
        item = build_item(external_id, latest.title, image=latest.image)

    if not item.get("image"):
        fallback = next((log.image for log in logs if log.image), None)
        item["image"] = fallback

    return {
        "item": item,
        "reviews": [review_dict(log, author) for log, author in rows],
        "meanGrade": mean_grade(logs),
    }


def get_season_episodes(tv_id: str, season: int, user=None) -> List[int]:
    try:
        return tmdb.get_tv_season_episodes(tv_id, season, _user_key(user, "tmdb"))
    except ProviderAPIException as e:
        logger.error("season_fetch_failed", tv_id=tv_id, season=season, error=str(e))
        return []
