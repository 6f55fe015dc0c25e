"""
Fixed vocabularies shared by routes, services and models
"""

MEDIA_TYPES = (
    "movies",
    "tv",
    "boardgames",
    "games",
    "books",
    "anime",
    "manga",
    "comics",
)

BOARD_GAME_PROVIDERS = ("bgg", "ludopedia")

LIST_TYPES = ("favorites", "pending")

SUPPORTED_LOCALES = ("en", "pt-BR", "es")
DEFAULT_LOCALE = "en"

THEMES = ("dark", "light")

STATS_GROUPS = ("category", "month", "year")

LOG_STATUS_OPTIONS = {
    "movies": ("watched", "plan to watch"),
    "tv": ("completed", "watching", "plan to watch", "dropped"),
    "boardgames": ("played", "plan to play"),
    "games": ("played", "plan to play", "dropped", "playing"),
    "books": ("read", "plan to read", "reading"),
    "anime": ("completed", "watching", "plan to watch", "dropped"),
    "manga": ("read", "plan to read", "reading"),
    "comics": ("read", "plan to read", "reading"),
}

IN_PROGRESS_STATUSES = frozenset(["watching", "reading", "playing"])
COMPLETED_STATUSES = frozenset(["watched", "completed", "read", "played"])

_TITLE_YEAR_SORTS = ("relevance", "title_asc", "title_desc", "year_desc", "year_asc")

SEARCH_SORT_OPTIONS = {
    "movies": _TITLE_YEAR_SORTS,
    "tv": _TITLE_YEAR_SORTS,
    "boardgames": _TITLE_YEAR_SORTS,
    "books": _TITLE_YEAR_SORTS,
    "comics": _TITLE_YEAR_SORTS,
    "games": ("relevance", "released_desc", "released_asc", "rating_desc", "name_asc", "name_desc"),
    "anime": ("relevance", "title_asc", "title_desc", "score_desc", "start_date_desc", "start_date_asc"),
    "manga": ("relevance", "title_asc", "title_desc", "score_desc", "start_date_desc", "start_date_asc"),
}


def is_valid_media_type(media_type):
    return media_type in MEDIA_TYPES


def is_valid_status(media_type, status):
    return status in LOG_STATUS_OPTIONS.get(media_type, ())


def is_in_progress(status):
    return status in IN_PROGRESS_STATUSES


def is_completed(status):
    return status in COMPLETED_STATUSES


def resolve_sort(media_type, sort):
    """Return the sort if the media type allows it, else None"""
    if sort and sort in SEARCH_SORT_OPTIONS.get(media_type, ()):
        return sort
    return None
