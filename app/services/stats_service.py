"""
Stats Service - hours of completed content per category, month or year
"""
import math
from typing import Dict, Any, Iterable, Optional

from media_types import STATS_GROUPS
from utils import ensure_utc

SECONDS_PER_HOUR = 60 * 60
# Derived hours (start -> finish) are capped so multi-day completions don't inflate stats
FALLBACK_MAX_HOURS = 24


def normalize_group(group: Optional[str]) -> str:
    return group if group in STATS_GROUPS else "month"


def log_hours(log) -> Optional[float]:
    """Hours a completed log contributes, or None when it contributes nothing"""
    completed_at = ensure_utc(log.completed_at)
    if completed_at is None:
        return None
    if log.content_hours is not None and log.content_hours > 0:
        return log.content_hours
    started_at = ensure_utc(log.started_at)
    if started_at is None:
        return None
    hours = min((completed_at - started_at).total_seconds() / SECONDS_PER_HOUR, FALLBACK_MAX_HOURS)
    return hours if hours > 0 else None


def period_key(log, group: str) -> str:
    if group == "category":
        return log.media_type
    completed_at = ensure_utc(log.completed_at)
    if group == "year":
        return f"{completed_at.year}"
    return f"{completed_at.year}-{completed_at.month:02d}"


def round_hours(hours: float) -> float:
    """One decimal, halves rounded up"""
    return math.floor(hours * 10 + 0.5) / 10


def aggregate_hours(logs: Iterable, group: Optional[str] = None) -> Dict[str, Any]:
    group = normalize_group(group)
    by_key: Dict[str, float] = {}
    for log in logs:
        hours = log_hours(log)
        if hours is None:
            continue
        key = period_key(log, group)
        by_key[key] = by_key.get(key, 0) + hours

    data = [{"period": key, "hours": round_hours(hours)} for key, hours in sorted(by_key.items())]
    return {"group": group, "data": data}
