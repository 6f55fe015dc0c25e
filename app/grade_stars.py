"""
Conversions between stored grades (0-10) and star ratings (0-5, half steps),
plus duration labels for log displays.
"""
import math

from utils import ensure_utc


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def grade_to_stars(grade):
    if grade is None:
        return 0
    return max(0, min(5, grade / 2))


def stars_to_grade(stars):
    return _round_half_up(max(0, min(5, stars)) * 2)


def split_hours(hours):
    """(hours, minutes) of a fractional hour count, e.g. 1.5 -> (1, 30)"""
    whole = int(math.floor(hours))
    minutes = _round_half_up((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return whole, minutes


def format_duration(hours):
    """'12 h', '1 h 30 m' or '45 m'"""
    if hours is None or hours <= 0:
        return "0 h"
    whole, minutes = split_hours(hours)
    if whole and minutes:
        return f"{whole} h {minutes} m"
    if whole:
        return f"{whole} h"
    return f"{minutes} m"


def format_time_to_finish(started_at, completed_at):
    """Rounded calendar distance between start and completion"""
    start = ensure_utc(started_at)
    end = ensure_utc(completed_at)
    if start is None or end is None:
        return None
    days = _round_half_up((end - start).total_seconds() / 86400)
    if days <= 0:
        return "Same day"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"
    weeks = _round_half_up(days / 7)
    if weeks == 1:
        return "1 week"
    if weeks < 4:
        return f"{weeks} weeks"
    months = _round_half_up(days / 30)
    if months == 1:
        return "1 month"
    if months < 12:
        return f"{months} months"
    years = _round_half_up(days / 365)
    return "1 year" if years == 1 else f"{years} years"
