"""
In-memory ordering for catalogs whose search API cannot sort (TMDB, Open Library,
BGG, Ludopedia, Comic Vine)
"""
import math
import re
import unicodedata
from typing import List, Dict, Any, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_year(value) -> Optional[int]:
    """Integer prefix of the year value, None when absent or unparsable"""
    if value is None or value == "":
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def _title_key(result: Dict[str, Any]) -> str:
    """Title folded for comparison: accents and case are ignored"""
    decomposed = unicodedata.normalize("NFKD", result.get("title") or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def sort_search_results(results: List[Dict[str, Any]], sort: Optional[str]) -> List[Dict[str, Any]]:
    """
    Reorder search results.

    relevance, empty and unknown values keep the upstream order. Python's sort is
    stable, so ties keep their relative order.
    """
    if not sort or sort == "relevance":
        return list(results)

    if sort == "title_asc":
        return sorted(results, key=_title_key)
    if sort == "title_desc":
        return sorted(results, key=_title_key, reverse=True)
    if sort == "year_desc":
        def year_desc_key(r):
            year = parse_year(r.get("year"))
            return -(year if year is not None else -math.inf)
        return sorted(results, key=year_desc_key)
    if sort == "year_asc":
        def year_asc_key(r):
            year = parse_year(r.get("year"))
            return year if year is not None else math.inf
        return sorted(results, key=year_asc_key)
    return list(results)
