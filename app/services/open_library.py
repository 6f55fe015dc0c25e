"""
Open Library client: books (no key required)
"""
import re
from typing import Optional, Dict, Any, List

from services.base_client import CatalogClient, build_item, clean_str, year_prefix
from services.search_sort import sort_search_results

OPEN_LIBRARY_BASE_URL = "https://openlibrary.org"
COVER_URL = "https://covers.openlibrary.org/b/id/{}-M.jpg"
SEARCH_LIMIT = 20

_WORKS_PREFIX = re.compile(r"^/works/")


def cover_url(cover_id) -> Optional[str]:
    return COVER_URL.format(cover_id) if cover_id else None


def _description(value) -> Optional[str]:
    # works expose either a plain string or {"type": ..., "value": ...}
    if isinstance(value, dict):
        value = value.get("value")
    return clean_str(value, max_length=2000)


class OpenLibraryClient(CatalogClient):
    """Client for the Open Library works and search APIs"""

    provider = "openlibrary"
    base_url = OPEN_LIBRARY_BASE_URL

    def get_work(self, work_id: str) -> Optional[Dict]:
        return self.get_json(f"/works/{work_id}.json")

    def search(self, query: str) -> Optional[Dict]:
        return self.get_json("/search.json", params={"q": query, "limit": SEARCH_LIMIT})


client = OpenLibraryClient()


def get_book_by_id(work_id: str, api_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    data = client.get_work(work_id)
    if not isinstance(data, dict):
        return None
    covers = data.get("covers") or []
    subjects = [s for s in data.get("subjects") or [] if isinstance(s, str) and s.strip()]
    return build_item(
        work_id,
        data.get("title"),
        image=cover_url(covers[0] if covers else None),
        year=year_prefix(data.get("first_publish_date")),
        itemSource="openlibrary",
        description=_description(data.get("description")),
        releaseDate=clean_str(data.get("first_publish_date")),
        subjects=subjects[:20] or None,
    )


def search_books(query: str, api_key: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    data = client.search(query)
    if not isinstance(data, dict):
        return []
    results = []
    for doc in data.get("docs") or []:
        authors = doc.get("author_name")
        results.append(
            build_item(
                _WORKS_PREFIX.sub("", doc.get("key") or ""),
                doc.get("title"),
                image=cover_url(doc.get("cover_i")),
                year=doc.get("first_publish_year"),
                subtitle=", ".join(authors) if isinstance(authors, list) else None,
            )
        )
    return sort_search_results(results, sort)
