"""
Shared plumbing for third-party catalog clients
"""
import requests
import logging
from typing import Optional, Dict, Any, List

from constants import USER_AGENT, PROVIDER_TIMEOUT
from metrics import track_provider_call

logger = logging.getLogger("main")

# Base fields every SearchResult / ItemDetail carries, even when null
BASE_FIELDS = ("id", "title", "image", "year", "subtitle")


class ProviderAPIException(Exception):
    """Raised when a catalog cannot be reached at all"""
    pass


class CatalogClient:
    """Base client: one requests.Session per catalog, fixed timeout, no retries"""

    provider = "catalog"
    base_url = ""

    def __init__(self):
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": f"{USER_AGENT} (https://github.com/logeverything)"
        })

    def _request(self, path: str, params: Optional[Dict] = None, headers: Optional[Dict] = None):
        """GET a catalog path. None on a non-OK status; ProviderAPIException on network failure."""
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=PROVIDER_TIMEOUT)
        except requests.RequestException as e:
            logger.error(f"{self.provider} request failed for {path}: {e}")
            raise ProviderAPIException(f"{self.provider} request failed: {e}")

        if not response.ok:
            logger.warning(f"{self.provider} returned HTTP {response.status_code} for {path}")
            return None
        return response

    def get_json(self, path: str, params: Optional[Dict] = None, headers: Optional[Dict] = None) -> Optional[Any]:
        response = track_provider_call(self.provider)(self._request)(path, params=params, headers=headers)
        if response is None:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning(f"{self.provider} returned invalid JSON for {path}")
            return None

    def get_text(self, path: str, params: Optional[Dict] = None, headers: Optional[Dict] = None) -> Optional[str]:
        response = track_provider_call(self.provider)(self._request)(path, params=params, headers=headers)
        if response is None:
            return None
        return response.text


def build_item(id, title, image=None, year=None, subtitle=None, **extra) -> Dict[str, Any]:
    """SearchResult/ItemDetail dict: base fields always present, optional fields only when set"""
    item = {
        "id": str(id) if id is not None else "",
        "title": title or "Unknown",
        "image": image or None,
        "year": str(year) if year not in (None, "") else None,
        "subtitle": subtitle or None,
    }
    for key, value in extra.items():
        if value is None or value == [] or value == "":
            continue
        item[key] = value
    return item


def names_of(entries, key: str = "name") -> Optional[List[str]]:
    """Collect non-empty `key` values from a list of dicts, None if nothing is left"""
    if not isinstance(entries, list):
        return None
    values = [e.get(key) for e in entries if isinstance(e, dict) and e.get(key)]
    return values or None


def clean_str(value, max_length: Optional[int] = None) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if max_length is not None:
        value = value[:max_length]
    return value or None


def positive(value):
    """Return numeric value when > 0, else None"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if value > 0 else None


def year_prefix(value) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)[:4] or None
