"""
Python client for the OMNILOG JSON API.

GET responses are kept in a short-lived in-memory cache; every mutation drops
the cached paths it can affect, so a read after a write always hits the server.
"""

import time
import threading
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15
CACHE_TTL_SECONDS = 120


class OmnilogAPIError(Exception):
    """Non-2xx answer from the API"""

    def __init__(self, status_code: int, body: Any = None):
        self.status_code = status_code
        self.body = body
        message = body.get("error") if isinstance(body, dict) else body
        self.code = body.get("code") if isinstance(body, dict) else None
        super().__init__(f"HTTP {status_code}: {message}")


class TTLCache:
    """Thread-safe key -> value store whose entries expire after `ttl` seconds"""

    def __init__(self, ttl: float = CACHE_TTL_SECONDS, clock=time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl:
                # Cache expired
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any):
        with self._lock:
            self._entries[key] = (value, self._clock())

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with prefix; returns how many"""
        with self._lock:
            stale = [k for k in self._entries if k.startswith(prefix)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


def cache_key(path: str, params: Optional[Dict[str, Any]] = None) -> str:
    clean = {k: v for k, v in (params or {}).items() if v is not None}
    if not clean:
        return path
    return f"{path}?{urlencode(sorted(clean.items()))}"


class OmnilogClient:
    """Client for the OMNILOG API under {base_url}/api"""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT, cache=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self.cache = cache if cache is not None else TTLCache()
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    # -- transport -------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, params=None, json=None, raw: bool = False):
        url = f"{self.base_url}/api{path}"
        response = self.session.request(
            method, url, params=params, json=json, headers=self._headers(), timeout=self.timeout
        )
        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            logger.debug(f"{method} {path} failed with HTTP {response.status_code}")
            raise OmnilogAPIError(response.status_code, body)
        if raw:
            return response.text
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, use_cache: bool = True):
        params = {k: v for k, v in (params or {}).items() if v is not None}
        key = cache_key(path, params)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        data = self._request("GET", path, params=params or None)
        if use_cache:
            self.cache.set(key, data)
        return data

    def _mutate(self, method: str, path: str, json=None, invalidate=()):
        data = self._request(method, path, json=json)
        for prefix in invalidate:
            self.cache.invalidate_prefix(prefix)
        return data

    def _remember_token(self, data):
        if isinstance(data, dict) and data.get("token"):
            self.token = data["token"]
            # cached reads belong to the previous identity
            self.cache.clear()
        return data

    # -- auth ------------------------------------------------------------

    def register(self, email: str, username: str, password: str):
        data = self._request("POST", "/auth/register", json={"email": email, "username": username, "password": password})
        return self._remember_token(data)

    def login(self, email_or_username: str, password: str):
        data = self._request("POST", "/auth/login", json={"email": email_or_username, "password": password})
        return self._remember_token(data)

    def logout(self):
        data = self._request("POST", "/auth/logout")
        self.token = None
        self.cache.clear()
        return data

    def forgot_password(self, email: str):
        return self._request("POST", "/auth/forgot-password", json={"email": email})

    def reset_password(self, token: str, password: str):
        data = self._request("POST", "/auth/reset-password", json={"token": token, "password": password})
        return self._remember_token(data)

    def me(self):
        return self._get("/me")

    # -- catalog ---------------------------------------------------------

    def search(self, media_type: str, query: str, sort: Optional[str] = None, board_game_provider: Optional[str] = None):
        # free search counters move on every call, so searches are never cached
        params = {"type": media_type, "q": query, "sort": sort, "boardGameProvider": board_game_provider}
        return self._get("/search", params, use_cache=False)

    def get_item(self, media_type: str, external_id: str, source: Optional[str] = None):
        return self._get(f"/items/{media_type}/{external_id}", {"source": source})

    def get_season_episodes(self, tv_id: str, season: int):
        return self._get(f"/items/tv/{tv_id}/season/{season}")

    # -- logs ------------------------------------------------------------

    def list_logs(self, media_type=None, external_id=None, status=None, sort=None):
        params = {"mediaType": media_type, "externalId": external_id, "status": status, "sort": sort}
        return self._get("/logs", params)

    def log_stats(self, group: Optional[str] = None):
        return self._get("/logs/stats", {"group": group})

    def export_logs(self, media_type: Optional[str] = None) -> str:
        params = {"mediaType": media_type} if media_type else None
        return self._request("GET", "/logs/export", params=params, raw=True)

    def save_log(self, payload: Dict[str, Any]):
        return self._mutate("POST", "/logs", json=payload, invalidate=("/logs", "/items"))

    def update_log(self, log_id: str, changes: Dict[str, Any]):
        return self._mutate("PATCH", f"/logs/{log_id}", json=changes, invalidate=("/logs", "/items"))

    def delete_log(self, log_id: str):
        return self._mutate("DELETE", f"/logs/{log_id}", invalidate=("/logs", "/items"))

    # -- settings --------------------------------------------------------

    def _put_setting(self, path: str, body: Dict[str, Any]):
        return self._mutate("PUT", f"/settings{path}", json=body, invalidate=("/me", "/settings"))

    def get_api_keys(self):
        return self._get("/settings/api-keys")

    def set_api_keys(self, **keys):
        return self._put_setting("/api-keys", keys)

    def set_theme(self, theme: str):
        return self._put_setting("/theme", {"theme": theme})

    def set_locale(self, locale: str):
        return self._put_setting("/locale", {"locale": locale})

    def set_visible_media_types(self, media_types):
        return self._put_setting("/visible-media-types", {"visibleMediaTypes": list(media_types)})

    def set_board_game_provider(self, provider: str):
        return self._put_setting("/board-game-provider", {"boardGameProvider": provider})

    def set_country(self, country: Optional[str]):
        return self._put_setting("/country", {"country": country})

    def complete_onboarding(self, media_types, theme: Optional[str] = None):
        body = {"visibleMediaTypes": list(media_types)}
        if theme:
            body["theme"] = theme
        return self._mutate("POST", "/settings/onboarding", json=body, invalidate=("/me", "/settings"))

    # -- public profiles -------------------------------------------------

    def public_profile(self, user_id: str):
        return self._get(f"/users/{user_id}")

    def public_logs(self, user_id: str, media_type=None, status=None, sort=None):
        return self._get(f"/users/{user_id}/logs", {"mediaType": media_type, "status": status, "sort": sort})

    def public_stats(self, user_id: str, group: Optional[str] = None):
        return self._get(f"/users/{user_id}/logs/stats", {"group": group})

    # -- billing ---------------------------------------------------------

    def create_checkout_session(self) -> str:
        return self._mutate("POST", "/stripe/create-checkout-session", invalidate=("/me",))["url"]

    def create_portal_session(self) -> str:
        return self._request("POST", "/stripe/create-portal-session")["url"]
