"""
Input sanitization for user-supplied text before it is stored or sent upstream
"""
import re

MAX_LENGTHS = {
    "TITLE": 500,
    "EXTERNAL_ID": 256,
    "SEARCH_QUERY": 300,
    "API_KEY": 512,
    "IMAGE_URL": 2048,
    "REVIEW": 10000,
    "EMAIL": 255,
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_HTML_TAGS = re.compile(r"<[^>]*>")


def strip_control_chars(value):
    return _CONTROL_CHARS.sub("", value)


def sanitize_text(value, max_length):
    """Strip control chars and HTML tags, trim, truncate. Empty becomes None."""
    if not isinstance(value, str):
        return None
    cleaned = strip_control_chars(value).strip()
    cleaned = _HTML_TAGS.sub("", cleaned).strip()
    if not cleaned:
        return None
    return cleaned[:max_length]


def sanitize_title(value):
    return sanitize_text(value, MAX_LENGTHS["TITLE"])


def sanitize_external_id(value):
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    return sanitize_text(value, MAX_LENGTHS["EXTERNAL_ID"])


def sanitize_search_query(value):
    return sanitize_text(value, MAX_LENGTHS["SEARCH_QUERY"])


def sanitize_review(value):
    if not isinstance(value, str):
        return None
    normalized = value.replace("\r\n", "\n").replace("\r", "\n")
    return sanitize_text(normalized, MAX_LENGTHS["REVIEW"])


def _sanitize_plain(value, max_length):
    if not isinstance(value, str):
        return None
    cleaned = strip_control_chars(value).strip()
    if not cleaned:
        return None
    return cleaned[:max_length]


def sanitize_url(value):
    return _sanitize_plain(value, MAX_LENGTHS["IMAGE_URL"])


def sanitize_api_key(value):
    return sanitize_text(value, MAX_LENGTHS["API_KEY"])


def sanitize_email(value):
    return _sanitize_plain(value, MAX_LENGTHS["EMAIL"])
