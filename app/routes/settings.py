"""
Settings Routes - per-user preferences and provider API keys
"""

from flask import Blueprint, request, jsonify
from flask_login import current_user, login_required

from api_responses import handle_api_errors
from exceptions import ValidationException
from media_types import MEDIA_TYPES, THEMES, SUPPORTED_LOCALES, BOARD_GAME_PROVIDERS
from models.user import API_KEY_FIELDS
from repositories.user_repository import UserRepository
from sanitize import sanitize_api_key
from services.api_key_meta import API_KEY_META
from validators import COUNTRY_RE
from utils import sanitize_sensitive_data
import logging

logger = logging.getLogger("main")

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationException()
    return data


def _media_types_from(data):
    types = data.get("visibleMediaTypes", data.get("types"))
    if not isinstance(types, list) or any(t not in MEDIA_TYPES for t in types):
        raise ValidationException()
    # keep order, drop repeats
    return list(dict.fromkeys(types))


@settings_bp.route("/api-keys", methods=["GET"])
@login_required
def get_api_keys():
    return jsonify(current_user.api_keys_status())


@settings_bp.route("/api-keys", methods=["PUT"])
@login_required
@handle_api_errors
def put_api_keys():
    """Set provider keys; an empty string clears one, a missing key is left alone"""
    data = _json_body()
    changes = {}
    for name, column in API_KEY_FIELDS.items():
        if name not in data:
            continue
        value = data[name]
        if value is None or value == "":
            changes[column] = None
        elif isinstance(value, str):
            changes[column] = sanitize_api_key(value)
        else:
            raise ValidationException()

    if changes:
        UserRepository.update(current_user.id, **changes)
        masked = sanitize_sensitive_data(data, sensitive_keys=list(API_KEY_FIELDS))
        logger.info(f"API keys updated for user {current_user.id}: {masked}")
    return jsonify({"ok": True})


@settings_bp.route("/api-key-meta", methods=["GET"])
def get_api_key_meta():
    """Display name, signup link and setup steps per provider"""
    return jsonify(API_KEY_META)


@settings_bp.route("/theme", methods=["GET"])
@login_required
def get_theme():
    return jsonify({"theme": current_user.effective_theme})


@settings_bp.route("/theme", methods=["PUT"])
@login_required
@handle_api_errors
def put_theme():
    theme = _json_body().get("theme")
    if theme not in THEMES:
        raise ValidationException()
    UserRepository.update(current_user.id, theme=theme)
    return jsonify({"ok": True, "theme": theme})


@settings_bp.route("/locale", methods=["GET"])
@login_required
def get_locale():
    return jsonify({"locale": current_user.effective_locale})


@settings_bp.route("/locale", methods=["PUT"])
@login_required
@handle_api_errors
def put_locale():
    locale = _json_body().get("locale")
    if locale not in SUPPORTED_LOCALES:
        raise ValidationException()
    UserRepository.update(current_user.id, locale=locale)
    return jsonify({"ok": True, "locale": locale})


@settings_bp.route("/visible-media-types", methods=["GET"])
@login_required
def get_visible_media_types():
    return jsonify({"visibleMediaTypes": current_user.get_visible_media_types()})


@settings_bp.route("/visible-media-types", methods=["PUT"])
@login_required
@handle_api_errors
def put_visible_media_types():
    types = _media_types_from(_json_body())
    current_user.set_visible_media_types(types)
    UserRepository.update(current_user.id)
    return jsonify({"ok": True, "visibleMediaTypes": types})


@settings_bp.route("/board-game-provider", methods=["PUT"])
@login_required
@handle_api_errors
def put_board_game_provider():
    provider = _json_body().get("boardGameProvider")
    if provider not in BOARD_GAME_PROVIDERS:
        raise ValidationException()
    UserRepository.update(current_user.id, board_game_provider=provider)
    return jsonify({"ok": True, "boardGameProvider": provider})


@settings_bp.route("/country", methods=["PUT"])
@login_required
@handle_api_errors
def put_country():
    data = _json_body()
    if "country" not in data:
        raise ValidationException()
    country = data.get("country")
    if country is not None:
        if not isinstance(country, str) or not COUNTRY_RE.match(country.strip()):
            raise ValidationException()
        country = country.strip().upper()
    UserRepository.update(current_user.id, country=country)
    return jsonify({"ok": True, "country": country})


@settings_bp.route("/onboarding", methods=["POST", "PUT"])
@login_required
@handle_api_errors
def complete_onboarding():
    data = _json_body()
    types = _media_types_from(data)
    changes = {"onboarded": True}
    if "theme" in data and data.get("theme") is not None:
        if data["theme"] not in THEMES:
            raise ValidationException()
        changes["theme"] = data["theme"]

    current_user.set_visible_media_types(types)
    UserRepository.update(current_user.id, **changes)
    logger.info(f"Onboarding completed for user {current_user.id}")
    return jsonify({"ok": True})
