"""
Items Routes - catalog detail of one item with community reviews
"""

from flask import Blueprint, request, jsonify

from api_responses import error_response, not_found_response, handle_api_errors, ErrorCode
from media_types import MEDIA_TYPES
from middleware.auth import optional_user
from sanitize import sanitize_external_id
from services import item_service

items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.route("/tv/<tv_id>/season/<int:season>", methods=["GET"])
@handle_api_errors
def tv_season_episodes(tv_id, season):
    tv_id = sanitize_external_id(tv_id)
    if not tv_id:
        return error_response(ErrorCode.VALIDATION_ERROR, message="Invalid mediaType or externalId", status_code=400)
    episodes = item_service.get_season_episodes(tv_id, season, user=optional_user())
    return jsonify({"season": season, "episodes": episodes})


@items_bp.route("/<media_type>/<external_id>", methods=["GET"])
@handle_api_errors
def get_item(media_type, external_id):
    external_id = sanitize_external_id(external_id)
    if media_type not in MEDIA_TYPES or not external_id:
        return error_response(ErrorCode.VALIDATION_ERROR, message="Invalid mediaType or externalId", status_code=400)

    page = item_service.get_item_page(
        media_type,
        external_id,
        user=optional_user(),
        source=request.args.get("source"),
    )
    if page is None:
        return not_found_response("Item")
    return jsonify(page)
