"""
Users Routes - public, read-only profiles for sharing. No email or secrets.
"""

from flask import Blueprint, request, jsonify

from api_responses import not_found_response, handle_api_errors
from repositories.log_repository import LogRepository
from repositories.user_repository import UserRepository
from services.stats_service import aggregate_hours
from validators import is_valid_user_id

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _public_user(user_id):
    if not is_valid_user_id(user_id):
        return None
    return UserRepository.get_by_id(user_id)


@users_bp.route("/<user_id>", methods=["GET"])
@handle_api_errors
def get_public_profile(user_id):
    user = _public_user(user_id)
    if user is None:
        return not_found_response("User")
    return jsonify(
        {
            "id": user.id,
            "username": user.username,
            "visibleMediaTypes": user.get_visible_media_types(),
            "logCount": LogRepository.count_for_user(user.id),
        }
    )


@users_bp.route("/<user_id>/logs", methods=["GET"])
@handle_api_errors
def get_public_logs(user_id):
    user = _public_user(user_id)
    if user is None:
        return not_found_response("User")
    sort = "grade" if request.args.get("sort") == "grade" else "date"
    logs = LogRepository.list_for_user(
        user.id,
        media_type=request.args.get("mediaType") or None,
        status=request.args.get("status") or None,
        sort=sort,
    )
    return jsonify([log.to_dict() for log in logs])


@users_bp.route("/<user_id>/logs/stats", methods=["GET"])
@handle_api_errors
def get_public_stats(user_id):
    user = _public_user(user_id)
    if user is None:
        return not_found_response("User")
    return jsonify(aggregate_hours(LogRepository.list_completed(user.id), request.args.get("group")))
