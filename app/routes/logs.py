"""
Logs Routes - the signed-in user's logs: list, stats, export and CRUD
"""

from flask import Blueprint, request, jsonify, Response
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError
import logging

from api_responses import error_response, handle_api_errors, ErrorCode
from middleware.auth import pro_required
from repositories.log_repository import LogRepository
from sanitize import sanitize_external_id
from services import log_service
from services.stats_service import aggregate_hours

logger = logging.getLogger("main")

logs_bp = Blueprint("logs", __name__, url_prefix="/api/logs")


def list_query_args():
    """(mediaType, externalId, status, sort) from the query string"""
    external_id = request.args.get("externalId")
    return (
        request.args.get("mediaType") or None,
        sanitize_external_id(external_id) if external_id else None,
        request.args.get("status") or None,
        "grade" if request.args.get("sort") == "grade" else "date",
    )


@logs_bp.route("", methods=["GET"])
@logs_bp.route("/", methods=["GET"])
@login_required
@handle_api_errors
def list_logs():
    media_type, external_id, status, sort = list_query_args()
    logs = LogRepository.list_for_user(current_user.id, media_type, external_id, status, sort)
    return jsonify([log.to_dict() for log in logs])


@logs_bp.route("/stats", methods=["GET"])
@login_required
@handle_api_errors
def logs_stats():
    logs = LogRepository.list_completed(current_user.id)
    return jsonify(aggregate_hours(logs, request.args.get("group")))


@logs_bp.route("/export", methods=["GET"])
@login_required
@pro_required("Export is available on Pro only")
@handle_api_errors
def export_logs():
    media_type = request.args.get("mediaType")
    csv_text = log_service.export_logs_csv(current_user, media_type)
    filename = log_service.export_filename(media_type)
    logger.info(f"Exported logs for user {current_user.id} ({filename})")
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={
            "Content-Type": "text/csv; charset=utf-8",
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )


@logs_bp.route("", methods=["POST"])
@logs_bp.route("/", methods=["POST"])
@login_required
def upsert_log():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    try:
        log = log_service.upsert_log(current_user, data)
    except SQLAlchemyError as e:
        logger.error(f"Error saving log for user {current_user.id}: {e}")
        return error_response(ErrorCode.INTERNAL_ERROR, message="Failed to save log", status_code=500, log_error=False)
    return jsonify(log.to_dict()), 201


@logs_bp.route("/<log_id>", methods=["PATCH"])
@login_required
@handle_api_errors
def patch_log(log_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    log = log_service.patch_log(current_user, log_id, data)
    return jsonify(log.to_dict())


@logs_bp.route("/<log_id>", methods=["DELETE"])
@login_required
@handle_api_errors
def delete_log(log_id):
    log_service.delete_log(current_user, log_id)
    return "", 204
