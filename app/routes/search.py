"""
Search Routes - catalog search across every media type
"""

from flask import Blueprint, request, jsonify

from api_responses import error_response, ErrorCode
from exceptions import ProviderException
from media_types import MEDIA_TYPES, resolve_sort
from middleware.auth import optional_user, requester_id
from sanitize import sanitize_search_query
from services.search_service import run_search
import structlog

logger = structlog.get_logger("search")

search_bp = Blueprint("search", __name__, url_prefix="/api/search")


@search_bp.route("", methods=["GET"])
@search_bp.route("/", methods=["GET"])
def search():
    media_type = request.args.get("type")
    raw_query = request.args.get("q")
    if media_type not in MEDIA_TYPES or not raw_query:
        return error_response(ErrorCode.VALIDATION_ERROR, message="Invalid type or q", status_code=400)

    query = sanitize_search_query(raw_query)
    if not query:
        return error_response(ErrorCode.VALIDATION_ERROR, message="Invalid or empty search query", status_code=400)

    sort = resolve_sort(media_type, request.args.get("sort"))
    try:
        body = run_search(
            media_type,
            query,
            sort,
            user=optional_user(),
            requester_id=requester_id(),
            board_provider=request.args.get("boardGameProvider"),
        )
    except Exception as e:
        logger.error("search_failed", media_type=media_type, error=str(e), exc_info=True)
        raise ProviderException("Search failed")
    return jsonify(body)
