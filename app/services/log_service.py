"""
Log Service - upsert, partial update and export of a user's logs
"""
import csv
import io
import structlog
from typing import Dict, Any, Optional

from constants import FREE_LOG_LIMIT
from exceptions import ValidationException, AuthorizationException, NotFoundException
from media_types import MEDIA_TYPES, BOARD_GAME_PROVIDERS, is_valid_status, is_in_progress, is_completed
from metrics import log_upserts_total
from repositories.log_repository import LogRepository
from sanitize import sanitize_title, sanitize_external_id, sanitize_url, sanitize_review
from settings import get_setting
from utils import now_utc, isoformat_utc
from validators import check_log_create, check_log_patch

logger = structlog.get_logger("logs")

INVALID_STATUS_ERROR = {"status": ["Invalid status for this media type"]}
COUNTER_FIELDS = ("season", "episode", "chapter", "volume")

EXPORT_COLUMNS = (
    "mediaType",
    "externalId",
    "title",
    "grade",
    "status",
    "season",
    "episode",
    "chapter",
    "volume",
    "startedAt",
    "completedAt",
    "contentHours",
    "review",
    "createdAt",
    "updatedAt",
)


def _status_or_none(status):
    return status if status else None


def _counter(value):
    if value is None:
        return None
    return int(value)


def _check_status(media_type, status):
    if status and not is_valid_status(media_type, status):
        raise ValidationException(INVALID_STATUS_ERROR)


def resolve_board_game_source(media_type, requested, user) -> Optional[str]:
    """Body value, else the user's provider, else bgg. Only board games carry a source."""
    if media_type != "boardgames":
        return None
    if requested in BOARD_GAME_PROVIDERS:
        return requested
    return user.effective_board_game_provider


def check_log_limit(user):
    if user.is_pro:
        return
    limit = get_setting("limits", "free_log_limit", FREE_LOG_LIMIT)
    if LogRepository.count_for_user(user.id) >= limit:
        logger.info("log_limit_reached", user_id=user.id, limit=limit)
        raise AuthorizationException("Log limit reached", code="LOG_LIMIT_REACHED", limit=limit)


def upsert_log(user, data: Dict[str, Any]):
    """
    Create or update the user's single log of (mediaType, externalId).

    The free tier limit is checked on create only. startedAt is stamped the first
    time an in-progress status is seen, completedAt every time a completed one is.
    """
    errors = check_log_create(data)
    if errors:
        raise ValidationException(errors.to_dict())

    media_type = data["mediaType"]
    status = _status_or_none(data.get("status"))
    _check_status(media_type, status)

    title = sanitize_title(data.get("title"))
    external_id = sanitize_external_id(data.get("externalId"))
    if not title or not external_id:
        raise ValidationException("Invalid title or externalId")

    fields = {
        "title": title,
        "grade": data.get("grade"),
        "review": sanitize_review(data.get("review")),
        "list_type": data.get("listType"),
        "status": status,
        "content_hours": data.get("contentHours"),
    }
    for field in COUNTER_FIELDS:
        fields[field] = _counter(data.get(field))

    now = now_utc()
    existing = LogRepository.get_by_item(user.id, media_type, external_id)
    if existing:
        if "image" in data:
            fields["image"] = sanitize_url(data.get("image"))
        if is_in_progress(status) and existing.started_at is None:
            fields["started_at"] = now
        if is_completed(status):
            fields["completed_at"] = now
        log = LogRepository.update(existing, **fields)
        log_upserts_total.labels(media_type=media_type, action="update").inc()
        logger.info("log_updated", user_id=user.id, media_type=media_type, external_id=external_id)
        return log

    check_log_limit(user)
    log = LogRepository.create(
        user_id=user.id,
        media_type=media_type,
        external_id=external_id,
        image=sanitize_url(data.get("image")),
        started_at=now if is_in_progress(status) else None,
        completed_at=now if is_completed(status) else None,
        board_game_source=resolve_board_game_source(media_type, data.get("boardGameSource"), user),
        **fields,
    )
    log_upserts_total.labels(media_type=media_type, action="create").inc()
    logger.info("log_created", user_id=user.id, media_type=media_type, external_id=external_id)
    return log


def get_user_log(user, log_id):
    log = LogRepository.get_for_user(user.id, log_id)
    if not log:
        raise NotFoundException("Log not found")
    return log


def patch_log(user, log_id, data: Dict[str, Any]):
    """Change only the fields present in the body"""
    errors = check_log_patch(data)
    if errors:
        raise ValidationException(errors.to_dict())

    log = get_user_log(user, log_id)
    fields = {}
    if "status" in data:
        status = _status_or_none(data.get("status"))
        _check_status(log.media_type, status)
        fields["status"] = status
        now = now_utc()
        if is_in_progress(status) and log.started_at is None:
            fields["started_at"] = now
        if is_completed(status):
            fields["completed_at"] = now
    if "image" in data:
        fields["image"] = sanitize_url(data.get("image"))
    if "grade" in data:
        fields["grade"] = data.get("grade")
    if "review" in data:
        fields["review"] = sanitize_review(data.get("review"))
    if "listType" in data:
        fields["list_type"] = data.get("listType")
    if "contentHours" in data:
        fields["content_hours"] = data.get("contentHours")
    for field in COUNTER_FIELDS:
        if field in data:
            fields[field] = _counter(data.get(field))

    log = LogRepository.update(log, **fields)
    log_upserts_total.labels(media_type=log.media_type, action="patch").inc()
    return log


def delete_log(user, log_id):
    log = get_user_log(user, log_id)
    LogRepository.delete(log)
    logger.info("log_deleted", user_id=user.id, log_id=log_id)


def _csv_value(value):
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_filename(media_type):
    return f"logs-{media_type}.csv" if media_type in MEDIA_TYPES else "logs-export.csv"


def export_logs_csv(user, media_type=None) -> str:
    """CSV of the user's logs, newest update first"""
    media_type = media_type if media_type in MEDIA_TYPES else None
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for log in LogRepository.list_for_export(user.id, media_type):
        writer.writerow(
            [
                _csv_value(v)
                for v in (
                    log.media_type,
                    log.external_id,
                    log.title,
                    log.grade,
                    log.status,
                    log.season,
                    log.episode,
                    log.chapter,
                    log.volume,
                    isoformat_utc(log.started_at),
                    isoformat_utc(log.completed_at),
                    log.content_hours,
                    log.review,
                    isoformat_utc(log.created_at),
                    isoformat_utc(log.updated_at),
                )
            ]
        )
    return output.getvalue()
