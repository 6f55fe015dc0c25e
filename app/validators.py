"""
Request body validation helpers.

Each check appends messages to a {field: [messages]} dict so a handler can
report every problem of a body at once, the same shape the API returns.
"""
import re

from media_types import MEDIA_TYPES, LIST_TYPES, BOARD_GAME_PROVIDERS
from sanitize import MAX_LENGTHS

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USER_ID_RE = re.compile(r"^[a-zA-Z0-9]{20,40}$")
COUNTRY_RE = re.compile(r"^[A-Za-z]{2}$")

PASSWORD_MIN_LENGTH = 8
USERNAME_MIN_LENGTH = 2
USERNAME_MAX_LENGTH = 32
RESET_TOKEN_MAX_LENGTH = 512


class FieldErrors:
    """Accumulates field messages; truthy once something was added"""

    def __init__(self):
        self.errors = {}

    def add(self, field, message):
        self.errors.setdefault(field, []).append(message)

    def __bool__(self):
        return bool(self.errors)

    def to_dict(self):
        return dict(self.errors)


def password_errors(password):
    if not isinstance(password, str):
        return ["Password must be at least 8 characters"]
    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append("Password must be at least 8 characters")
    if not re.search(r"[a-zA-Z]", password):
        errors.append("Password must contain at least one letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    return errors


def username_errors(username):
    if not isinstance(username, str):
        return ["Username must be at least 2 characters"]
    username = username.strip()
    errors = []
    if len(username) < USERNAME_MIN_LENGTH:
        errors.append("Username must be at least 2 characters")
    if len(username) > USERNAME_MAX_LENGTH:
        errors.append("Username must be at most 32 characters")
    if username and not USERNAME_RE.match(username):
        errors.append("Username can only contain letters, numbers, underscore and hyphen")
    return errors


def is_valid_email(email):
    return isinstance(email, str) and len(email) <= MAX_LENGTHS["EMAIL"] and bool(EMAIL_RE.match(email))


def is_valid_user_id(user_id):
    return isinstance(user_id, str) and bool(USER_ID_RE.match(user_id))


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_counter(value):
    """Non-negative integer progress counter"""
    if isinstance(value, bool):
        return False
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return isinstance(value, int) and value >= 0


def check_grade(errors, data, required=True):
    if "grade" not in data or data.get("grade") is None:
        if required:
            errors.add("grade", "Grade is required")
        return
    grade = data["grade"]
    if not is_number(grade) or grade < 0 or grade > 10:
        errors.add("grade", "Grade must be between 0 and 10")


def check_log_optional_fields(errors, data):
    """Optional fields shared by log create and log patch"""
    image = data.get("image")
    if image is not None and (not isinstance(image, str) or len(image) > MAX_LENGTHS["IMAGE_URL"]):
        errors.add("image", "Invalid image URL")

    review = data.get("review")
    if review is not None and not isinstance(review, str):
        errors.add("review", "Review must be text")

    list_type = data.get("listType")
    if list_type is not None and list_type not in LIST_TYPES:
        errors.add("listType", "Invalid list type")

    status = data.get("status")
    if status is not None and not isinstance(status, str):
        errors.add("status", "Invalid status for this media type")

    for field in ("season", "episode", "chapter", "volume"):
        value = data.get(field)
        if value is not None and not is_counter(value):
            errors.add(field, f"{field.capitalize()} must be a non-negative integer")

    hours = data.get("contentHours")
    if hours is not None and (not is_number(hours) or hours < 0):
        errors.add("contentHours", "Content hours must be a non-negative number")


def check_log_create(data):
    errors = FieldErrors()
    if data.get("mediaType") not in MEDIA_TYPES:
        errors.add("mediaType", "Invalid media type")

    external_id = data.get("externalId")
    if isinstance(external_id, (int, float)) and not isinstance(external_id, bool):
        external_id = str(external_id)
    if not isinstance(external_id, str) or not 1 <= len(external_id) <= MAX_LENGTHS["EXTERNAL_ID"]:
        errors.add("externalId", "Invalid externalId")

    title = data.get("title")
    if not isinstance(title, str) or not 1 <= len(title) <= MAX_LENGTHS["TITLE"]:
        errors.add("title", "Invalid title")

    check_grade(errors, data, required=True)
    check_log_optional_fields(errors, data)

    source = data.get("boardGameSource")
    if source is not None and source not in BOARD_GAME_PROVIDERS:
        errors.add("boardGameSource", "Invalid board game source")
    return errors


def check_log_patch(data):
    errors = FieldErrors()
    check_grade(errors, data, required=False)
    check_log_optional_fields(errors, data)
    return errors
