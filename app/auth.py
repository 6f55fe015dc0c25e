from flask import Blueprint, request, jsonify, current_app
from flask_login import LoginManager
from werkzeug.security import generate_password_hash, check_password_hash
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from datetime import timedelta
from sqlalchemy.exc import SQLAlchemyError
import secrets
import logging

from db import db, now_utc
from constants import AUTH_COOKIE_NAME, AUTH_COOKIE_MAX_AGE, AUTH_TOKEN_MAX_AGE, RESET_TOKEN_TTL_SECONDS
from api_responses import error_response, validation_error_response, handle_api_errors, ErrorCode
from repositories.user_repository import UserRepository
from sanitize import sanitize_email
from settings import get_setting
from utils import ensure_utc
from validators import (
    FieldErrors,
    password_errors,
    username_errors,
    is_valid_email,
    RESET_TOKEN_MAX_LENGTH,
)
import mailer

# Retrieve main logger
logger = logging.getLogger("main")

TOKEN_SALT = "omnilog-auth"
FORGOT_PASSWORD_MESSAGE = "If that email is registered, you will receive a reset link."
INVALID_RESET_MESSAGE = "Invalid or expired reset link. Request a new one."

auth_blueprint = Blueprint("auth", __name__, url_prefix="/api/auth")

login_manager = LoginManager()


def _serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def hash_password(password):
    return generate_password_hash(password, method="pbkdf2:sha256")


def create_token(user):
    """Signed token carrying the user id"""
    return _serializer().dumps({"sub": user.id})


def verify_token(token):
    """Return the user id of a valid token, None when bad or expired"""
    if not token:
        return None
    try:
        payload = _serializer().loads(token, max_age=AUTH_TOKEN_MAX_AGE)
    except SignatureExpired:
        logger.debug("Expired auth token")
        return None
    except BadSignature:
        logger.debug("Bad auth token signature")
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("sub"), str):
        return None
    return payload["sub"]


def token_from_request(req):
    """Bearer header first, then the auth cookie"""
    auth_header = req.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return req.cookies.get(AUTH_COOKIE_NAME)


@login_manager.user_loader
def load_user(user_id):
    return UserRepository.get_by_id(user_id)


@login_manager.request_loader
def load_user_from_request(req):
    user_id = verify_token(token_from_request(req))
    if not user_id:
        return None
    return UserRepository.get_by_id(user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Unauthorized"}), 401


def set_auth_cookie(response, token):
    response.set_cookie(
        AUTH_COOKIE_NAME,
        token,
        max_age=AUTH_COOKIE_MAX_AGE,
        httponly=True,
        samesite="Lax",
        secure=bool(get_setting("server", "cookie_secure", False)),
        path="/",
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(
        AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=bool(get_setting("server", "cookie_secure", False)),
    )
    return response


def auth_response(user, status_code=200):
    """Token + user body, with the auth cookie set"""
    token = create_token(user)
    response = jsonify({"token": token, "user": user.to_auth_dict()})
    response.status_code = status_code
    return set_auth_cookie(response, token)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@auth_blueprint.route("/register", methods=["POST"])
def register():
    # Import here to avoid circular dependency
    from app import limiter

    @limiter.limit("10 per minute")
    @handle_api_errors
    def _rate_limited_register():
        data = _json_body()
        email = sanitize_email(data.get("email"))
        username = data.get("username")
        password = data.get("password")

        errors = FieldErrors()
        if not is_valid_email(email):
            errors.add("email", "Invalid email")
        for message in username_errors(username):
            errors.add("username", message)
        for message in password_errors(password):
            errors.add("password", message)
        if errors:
            return validation_error_response(errors.to_dict())

        username = username.strip()
        if UserRepository.get_by_email(email):
            return error_response(ErrorCode.CONFLICT, message="Email already registered", status_code=409)
        if UserRepository.get_by_username(username):
            return error_response(ErrorCode.CONFLICT, message="Username already taken", status_code=409)

        user = UserRepository.create(email=email, username=username, password_hash=hash_password(password))
        logger.info(f"Registered new user {user.username}")
        return auth_response(user, status_code=201)

    return _rate_limited_register()


@auth_blueprint.route("/login", methods=["POST"])
def login():
    # Import here to avoid circular dependency
    from app import limiter

    # 20 login attempts per minute per IP
    @limiter.limit("20 per minute")
    @handle_api_errors
    def _rate_limited_login():
        data = _json_body()
        identifier = data.get("email")
        password = data.get("password")

        errors = FieldErrors()
        if not isinstance(identifier, str) or not identifier.strip():
            errors.add("email", "Email or username required")
        if not isinstance(password, str) or not password:
            errors.add("password", "Password required")
        if errors:
            return validation_error_response(errors.to_dict())

        identifier = identifier.strip()
        user = UserRepository.get_by_login(identifier)
        if not user or not check_password_hash(user.password_hash, password):
            logger.warning(f"Incorrect login for {identifier}")
            return error_response(
                ErrorCode.UNAUTHORIZED, message="Invalid email/username or password", status_code=401
            )

        logger.info(f"Successful login for user {user.username or user.id}")
        return auth_response(user)

    return _rate_limited_login()


@auth_blueprint.route("/logout", methods=["POST"])
def logout():
    response = jsonify({"message": "Logged out"})
    return clear_auth_cookie(response)


@auth_blueprint.route("/forgot-password", methods=["POST"])
def forgot_password():
    # Import here to avoid circular dependency
    from app import limiter

    @limiter.limit("5 per minute")
    @handle_api_errors
    def _rate_limited_forgot_password():
        data = _json_body()
        email = sanitize_email(data.get("email"))
        if not is_valid_email(email):
            return validation_error_response({"email": ["Invalid email"]})

        user = UserRepository.get_by_email(email)
        if user:
            token = secrets.token_hex(32)
            try:
                user.reset_token = token
                user.reset_token_expires = now_utc() + timedelta(seconds=RESET_TOKEN_TTL_SECONDS)
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error(f"Error storing reset token for user {user.id}: {e}")
                return jsonify({"message": FORGOT_PASSWORD_MESSAGE})

            web_origin = get_setting("server", "web_origin", "http://localhost:5173").rstrip("/")
            reset_url = f"{web_origin}/reset-password?token={token}"
            mailer.send_password_reset_email(user.email, reset_url, user.effective_locale)

        return jsonify({"message": FORGOT_PASSWORD_MESSAGE})

    return _rate_limited_forgot_password()


@auth_blueprint.route("/reset-password", methods=["POST"])
@handle_api_errors
def reset_password():
    data = _json_body()
    token = data.get("token")
    password = data.get("password")

    errors = FieldErrors()
    if not isinstance(token, str) or not 1 <= len(token) <= RESET_TOKEN_MAX_LENGTH:
        errors.add("token", "Invalid token")
    for message in password_errors(password):
        errors.add("password", message)
    if errors:
        return validation_error_response(errors.to_dict())

    user = UserRepository.get_by_reset_token(token)
    expires = ensure_utc(user.reset_token_expires) if user else None
    if not user or expires is None or expires < now_utc():
        return error_response(ErrorCode.VALIDATION_ERROR, message=INVALID_RESET_MESSAGE, status_code=400)

    UserRepository.update(
        user.id,
        password_hash=hash_password(password),
        reset_token=None,
        reset_token_expires=None,
    )
    logger.info(f"Password reset for user {user.username or user.id}")
    return auth_response(user)
