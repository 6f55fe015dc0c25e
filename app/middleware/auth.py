"""
Authentication Middleware - route decorators and request identity helpers
"""
from functools import wraps
from flask import request, jsonify
from flask_login import current_user
from flask_limiter.util import get_remote_address
import logging

logger = logging.getLogger('main')


def optional_user():
    """The authenticated User, or None. Bad or expired tokens count as anonymous."""
    if current_user and current_user.is_authenticated:
        return current_user._get_current_object()
    return None


def requester_id():
    """Identity used to meter anonymous usage: the user id, else the socket address the rate limiter keys on"""
    user = optional_user()
    if user is not None:
        return user.id
    return get_remote_address() or 'unknown'


def pro_required(message):
    """403 PRO_REQUIRED for free-tier users"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'error': 'Unauthorized'}), 401

            if not current_user.is_pro:
                logger.info(f"Pro feature refused for user {current_user.id}: {request.path}")
                return jsonify({'error': message, 'code': 'PRO_REQUIRED'}), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator
