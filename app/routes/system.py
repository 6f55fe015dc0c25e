"""
System Routes - health probes
"""

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import socket
import logging

from db import db
from constants import BUILD_VERSION
from utils import now_utc

logger = logging.getLogger("main")

system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.route("/health", methods=["GET"])
def health_check_api():
    """
    Health check endpoint for monitoring.
    """
    overall_status = "healthy"
    checks = {
        "timestamp": now_utc().isoformat(),
        "version": BUILD_VERSION,
        "hostname": socket.gethostname(),
        "database": "unknown",
    }

    # Check Database connection
    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        checks["database"] = f"error: {str(e)}"
        overall_status = "unhealthy"

    status_code = 200 if overall_status == "healthy" else 503
    return jsonify({"status": overall_status, "checks": checks}), status_code


@system_bp.route("/health/ready", methods=["GET"])
def health_ready_api():
    """
    Readiness probe - checks if the application is ready to serve requests.
    """
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check database error: {e}")
        return jsonify({"status": "not ready", "error": str(e)}), 503
    return jsonify({"status": "ready", "timestamp": now_utc().isoformat()})


@system_bp.route("/health/live", methods=["GET"])
def health_live_api():
    """
    Liveness probe - checks if the application is alive.
    """
    return jsonify({"status": "alive", "timestamp": now_utc().isoformat()})
