from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from flask import Response, request
import logging
import time
from functools import wraps

logger = logging.getLogger("main")

# API Metrics
api_request_duration_seconds = Histogram(
    "omnilog_api_request_duration_seconds", "API request duration", ["endpoint", "method"]
)

api_requests_total = Counter("omnilog_api_requests_total", "Total API requests", ["endpoint", "method", "status_code"])

# Provider Metrics
provider_requests_total = Counter(
    "omnilog_provider_requests_total", "Requests made to third-party catalogs", ["provider", "outcome"]
)

provider_request_duration_seconds = Histogram(
    "omnilog_provider_request_duration_seconds", "Third-party catalog request duration", ["provider"]
)

free_searches_total = Counter("omnilog_free_searches_total", "Keyless searches served", ["category", "status"])

# Log Metrics
log_upserts_total = Counter("omnilog_log_upserts_total", "Log saves", ["media_type", "action"])

db_users_total = Gauge("omnilog_users_total", "Total number of users")
db_logs_total = Gauge("omnilog_logs_total", "Total number of logs")


def init_metrics(app):
    @app.route("/api/metrics")
    def metrics():
        update_db_metrics()
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def before_request():
        request.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(request, "start_time", time.time())
        api_request_duration_seconds.labels(endpoint=request.endpoint or "unknown", method=request.method).observe(
            duration
        )
        api_requests_total.labels(
            endpoint=request.endpoint or "unknown", method=request.method, status_code=response.status_code
        ).inc()
        return response

    app.logger.info("Prometheus metrics initialized at /api/metrics")


def update_db_metrics():
    """Update user and log counts."""
    from sqlalchemy.exc import SQLAlchemyError
    from models import User, Log

    try:
        db_users_total.set(User.query.count())
        db_logs_total.set(Log.query.count())
    except SQLAlchemyError:
        logger.warning("Could not refresh database metrics")


def track_provider_call(provider):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                outcome = "empty" if result is None else "success"
                provider_requests_total.labels(provider=provider, outcome=outcome).inc()
                return result
            except Exception:
                provider_requests_total.labels(provider=provider, outcome="error").inc()
                raise
            finally:
                provider_request_duration_seconds.labels(provider=provider).observe(time.time() - start_time)

        return wrapper

    return decorator
