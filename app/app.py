"""
OMNILOG - Personal media log API
Application Factory e Inicialização
"""
import warnings
import os
import sys
import logging

warnings.filterwarnings("ignore", category=UserWarning, module="flask_limiter")

import flask.cli
flask.cli.show_server_banner = lambda *args: None

# Core Flask imports
from flask import Flask, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Local imports
from constants import *
from settings import get_setting, reload_conf
from db import db, migrate, init_db
from i18n import i18n
import structlog
from metrics import init_metrics
from exceptions import register_exception_handlers
from utils import ColoredFormatter, FilterRemoveDateFromWerkzeugLogs, get_or_create_secret_key

# Routes
from auth import auth_blueprint, login_manager
from routes.me import me_bp
from routes.logs import logs_bp
from routes.search import search_bp
from routes.items import items_bp
from routes.settings import settings_bp
from routes.users import users_bp
from routes.billing import stripe_bp
from routes.system import system_bp

limiter = Limiter(key_func=get_remote_address, default_limits=["100 per 15 minutes"], storage_uri="memory://")

# Logging configuration
formatter = ColoredFormatter(
    '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(formatter)

logging.basicConfig(
    level=logging.INFO,
    handlers=[handler]
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if os.environ.get('LOG_FORMAT') == 'json' else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger('main')

# Apply filter to hide date from http access logs
logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())
logging.getLogger('alembic.runtime.migration').setLevel(logging.WARNING)


def allowed_origins():
    """CORS_ORIGINS (comma separated) or the web origin"""
    raw = get_setting("server", "cors_origins")
    if isinstance(raw, str):
        origins = [o.strip() for o in raw.split(",") if o.strip()]
    elif isinstance(raw, list):
        origins = [str(o).strip() for o in raw if str(o).strip()]
    else:
        origins = []
    return origins or [get_setting("server", "web_origin", "http://localhost:5173")]


def init_cors(app):
    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in allowed_origins():
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
            response.headers.add("Vary", "Origin")
        return response


def create_app(test_config=None):
    """Application factory"""
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = get_setting("server", "database_url") or OMNILOG_DB
    app.config['SECRET_KEY'] = get_or_create_secret_key()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    if test_config:
        app.config.update(test_config)
    app.json.sort_keys = False

    # Initialize components
    db.init_app(app)
    migrate.init_app(app, db)

    # Bearer header or auth cookie resolves current_user
    login_manager.init_app(app)

    limiter.init_app(app)

    # Initialize I18n
    i18n.init_app(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Register blueprints
    app.register_blueprint(auth_blueprint)
    app.register_blueprint(me_bp)
    app.register_blueprint(logs_bp)
    app.register_blueprint(search_bp)
    app.register_blueprint(items_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(stripe_bp)
    app.register_blueprint(system_bp)

    init_cors(app)

    # Initialize metrics
    init_metrics(app)

    with app.app_context():
        # Load settings
        if not app.config.get("TESTING"):
            reload_conf()

        # Initialize database
        init_db(app)

    return app


if __name__ == '__main__':
    # Import the factory through the module so blueprints share its limiter
    from app import create_app as _create_app

    port = int(os.environ.get('PORT', 3001))
    logger.info(f'Build Version: {BUILD_VERSION}')
    logger.info(f'Starting server on port {port}...')
    _create_app().run(debug=False, use_reloader=False, host="0.0.0.0", port=port)
    logger.info('Shutting down server...')
