import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.environ.get('OMNILOG_CONFIG_DIR', os.path.join(APP_DIR, 'config'))
DB_FILE = os.path.join(CONFIG_DIR, 'omnilog.db')
CONFIG_FILE = os.path.join(CONFIG_DIR, 'settings.yaml')
ALEMBIC_DIR = os.path.join(APP_DIR, 'migrations')
ALEMBIC_CONF = os.path.join(ALEMBIC_DIR, 'alembic.ini')
TRANSLATIONS_DIR = os.path.join(APP_DIR, 'translations')

OMNILOG_DB = 'sqlite:///' + DB_FILE

BUILD_VERSION = '20261019_0900'

USER_AGENT = 'Logeverything/1.0'
PROVIDER_TIMEOUT = 10

AUTH_COOKIE_NAME = 'auth'
AUTH_COOKIE_MAX_AGE = 7 * 24 * 60 * 60
AUTH_TOKEN_MAX_AGE = 30 * 24 * 60 * 60
RESET_TOKEN_TTL_SECONDS = 60 * 60

FREE_LOG_LIMIT = 500
FREE_SEARCH_LIMIT = 5

TIER_FREE = 'free'
TIER_PRO = 'pro'

DEFAULT_SETTINGS = {
    "server": {
        "web_origin": "http://localhost:5173",
        "cookie_secure": False,
        "cors_origins": None,
        "database_url": None,
    },
    "providers": {
        "tmdb_api_key": None,
        "rawg_api_key": None,
        "bgg_api_token": None,
        "ludopedia_api_token": None,
        "comicvine_api_key": None,
    },
    "smtp": {
        "host": None,
        "port": 587,
        "user": None,
        "password": None,
        "secure": False,
        "from": "OMNILOG <noreply@example.com>",
    },
    "stripe": {
        "secret_key": None,
        "webhook_secret": None,
        "price_id": None,
        "price_id_br": None,
    },
    "limits": {
        "free_log_limit": FREE_LOG_LIMIT,
        "free_search_limit": FREE_SEARCH_LIMIT,
    },
}

# (section, key) -> environment variable
ENV_OVERRIDES = {
    ("server", "web_origin"): "WEB_ORIGIN",
    ("server", "cookie_secure"): "COOKIE_SECURE",
    ("server", "cors_origins"): "CORS_ORIGINS",
    ("server", "database_url"): "DATABASE_URL",
    ("providers", "tmdb_api_key"): "TMDB_API_KEY",
    ("providers", "rawg_api_key"): "RAWG_API_KEY",
    ("providers", "bgg_api_token"): "BGG_API_TOKEN",
    ("providers", "ludopedia_api_token"): "LUDOPEDIA_API_TOKEN",
    ("providers", "comicvine_api_key"): "COMIC_VINE_API_KEY",
    ("smtp", "host"): "SMTP_HOST",
    ("smtp", "port"): "SMTP_PORT",
    ("smtp", "user"): "SMTP_USER",
    ("smtp", "password"): "SMTP_PASS",
    ("smtp", "secure"): "SMTP_SECURE",
    ("smtp", "from"): "SMTP_FROM",
    ("stripe", "secret_key"): "STRIPE_SECRET_KEY",
    ("stripe", "webhook_secret"): "STRIPE_WEBHOOK_SECRET",
    ("stripe", "price_id"): "STRIPE_PRICE_ID",
    ("stripe", "price_id_br"): "STRIPE_PRICE_ID_BR",
}
