from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import create_engine
from sqlalchemy import event
from flask_migrate import Migrate
from alembic.runtime.migration import MigrationContext
from alembic.config import Config
from alembic.script import ScriptDirectory
from alembic import command
import logging
from constants import ALEMBIC_DIR, ALEMBIC_CONF
from utils import now_utc

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()
migrate = Migrate()


# Alembic functions
def get_alembic_cfg():
    cfg = Config(ALEMBIC_CONF)
    cfg.set_main_option("script_location", ALEMBIC_DIR)
    return cfg


def get_current_db_version(database_url):
    engine = create_engine(database_url)
    with engine.connect() as connection:
        context = MigrationContext.configure(connection)
        current_rev = context.get_current_revision()
        return current_rev or "0"


def is_migration_needed(database_url):
    script = ScriptDirectory.from_config(get_alembic_cfg())
    latest_revision = script.get_current_head()
    current_revision = get_current_db_version(database_url)
    if current_revision != latest_revision:
        logger.info(f"Database migration needed, from {current_revision} to {latest_revision}")
        return True
    return False


def init_db(app):
    # Register models on the metadata before create_all
    import models  # noqa: F401

    with app.app_context():
        @event.listens_for(db.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            import sqlite3
            if not isinstance(dbapi_connection, sqlite3.Connection):
                return

            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

        from sqlalchemy import inspect
        inspector = inspect(db.engine)
        if not inspector.has_table("users"):
            logger.info("Initializing database tables...")
            db.create_all()
            if not app.config.get("TESTING"):
                command.stamp(get_alembic_cfg(), "head")
                logger.info("Database created and stamped to the latest migration version.")
        elif not app.config.get("TESTING") and is_migration_needed(app.config["SQLALCHEMY_DATABASE_URI"]):
            logger.info("Applying pending database migrations...")
            command.upgrade(get_alembic_cfg(), "head")


__all__ = ["db", "migrate", "init_db", "logger", "now_utc"]
