"""Alembic wiring for the users/projects/tasks schema.

The Alembic config is built in code, so there is no alembic.ini. env.py
takes the database URL from here when one is given and from settings
otherwise. The CLI's migrate and downgrade commands call into this module.
"""

from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine

from core import get_logger
from core.config import get_settings
from core.database import to_sync_url

logger = get_logger(__name__)

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def get_alembic_config(database_url: str | None = None) -> Config:
    cfg = Config()
    # Absolute, so migrations run from any working directory
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    if database_url:
        cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def upgrade(target: str = "head", database_url: str | None = None) -> None:
    logger.info("db.migrate.upgrade", target=target)
    command.upgrade(get_alembic_config(database_url), target)


def downgrade(target: str = "-1", database_url: str | None = None) -> None:
    logger.info("db.migrate.downgrade", target=target)
    command.downgrade(get_alembic_config(database_url), target)


def current_revision(database_url: str | None = None) -> str | None:
    """Revision the database is stamped with, or None if never migrated."""
    url = database_url or get_settings().database_url
    engine = create_engine(to_sync_url(url))
    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()
