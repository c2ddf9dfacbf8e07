from database import engine, Base
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from typing import Optional
import logging

import models  # noqa: F401  registers the tables on Base.metadata

logger = logging.getLogger(__name__)


def _check_column_exists(inspector, table: str, column: str) -> bool:
    """Check if a column exists in a table"""
    columns = [col['name'] for col in inspector.get_columns(table)]
    return column in columns


def _run_essential_migrations(bind: Engine) -> int:
    """
    Bring databases created before the queue_order sequence up to date.

    Existing reservations get their id as queue position, which matches the
    order they were inserted in.
    """
    inspector = inspect(bind)
    migrations_run = 0

    if 'reservations' in inspector.get_table_names():
        if not _check_column_exists(inspector, 'reservations', 'queue_order'):
            logger.info("Running migration: Adding 'queue_order' column to reservations table...")
            with bind.begin() as conn:
                conn.execute(text("ALTER TABLE reservations ADD COLUMN queue_order INTEGER"))
                conn.execute(text("UPDATE reservations SET queue_order = id WHERE queue_order IS NULL"))
            logger.info("Migration complete: 'queue_order' column added to reservations")
            migrations_run += 1

    if migrations_run == 0:
        logger.debug("Database schema is up to date")

    return migrations_run


def init_database(bind: Optional[Engine] = None) -> None:
    """Create all tables and apply pending schema migrations"""
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    _run_essential_migrations(bind)
    logger.info(f"Lending database ready ({bind.url.render_as_string(hide_password=True)})")


if __name__ == "__main__":
    from config.lending_config import settings
    from utils.logging_utils import configure_logging

    configure_logging(settings.log_dir, settings.log_level)
    init_database()
