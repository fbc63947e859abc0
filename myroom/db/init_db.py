# myroom/db/init_db.py
"""Database initialization utilities."""
import logging
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from myroom.db.base import Base, import_models

logger = logging.getLogger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create any missing tables.

    Suitable for development and tests; existing tables are left alone.
    """
    if bind is None:
        from myroom.db.session import engine as bind

    import_models()
    try:
        existing_tables = set(inspect(bind).get_table_names())
        Base.metadata.create_all(bind=bind)
        created = set(Base.metadata.tables) - existing_tables
        if created:
            logger.info(f"Created tables: {sorted(created)}")
        else:
            logger.info(f"Database already initialized with {len(existing_tables)} tables")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


def drop_db(bind: Optional[Engine] = None) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data!
    """
    if bind is None:
        from myroom.db.session import engine as bind

    import_models()
    Base.metadata.drop_all(bind=bind)
    logger.warning("All database tables dropped")
