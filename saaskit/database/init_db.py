"""
Database Initialization - Create or drop all application tables.
"""
from saaskit.core.logging_config import get_logger
from saaskit.database.connection import get_database
from saaskit.database.models import Base

logger = get_logger(__name__)


def init_tables() -> bool:
    """
    Create all tables that don't exist yet.

    Called during application startup when AUTO_CREATE_TABLES is enabled.
    """
    db = get_database()
    try:
        Base.metadata.create_all(db.engine)
    except Exception as e:
        logger.error(f"Failed to initialize tables: {e}")
        raise

    logger.info("Database tables initialized successfully")
    return True


def drop_tables() -> bool:
    """Drop every application table (use with caution!)."""
    db = get_database()
    try:
        Base.metadata.drop_all(db.engine)
    except Exception as e:
        logger.error(f"Failed to drop tables: {e}")
        raise

    logger.warning("Database tables dropped")
    return True


if __name__ == "__main__":
    from saaskit.core.config import get_settings
    from saaskit.core.logging_config import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)
    init_tables()
