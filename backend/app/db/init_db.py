"""
Create every ledger table on the configured database.
"""
import logging
from app.core.config import settings
from app.db.session import init_db

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info(f"Creating ledger tables for {settings.APP_NAME}...")
    init_db()
    logger.info("Database initialized")
