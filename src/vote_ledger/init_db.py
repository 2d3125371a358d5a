"""Create the vote ledger tables on the configured database."""

import logging

from vote_ledger.core.settings import settings
from vote_ledger.db.session import create_tables

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()
    logger.info("Created vote ledger tables on %s", settings.effective_database_url)


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    init_db()
