"""Create the database tables directly from the ORM metadata.

Alembic migrations are the normal path; this is for local development and
throwaway databases.
"""

import argparse
import logging

from kemotown.core.logging import configure_logging
from kemotown.core.settings import settings
from kemotown.db.session import create_tables, drop_tables

logger = logging.getLogger(__name__)


def init_db(*, reset: bool = False) -> None:
    """Initialize the database by creating all tables, dropping them first if asked."""
    if reset:
        drop_tables()
        logger.info("Dropped all tables")
    create_tables()
    logger.info("Database initialized")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="drop existing tables first")
    args = parser.parse_args()
    configure_logging(settings.log_level)
    init_db(reset=args.reset)
