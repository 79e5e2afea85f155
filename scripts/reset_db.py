"""Database reset script.

Drops every table and reinitializes the database. All data is lost; meant
for development databases only.

Usage:
    python -m scripts.reset_db
"""

import asyncio
import logging

from app.core.config import get_settings
from app.db.session import close_db, drop_all_tables, init_db

logger = logging.getLogger(__name__)


async def main() -> None:
    """Reset the database by dropping all tables and reinitializing."""
    settings = get_settings()
    try:
        logger.warning(f"Resetting database {settings.database_url}")
        await drop_all_tables(settings)
        await init_db(settings, seed_admin=True)
        logger.info("Database reinitialized successfully")
    finally:
        await close_db(settings)


if __name__ == "__main__":
    asyncio.run(main())
