"""Database initialization script.

Creates the Laravel-compatible tables when missing and seeds a development
administrator on an empty database.

Usage:
    python -m scripts.init_db
"""

import asyncio
import logging

from app.core.config import get_settings
from app.db.session import close_db, init_db

logger = logging.getLogger(__name__)


async def main() -> None:
    """Initialize the database."""
    settings = get_settings()
    try:
        await init_db(settings, seed_admin=True)
        logger.info("Database initialized successfully")
    finally:
        await close_db(settings)


if __name__ == "__main__":
    asyncio.run(main())
