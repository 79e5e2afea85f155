"""Database session management for the async SQL engine.

Provides async session creation and dependency injection for FastAPI.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, select

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


# Global engine and session maker
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def _engine_options(settings: Settings) -> dict[str, Any]:
    options: dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
        "future": True,
    }
    if settings.database_url.startswith("sqlite"):
        # One connection per session; aiosqlite connections are loop-bound
        options["poolclass"] = NullPool
    else:
        options.update(pool_pre_ping=True, pool_size=10, max_overflow=20)
    return options


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Get or create the async database engine.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The async SQLAlchemy engine.
    """
    global _engine

    try:
        if _engine is None:
            settings = settings or get_settings()

            logger.info(f"Creating async database engine: {settings.database_url}")

            _engine = create_async_engine(settings.database_url, **_engine_options(settings))

            logger.info("Database engine created successfully")

        return _engine

    except Exception as e:
        logger.error(f"Failed to create database engine: {e}", exc_info=True)
        raise


def get_session_maker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Get or create the async session maker.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The async session maker.
    """
    global _async_session_maker

    try:
        if _async_session_maker is None:
            engine = get_engine(settings)

            _async_session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            logger.info("Session maker created successfully")

        return _async_session_maker

    except Exception as e:
        logger.error(f"Failed to create session maker: {e}", exc_info=True)
        raise


async def get_async_session(settings: Settings | None = None) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session, rolling back on errors.

    Args:
        settings: Optional settings. If None, uses global settings.

    Yields:
        An async database session.
    """
    session_maker = get_session_maker(settings)
    async with session_maker() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}", exc_info=True)
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise


async def create_all_tables(settings: Settings | None = None) -> None:
    """Create all database tables.

    The legacy Laravel schema normally already exists; this is meant for
    development and test databases.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        # Import models to ensure they're registered with SQLModel metadata
        from app.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.info("Creating database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        logger.info("Database tables created successfully")

    except Exception as e:
        logger.error(f"Failed to create database tables: {e}", exc_info=True)
        raise


async def drop_all_tables(settings: Settings | None = None) -> None:
    """Drop all database tables.

    WARNING: This will delete all data. Use with caution,
    typically only in test environments.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        from app.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.warning("Dropping all database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)

        logger.warning("All database tables dropped")

    except Exception as e:
        logger.error(f"Failed to drop database tables: {e}", exc_info=True)
        raise


# Not a valid bcrypt hash; the seeded account cannot log in
UNUSABLE_PASSWORD_HASH = "$2b$10$unusable"


async def init_db(settings: Settings | None = None, seed_admin: bool = False) -> None:
    """Create missing tables and optionally seed a development administrator.

    The administrator is only inserted when ``seed_admin`` is set and the
    ``users`` table is empty. Its password hash is unusable.

    Args:
        settings: Optional settings. If None, uses global settings.
        seed_admin: Insert ``admin@example.com`` into an empty ``users`` table.
    """
    try:
        # Import here to avoid circular dependency
        from app.db.models import User, UserProfile

        await create_all_tables(settings)

        if not seed_admin:
            return

        session_maker = get_session_maker(settings)
        async with session_maker() as session:
            try:
                result = await session.execute(select(User).limit(1))
                user_exists = result.scalars().first() is not None

                if not user_exists:
                    logger.info("Seeding initial administrator...")

                    admin = User(
                        name="Administrador",
                        email="admin@example.com",
                        password=UNUSABLE_PASSWORD_HASH,
                        profile=UserProfile.ADMINISTRATOR.value,
                    )
                    session.add(admin)
                    await session.commit()

                    logger.info(f"Created default administrator: {admin.id}")

            except Exception as e:
                logger.error(f"Error seeding initial data: {e}", exc_info=True)
                await session.rollback()
                raise

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise


async def close_db(settings: Settings | None = None) -> None:
    """Close the database engine and all connections.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    global _engine, _async_session_maker

    try:
        if _engine is not None:
            logger.info("Closing database engine...")
            await _engine.dispose()
            _engine = None
            _async_session_maker = None
            logger.info("Database engine closed")

    except Exception as e:
        logger.error(f"Error closing database engine: {e}", exc_info=True)
        raise
