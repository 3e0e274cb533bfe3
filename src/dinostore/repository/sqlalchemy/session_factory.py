"""SQLAlchemy engine and session factory configured from Settings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dinostore.models import Base

if TYPE_CHECKING:
    from dinostore.config import Settings


def create_default_session_factory(
    settings: Settings,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create a pooled engine and a session factory for one-statement operations.

    Configuration:
        - autoflush=False
        - expire_on_commit=False

    Pool sizing (db_pool_size, db_max_overflow, db_pool_timeout) only applies to
    pooled drivers; SQLite engines keep SQLAlchemy's default pool.

    Args:
        settings: Settings carrying a database_url.

    Returns:
        Tuple containing (engine, session_factory)

    Raises:
        ValueError: If settings.database_url is not set.
    """
    if not settings.database_url:
        msg = "database_url is required to create a session factory"
        raise ValueError(msg)

    url = make_url(settings.database_url)
    engine_options: dict[str, Any] = {"echo": settings.db_echo}
    if url.get_backend_name() != "sqlite":
        engine_options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )

    engine = create_async_engine(url, **engine_options)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    return engine, session_factory


async def create_schema(engine: AsyncEngine) -> None:
    """Create the tables of every mapped model that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
