"""
Metadata database.

The only table is the single-row metadata document, so the engine is small:
SQLite through aiosqlite by default, any async SQLAlchemy URL otherwise.
"""

import logging
from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from wallsync.config import settings
from wallsync.models.db import Base

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def sqlite_file(database_url: str) -> Path | None:
    """Path of the SQLite database file, or None for other backends and :memory:."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return None
    return Path(url.database)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; committed on success, rolled back on database errors."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Prepare storage for a fresh install.

    Creates the directory of a file-backed SQLite database and the
    metadata table. Safe to call on every startup.
    """
    db_file = sqlite_file(settings.database_url)
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Metadata database ready at %s", engine.url.render_as_string(hide_password=True))
