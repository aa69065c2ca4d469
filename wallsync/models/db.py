"""
SQLAlchemy ORM models for persistent storage.

Only the metadata document lives in the database; wallpaper assets and the
current selection are kept in the blob store.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class WallpaperMetadataDB(Base):
    """
    The last metadata document fetched from the server.

    A single row (id=1) that is replaced wholesale on each changed fetch.
    """

    __tablename__ = "wallpaper_metadata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    marker: Mapped[str] = mapped_column(String(255))
    document: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<WallpaperMetadataDB(marker={self.marker})>"
