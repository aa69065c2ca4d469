"""
Database CRUD operations.

The metadata table holds a single row that is replaced on every changed fetch.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wallsync.models.db import WallpaperMetadataDB
from wallsync.models.wallpaper import WallpaperMetadata
from wallsync.parsers.metadata import parse_metadata, serialize_metadata

METADATA_ROW_ID = 1


async def get_metadata_record(session: AsyncSession) -> WallpaperMetadataDB | None:
    """
    Get the stored metadata row.

    Returns None if no document was ever stored.
    """
    result = await session.execute(
        select(WallpaperMetadataDB).where(WallpaperMetadataDB.id == METADATA_ROW_ID)
    )
    return result.scalar_one_or_none()


async def upsert_metadata(
    session: AsyncSession, marker: str, document: dict[str, Any]
) -> WallpaperMetadataDB:
    """Insert the metadata row or replace its marker and document."""
    record = await get_metadata_record(session)

    if record is None:
        record = WallpaperMetadataDB(id=METADATA_ROW_ID, marker=marker, document=document)
        session.add(record)
    else:
        record.marker = marker
        record.document = document

    await session.flush()
    return record


def metadata_to_model(record: WallpaperMetadataDB) -> WallpaperMetadata:
    """Convert a database row to a domain model."""
    return parse_metadata(record.document, marker=record.marker)


def metadata_to_document(metadata: WallpaperMetadata) -> dict[str, Any]:
    """Convert a domain model to the JSON stored in the document column."""
    return serialize_metadata(metadata)
