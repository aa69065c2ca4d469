"""Database-backed metadata store"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wallsync.db.operations import (
    get_metadata_record,
    metadata_to_document,
    metadata_to_model,
    upsert_metadata,
)
from wallsync.models.errors import DecodeError, StorageError, StorageFailure
from wallsync.models.wallpaper import WallpaperMetadata
from wallsync.storage.base import MetadataStore

logger = logging.getLogger(__name__)


class DatabaseMetadataStore(MetadataStore):
    """Keeps the last fetched metadata document in a single database row"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_metadata(self) -> WallpaperMetadata | None:
        try:
            async with self.session_factory() as session:
                record = await get_metadata_record(session)
                if record is None:
                    return None
                return metadata_to_model(record)
        except SQLAlchemyError as e:
            raise StorageError(
                StorageFailure.READ, "Failed to read stored metadata", detail=str(e)
            ) from e
        except DecodeError as e:
            raise StorageError(
                StorageFailure.READ, "Stored metadata is corrupt", detail=e.message
            ) from e

    async def set_metadata(self, metadata: WallpaperMetadata) -> None:
        try:
            async with self.session_factory() as session:
                await upsert_metadata(session, metadata.marker, metadata_to_document(metadata))
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(
                StorageFailure.WRITE, "Failed to store metadata", detail=str(e)
            ) from e

        logger.info("Stored wallpaper metadata %s", metadata.marker)
