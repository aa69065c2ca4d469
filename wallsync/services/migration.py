"""
Legacy selection migration.

Old releases stored the chosen wallpaper in a flat record with no collection
information. The first time new metadata arrives, that record is resolved
against the metadata and rewritten as the current selection.

Running the pass again is always safe: once the store is marked migrated it
does nothing.
"""

import logging

from wallsync.models.errors import MigrationError, StorageError
from wallsync.models.wallpaper import CurrentSelection, WallpaperMetadata
from wallsync.services.availability import find_wallpaper
from wallsync.storage.base import BlobStore

logger = logging.getLogger(__name__)


class WallpaperMigrator:
    """One-shot upgrade of the legacy selection layout."""

    def __init__(self, blob_store: BlobStore) -> None:
        self.blob_store = blob_store

    async def attempt_migration(self, metadata: WallpaperMetadata) -> bool:
        """
        Upgrade the legacy selection record if one exists.

        An unknown legacy id is dropped; the default wallpaper then applies.

        Args:
            metadata: Freshly stored metadata used to resolve the legacy id

        Returns:
            True if a legacy selection was carried over

        Raises:
            MigrationError: If the store could not be read or written
        """
        try:
            if await self.blob_store.is_migrated():
                return False

            migrated = False
            legacy_id = await self.blob_store.get_legacy_selection()

            if legacy_id is not None:
                wallpaper = find_wallpaper(list(metadata.collections), legacy_id)
                if wallpaper is not None:
                    await self.blob_store.set_current_selection(
                        CurrentSelection(wallpaper_id=wallpaper.id)
                    )
                    migrated = True
                    logger.info("Migrated legacy wallpaper selection %s", legacy_id)
                else:
                    logger.warning("Legacy wallpaper %s not found in metadata", legacy_id)

                await self.blob_store.clear_legacy_selection()

            await self.blob_store.mark_migrated()
            return migrated

        except StorageError as e:
            raise MigrationError("Wallpaper migration failed", detail=e.message) from e
