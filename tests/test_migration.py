"""Tests for legacy selection migration."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from wallsync.models.errors import MigrationError, StorageError, StorageFailure
from wallsync.models.wallpaper import CurrentSelection, WallpaperMetadata
from wallsync.services.migration import WallpaperMigrator


def _write_legacy(blob_store, wallpaper_id: str) -> None:
    blob_store.root.mkdir(parents=True, exist_ok=True)
    (blob_store.root / "legacy-selection.json").write_text(json.dumps({"wallpaper": wallpaper_id}))


@pytest.fixture
def migrator(blob_store) -> WallpaperMigrator:
    return WallpaperMigrator(blob_store)


class TestAttemptMigration:
    async def test_known_legacy_selection_carried_over(
        self, migrator: WallpaperMigrator, blob_store, metadata: WallpaperMetadata
    ) -> None:
        _write_legacy(blob_store, "beach-hills")

        assert await migrator.attempt_migration(metadata) is True

        assert await blob_store.get_current_selection() == CurrentSelection("beach-hills")
        assert await blob_store.get_legacy_selection() is None
        assert await blob_store.is_migrated()

    async def test_legacy_in_expired_collection_still_migrated(
        self, migrator: WallpaperMigrator, blob_store, metadata: WallpaperMetadata
    ) -> None:
        """Legacy ids resolve against every collection, not only visible ones."""
        _write_legacy(blob_store, "snowfall")

        assert await migrator.attempt_migration(metadata) is True

    async def test_unknown_legacy_selection_dropped(
        self, migrator: WallpaperMigrator, blob_store, metadata: WallpaperMetadata
    ) -> None:
        """Unknown legacy ids are cleared and the default applies."""
        _write_legacy(blob_store, "long-gone")

        assert await migrator.attempt_migration(metadata) is False

        assert await blob_store.get_current_selection() is None
        assert await blob_store.get_legacy_selection() is None
        assert await blob_store.is_migrated()

    async def test_nothing_to_migrate(
        self, migrator: WallpaperMigrator, blob_store, metadata: WallpaperMetadata
    ) -> None:
        assert await migrator.attempt_migration(metadata) is False
        assert await blob_store.is_migrated()

    async def test_runs_once(
        self, migrator: WallpaperMigrator, blob_store, metadata: WallpaperMetadata
    ) -> None:
        """Later passes leave the store alone."""
        await migrator.attempt_migration(metadata)
        _write_legacy(blob_store, "sunset")

        assert await migrator.attempt_migration(metadata) is False
        assert await blob_store.get_current_selection() is None
        assert await blob_store.get_legacy_selection() == "sunset"

    async def test_storage_failure_raises_migration_error(
        self, migrator: WallpaperMigrator, blob_store, metadata: WallpaperMetadata
    ) -> None:
        """Store errors are wrapped and the store is not marked migrated."""
        _write_legacy(blob_store, "sunset")
        blob_store.fail_selection_writes = True

        with pytest.raises(MigrationError) as exc_info:
            await migrator.attempt_migration(metadata)

        assert exc_info.value.detail == "read-only filesystem"
        assert not await blob_store.is_migrated()
        assert await blob_store.get_legacy_selection() == "sunset"

    async def test_marker_read_failure(
        self, migrator: WallpaperMigrator, blob_store, metadata: WallpaperMetadata
    ) -> None:
        with patch.object(
            blob_store,
            "is_migrated",
            AsyncMock(side_effect=StorageError(StorageFailure.READ, "permission denied")),
        ):
            with pytest.raises(MigrationError):
                await migrator.attempt_migration(metadata)
