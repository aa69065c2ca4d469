"""Tests for the wallpaper manager facade."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from wallsync.config import CLASSIC_COLLECTION_ID, DEFAULT_WALLPAPER_ID
from wallsync.models.errors import AssetFetchError, StorageError, StorageFailure
from wallsync.models.wallpaper import AssetKey, Wallpaper
from wallsync.services.manager import WallpaperManager
from wallsync.services.synchronizer import SyncOutcome

TODAY = date(2022, 6, 15)


@pytest.fixture
def gate() -> MagicMock:
    return MagicMock(return_value=True)


@pytest.fixture
def manager(network, blob_store, metadata_store, gate) -> WallpaperManager:
    return WallpaperManager(
        network,
        blob_store,
        metadata_store,
        feature_gate=gate,
        clock=lambda: TODAY,
        locale="en-US",
    )


class TestAvailableCollections:
    async def test_before_first_sync(self, manager: WallpaperManager) -> None:
        """Only the synthetic classic collection exists before any sync."""
        collections = await manager.available_collections()

        assert [c.id for c in collections] == [CLASSIC_COLLECTION_ID]

    async def test_after_sync(self, manager: WallpaperManager) -> None:
        await manager.check_for_updates()

        collections = await manager.available_collections()

        assert [c.id for c in collections] == [CLASSIC_COLLECTION_ID, "summer-2022"]
        assert collections[0].wallpapers[0].id == DEFAULT_WALLPAPER_ID

    async def test_explicit_date_and_locale(self, manager: WallpaperManager) -> None:
        await manager.check_for_updates()

        collections = await manager.available_collections(now=date(2021, 12, 24), locale="fr-FR")

        assert [c.id for c in collections] == [CLASSIC_COLLECTION_ID, "winter-2021"]

    async def test_find_wallpaper(self, manager: WallpaperManager) -> None:
        await manager.check_for_updates()

        assert await manager.find_wallpaper("sunset") == Wallpaper.from_id("sunset")
        assert await manager.find_wallpaper("snowfall") is None


class TestFeatureAvailable:
    async def test_requires_synced_thumbnails(self, manager: WallpaperManager, network) -> None:
        """Available once every visible thumbnail is cached."""
        network.assets.pop(("sunset", "sunset_thumbnail"))
        await manager.check_for_updates()

        assert not await manager.feature_available()

        network.assets[("sunset", "sunset_thumbnail")] = b"thumb"
        await manager.check_for_updates()

        assert await manager.feature_available()

    async def test_closed_gate(self, manager: WallpaperManager, gate: MagicMock) -> None:
        """A closed gate hides the feature regardless of the cache."""
        await manager.check_for_updates()
        gate.return_value = False

        assert not await manager.feature_available()


class TestSelection:
    async def test_current_defaults(self, manager: WallpaperManager) -> None:
        assert (await manager.current_wallpaper()).id == DEFAULT_WALLPAPER_ID

    async def test_set_and_notify(self, manager: WallpaperManager) -> None:
        await manager.check_for_updates()
        listener = MagicMock()
        manager.add_selection_listener(listener)

        await manager.set_current_wallpaper(Wallpaper.from_id("sunrise"))

        assert (await manager.current_wallpaper()).id == "sunrise"
        listener.assert_called_once_with()

        manager.remove_selection_listener(listener)
        await manager.set_current_wallpaper(Wallpaper.from_id("sunset"))
        listener.assert_called_once_with()

    async def test_set_failure_raises(self, manager: WallpaperManager, blob_store) -> None:
        blob_store.fail_selection_writes = True

        with pytest.raises(StorageError):
            await manager.set_current_wallpaper(Wallpaper.from_id("sunrise"))

    async def test_selection_outside_collections_falls_back(
        self, manager: WallpaperManager
    ) -> None:
        """A selection from an expired collection reads as the default."""
        await manager.check_for_updates()
        await manager.set_current_wallpaper(Wallpaper.from_id("snowfall"))

        assert (await manager.current_wallpaper()).id == DEFAULT_WALLPAPER_ID


class TestAssets:
    async def test_fetch_assets_for(self, manager: WallpaperManager, blob_store) -> None:
        await manager.fetch_assets_for(Wallpaper.from_id("sunset"))

        assert await blob_store.has_asset(AssetKey("sunset", "sunset_portrait"))
        assert await blob_store.has_asset(AssetKey("sunset", "sunset_landscape"))

    async def test_fetch_assets_failure(self, manager: WallpaperManager, network) -> None:
        network.assets.pop(("sunset", "sunset_portrait"))

        with pytest.raises(AssetFetchError):
            await manager.fetch_assets_for(Wallpaper.from_id("sunset"))

    async def test_remove_unused_assets(self, manager: WallpaperManager, blob_store) -> None:
        """Assets of wallpapers no longer offered are removed."""
        await manager.check_for_updates()
        await blob_store.put_asset(AssetKey("retired", "retired_portrait"), b"old")

        report = await manager.remove_unused_assets()

        assert report is not None
        assert report.deleted == [AssetKey("retired", "retired_portrait")]
        assert await blob_store.has_asset(AssetKey("sunset", "sunset_thumbnail"))

    async def test_unreadable_metadata_skips_cleanup(
        self, manager: WallpaperManager, metadata_store, blob_store
    ) -> None:
        """A metadata read failure leaves the cache untouched."""
        await manager.check_for_updates()
        cached = await blob_store.list_asset_keys()

        with patch.object(
            metadata_store,
            "get_metadata",
            AsyncMock(side_effect=StorageError(StorageFailure.READ, "database is locked")),
        ):
            report = await manager.remove_unused_assets()

        assert report is None
        assert cached
        assert await blob_store.list_asset_keys() == cached


class TestCheckForUpdates:
    async def test_delegates_to_synchronizer(
        self, manager: WallpaperManager, metadata_store
    ) -> None:
        result = await manager.check_for_updates()

        assert result.outcome is SyncOutcome.UPDATED
        assert metadata_store.metadata is not None
        assert manager.synchronizer.locale == "en-US"
