"""
Wallpaper manager.

The primary interface for the wallpaper feature. Wires the network client,
stores, synchronizer and selection cache together and answers questions in
terms of the current effective collections.
"""

import logging
from collections.abc import Callable
from datetime import date

from wallsync.config import settings
from wallsync.db.database import async_session_factory
from wallsync.models.errors import StorageError
from wallsync.models.wallpaper import Wallpaper, WallpaperCollection, WallpaperMetadata
from wallsync.services.availability import effective_collections, find_wallpaper
from wallsync.services.garbage_collector import GarbageCollector, SweepReport
from wallsync.services.migration import WallpaperMigrator
from wallsync.services.networking import WallpaperNetworkClient
from wallsync.services.selection import SelectionCache, SelectionListener
from wallsync.services.synchronizer import AssetSynchronizer, SyncResult
from wallsync.services.verification import AssetVerifier
from wallsync.storage.base import BlobStore, MetadataStore
from wallsync.storage.file_store import FileBlobStore
from wallsync.storage.metadata_store import DatabaseMetadataStore

logger = logging.getLogger(__name__)

FeatureGate = Callable[[], bool]


def _settings_gate() -> bool:
    return settings.wallpapers_enabled


class WallpaperManager:
    """
    Facade over the wallpaper synchronization core.

    Callers consult `feature_available()` before using anything else.
    """

    def __init__(
        self,
        network: WallpaperNetworkClient,
        blob_store: BlobStore,
        metadata_store: MetadataStore,
        feature_gate: FeatureGate = _settings_gate,
        clock: Callable[[], date] = date.today,
        locale: str | None = None,
    ) -> None:
        self.network = network
        self.blob_store = blob_store
        self.metadata_store = metadata_store
        self.feature_gate = feature_gate
        self.clock = clock
        self.locale = locale or settings.default_locale

        self.verifier = AssetVerifier(network, blob_store)
        self.selection = SelectionCache(network, blob_store, GarbageCollector(blob_store))
        self.synchronizer = AssetSynchronizer(
            network,
            metadata_store,
            WallpaperMigrator(blob_store),
            self.verifier,
            clock=clock,
            locale=self.locale,
        )

    # ------------------------------------------------------------------
    async def _stored_metadata(self) -> WallpaperMetadata | None:
        try:
            return await self.metadata_store.get_metadata()
        except StorageError as e:
            logger.error("Error getting stored metadata: %s", e.message)
            return None

    async def available_collections(
        self, now: date | None = None, locale: str | None = None
    ) -> list[WallpaperCollection]:
        """Collections available on the given date and locale, default injected."""
        metadata = await self._stored_metadata()
        return effective_collections(metadata, now or self.clock(), locale or self.locale)

    async def find_wallpaper(self, wallpaper_id: str) -> Wallpaper | None:
        """Resolve an id against the currently available collections."""
        return find_wallpaper(await self.available_collections(), wallpaper_id)

    async def current_wallpaper(self) -> Wallpaper:
        """The selected wallpaper; the default when none is selected or known."""
        return await self.selection.current_wallpaper(await self.available_collections())

    async def feature_available(self) -> bool:
        """
        True if the feature may be shown.

        The feature gate must be open and every available wallpaper must have
        its thumbnail cached.
        """
        if not self.feature_gate():
            return False
        return await self.verifier.thumbnails_available(await self.available_collections())

    # ------------------------------------------------------------------
    def add_selection_listener(self, callback: SelectionListener) -> None:
        self.selection.add_listener(callback)

    def remove_selection_listener(self, callback: SelectionListener) -> None:
        self.selection.remove_listener(callback)

    async def set_current_wallpaper(self, wallpaper: Wallpaper) -> None:
        """Persist a selection. Raises StorageError on failure."""
        await self.selection.set_current_wallpaper(wallpaper)

    async def fetch_assets_for(self, wallpaper: Wallpaper) -> None:
        """Cache both images of a wallpaper. Raises AssetFetchError on failure."""
        await self.selection.fetch_assets(wallpaper)

    async def remove_unused_assets(self) -> SweepReport | None:
        """
        Best-effort cleanup of unreachable assets; never raises.

        Returns None without deleting anything when the stored metadata
        cannot be read, since reachability is unknown.
        """
        try:
            metadata = await self.metadata_store.get_metadata()
        except StorageError as e:
            logger.warning("Skipping unused asset cleanup, metadata unreadable: %s", e.message)
            return None

        collections = effective_collections(metadata, self.clock(), self.locale)
        return await self.selection.remove_unused_assets(collections)

    async def check_for_updates(self) -> SyncResult:
        """Refresh metadata and cached thumbnails; never raises."""
        return await self.synchronizer.check_for_updates()


# Default manager instance
_manager: WallpaperManager | None = None


def get_wallpaper_manager() -> WallpaperManager:
    """
    Get the default wallpaper manager.

    Returns:
        Singleton WallpaperManager built from settings
    """
    global _manager
    if _manager is None:
        _manager = WallpaperManager(
            network=WallpaperNetworkClient(),
            blob_store=FileBlobStore(settings.storage_dir),
            metadata_store=DatabaseMetadataStore(async_session_factory),
        )
    return _manager
