"""
Current wallpaper selection and its assets.

Tracks which wallpaper is current, notifies listeners when it changes and
downloads the portrait/landscape pair for a wallpaper.

INVARIANTS:
- Reading the current wallpaper never fails; the default fills every gap
- A wallpaper's two assets are cached together or not at all
- Unused asset cleanup never raises
"""

import asyncio
import logging
from collections.abc import Callable

from wallsync.models.errors import AssetFetchError, StorageError, WallpaperError
from wallsync.models.wallpaper import (
    AssetKey,
    CurrentSelection,
    Wallpaper,
    WallpaperCollection,
)
from wallsync.services.availability import (
    default_wallpaper,
    find_wallpaper,
    reachable_wallpaper_ids,
)
from wallsync.services.garbage_collector import GarbageCollector, SweepReport
from wallsync.services.networking import WallpaperNetworkClient
from wallsync.storage.base import BlobStore

logger = logging.getLogger(__name__)

SelectionListener = Callable[[], None]


class SelectionCache:
    """Persists the current wallpaper and caches its paired assets."""

    def __init__(
        self,
        network: WallpaperNetworkClient,
        blob_store: BlobStore,
        garbage_collector: GarbageCollector | None = None,
    ) -> None:
        self.network = network
        self.blob_store = blob_store
        self.garbage_collector = garbage_collector or GarbageCollector(blob_store)
        self._listeners: list[SelectionListener] = []
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    def add_listener(self, callback: SelectionListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: SelectionListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as exc:
                logger.error("Selection listener error: %s", exc)

    # ------------------------------------------------------------------
    async def set_current_wallpaper(self, wallpaper: Wallpaper) -> None:
        """
        Make `wallpaper` the current selection.

        Raises:
            StorageError: If the selection could not be written. The previous
                selection remains current and no listener is notified.
        """
        async with self._write_lock:
            try:
                await self.blob_store.set_current_selection(
                    CurrentSelection(wallpaper_id=wallpaper.id)
                )
            except StorageError as e:
                logger.error("Failed to set wallpaper: %s", e.message)
                raise

        logger.info("Current wallpaper set to %s", wallpaper.id)
        self._notify_listeners()

    async def current_selection(self) -> CurrentSelection | None:
        """The stored selection, or None if it is missing or unreadable."""
        try:
            return await self.blob_store.get_current_selection()
        except StorageError as e:
            logger.error("Failed to read current wallpaper: %s", e.message)
            return None

    async def current_wallpaper(self, collections: list[WallpaperCollection]) -> Wallpaper:
        """
        The wallpaper the user picked.

        Args:
            collections: Known collections used to resolve the stored id

        Returns:
            The selected wallpaper, or the default wallpaper if nothing is
            stored, the record is unreadable or its id is unknown.
        """
        selection = await self.current_selection()
        if selection is None:
            return default_wallpaper()

        wallpaper = find_wallpaper(collections, selection.wallpaper_id)
        if wallpaper is None:
            logger.info("Selected wallpaper %s no longer known", selection.wallpaper_id)
            return default_wallpaper()

        return wallpaper

    # ------------------------------------------------------------------
    async def fetch_assets(self, wallpaper: Wallpaper) -> None:
        """
        Download and cache the portrait and landscape images.

        Both downloads run concurrently; the first failure cancels the other.
        Nothing is stored unless both succeed, and if storing the second
        image fails the first is removed again unless it was already cached
        before this call. Cancelling the call cancels both downloads.

        Raises:
            AssetFetchError: Wrapping the NetworkError or StorageError cause
        """
        if wallpaper.is_default:
            return

        portrait_key = AssetKey(scope=wallpaper.id, name=wallpaper.portrait_asset_id)
        landscape_key = AssetKey(scope=wallpaper.id, name=wallpaper.landscape_asset_id)

        try:
            async with asyncio.TaskGroup() as tg:
                portrait_task = tg.create_task(
                    self.network.fetch_asset(portrait_key.name, portrait_key.scope)
                )
                landscape_task = tg.create_task(
                    self.network.fetch_asset(landscape_key.name, landscape_key.scope)
                )
        except ExceptionGroup as eg:
            cause = _first_wallpaper_error(eg)
            if cause is None:
                raise
            logger.error("Error fetching wallpaper resources: %s", cause.message)
            raise AssetFetchError(wallpaper.id, cause) from cause

        try:
            await self._store_pair(
                (portrait_key, portrait_task.result()),
                (landscape_key, landscape_task.result()),
            )
        except StorageError as e:
            logger.error("Error storing wallpaper resources: %s", e.message)
            raise AssetFetchError(wallpaper.id, e) from e

        logger.info("Cached assets for wallpaper %s", wallpaper.id)

    async def _store_pair(
        self, first: tuple[AssetKey, bytes], second: tuple[AssetKey, bytes]
    ) -> None:
        # Only a first asset created here is rolled back; a previously cached
        # copy was overwritten with fresh bytes and stays
        first_existed = await self.blob_store.has_asset(first[0])
        await self.blob_store.put_asset(*first)
        try:
            await self.blob_store.put_asset(*second)
        except StorageError:
            if first_existed:
                raise
            try:
                await self.blob_store.delete_asset(first[0])
            except StorageError as e:
                logger.error(
                    "Failed to roll back asset %s/%s: %s", first[0].scope, first[0].name, e.message
                )
            raise

    # ------------------------------------------------------------------
    async def remove_unused_assets(
        self, collections: list[WallpaperCollection]
    ) -> SweepReport | None:
        """
        Delete assets of wallpapers that are no longer reachable.

        Best effort: failures are logged, never raised.

        Returns:
            The sweep report, or None if the sweep could not run
        """
        selection = await self.current_selection()
        reachable = reachable_wallpaper_ids(
            collections, selection.wallpaper_id if selection else None
        )
        try:
            return await self.garbage_collector.sweep(reachable)
        except WallpaperError as e:
            logger.warning("Unused asset cleanup failed: %s", e.message)
            return None


def _first_wallpaper_error(group: BaseExceptionGroup) -> WallpaperError | None:
    for exc in group.exceptions:
        if isinstance(exc, WallpaperError):
            return exc
        if isinstance(exc, BaseExceptionGroup):
            nested = _first_wallpaper_error(exc)
            if nested is not None:
                return nested
    return None
