"""
Thumbnail verification.

Makes sure every wallpaper the UI can show has its thumbnail cached, so the
picker never renders an empty tile. Missing thumbnails are downloaded, a few
at a time; corrupt or deleted cache entries are repaired the same way.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from wallsync.config import settings
from wallsync.models.errors import VerificationError, WallpaperError
from wallsync.models.wallpaper import AssetKey, Wallpaper, WallpaperCollection
from wallsync.services.networking import WallpaperNetworkClient
from wallsync.storage.base import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class VerificationReport:
    """Thumbnails found already cached and thumbnails downloaded."""

    present: list[str] = field(default_factory=list)
    fetched: list[str] = field(default_factory=list)


def _thumbnail_key(wallpaper: Wallpaper) -> AssetKey:
    return AssetKey(scope=wallpaper.id, name=wallpaper.thumbnail_asset_id)


def _downloadable(collections: list[WallpaperCollection]) -> list[Wallpaper]:
    seen: set[str] = set()
    wallpapers: list[Wallpaper] = []
    for collection in collections:
        for wallpaper in collection.wallpapers:
            if wallpaper.is_default or wallpaper.id in seen:
                continue
            seen.add(wallpaper.id)
            wallpapers.append(wallpaper)
    return wallpapers


class AssetVerifier:
    """Checks and repairs cached thumbnails."""

    def __init__(
        self,
        network: WallpaperNetworkClient,
        blob_store: BlobStore,
        max_concurrency: int | None = None,
    ) -> None:
        self.network = network
        self.blob_store = blob_store
        self.max_concurrency = max_concurrency or settings.max_concurrent_fetches

    async def thumbnails_available(self, collections: list[WallpaperCollection]) -> bool:
        """True if every downloadable wallpaper has a cached thumbnail."""
        for wallpaper in _downloadable(collections):
            if not await self.blob_store.has_asset(_thumbnail_key(wallpaper)):
                return False
        return True

    async def verify(self, collections: list[WallpaperCollection]) -> VerificationReport:
        """
        Ensure every thumbnail for the given collections is cached.

        Args:
            collections: Effective collections to verify

        Returns:
            VerificationReport of what was already present and what was fetched

        Raises:
            VerificationError: If any thumbnail could not be fetched or stored.
                Successful downloads are kept.
        """
        report = VerificationReport()
        failures: dict[str, WallpaperError] = {}
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def check(wallpaper: Wallpaper) -> None:
            key = _thumbnail_key(wallpaper)
            try:
                if await self.blob_store.has_asset(key):
                    report.present.append(wallpaper.id)
                    return
                async with semaphore:
                    data = await self.network.fetch_asset(key.name, key.scope)
                await self.blob_store.put_asset(key, data)
                report.fetched.append(wallpaper.id)
            except WallpaperError as e:
                failures[wallpaper.id] = e

        async with asyncio.TaskGroup() as tg:
            for wallpaper in _downloadable(collections):
                tg.create_task(check(wallpaper))

        logger.info(
            "Verified thumbnails: %d present, %d fetched, %d failed",
            len(report.present),
            len(report.fetched),
            len(failures),
        )

        if failures:
            raise VerificationError(failures)

        return report
