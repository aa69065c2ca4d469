"""
Cached asset garbage collection.

Deletes assets whose owning wallpaper is no longer reachable. Deletions are
independent: one failing key never stops the sweep, failures are collected
and logged together at the end.
"""

import logging
from dataclasses import dataclass, field

from wallsync.models.errors import StorageError
from wallsync.models.wallpaper import AssetKey
from wallsync.storage.base import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Outcome of a single sweep."""

    deleted: list[AssetKey] = field(default_factory=list)
    failures: dict[AssetKey, StorageError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class GarbageCollector:
    """Removes cached assets of unreachable wallpapers."""

    def __init__(self, blob_store: BlobStore) -> None:
        self.blob_store = blob_store

    async def sweep(self, reachable: set[str]) -> SweepReport:
        """
        Delete every cached asset whose scope is not in `reachable`.

        Args:
            reachable: Wallpaper ids whose assets must be kept

        Returns:
            SweepReport listing deleted keys and per-key failures

        Raises:
            StorageError: If the cached keys cannot be listed
        """
        report = SweepReport()

        for key in await self.blob_store.list_asset_keys():
            if key.scope in reachable:
                continue
            try:
                await self.blob_store.delete_asset(key)
                report.deleted.append(key)
            except StorageError as e:
                report.failures[key] = e

        if report.failures:
            logger.warning(
                "Failed to delete %d unused asset(s): %s",
                len(report.failures),
                ", ".join(f"{k.scope}/{k.name}: {e.message}" for k, e in report.failures.items()),
            )

        logger.info("Removed %d unused asset(s)", len(report.deleted))
        return report
