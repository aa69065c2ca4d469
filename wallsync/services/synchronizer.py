"""
Wallpaper metadata synchronization.

Reconciles the remote metadata document with local state:

    fetch metadata
      ├─ failed            → log, keep stored metadata
      ├─ marker changed    → persist, migrate, verify new collections
      └─ marker unchanged  → verify stored collections

Change detection compares markers only. A server that edits the document
without changing its marker (ETag / last-updated-date) is not picked up.

Migration and verification failures are reported in the result and logged;
the new metadata stays persisted either way.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from wallsync.config import settings
from wallsync.models.errors import (
    DecodeError,
    MigrationError,
    NetworkError,
    StorageError,
    WallpaperError,
)
from wallsync.models.wallpaper import WallpaperMetadata
from wallsync.services.availability import effective_collections
from wallsync.services.migration import WallpaperMigrator
from wallsync.services.networking import WallpaperNetworkClient
from wallsync.services.verification import AssetVerifier
from wallsync.storage.base import MetadataStore

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class SyncOutcome(str, Enum):
    """How an update check ended."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FETCH_FAILED = "fetch_failed"
    PERSIST_FAILED = "persist_failed"
    SKIPPED = "skipped"


@dataclass
class SyncResult:
    """Outcome of check_for_updates plus any non-fatal errors."""

    outcome: SyncOutcome
    marker: str | None = None
    errors: list[WallpaperError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome in (SyncOutcome.UPDATED, SyncOutcome.UNCHANGED) and not self.errors


class AssetSynchronizer:
    """
    Keeps stored metadata and cached thumbnails in step with the server.

    Only one check runs at a time; a call made while another is in flight
    returns SKIPPED immediately.
    """

    def __init__(
        self,
        network: WallpaperNetworkClient,
        metadata_store: MetadataStore,
        migrator: WallpaperMigrator,
        verifier: AssetVerifier,
        clock: Callable[[], date] = date.today,
        locale: str | None = None,
    ) -> None:
        self.network = network
        self.metadata_store = metadata_store
        self.migrator = migrator
        self.verifier = verifier
        self.clock = clock
        self.locale = locale or settings.default_locale
        self.state = SyncState.IDLE
        self._lock = asyncio.Lock()

    async def check_for_updates(
        self, now: date | None = None, locale: str | None = None
    ) -> SyncResult:
        """
        Fetch metadata and bring local state up to date.

        Args:
            now: Date used for availability. Defaults to the clock.
            locale: Locale used for availability. Defaults to the configured locale.

        Returns:
            SyncResult describing what happened. Never raises for
            network, storage, migration or verification failures.
        """
        if self._lock.locked():
            logger.info("Wallpaper update check already running, skipping")
            return SyncResult(outcome=SyncOutcome.SKIPPED)

        async with self._lock:
            self.state = SyncState.REFRESHING
            try:
                return await self._refresh(now or self.clock(), locale or self.locale)
            finally:
                self.state = SyncState.IDLE

    async def _refresh(self, now: date, locale: str) -> SyncResult:
        try:
            fetched = await self.network.fetch_metadata()
        except (NetworkError, DecodeError) as e:
            logger.warning("Wallpaper metadata fetch failed: %s", e.message)
            return SyncResult(outcome=SyncOutcome.FETCH_FAILED, errors=[e])

        stored = await self._stored_metadata()

        if stored is not None and stored.marker == fetched.marker:
            logger.info("Wallpaper metadata unchanged (%s)", fetched.marker)
            result = SyncResult(outcome=SyncOutcome.UNCHANGED, marker=stored.marker)
            await self._verify(stored, now, locale, result)
            return result

        try:
            await self.metadata_store.set_metadata(fetched)
        except StorageError as e:
            logger.error("Failed to persist wallpaper metadata: %s", e.message)
            return SyncResult(outcome=SyncOutcome.PERSIST_FAILED, marker=fetched.marker, errors=[e])

        result = SyncResult(outcome=SyncOutcome.UPDATED, marker=fetched.marker)

        try:
            await self.migrator.attempt_migration(fetched)
        except MigrationError as e:
            logger.error("Wallpaper migration error: %s", e.message)
            result.errors.append(e)

        await self._verify(fetched, now, locale, result)
        return result

    async def _stored_metadata(self) -> WallpaperMetadata | None:
        try:
            return await self.metadata_store.get_metadata()
        except StorageError as e:
            # Unreadable metadata is replaced by the fresh copy
            logger.warning("Stored wallpaper metadata unreadable: %s", e.message)
            return None

    async def _verify(
        self, metadata: WallpaperMetadata, now: date, locale: str, result: SyncResult
    ) -> None:
        collections = effective_collections(metadata, now, locale)
        try:
            await self.verifier.verify(collections)
        except WallpaperError as e:
            logger.error("Wallpaper update check error: %s", e.message)
            result.errors.append(e)
