"""
wallsync services.

Metadata synchronization, selection and asset caching for wallpapers.
"""

from wallsync.services.availability import (
    default_collection,
    default_wallpaper,
    effective_collections,
    find_wallpaper,
    is_available,
    reachable_wallpaper_ids,
)
from wallsync.services.garbage_collector import GarbageCollector, SweepReport
from wallsync.services.manager import WallpaperManager, get_wallpaper_manager
from wallsync.services.migration import WallpaperMigrator
from wallsync.services.networking import WallpaperNetworkClient
from wallsync.services.selection import SelectionCache
from wallsync.services.synchronizer import (
    AssetSynchronizer,
    SyncOutcome,
    SyncResult,
    SyncState,
)
from wallsync.services.verification import AssetVerifier, VerificationReport

__all__ = [
    # Availability (pure)
    "default_collection",
    "default_wallpaper",
    "effective_collections",
    "find_wallpaper",
    "is_available",
    "reachable_wallpaper_ids",
    # Synchronization
    "AssetSynchronizer",
    "AssetVerifier",
    "SyncOutcome",
    "SyncResult",
    "SyncState",
    "VerificationReport",
    "WallpaperMigrator",
    # Selection and cleanup
    "GarbageCollector",
    "SelectionCache",
    "SweepReport",
    # Facade
    "WallpaperManager",
    "WallpaperNetworkClient",
    "get_wallpaper_manager",
]
