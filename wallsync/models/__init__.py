from wallsync.models.errors import (
    AssetFetchError,
    DecodeError,
    FailureKind,
    MigrationError,
    NetworkError,
    NetworkFailure,
    StorageError,
    StorageFailure,
    VerificationError,
    WallpaperError,
)
from wallsync.models.wallpaper import (
    AssetKey,
    AvailabilityRange,
    CollectionType,
    Color,
    CurrentSelection,
    Wallpaper,
    WallpaperCollection,
    WallpaperMetadata,
)

__all__ = [
    "AssetFetchError",
    "AssetKey",
    "AvailabilityRange",
    "CollectionType",
    "Color",
    "CurrentSelection",
    "DecodeError",
    "FailureKind",
    "MigrationError",
    "NetworkError",
    "NetworkFailure",
    "StorageError",
    "StorageFailure",
    "VerificationError",
    "Wallpaper",
    "WallpaperCollection",
    "WallpaperError",
    "WallpaperMetadata",
]
