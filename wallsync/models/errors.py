"""
Wallpaper error taxonomy.

Every failure the synchronization core can produce is one of the classes
below. Each carries a FailureKind so the API layer can translate it to an
HTTP status without inspecting messages.

Recovery rules:
- NetworkError during an update check: logged, prior metadata stands
- NetworkError / StorageError during an asset fetch: surfaced to the caller
- StorageError writing the current selection: surfaced to the caller
- Garbage collection failures: logged as a batch, never surfaced
- MigrationError: reported on the update check, metadata is not rolled back
"""

from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    NETWORK = "network"
    STORAGE = "storage"
    MIGRATION = "migration"
    DECODE = "decode"
    VERIFICATION = "verification"
    ASSET_FETCH = "asset_fetch"


class NetworkFailure(str, Enum):
    """Whether a network failure is worth retrying."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"


class StorageFailure(str, Enum):
    """Which storage operation failed."""

    READ = "read"
    WRITE = "write"
    NOT_FOUND = "not_found"


class WallpaperError(Exception):
    """
    Base class for known wallpaper failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 500,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)


class NetworkError(WallpaperError):
    """Raised when metadata or an asset cannot be fetched."""

    def __init__(self, reason: NetworkFailure, message: str, detail: str | None = None):
        self.reason = reason
        super().__init__(
            kind=FailureKind.NETWORK,
            message=message,
            detail=detail,
            status_code=502,
        )

    @property
    def is_transient(self) -> bool:
        return self.reason is NetworkFailure.TRANSIENT


class StorageError(WallpaperError):
    """Raised when a blob or metadata store operation fails."""

    def __init__(self, operation: StorageFailure, message: str, detail: str | None = None):
        self.operation = operation
        super().__init__(
            kind=FailureKind.STORAGE,
            message=message,
            detail=detail,
            status_code=404 if operation is StorageFailure.NOT_FOUND else 503,
        )


class MigrationError(WallpaperError):
    """Raised when the legacy selection layout cannot be upgraded."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(kind=FailureKind.MIGRATION, message=message, detail=detail)


class DecodeError(WallpaperError):
    """Raised when a metadata document is malformed."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.DECODE,
            message=message,
            detail=detail,
            status_code=502,
        )


class VerificationError(WallpaperError):
    """
    Raised when one or more thumbnails could not be cached.

    Attributes:
        failures: Wallpaper id -> error for each thumbnail that failed
    """

    def __init__(self, failures: dict[str, WallpaperError]):
        self.failures = failures
        super().__init__(
            kind=FailureKind.VERIFICATION,
            message=f"Failed to verify {len(failures)} thumbnail(s)",
            detail=", ".join(sorted(failures)),
        )


class AssetFetchError(WallpaperError):
    """Raised when the paired assets of a wallpaper could not be cached."""

    def __init__(self, wallpaper_id: str, cause: WallpaperError):
        self.wallpaper_id = wallpaper_id
        self.cause = cause
        super().__init__(
            kind=FailureKind.ASSET_FETCH,
            message=f"Failed to fetch assets for wallpaper {wallpaper_id}",
            detail=cause.message,
            status_code=cause.status_code,
        )
