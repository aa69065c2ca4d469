"""Base storage interfaces for wallpaper state

Defines the abstract interfaces that the synchronization core depends on.
"""

from abc import ABC, abstractmethod

from wallsync.models.wallpaper import AssetKey, CurrentSelection, WallpaperMetadata


class BlobStore(ABC):
    """Persistence for the current selection and cached wallpaper assets"""

    @abstractmethod
    async def get_current_selection(self) -> CurrentSelection | None:
        """
        Read the persisted selection

        Returns:
            The selection, or None if nothing was ever selected

        Raises:
            StorageError: If the record exists but cannot be read
        """
        pass

    @abstractmethod
    async def set_current_selection(self, selection: CurrentSelection) -> None:
        """
        Overwrite the persisted selection in a single write

        Raises:
            StorageError: If the write fails; the previous record is untouched
        """
        pass

    @abstractmethod
    async def put_asset(self, key: AssetKey, data: bytes) -> None:
        """
        Store an asset, replacing any existing blob with the same key

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get_asset(self, key: AssetKey) -> bytes:
        """
        Read an asset

        Raises:
            StorageError: NOT_FOUND if missing, READ if unreadable
        """
        pass

    @abstractmethod
    async def has_asset(self, key: AssetKey) -> bool:
        """Check if an asset is cached"""
        pass

    @abstractmethod
    async def list_asset_keys(self) -> list[AssetKey]:
        """
        List every cached asset

        Raises:
            StorageError: If the store cannot be enumerated
        """
        pass

    @abstractmethod
    async def delete_asset(self, key: AssetKey) -> None:
        """
        Delete an asset

        Raises:
            StorageError: NOT_FOUND if missing, WRITE if deletion fails
        """
        pass

    # Legacy layout support, used once by the migration pass

    @abstractmethod
    async def get_legacy_selection(self) -> str | None:
        """Wallpaper id recorded by the pre-collection storage layout, if any"""
        pass

    @abstractmethod
    async def clear_legacy_selection(self) -> None:
        """Remove the legacy selection record; no-op if absent"""
        pass

    @abstractmethod
    async def is_migrated(self) -> bool:
        """True once the legacy layout has been upgraded"""
        pass

    @abstractmethod
    async def mark_migrated(self) -> None:
        """Record that the legacy layout has been upgraded"""
        pass


class MetadataStore(ABC):
    """Persistence for the last known metadata document"""

    @abstractmethod
    async def get_metadata(self) -> WallpaperMetadata | None:
        """
        Read the stored document

        Returns:
            The document, or None if none was ever stored

        Raises:
            StorageError: If the stored document cannot be read
        """
        pass

    @abstractmethod
    async def set_metadata(self, metadata: WallpaperMetadata) -> None:
        """
        Replace the stored document

        Raises:
            StorageError: If the write fails
        """
        pass
