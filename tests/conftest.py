import asyncio
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from wallsync.models.db import Base
from wallsync.models.errors import NetworkError, NetworkFailure, StorageError, StorageFailure
from wallsync.models.wallpaper import AssetKey, WallpaperMetadata
from wallsync.parsers.metadata import parse_metadata
from wallsync.storage.base import MetadataStore
from wallsync.storage.file_store import FileBlobStore


class FakeNetworkClient:
    """Network client double with scripted metadata and asset responses."""

    def __init__(self, metadata: WallpaperMetadata | Exception | None = None) -> None:
        self.metadata = metadata
        self.assets: dict[tuple[str, str], bytes | Exception] = {}
        self.delays: dict[tuple[str, str], float] = {}
        self.metadata_calls = 0
        self.asset_calls: list[tuple[str, str]] = []
        self.cancelled: list[tuple[str, str]] = []

    async def fetch_metadata(self) -> WallpaperMetadata:
        self.metadata_calls += 1
        if isinstance(self.metadata, Exception):
            raise self.metadata
        if self.metadata is None:
            raise NetworkError(NetworkFailure.PERMANENT, "No metadata scripted")
        return self.metadata

    async def fetch_asset(self, name: str, scope: str) -> bytes:
        key = (scope, name)
        self.asset_calls.append(key)
        try:
            if key in self.delays:
                await asyncio.sleep(self.delays[key])
        except asyncio.CancelledError:
            self.cancelled.append(key)
            raise

        result = self.assets.get(key)
        if result is None:
            raise NetworkError(NetworkFailure.PERMANENT, f"HTTP 404 for {scope}/{name}")
        if isinstance(result, Exception):
            raise result
        return result


class MemoryMetadataStore(MetadataStore):
    """Metadata store double that counts writes."""

    def __init__(self, metadata: WallpaperMetadata | None = None) -> None:
        self.metadata = metadata
        self.set_calls = 0
        self.fail_writes = False

    async def get_metadata(self) -> WallpaperMetadata | None:
        return self.metadata

    async def set_metadata(self, metadata: WallpaperMetadata) -> None:
        self.set_calls += 1
        if self.fail_writes:
            raise StorageError(StorageFailure.WRITE, "disk full")
        self.metadata = metadata


class FlakyBlobStore(FileBlobStore):
    """File store that fails writes or deletes for chosen keys."""

    def __init__(self, root: Path) -> None:
        super().__init__(root)
        self.failing_puts: set[AssetKey] = set()
        self.failing_deletes: set[AssetKey] = set()
        self.fail_selection_writes = False

    async def put_asset(self, key: AssetKey, data: bytes) -> None:
        if key in self.failing_puts:
            raise StorageError(StorageFailure.WRITE, f"Failed to store {key.name}")
        await super().put_asset(key, data)

    async def delete_asset(self, key: AssetKey) -> None:
        if key in self.failing_deletes:
            raise StorageError(StorageFailure.WRITE, f"Failed to delete {key.name}")
        await super().delete_asset(key)

    async def set_current_selection(self, selection) -> None:
        if self.fail_selection_writes:
            raise StorageError(StorageFailure.WRITE, "read-only filesystem")
        await super().set_current_selection(selection)


@pytest.fixture
def metadata_payload() -> dict[str, Any]:
    """Sample metadata document in wire format."""
    return {
        "last-updated-date": "2022-06-15",
        "collections": [
            {
                "id": "classic-firefox",
                "learn-more-url": None,
                "available-locales": None,
                "availability-range": None,
                "heading": None,
                "description": None,
                "wallpapers": [
                    {"id": "beach-hills", "text-color": "0xADD8E6", "card-color": "0x000000"},
                    {"id": "twilight-hills", "text-color": "0xFFFFFF"},
                ],
            },
            {
                "id": "summer-2022",
                "learn-more-url": "https://example.com/summer",
                "available-locales": ["en-US", "en-CA"],
                "availability-range": {"start": "2022-06-01", "end": "2022-07-01"},
                "heading": "Summer",
                "description": "Warm colors",
                "wallpapers": [{"id": "sunrise"}, {"id": "sunset"}],
            },
            {
                "id": "winter-2021",
                "availability-range": {"start": "2021-12-01", "end": "2022-01-31"},
                "wallpapers": [{"id": "snowfall"}],
            },
        ],
    }


@pytest.fixture
def metadata(metadata_payload: dict[str, Any]) -> WallpaperMetadata:
    return parse_metadata(metadata_payload, marker="v1")


@pytest.fixture
def blob_store(tmp_path: Path) -> FlakyBlobStore:
    return FlakyBlobStore(tmp_path / "wallpapers")


@pytest.fixture
def network(metadata: WallpaperMetadata) -> FakeNetworkClient:
    client = FakeNetworkClient(metadata)
    for collection in metadata.collections:
        for wallpaper in collection.wallpapers:
            for name in (
                wallpaper.portrait_asset_id,
                wallpaper.landscape_asset_id,
                wallpaper.thumbnail_asset_id,
            ):
                client.assets[(wallpaper.id, name)] = f"{name}-bytes".encode()
    return client


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def metadata_store() -> MemoryMetadataStore:
    return MemoryMetadataStore()
