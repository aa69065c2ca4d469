"""
Wallpaper API endpoints.

Exposes the wallpaper manager: available collections, the current selection,
asset downloads, update checks and cleanup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from wallsync.models.errors import AssetFetchError, StorageError
from wallsync.models.wallpaper import Wallpaper, WallpaperCollection
from wallsync.services.manager import WallpaperManager, get_wallpaper_manager
from wallsync.services.synchronizer import SyncOutcome

router = APIRouter(prefix="/wallpapers", tags=["wallpapers"])

Manager = Annotated[WallpaperManager, Depends(get_wallpaper_manager)]


class WallpaperResponse(BaseModel):
    """A single wallpaper."""

    id: str
    portrait_asset_id: str
    landscape_asset_id: str
    thumbnail_asset_id: str
    text_color: str | None = None
    card_color: str | None = None
    is_default: bool = False


class CollectionResponse(BaseModel):
    """A collection as presented to clients."""

    id: str
    type: str
    heading: str | None = None
    description: str | None = None
    learn_more_url: str | None = None
    wallpapers: list[WallpaperResponse] = Field(default_factory=list)


class CollectionsResponse(BaseModel):
    collections: list[CollectionResponse] = Field(default_factory=list)


class SelectionRequest(BaseModel):
    """Request model for changing the current wallpaper."""

    wallpaper_id: str = Field(
        ...,
        min_length=1,
        description="Id of a wallpaper from the available collections",
        examples=["beach-hills"],
    )


class SyncResponse(BaseModel):
    """Result of an update check."""

    outcome: SyncOutcome
    marker: str | None = None
    errors: list[str] = Field(default_factory=list)


class CleanupResponse(BaseModel):
    deleted: int = 0
    failed: int = 0
    completed: bool = True


class StatusResponse(BaseModel):
    feature_available: bool
    sync_state: str


def _wallpaper_response(wallpaper: Wallpaper) -> WallpaperResponse:
    return WallpaperResponse(
        id=wallpaper.id,
        portrait_asset_id=wallpaper.portrait_asset_id,
        landscape_asset_id=wallpaper.landscape_asset_id,
        thumbnail_asset_id=wallpaper.thumbnail_asset_id,
        text_color=str(wallpaper.text_color) if wallpaper.text_color else None,
        card_color=str(wallpaper.card_color) if wallpaper.card_color else None,
        is_default=wallpaper.is_default,
    )


def _collection_response(collection: WallpaperCollection) -> CollectionResponse:
    return CollectionResponse(
        id=collection.id,
        type=collection.type.value,
        heading=collection.heading,
        description=collection.description,
        learn_more_url=collection.learn_more_url,
        wallpapers=[_wallpaper_response(w) for w in collection.wallpapers],
    )


async def _resolve(manager: WallpaperManager, wallpaper_id: str) -> Wallpaper:
    wallpaper = await manager.find_wallpaper(wallpaper_id)
    if wallpaper is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown wallpaper: {wallpaper_id}",
        )
    return wallpaper


@router.get("/collections", response_model=CollectionsResponse)
async def list_collections(manager: Manager) -> CollectionsResponse:
    """
    Get the available collections.

    The classic collection always comes first and starts with the default
    wallpaper.
    """
    collections = await manager.available_collections()
    return CollectionsResponse(collections=[_collection_response(c) for c in collections])


@router.get("/current", response_model=WallpaperResponse)
async def get_current_wallpaper(manager: Manager) -> WallpaperResponse:
    """Get the current wallpaper (the default if none was selected)."""
    return _wallpaper_response(await manager.current_wallpaper())


@router.put("/current", response_model=WallpaperResponse)
async def set_current_wallpaper(request: SelectionRequest, manager: Manager) -> WallpaperResponse:
    """
    Change the current wallpaper.

    Returns 404 for unknown wallpapers and 503 if the selection cannot be saved.
    """
    wallpaper = await _resolve(manager, request.wallpaper_id)

    try:
        await manager.set_current_wallpaper(wallpaper)
    except StorageError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    return _wallpaper_response(wallpaper)


@router.post("/{wallpaper_id}/assets", status_code=status.HTTP_204_NO_CONTENT)
async def fetch_wallpaper_assets(wallpaper_id: str, manager: Manager) -> None:
    """
    Download and cache a wallpaper's portrait and landscape images.

    Either both images are cached or neither is.
    """
    wallpaper = await _resolve(manager, wallpaper_id)

    try:
        await manager.fetch_assets_for(wallpaper)
    except AssetFetchError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e


@router.post("/check-for-updates", response_model=SyncResponse)
async def check_for_updates(manager: Manager) -> SyncResponse:
    """Refresh metadata from the server and verify cached thumbnails."""
    result = await manager.check_for_updates()
    return SyncResponse(
        outcome=result.outcome,
        marker=result.marker,
        errors=[e.message for e in result.errors],
    )


@router.post("/cleanup", response_model=CleanupResponse)
async def remove_unused_assets(manager: Manager) -> CleanupResponse:
    """Delete cached assets of wallpapers that are no longer reachable."""
    report = await manager.remove_unused_assets()
    if report is None:
        return CleanupResponse(completed=False)
    return CleanupResponse(deleted=len(report.deleted), failed=len(report.failures))


@router.get("/status", response_model=StatusResponse)
async def wallpaper_status(manager: Manager) -> StatusResponse:
    """Whether the wallpaper feature can currently be shown."""
    return StatusResponse(
        feature_available=await manager.feature_available(),
        sync_state=manager.synchronizer.state.value,
    )
