"""
Availability evaluation.

Turns a metadata document into the collections the UI may present right now.
Everything here is pure: the same metadata, date and locale always produce
the same list.

INVARIANTS:
- The result contains exactly one classic collection, placed first
- That collection's first wallpaper is the default wallpaper
- Non-classic collections keep their server order
"""

from dataclasses import replace
from datetime import date

from wallsync.config import CLASSIC_COLLECTION_ID, DEFAULT_WALLPAPER_ID
from wallsync.models.wallpaper import (
    CollectionType,
    Wallpaper,
    WallpaperCollection,
    WallpaperMetadata,
)


def default_wallpaper() -> Wallpaper:
    """The built-in wallpaper, implied whenever nothing else is selected."""
    return Wallpaper.from_id(DEFAULT_WALLPAPER_ID)


def default_collection() -> WallpaperCollection:
    """Synthetic classic collection holding only the default wallpaper."""
    return WallpaperCollection(
        id=CLASSIC_COLLECTION_ID,
        wallpapers=(default_wallpaper(),),
        type=CollectionType.CLASSIC,
    )


def is_available(collection: WallpaperCollection, now: date, locale: str) -> bool:
    """Check if a collection may be shown on `now` in `locale`."""
    return collection.is_available(now, locale)


def _with_default(classic: WallpaperCollection) -> WallpaperCollection:
    rest = tuple(w for w in classic.wallpapers if w.id != DEFAULT_WALLPAPER_ID)
    return replace(classic, wallpapers=(default_wallpaper(), *rest))


def effective_collections(
    metadata: WallpaperMetadata | None,
    now: date,
    locale: str,
) -> list[WallpaperCollection]:
    """
    Collections the UI should show.

    Args:
        metadata: Stored metadata, or None if none was ever fetched
        now: Current date
        locale: Current locale identifier (e.g. "en-US")

    Returns:
        The available collections with the default wallpaper injected into
        the classic collection, which is synthesized if none survives.
    """
    if metadata is None:
        return [default_collection()]

    available = [c for c in metadata.collections if c.is_available(now, locale)]

    classic = next((c for c in available if c.type is CollectionType.CLASSIC), None)
    others = [c for c in available if c.type is not CollectionType.CLASSIC]

    if classic is None:
        return [default_collection(), *others]

    return [_with_default(classic), *others]


def find_wallpaper(
    collections: list[WallpaperCollection], wallpaper_id: str
) -> Wallpaper | None:
    """Resolve a wallpaper id against a list of collections."""
    for collection in collections:
        for wallpaper in collection.wallpapers:
            if wallpaper.id == wallpaper_id:
                return wallpaper
    return None


def reachable_wallpaper_ids(
    collections: list[WallpaperCollection], selected_id: str | None = None
) -> set[str]:
    """
    Ids whose assets must be kept.

    Union of every wallpaper in the collections, the selected wallpaper and
    the default wallpaper.
    """
    reachable = {DEFAULT_WALLPAPER_ID}
    for collection in collections:
        reachable |= collection.wallpaper_ids()
    if selected_id:
        reachable.add(selected_id)
    return reachable
