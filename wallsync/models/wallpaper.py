from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from wallsync.config import DEFAULT_WALLPAPER_ID

_HEX_DIGITS = frozenset("0123456789abcdef")


@dataclass(frozen=True, slots=True)
class Color:
    """
    An RGB color stored as a lowercase six digit hex string.

    Accepts "0xRRGGBB", "#RRGGBB" or "RRGGBB".
    """

    hex: str

    @classmethod
    def parse(cls, value: str) -> "Color":
        raw = value.strip().lower()
        if raw.startswith("0x"):
            raw = raw[2:]
        elif raw.startswith("#"):
            raw = raw[1:]

        if len(raw) != 6 or not set(raw) <= _HEX_DIGITS:
            raise ValueError(f"Invalid color: {value!r}")

        return cls(hex=raw)

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (int(self.hex[0:2], 16), int(self.hex[2:4], 16), int(self.hex[4:6], 16))

    def __str__(self) -> str:
        return f"0x{self.hex.upper()}"


@dataclass(frozen=True, slots=True)
class Wallpaper:
    """
    A single wallpaper and the names of its cached assets.

    Attributes:
        id: Unique within its collection; also the scope its assets live under
        portrait_asset_id: Asset name of the portrait image
        landscape_asset_id: Asset name of the landscape image
        thumbnail_asset_id: Asset name of the preview shown in pickers
        text_color: Color for text drawn over the wallpaper
        card_color: Color for cards drawn over the wallpaper
    """

    id: str
    portrait_asset_id: str
    landscape_asset_id: str
    thumbnail_asset_id: str
    text_color: Color | None = None
    card_color: Color | None = None

    @classmethod
    def from_id(
        cls,
        wallpaper_id: str,
        text_color: Color | None = None,
        card_color: Color | None = None,
    ) -> "Wallpaper":
        """Build a wallpaper whose asset names derive from its id."""
        return cls(
            id=wallpaper_id,
            portrait_asset_id=f"{wallpaper_id}_portrait",
            landscape_asset_id=f"{wallpaper_id}_landscape",
            thumbnail_asset_id=f"{wallpaper_id}_thumbnail",
            text_color=text_color,
            card_color=card_color,
        )

    @property
    def is_default(self) -> bool:
        """The default wallpaper ships with the app and has nothing to download."""
        return self.id == DEFAULT_WALLPAPER_ID


class CollectionType(str, Enum):
    STANDARD = "standard"
    CLASSIC = "classic"


@dataclass(frozen=True, slots=True)
class AvailabilityRange:
    """Inclusive date range; a missing end is open."""

    start: date | None = None
    end: date | None = None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


def _normalize_locale(locale: str) -> str:
    return locale.replace("_", "-").lower()


@dataclass(frozen=True, slots=True)
class WallpaperCollection:
    """
    A group of wallpapers shown together.

    Availability is a pure function of the current date and locale against
    `availability` and `available_locales`. Missing (or empty) fields mean
    the collection is always available.
    """

    id: str
    wallpapers: tuple[Wallpaper, ...]
    type: CollectionType = CollectionType.STANDARD
    availability: AvailabilityRange | None = None
    available_locales: frozenset[str] | None = None
    description: str | None = None
    heading: str | None = None
    learn_more_url: str | None = None

    def is_available(self, now: date, locale: str) -> bool:
        if self.availability is not None and not self.availability.contains(now):
            return False

        if self.available_locales:
            wanted = _normalize_locale(locale)
            if not any(_normalize_locale(loc) == wanted for loc in self.available_locales):
                return False

        return True

    def wallpaper_ids(self) -> set[str]:
        return {wallpaper.id for wallpaper in self.wallpapers}


@dataclass(frozen=True, slots=True)
class WallpaperMetadata:
    """
    A remote metadata document.

    Attributes:
        marker: Opaque version token; equality means "same document"
        collections: Collections in server order
        last_updated: Date the server says the document was last changed
    """

    marker: str
    collections: tuple[WallpaperCollection, ...] = field(default_factory=tuple)
    last_updated: date | None = None


@dataclass(frozen=True, slots=True)
class CurrentSelection:
    """The persisted id of the wallpaper the user picked."""

    wallpaper_id: str


@dataclass(frozen=True, slots=True, order=True)
class AssetKey:
    """Location of a cached blob: the owning wallpaper id and asset name."""

    scope: str
    name: str
