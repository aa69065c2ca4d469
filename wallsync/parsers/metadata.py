"""
Wallpaper metadata document parser.

Decodes the JSON document served at /metadata/v1/wallpapers.json into
WallpaperMetadata, and serializes it back for the metadata store.

Format:
    {
      "last-updated-date": "2022-06-15",
      "collections": [
        {"id": "classic-firefox", "type": "classic",
         "available-locales": ["en-US"],
         "availability-range": {"start": "2022-06-01", "end": "2022-07-01"},
         "learn-more-url": null, "heading": null, "description": null,
         "wallpapers": [{"id": "beach-hills", "text-color": "0xFFFFFF"}]}
      ]
    }
"""

import hashlib
import json
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wallsync.config import CLASSIC_COLLECTION_ID
from wallsync.models.errors import DecodeError
from wallsync.models.wallpaper import (
    AvailabilityRange,
    CollectionType,
    Color,
    Wallpaper,
    WallpaperCollection,
    WallpaperMetadata,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WallpaperPayload(_WireModel):
    id: str = Field(min_length=1)
    text_color: str | None = Field(default=None, alias="text-color")
    card_color: str | None = Field(default=None, alias="card-color")

    @field_validator("text_color", "card_color")
    @classmethod
    def _valid_color(cls, value: str | None) -> str | None:
        if value is not None:
            Color.parse(value)
        return value


class AvailabilityPayload(_WireModel):
    start: date | None = None
    end: date | None = None


class CollectionPayload(_WireModel):
    id: str = Field(min_length=1)
    type: CollectionType | None = None
    wallpapers: list[WallpaperPayload] = Field(default_factory=list)
    available_locales: list[str] | None = Field(default=None, alias="available-locales")
    availability: AvailabilityPayload | None = Field(default=None, alias="availability-range")
    learn_more_url: str | None = Field(default=None, alias="learn-more-url")
    heading: str | None = None
    description: str | None = None


class MetadataPayload(_WireModel):
    last_updated: date | None = Field(default=None, alias="last-updated-date")
    collections: list[CollectionPayload] = Field(default_factory=list)


def _to_wallpaper(payload: WallpaperPayload) -> Wallpaper:
    return Wallpaper.from_id(
        payload.id,
        text_color=Color.parse(payload.text_color) if payload.text_color else None,
        card_color=Color.parse(payload.card_color) if payload.card_color else None,
    )


def _to_collection(payload: CollectionPayload) -> WallpaperCollection:
    collection_type = payload.type
    if collection_type is None:
        collection_type = (
            CollectionType.CLASSIC
            if payload.id == CLASSIC_COLLECTION_ID
            else CollectionType.STANDARD
        )

    availability = None
    if payload.availability is not None:
        availability = AvailabilityRange(
            start=payload.availability.start,
            end=payload.availability.end,
        )

    return WallpaperCollection(
        id=payload.id,
        wallpapers=tuple(_to_wallpaper(w) for w in payload.wallpapers),
        type=collection_type,
        availability=availability,
        available_locales=(
            frozenset(payload.available_locales) if payload.available_locales else None
        ),
        description=payload.description,
        heading=payload.heading,
        learn_more_url=payload.learn_more_url,
    )


def document_digest(payload: Any) -> str:
    """Stable SHA-256 of a JSON payload, used when the server sends no marker."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_metadata(payload: Any, marker: str | None = None) -> WallpaperMetadata:
    """
    Decode a metadata document.

    Args:
        payload: Decoded JSON object
        marker: Version token from the transport (e.g. ETag). When missing,
            the document's last-updated-date is used, then a content digest.

    Returns:
        WallpaperMetadata in server order

    Raises:
        DecodeError: If the document does not match the expected shape
    """
    if not isinstance(payload, dict):
        raise DecodeError(
            "Metadata document must be a JSON object",
            detail=f"got {type(payload).__name__}",
        )

    try:
        parsed = MetadataPayload.model_validate(payload)
    except (ValidationError, ValueError) as e:
        raise DecodeError("Malformed metadata document", detail=str(e)) from e

    if not marker:
        marker = parsed.last_updated.isoformat() if parsed.last_updated else None
    if not marker:
        marker = document_digest(payload)

    return WallpaperMetadata(
        marker=marker,
        collections=tuple(_to_collection(c) for c in parsed.collections),
        last_updated=parsed.last_updated,
    )


def parse_metadata_bytes(content: bytes, marker: str | None = None) -> WallpaperMetadata:
    """Decode a raw response body. Raises DecodeError on invalid JSON."""
    try:
        payload = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError("Metadata document is not valid JSON", detail=str(e)) from e

    return parse_metadata(payload, marker=marker)


def _serialize_collection(collection: WallpaperCollection) -> dict[str, Any]:
    availability = None
    if collection.availability is not None:
        availability = {
            "start": collection.availability.start.isoformat()
            if collection.availability.start
            else None,
            "end": collection.availability.end.isoformat() if collection.availability.end else None,
        }

    return {
        "id": collection.id,
        "type": collection.type.value,
        "available-locales": (
            sorted(collection.available_locales) if collection.available_locales else None
        ),
        "availability-range": availability,
        "learn-more-url": collection.learn_more_url,
        "heading": collection.heading,
        "description": collection.description,
        "wallpapers": [
            {
                "id": w.id,
                "text-color": str(w.text_color) if w.text_color else None,
                "card-color": str(w.card_color) if w.card_color else None,
            }
            for w in collection.wallpapers
        ],
    }


def serialize_metadata(metadata: WallpaperMetadata) -> dict[str, Any]:
    """Serialize to the wire format; parse_metadata(result, marker) round-trips."""
    return {
        "last-updated-date": metadata.last_updated.isoformat() if metadata.last_updated else None,
        "collections": [_serialize_collection(c) for c in metadata.collections],
    }
