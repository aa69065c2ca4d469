"""
Wallpaper network client.

Fetches the metadata document and wallpaper images from the wallpaper CDN.
Every request is bounded by the configured timeout; a timeout surfaces as a
transient NetworkError like any other connectivity problem.
"""

import logging

import httpx

from wallsync.config import settings
from wallsync.models.errors import NetworkError, NetworkFailure
from wallsync.models.wallpaper import WallpaperMetadata
from wallsync.parsers.metadata import parse_metadata_bytes

logger = logging.getLogger(__name__)

METADATA_PATH = "/metadata/v1/wallpapers.json"
ASSET_PATH = "/assets/v1/{scope}/{name}.jpg"

# Status codes worth retrying later
_TRANSIENT_STATUS = frozenset({408, 425, 429})

USER_AGENT = "wallsync/1.0"


def _classify_status(status_code: int) -> NetworkFailure:
    if status_code in _TRANSIENT_STATUS or status_code >= 500:
        return NetworkFailure.TRANSIENT
    return NetworkFailure.PERMANENT


class WallpaperNetworkClient:
    """
    Client for the wallpaper CDN.

    Downloads the metadata document and individual wallpaper assets.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        """
        Initialize the network client.

        Args:
            base_url: CDN base URL. Defaults to settings.wallpaper_base_url.
            timeout: Request timeout in seconds. Defaults to settings.request_timeout.
        """
        self.base_url = (base_url or settings.wallpaper_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout

    def metadata_url(self) -> str:
        return f"{self.base_url}{METADATA_PATH}"

    def asset_url(self, name: str, scope: str) -> str:
        return f"{self.base_url}{ASSET_PATH.format(scope=scope, name=name)}"

    async def _get(self, url: str) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise NetworkError(
                _classify_status(status_code),
                f"Request failed: HTTP {status_code}",
                detail=url,
            ) from e
        except httpx.TimeoutException as e:
            raise NetworkError(NetworkFailure.TRANSIENT, "Request timed out", detail=url) from e
        except httpx.RequestError as e:
            raise NetworkError(
                NetworkFailure.TRANSIENT, f"Request failed: {e}", detail=url
            ) from e

    async def fetch_metadata(self) -> WallpaperMetadata:
        """
        Fetch the current metadata document.

        Returns:
            Parsed metadata. The marker is the response ETag when present.

        Raises:
            NetworkError: If the request fails
            DecodeError: If the document is malformed
        """
        response = await self._get(self.metadata_url())
        etag = response.headers.get("etag")
        metadata = parse_metadata_bytes(response.content, marker=etag)

        logger.info(
            "Fetched wallpaper metadata %s with %d collections",
            metadata.marker,
            len(metadata.collections),
        )
        return metadata

    async def fetch_asset(self, name: str, scope: str) -> bytes:
        """
        Fetch a single wallpaper image.

        Args:
            name: Asset name (e.g. "beach-hills_portrait")
            scope: Owning wallpaper id

        Returns:
            Raw image bytes

        Raises:
            NetworkError: If the request fails or the body is empty
        """
        url = self.asset_url(name, scope)
        response = await self._get(url)

        if not response.content:
            raise NetworkError(NetworkFailure.PERMANENT, "Empty asset response", detail=url)

        return response.content
