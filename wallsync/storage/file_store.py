"""Filesystem blob store

Layout under the root directory:

    selection.json            {"wallpaper_id": "..."}
    legacy-selection.json     {"wallpaper": "..."} (written by old releases)
    .migrated                 marker file, present once migration has run
    assets/<scope>/<name>     raw asset bytes

Every write goes to a temporary file first and is moved into place with
os.replace, so readers never observe a half written file.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

from wallsync.models.errors import StorageError, StorageFailure
from wallsync.models.wallpaper import AssetKey, CurrentSelection
from wallsync.storage.base import BlobStore

logger = logging.getLogger(__name__)

SELECTION_FILE = "selection.json"
LEGACY_SELECTION_FILE = "legacy-selection.json"
MIGRATION_MARKER = ".migrated"
ASSETS_DIR = "assets"


def _check_component(value: str, what: str) -> None:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise StorageError(StorageFailure.WRITE, f"Invalid asset {what}: {value!r}")


def _atomic_write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileBlobStore(BlobStore):
    """Blob store backed by a local directory"""

    def __init__(self, root: str | Path):
        """
        Initialize file storage

        Args:
            root: Directory holding the selection record and assets
        """
        self.root = Path(root)
        self.assets_dir = self.root / ASSETS_DIR

    def _asset_path(self, key: AssetKey) -> Path:
        _check_component(key.scope, "scope")
        _check_component(key.name, "name")
        return self.assets_dir / key.scope / key.name

    # --- Current selection ---

    def _read_selection(self) -> CurrentSelection | None:
        path = self.root / SELECTION_FILE
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CurrentSelection(wallpaper_id=str(data["wallpaper_id"]))
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(
                StorageFailure.READ, "Failed to read current selection", detail=str(e)
            ) from e

    async def get_current_selection(self) -> CurrentSelection | None:
        return await asyncio.to_thread(self._read_selection)

    def _write_selection(self, selection: CurrentSelection) -> None:
        payload = json.dumps({"wallpaper_id": selection.wallpaper_id}).encode("utf-8")
        try:
            _atomic_write(self.root / SELECTION_FILE, payload)
        except OSError as e:
            raise StorageError(
                StorageFailure.WRITE, "Failed to write current selection", detail=str(e)
            ) from e

    async def set_current_selection(self, selection: CurrentSelection) -> None:
        await asyncio.to_thread(self._write_selection, selection)

    # --- Assets ---

    def _write_asset(self, key: AssetKey, data: bytes) -> None:
        path = self._asset_path(key)
        try:
            _atomic_write(path, data)
        except OSError as e:
            raise StorageError(
                StorageFailure.WRITE, f"Failed to store asset {key.scope}/{key.name}", detail=str(e)
            ) from e

    async def put_asset(self, key: AssetKey, data: bytes) -> None:
        await asyncio.to_thread(self._write_asset, key, data)
        logger.debug("Stored asset %s/%s (%d bytes)", key.scope, key.name, len(data))

    def _read_asset(self, key: AssetKey) -> bytes:
        path = self._asset_path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise StorageError(
                StorageFailure.NOT_FOUND, f"Asset not found: {key.scope}/{key.name}"
            ) from e
        except OSError as e:
            raise StorageError(
                StorageFailure.READ, f"Failed to read asset {key.scope}/{key.name}", detail=str(e)
            ) from e

    async def get_asset(self, key: AssetKey) -> bytes:
        return await asyncio.to_thread(self._read_asset, key)

    async def has_asset(self, key: AssetKey) -> bool:
        path = self._asset_path(key)
        return await asyncio.to_thread(path.is_file)

    def _list_keys(self) -> list[AssetKey]:
        if not self.assets_dir.exists():
            return []
        try:
            keys = [
                AssetKey(scope=scope_dir.name, name=asset.name)
                for scope_dir in self.assets_dir.iterdir()
                if scope_dir.is_dir()
                for asset in scope_dir.iterdir()
                if asset.is_file() and not asset.name.startswith(".")
            ]
        except OSError as e:
            raise StorageError(
                StorageFailure.READ, "Failed to list cached assets", detail=str(e)
            ) from e
        return sorted(keys)

    async def list_asset_keys(self) -> list[AssetKey]:
        return await asyncio.to_thread(self._list_keys)

    def _remove_asset(self, key: AssetKey) -> None:
        path = self._asset_path(key)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise StorageError(
                StorageFailure.NOT_FOUND, f"Asset not found: {key.scope}/{key.name}"
            ) from e
        except OSError as e:
            raise StorageError(
                StorageFailure.WRITE, f"Failed to delete asset {key.scope}/{key.name}", detail=str(e)
            ) from e

        # Drop the scope directory once its last asset is gone
        try:
            path.parent.rmdir()
        except OSError:
            pass

    async def delete_asset(self, key: AssetKey) -> None:
        await asyncio.to_thread(self._remove_asset, key)

    # --- Legacy layout ---

    def _read_legacy(self) -> str | None:
        path = self.root / LEGACY_SELECTION_FILE
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(
                StorageFailure.READ, "Failed to read legacy selection", detail=str(e)
            ) from e
        wallpaper = data.get("wallpaper") if isinstance(data, dict) else None
        return str(wallpaper) if wallpaper else None

    async def get_legacy_selection(self) -> str | None:
        return await asyncio.to_thread(self._read_legacy)

    def _clear_legacy(self) -> None:
        try:
            (self.root / LEGACY_SELECTION_FILE).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(
                StorageFailure.WRITE, "Failed to remove legacy selection", detail=str(e)
            ) from e

    async def clear_legacy_selection(self) -> None:
        await asyncio.to_thread(self._clear_legacy)

    async def is_migrated(self) -> bool:
        return await asyncio.to_thread((self.root / MIGRATION_MARKER).exists)

    def _write_marker(self) -> None:
        try:
            _atomic_write(self.root / MIGRATION_MARKER, b"")
        except OSError as e:
            raise StorageError(
                StorageFailure.WRITE, "Failed to record migration", detail=str(e)
            ) from e

    async def mark_migrated(self) -> None:
        await asyncio.to_thread(self._write_marker)
