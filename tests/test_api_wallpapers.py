"""Tests for wallpaper API endpoints."""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from wallsync.main import app
from wallsync.models.wallpaper import AssetKey
from wallsync.services.manager import WallpaperManager, get_wallpaper_manager

TODAY = date(2022, 6, 15)


@pytest.fixture
def manager(network, blob_store, metadata_store) -> WallpaperManager:
    return WallpaperManager(
        network,
        blob_store,
        metadata_store,
        feature_gate=lambda: True,
        clock=lambda: TODAY,
        locale="en-US",
    )


@pytest.fixture
async def client(manager: WallpaperManager):
    """Provide an async test client with an overridden wallpaper manager."""
    app.dependency_overrides[get_wallpaper_manager] = lambda: manager

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


class TestCollectionsEndpoint:
    async def test_lists_default_before_sync(self, client: AsyncClient) -> None:
        """Before any sync only the default wallpaper is offered."""
        response = await client.get("/wallpapers/collections")

        assert response.status_code == 200
        collections = response.json()["collections"]
        assert len(collections) == 1
        assert collections[0]["type"] == "classic"
        assert collections[0]["wallpapers"][0]["id"] == "fxDefault"
        assert collections[0]["wallpapers"][0]["is_default"] is True

    async def test_lists_synced_collections(self, client: AsyncClient) -> None:
        await client.post("/wallpapers/check-for-updates")

        response = await client.get("/wallpapers/collections")

        collections = response.json()["collections"]
        assert [c["id"] for c in collections] == ["classic-firefox", "summer-2022"]
        beach = collections[0]["wallpapers"][1]
        assert beach["id"] == "beach-hills"
        assert beach["text_color"] == "0xADD8E6"


class TestCurrentEndpoints:
    async def test_get_current_defaults(self, client: AsyncClient) -> None:
        response = await client.get("/wallpapers/current")

        assert response.status_code == 200
        assert response.json()["id"] == "fxDefault"

    async def test_put_current(self, client: AsyncClient) -> None:
        await client.post("/wallpapers/check-for-updates")

        response = await client.put("/wallpapers/current", json={"wallpaper_id": "sunset"})

        assert response.status_code == 200
        assert response.json()["id"] == "sunset"
        assert (await client.get("/wallpapers/current")).json()["id"] == "sunset"

    async def test_put_unknown_returns_404(self, client: AsyncClient) -> None:
        response = await client.put("/wallpapers/current", json={"wallpaper_id": "nope"})

        assert response.status_code == 404

    async def test_put_empty_id_rejected(self, client: AsyncClient) -> None:
        response = await client.put("/wallpapers/current", json={"wallpaper_id": ""})

        assert response.status_code == 422

    async def test_put_storage_failure_returns_503(
        self, client: AsyncClient, blob_store
    ) -> None:
        """A selection that cannot be saved maps to 503."""
        blob_store.fail_selection_writes = True

        response = await client.put("/wallpapers/current", json={"wallpaper_id": "fxDefault"})

        assert response.status_code == 503


class TestAssetsEndpoint:
    async def test_fetch_assets(self, client: AsyncClient, blob_store) -> None:
        await client.post("/wallpapers/check-for-updates")

        response = await client.post("/wallpapers/sunset/assets")

        assert response.status_code == 204
        assert await blob_store.has_asset(AssetKey("sunset", "sunset_landscape"))

    async def test_network_failure_returns_502(self, client: AsyncClient, network) -> None:
        await client.post("/wallpapers/check-for-updates")
        network.assets.pop(("sunset", "sunset_landscape"))

        response = await client.post("/wallpapers/sunset/assets")

        assert response.status_code == 502
        assert "sunset" in response.json()["detail"]

    async def test_unknown_wallpaper_returns_404(self, client: AsyncClient) -> None:
        response = await client.post("/wallpapers/nope/assets")

        assert response.status_code == 404


class TestSyncEndpoints:
    async def test_check_for_updates(self, client: AsyncClient) -> None:
        response = await client.post("/wallpapers/check-for-updates")

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "updated"
        assert data["marker"] == "v1"
        assert data["errors"] == []

    async def test_check_for_updates_reports_errors(self, client: AsyncClient, network) -> None:
        network.assets.pop(("sunrise", "sunrise_thumbnail"))

        data = (await client.post("/wallpapers/check-for-updates")).json()

        assert data["outcome"] == "updated"
        assert data["errors"] == ["Failed to verify 1 thumbnail(s)"]

    async def test_cleanup(self, client: AsyncClient, blob_store) -> None:
        await blob_store.put_asset(AssetKey("retired", "retired_thumbnail"), b"x")

        response = await client.post("/wallpapers/cleanup")

        assert response.status_code == 200
        assert response.json() == {"deleted": 1, "failed": 0, "completed": True}

    async def test_status(self, client: AsyncClient) -> None:
        before = (await client.get("/wallpapers/status")).json()
        await client.post("/wallpapers/check-for-updates")
        after = (await client.get("/wallpapers/status")).json()

        assert before == {"feature_available": True, "sync_state": "idle"}
        assert after["feature_available"] is True
