from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI

from wallsync.api import health_router, wallpapers_router
from wallsync.config import settings
from wallsync.db.database import init_db


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the metadata table and the blob store directory on startup."""
    await init_db()
    settings.storage_dir.mkdir(parents=True, exist_ok=True)
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("wallsync"),
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(wallpapers_router)
