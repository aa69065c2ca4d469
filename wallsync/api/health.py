"""
Health check endpoints.

/health answers as long as the process runs. /ready additionally checks the
two stores every wallpaper operation depends on: the metadata database and
the blob store directory holding the selection and cached images.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wallsync.config import settings
from wallsync.db.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str | None = None
    storage: str | None = None


def get_storage_dir() -> Path:
    """Blob store root checked by the readiness probe."""
    return settings.storage_dir


def _storage_writable(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.W_OK | os.X_OK)


async def _database_connected(session: AsyncSession) -> bool:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Metadata database unavailable: %s", e)
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe; touches neither store."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    storage_dir: Annotated[Path, Depends(get_storage_dir)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 unless the metadata database answers and the blob store
    directory exists and is writable.
    """
    database_ok = await _database_connected(session)
    storage_ok = await asyncio.to_thread(_storage_writable, storage_dir)

    if not storage_ok:
        logger.warning("Blob store directory %s missing or read-only", storage_dir)

    result = HealthResponse(
        status="ready" if database_ok and storage_ok else "not ready",
        database="connected" if database_ok else "disconnected",
        storage="writable" if storage_ok else "unavailable",
    )
    if result.status != "ready":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result
