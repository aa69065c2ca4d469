from wallsync.api.health import router as health_router
from wallsync.api.wallpapers import router as wallpapers_router

__all__ = [
    "health_router",
    "wallpapers_router",
]
