from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "wallsync"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./wallsync.db"

    wallpaper_base_url: str = "https://assets.wallsync.example.com"
    storage_dir: Path = Path(".cache/wallpapers")

    # Seconds; bounds every individual metadata or asset request
    request_timeout: float = 30.0
    max_concurrent_fetches: int = 4

    default_locale: str = "en-US"

    # Feature gate consulted before any wallpaper work is started
    wallpapers_enabled: bool = True


settings = Settings()


# =============================================================================
# WALLPAPER IDENTITIES
# =============================================================================

# The built-in wallpaper; always reachable, never downloaded
DEFAULT_WALLPAPER_ID = "fxDefault"

# Collections with this id are classic when the metadata omits "type"
CLASSIC_COLLECTION_ID = "classic-firefox"
