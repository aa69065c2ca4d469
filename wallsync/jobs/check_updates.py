"""
Scheduled job to refresh wallpaper metadata.

Checks the wallpaper server for new metadata, verifies cached thumbnails and
removes assets that are no longer reachable. Can be run as a standalone
script or called from a scheduler.
"""

import asyncio
import logging

from wallsync.db.database import init_db
from wallsync.services.manager import WallpaperManager, get_wallpaper_manager
from wallsync.services.synchronizer import SyncOutcome, SyncResult

logger = logging.getLogger(__name__)


async def run_update_check(manager: WallpaperManager | None = None) -> SyncResult:
    """
    Run one update check followed by unused asset cleanup.

    Args:
        manager: Manager to use. Defaults to the settings-based manager.

    Returns:
        Result of the update check
    """
    if manager is None:
        await init_db()
        manager = get_wallpaper_manager()

    if not manager.feature_gate():
        logger.info("Wallpapers disabled, skipping update check")
        return SyncResult(outcome=SyncOutcome.SKIPPED)

    result = await manager.check_for_updates()
    logger.info("Update check finished: %s (marker %s)", result.outcome.value, result.marker)
    for error in result.errors:
        logger.warning("Update check reported: %s", error.message)

    report = await manager.remove_unused_assets()
    if report is not None:
        logger.info(
            "Cleanup removed %d asset(s), %d failure(s)",
            len(report.deleted),
            len(report.failures),
        )

    return result


def main() -> None:
    """CLI entry point for running an update check."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_update_check())


if __name__ == "__main__":
    main()
