"""
Main entry point for the Skywatch application.
Author: Oliver Ernster

This module sets up logging, loads the configuration, resolves the
observer's location and reports tonight's sky conditions and highlights.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from src.managers.app_config import ConfigManager, ConfigurationError
from src.managers.sky_session import SkySession, SkySessionFactory
from src.models.location_data import ResolverPhase
from src.services.highlight_engine import NO_HIGHLIGHTS_MESSAGE
from version import __app_name__, __version__, get_version_string


def setup_logging(level: str = "WARNING"):
    """Setup application logging with file and console output."""
    # Create log directory in user's home directory
    if sys.platform == "darwin":  # macOS
        log_dir = Path.home() / "Library" / "Logs" / __app_name__
    elif sys.platform == "win32":  # Windows
        log_dir = Path(os.environ.get("APPDATA", Path.home())) / __app_name__ / "logs"
    else:  # Linux and others
        log_dir = Path.home() / ".local" / "share" / __app_name__.lower() / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "skywatch.log"

    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(str(log_file)), logging.StreamHandler()],
        force=True,
    )

    # Set specific log levels for different modules
    root_level = getattr(logging, level, logging.WARNING)
    logging.getLogger("src.api").setLevel(root_level)
    logging.getLogger("src.managers").setLevel(root_level)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def report(session: SkySession) -> None:
    """Print the location and tonight's highlights."""
    print(session.location_state.get_display_text())

    view = session.get_view_state()
    if view.error:
        print(f"Error: {view.error}")
        return
    if view.data is None:
        print("No astronomy data available")
        return

    if view.data.moon_phase is not None:
        moon = view.data.moon_phase
        print(f"{moon.moon_phase_icon} {moon.phase_name} ({moon.illumination:.0%} illuminated)")

    print(f"Tonight's Highlights ({view.data.key.iso_date})")
    highlights = session.get_highlights()
    if not highlights:
        print(f"  {NO_HIGHLIGHTS_MESSAGE}")
    for highlight in highlights:
        print(f"  {highlight.icon} {highlight.title}: {highlight.description}")


async def run(session: SkySession, fallback_place) -> None:
    """Resolve the location and wait for the astronomy snapshot."""
    logger = logging.getLogger(__name__)
    try:
        await session.start()

        state = session.location_state
        if state.phase is ResolverPhase.FAILED and fallback_place:
            logger.warning(f"Automatic location failed, using configured place '{fallback_place}'")
            state = await session.submit_manual_location(fallback_place)

        if state.phase is ResolverPhase.RESOLVED:
            await session.manager.wait_for_pending_updates()
        else:
            logger.error(f"Location could not be resolved: {state.error or state.validation_error}")

        report(session)
    finally:
        await session.shutdown()


def main():
    """Main application entry point."""
    try:
        config_manager = ConfigManager()
        config = config_manager.load_config()
    except ConfigurationError as e:
        setup_logging()
        logging.getLogger(__name__).error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(config.log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting {get_version_string()}")

    # Signals of the managers need a core application
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    app.setApplicationName(__app_name__)
    app.setApplicationVersion(__version__)

    session = SkySessionFactory.create_from_config(config)
    try:
        asyncio.run(run(session, config.location.fallback_place))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
