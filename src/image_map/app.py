"""Application bootstrap for Image Map."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from .core.config import ConfigManager, DEFAULT_CONFIG_PATH
from .ui.main_window import MainWindow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

logger = logging.getLogger(__name__)


def create_application(argv: Optional[List[str]] = None) -> QApplication:
    """
    Create and configure the Qt application.

    Returns:
        Configured QApplication instance
    """
    app = QApplication(argv if argv is not None else sys.argv)
    app.setApplicationName("Image Map")
    app.setApplicationVersion("1.0.0")
    app.setOrganizationName("Image Map")
    return app


def create_main_window(config_path: Path = DEFAULT_CONFIG_PATH) -> MainWindow:
    """
    Create the main application window.

    Args:
        config_path: YAML configuration file to read settings from

    Returns:
        MainWindow instance
    """
    return MainWindow(ConfigManager(config_path))


def run() -> int:
    """
    Run the Image Map application.

    An optional first command-line argument names the config file.

    Returns:
        Exit code
    """
    logger.info("Starting Image Map")

    try:
        app = create_application()
        logger.info("QApplication created")

        args = app.arguments()[1:]
        config_path = Path(args[0]) if args else DEFAULT_CONFIG_PATH
        window = create_main_window(config_path)
        logger.info("MainWindow created")

        window.show()
        logger.info("MainWindow shown")

        return app.exec()

    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        return 1


def main() -> None:
    """Main entry point for the application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
