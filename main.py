"""Batch Regex Replace — entry point.

Run with:
    python main.py
"""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

# Configure logging before any app imports
_level = logging.DEBUG if os.environ.get("BRR_DEBUG") == "1" else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName("Batch Regex Replace")
    app.setOrganizationName("BatchRegexReplace")
    app.setStyle("Fusion")

    from config.settings import AppSettings
    from app.theme import apply_theme
    settings = AppSettings()
    apply_theme(app, settings.dark_mode)

    from app.window import MainWindow
    window = MainWindow(settings)
    window.show()

    logger.info("Batch Regex Replace started.")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
