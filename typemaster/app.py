"""Application entry point and setup for the TypeMaster typing test."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from typemaster.core.leaderboard import LeaderboardStore
from typemaster.core.settings import load_settings
from typemaster.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load settings, open the main window and start the event loop."""
    configure_logging()
    settings = load_settings()
    logging.info(
        "Loaded settings: mode=%s difficulty=%s type=%s",
        settings.mode.value,
        settings.difficulty.value,
        settings.test_type.value,
    )

    app = QApplication(sys.argv)
    app.setApplicationName("TypeMaster")
    app.setApplicationDisplayName("TypeMaster")

    window = MainWindow(settings=settings, store=LeaderboardStore())
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(int(geometry.width() * 0.7), int(geometry.height() * 0.7))
    window.show()

    sys.exit(app.exec())
