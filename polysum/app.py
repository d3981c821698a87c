"""Application entry point and setup for the Polysum shape game."""

import logging
import os
import random
import sys
from typing import Optional

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from polysum.core.config import ConfigError, load_config
from polysum.core.game import GameSession
from polysum.core.scoring import ScoreStore
from polysum.ui.main_window import MainWindow
from polysum.ui.scheduler import QtScheduler

SEED_ENV = "POLYSUM_SEED"
LOG_LEVEL_ENV = "POLYSUM_LOG_LEVEL"


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def make_rng() -> random.Random:
    """Session RNG, seeded from $POLYSUM_SEED when it holds an integer."""
    seed: Optional[int] = None
    raw = os.environ.get(SEED_ENV, "").strip()
    if raw:
        try:
            seed = int(raw)
        except ValueError:
            logging.warning(f"Ignoring non-integer {SEED_ENV}: {raw!r}")
    return random.Random(seed)


def run() -> None:
    """Validate the configuration, build the session, and start the main window."""
    configure_logging()
    try:
        config = load_config()
    except ConfigError as e:
        logging.error(f"Invalid configuration: {e}")
        sys.exit(1)

    app = QApplication(sys.argv)
    app.setApplicationName("Polysum")
    app.setApplicationDisplayName("Polysum")

    session = GameSession(
        config,
        scheduler=QtScheduler(app),
        store=ScoreStore(),
        rng=make_rng(),
    )
    window = MainWindow(session)
    try:
        session.new_game()
    except ConfigError as e:
        logging.error(f"Could not start a round: {e}")
        sys.exit(1)

    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(geometry.width(), 1000), min(geometry.height(), 720))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
