# src/mhwshopeditor/app.py

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from mhwshopeditor.gui.main_window import MainWindow
from mhwshopeditor.settings import Settings, default_settings_path


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings_path = default_settings_path()
    settings = Settings.load(settings_path)

    app = QApplication(sys.argv)
    win = MainWindow(settings, settings_path)
    win.show()
    return app.exec()
