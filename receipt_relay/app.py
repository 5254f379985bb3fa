from __future__ import annotations
import logging
import os
import sys
from PySide6.QtWidgets import QApplication

from .service import PrinterService
from .settings import APP_NAME, APP_VERSION, ORG_NAME, load_line_width, load_transport_timeouts
from .ui.main_window import MainWindow

LOG_LEVEL_ENV = "RECEIPT_RELAY_LOG_LEVEL"


def configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
    )


def main():
    configure_logging()

    app = QApplication(sys.argv)
    app.setOrganizationName(ORG_NAME)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    service = PrinterService(
        timeouts=load_transport_timeouts(),
        line_width=load_line_width(),
    )
    app.aboutToQuit.connect(service.shutdown)

    win = MainWindow(service)
    win.show()
    sys.exit(app.exec())

if __name__ == '__main__':
    main()
