from __future__ import annotations

import logging

from PySide6 import QtCore, QtGui, QtWidgets

from ..printing.exceptions import PrintError, friendly_message
from ..service import PrinterService
from ..settings import APP_NAME, APP_VERSION
from .dialogs import show_printer_config_dialog

_LOGGER = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    """Printer setup, test print, and a box for sending raw text to the printer."""

    def __init__(self, service: PrinterService):
        super().__init__()
        self.service = service
        self._busy = False

        self.setWindowTitle(f"{APP_NAME} — {APP_VERSION}")
        self.resize(560, 380)

        self._build_toolbar()
        self._build_central()

        self.service.scheduler.signals.drained.connect(self._on_drained)
        self.service.scheduler.signals.failed.connect(self._on_failed)

        self._refresh_status()

    # ---------------- building ----------------

    def _build_toolbar(self):
        tb = self.addToolBar("Printer")
        tb.setMovable(False)

        self.act_configure = QtGui.QAction("Printer Settings…", self)
        self.act_configure.triggered.connect(self.configure_printer)
        tb.addAction(self.act_configure)

        self.act_connect = QtGui.QAction("Connect", self)
        self.act_connect.triggered.connect(self.connect_printer)
        tb.addAction(self.act_connect)

        self.act_test = QtGui.QAction("Test Print", self)
        self.act_test.triggered.connect(self.test_print)
        tb.addAction(self.act_test)

    def _build_central(self):
        w = QtWidgets.QWidget()
        lay = QtWidgets.QVBoxLayout(w)

        self.lbl_config = QtWidgets.QLabel()
        lay.addWidget(self.lbl_config)

        self.txt_raw = QtWidgets.QPlainTextEdit()
        self.txt_raw.setPlaceholderText("Text to send to the printer as-is")
        lay.addWidget(self.txt_raw, 1)

        self.btn_send = QtWidgets.QPushButton("Send")
        self.btn_send.clicked.connect(self.send_raw)
        lay.addWidget(self.btn_send, 0, QtCore.Qt.AlignRight)

        self.setCentralWidget(w)

    # ---------------- actions ----------------

    def configure_printer(self):
        if self._busy:
            return
        cfg = show_printer_config_dialog(self.service, self)
        if cfg is not None:
            self.statusBar().showMessage(f"Saved {cfg.kind} printer settings.", 3000)
        self._refresh_status()

    def connect_printer(self):
        if self._busy:
            return
        self._set_busy(True)
        try:
            self.service.connect()
        except PrintError as e:
            QtWidgets.QMessageBox.warning(self, "Connect", friendly_message(e))
        finally:
            self._set_busy(False)
        self._refresh_status()

    def test_print(self):
        # test_connection spins a nested event loop while queued writes
        # finish; the printer actions must not fire again meanwhile.
        if self._busy:
            return
        self._set_busy(True)
        QtWidgets.QApplication.setOverrideCursor(QtCore.Qt.WaitCursor)
        try:
            self.service.test_connection()
        except PrintError as e:
            QtWidgets.QApplication.restoreOverrideCursor()
            QtWidgets.QMessageBox.warning(self, "Test Print", friendly_message(e))
        else:
            QtWidgets.QApplication.restoreOverrideCursor()
            self.statusBar().showMessage("Test page sent.", 3000)
        finally:
            self._set_busy(False)
        self._refresh_status()

    def _set_busy(self, busy: bool):
        self._busy = busy
        for act in (self.act_configure, self.act_connect, self.act_test):
            act.setEnabled(not busy)

    def send_raw(self):
        text = self.txt_raw.toPlainText()
        if not text:
            return
        if not text.endswith("\n"):
            text += "\n"
        if self.service.write_raw(text):
            self.statusBar().showMessage("Queued.", 2000)
        else:
            self.statusBar().showMessage("Printer is not connected.", 3000)

    # ---------------- status ----------------

    def _on_drained(self, seq: int):
        self.statusBar().showMessage(f"Job {seq} printed.", 2000)

    def _on_failed(self, seq: int, message: str):
        self.statusBar().showMessage(f"Job {seq} failed: {message}", 5000)

    def _refresh_status(self):
        cfg = self.service.get_config()
        if cfg is None:
            text = "No printer configured."
        else:
            transport = self.service.context.transport
            state = "connected" if self.service.is_connected() else "not connected"
            target = transport.describe() if transport is not None else f"{cfg.kind} printer"
            text = f"{target} — {state}"
        self.lbl_config.setText(text)
        self.btn_send.setEnabled(self.service.is_connected())
