from __future__ import annotations

from typing import Optional

from PySide6 import QtCore

from .core.encoder import DEFAULT_LINE_WIDTH
from .printing.transports import TransportTimeouts

# -------------------------
# App constants / QSettings
# -------------------------
ORG_NAME = "ByteSized Labs"
APP_NAME = "Receipt Relay"
APP_VERSION = "0.3.0"


def _settings(settings: Optional[QtCore.QSettings]) -> QtCore.QSettings:
    return settings if settings is not None else QtCore.QSettings(ORG_NAME, APP_NAME)


def load_transport_timeouts(settings: Optional[QtCore.QSettings] = None) -> TransportTimeouts:
    s = _settings(settings)
    defaults = TransportTimeouts()
    return TransportTimeouts(
        serial=float(s.value("transport/serial_timeout", defaults.serial)),
        network=float(s.value("transport/network_timeout", defaults.network)),
        usb=float(s.value("transport/usb_timeout", defaults.usb)),
    )


def save_transport_timeouts(timeouts: TransportTimeouts, settings: Optional[QtCore.QSettings] = None) -> None:
    s = _settings(settings)
    s.setValue("transport/serial_timeout", float(timeouts.serial))
    s.setValue("transport/network_timeout", float(timeouts.network))
    s.setValue("transport/usb_timeout", float(timeouts.usb))


def load_line_width(settings: Optional[QtCore.QSettings] = None) -> int:
    s = _settings(settings)
    return max(1, int(s.value("printer/line_width", DEFAULT_LINE_WIDTH)))
