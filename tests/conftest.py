"""
Shared fixtures: a headless QApplication and stand-ins for the serial port,
the TCP socket and the config file so no test touches real hardware.
"""
from __future__ import annotations

import os
import threading
import time

# Qt offscreen so these tests work in headless CI
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PySide6 import QtWidgets

from receipt_relay.core.models import SerialSettings
from receipt_relay.printing import transports
from receipt_relay.printing.config_store import ConfigStore


@pytest.fixture(scope="session")
def qapp():
    """Ensure a QApplication exists (needed for event loops and QThreads)."""
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app


# ---------------------------------------------------------------------------
# Serial
# ---------------------------------------------------------------------------

class FakeSerial:
    """Records what pyserial would have been asked to do."""

    fail_open: Exception | None = None
    fail_write: Exception | None = None

    def __init__(self, **kwargs):
        if type(self).fail_open is not None:
            raise type(self).fail_open
        self.kwargs = kwargs
        self.port = kwargs.get("port")
        self.writes: list[bytes] = []
        self.flushes = 0
        self.closed = False

    def write(self, data):
        if type(self).fail_write is not None:
            raise type(self).fail_write
        self.writes.append(bytes(data))
        return len(data)

    def flush(self):
        self.flushes += 1

    def close(self):
        self.closed = True


@pytest.fixture()
def fake_serial(monkeypatch):
    """Patch serial.Serial; the returned class keeps every port in ``opened``."""

    class _Serial(FakeSerial):
        fail_open = None
        fail_write = None
        opened: list[FakeSerial] = []

        def __init__(self, **kwargs):
            super().__init__(**kwargs)
            _Serial.opened.append(self)

    monkeypatch.setattr(transports.serial, "Serial", _Serial)
    return _Serial


# ---------------------------------------------------------------------------
# TCP
# ---------------------------------------------------------------------------

class FakeConnection:
    def __init__(self, address, timeout):
        self.address = address
        self.timeout = timeout
        self.sent = b""
        self.closed = False

    def settimeout(self, value):
        self.timeout = value

    def sendall(self, data):
        self.sent += bytes(data)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


@pytest.fixture()
def fake_socket(monkeypatch):
    """Patch socket.create_connection; returns the list of connections made."""
    connections: list[FakeConnection] = []

    def _create_connection(address, timeout=None):
        conn = FakeConnection(address, timeout)
        connections.append(conn)
        return conn

    monkeypatch.setattr(transports.socket, "create_connection", _create_connection)
    return connections


# ---------------------------------------------------------------------------
# Config store
# ---------------------------------------------------------------------------

@pytest.fixture()
def store(tmp_path):
    return ConfigStore(str(tmp_path / "printer-config.json"))


# ---------------------------------------------------------------------------
# Slow serial-like transport for queue tests
# ---------------------------------------------------------------------------

class SlowTransport(transports.BaseTransport):
    """
    Serial-like transport whose drain takes *delay* seconds.

    Records ``("open",)``, ``("start", data)``, ``("end", data)`` and
    ``("close",)`` in ``events``. A write in progress gives up as soon as
    the transport is closed, the way a real port errors out.
    """
    kind = "serial"
    settings_type = SerialSettings

    def __init__(self, timeouts=None, delay=0.02, fail_on=(), close_after=None):
        super().__init__(timeouts)
        self.delay = delay
        self.fail_on = set(fail_on)
        self.close_after = close_after
        self.events: list[tuple] = []
        self.threads: set[int] = set()
        self._lock = threading.Lock()
        self._active = 0
        self.max_active = 0

    def _open(self, settings):
        self.events.append(("open",))

    def _write(self, data):
        with self._lock:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        self.threads.add(threading.get_ident())
        self.events.append(("start", data))
        try:
            deadline = time.monotonic() + self.delay
            while time.monotonic() < deadline:
                if self.state == transports.STATE_CLOSED:
                    raise OSError("port closed during write")
                time.sleep(0.005)
            if data in self.fail_on:
                raise OSError("device unplugged")
        finally:
            self.events.append(("end", data))
            with self._lock:
                self._active -= 1
        if self.close_after is not None and data == self.close_after:
            self.state = transports.STATE_CLOSED

    def _close(self):
        self.events.append(("close",))


@pytest.fixture()
def slow_transport():
    """The SlowTransport class, for tests that build their own instances."""
    return SlowTransport
