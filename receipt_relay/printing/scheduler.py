from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Union

from PySide6 import QtCore

from .context import PrinterContext
from .exceptions import friendly_message

_LOGGER = logging.getLogger(__name__)


@dataclass
class WriteQueueEntry:
    seq: int
    payload: bytes


class WorkerSignals(QtCore.QObject):
    drained = QtCore.Signal(int)        # seq
    failed = QtCore.Signal(int, str)    # seq, error message
    idle = QtCore.Signal()


class _SendWorker(QtCore.QObject):
    """Lives on the scheduler's worker thread and performs the blocking sends."""
    done = QtCore.Signal(int, str)      # seq, "" on success

    @QtCore.Slot(int, object, object)
    def send(self, seq, transport, payload):
        error = ""
        try:
            transport.send(payload)
        except Exception as e:
            _LOGGER.debug("Send %d failed", seq, exc_info=True)
            error = friendly_message(e)
        self.done.emit(seq, error)


class WriteScheduler(QtCore.QObject):
    """
    FIFO of raw payloads fed to the active transport one at a time.

    ``enqueue`` never blocks. A single ``_is_writing`` flag keeps at most one
    payload in flight; the next entry is dispatched only after the previous
    send has reported its drain (or its failure) back on this object's thread.
    Failed entries are logged and dropped, never retried.

    Must be used from the thread that owns the Qt event loop.
    """

    _dispatch = QtCore.Signal(int, object, object)

    def __init__(self, context: PrinterContext, parent: Optional[QtCore.QObject] = None):
        super().__init__(parent)
        self._context = context
        self._queue: Deque[WriteQueueEntry] = deque()
        self._is_writing = False
        self._in_flight: Optional[WriteQueueEntry] = None
        self._seq = 0
        self.signals = WorkerSignals()

        self._thread = QtCore.QThread()
        self._thread.setObjectName("printer-writer")
        self._worker = _SendWorker()
        self._worker.moveToThread(self._thread)
        self._dispatch.connect(self._worker.send)
        self._worker.done.connect(self._on_send_done)
        self._thread.start()

    # ---------------- public API ----------------

    def enqueue(self, payload: Union[bytes, bytearray, str]) -> bool:
        """
        Queue *payload* for the active transport.

        Returns False when it was dropped because no transport is open.
        Delivery failures are not reported to the caller.
        """
        data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        transport = self._context.transport
        if transport is None or not transport.is_open:
            _LOGGER.warning("Printer is not open; dropping %d byte payload", len(data))
            return False

        self._seq += 1
        self._queue.append(WriteQueueEntry(self._seq, data))
        _LOGGER.debug("Queued payload %d (%d bytes)", self._seq, len(data))
        self._process_queue()
        return True

    def pending(self) -> int:
        """Entries waiting, not counting the one in flight."""
        return len(self._queue)

    def is_idle(self) -> bool:
        return not self._is_writing and not self._queue

    def wait_until_idle(self, timeout_ms: int = 10000) -> bool:
        """Spin a local event loop until the queue drains or *timeout_ms* passes."""
        if self.is_idle():
            return True
        loop = QtCore.QEventLoop()
        timer = QtCore.QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(loop.quit)
        self.signals.idle.connect(loop.quit)
        timer.start(timeout_ms)
        try:
            loop.exec()
        finally:
            timer.stop()
            self.signals.idle.disconnect(loop.quit)
        return self.is_idle()

    def shutdown(self) -> None:
        """
        Stop the worker thread. Queued entries that never started are dropped.

        Blocks until a send already in flight returns. Close the transport
        first to make that send fail fast; its own timeout bounds the wait
        otherwise.
        """
        if self._queue:
            _LOGGER.warning("Dropping %d queued payload(s) on shutdown", len(self._queue))
            self._queue.clear()
        if self._thread.isRunning():
            if self._is_writing:
                _LOGGER.info("Waiting for payload %d to finish", self._in_flight.seq)
            self._thread.quit()
            self._thread.wait()

    # ---------------- queue processing ----------------

    def _process_queue(self) -> None:
        while not self._is_writing and self._queue:
            entry = self._queue.popleft()
            transport = self._context.transport
            if transport is None or not transport.is_open:
                message = "Printer transport closed before the payload was sent."
                _LOGGER.error("Payload %d dropped: %s", entry.seq, message)
                self.signals.failed.emit(entry.seq, message)
                continue

            self._is_writing = True
            self._in_flight = entry
            _LOGGER.debug("Sending payload %d to %s", entry.seq, transport.describe())
            self._dispatch.emit(entry.seq, transport, entry.payload)

        if self.is_idle():
            self.signals.idle.emit()

    @QtCore.Slot(int, str)
    def _on_send_done(self, seq: int, error: str) -> None:
        self._is_writing = False
        self._in_flight = None
        if error:
            _LOGGER.error("Error writing payload %d: %s", seq, error)
            self.signals.failed.emit(seq, error)
        else:
            _LOGGER.debug("Payload %d drained", seq)
            self.signals.drained.emit(seq)
        self._process_queue()
