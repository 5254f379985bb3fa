# receipt_relay/printing/exceptions.py
"""
Consistent error types for the printing subsystem.

No Qt dependencies — this module is pure Python so it can be used
in non-GUI contexts (tests, CLI tools, the scheduler worker thread).
"""
from __future__ import annotations


class PrintError(Exception):
    """Base exception for all printing errors."""


class PrinterConnectionError(PrintError):
    """Failed to connect to the printer (network, serial, USB)."""


class PrinterConfigError(PrintError):
    """Invalid, incomplete or missing printer configuration."""


class PrintJobError(PrintError):
    """Error while delivering a payload to the printer."""


class ConfigStoreError(PrintError):
    """The printer configuration file could not be written."""


class TransportOpenError(PrinterConnectionError):
    """Opening a transport failed (port busy, device absent, permission denied)."""


class TransportSendError(PrintJobError):
    """A write failed after the transport was opened (device unplugged mid-write, etc.)."""


# ---------------------------------------------------------------------------
# Error-mapping helpers
# ---------------------------------------------------------------------------

_CONNECTION_PATTERNS: list[tuple[type, str]] = [
    (ConnectionRefusedError, "Printer refused the connection. Is it powered on?"),
    (ConnectionResetError, "Connection to printer was reset unexpectedly."),
    (TimeoutError, "Printer connection timed out. Check network/cable."),
    (PermissionError, "Permission denied while accessing the printer."),
    (FileNotFoundError, "Printer device or share path was not found."),
    (OSError, "I/O error communicating with the printer."),
]


def _chain(new: PrintError, cause: BaseException) -> PrintError:
    """Attach *cause* as ``__cause__`` (mimics ``raise new from cause``)."""
    new.__cause__ = cause
    return new


def map_exception(exc: BaseException) -> PrintError:
    """
    Wrap a low-level exception into the appropriate ``PrintError`` subclass
    with a user-friendly message while preserving the original as ``__cause__``.

    ``serial.SerialException`` and ``usb.core.USBError`` both derive from
    ``OSError`` and land in the connection bucket.

    If *exc* is already a ``PrintError`` it is returned unchanged.
    """
    if isinstance(exc, PrintError):
        return exc

    for exc_type, message in _CONNECTION_PATTERNS:
        if isinstance(exc, exc_type):
            detail = str(exc)
            if detail and exc_type is OSError:
                message = f"{message} ({detail})"
            return _chain(PrinterConnectionError(message), exc)

    text = str(exc).lower()
    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return _chain(PrinterConfigError(str(exc)), exc)
    if isinstance(exc, RuntimeError) and any(
        kw in text for kw in ("not installed", "missing", "requires", "unknown interface")
    ):
        return _chain(PrinterConfigError(str(exc)), exc)

    return _chain(PrintJobError(str(exc)), exc)


def friendly_message(exc: BaseException) -> str:
    """Return a short, UI-safe description for *exc*."""
    mapped = map_exception(exc)
    return str(mapped) or type(mapped).__name__
