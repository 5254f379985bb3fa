"""
Tests for printing error types and the low-level -> PrintError mapping.
"""
from __future__ import annotations

import pytest
import serial
import usb.core

from receipt_relay.printing.exceptions import (
    ConfigStoreError,
    PrintError,
    PrinterConfigError,
    PrinterConnectionError,
    PrintJobError,
    TransportOpenError,
    TransportSendError,
    friendly_message,
    map_exception,
)
from receipt_relay.printing.transports import make_transport


class TestExceptionMapping:
    def test_connection_refused_maps_to_connection_error(self):
        exc = ConnectionRefusedError("refused")
        mapped = map_exception(exc)
        assert isinstance(mapped, PrinterConnectionError)
        assert mapped.__cause__ is exc
        assert "powered on" in str(mapped).lower()

    def test_timeout_maps_to_connection_error(self):
        mapped = map_exception(TimeoutError("timed out"))
        assert isinstance(mapped, PrinterConnectionError)
        assert "timed out" in str(mapped).lower()

    def test_permission_error_has_its_own_message(self):
        mapped = map_exception(PermissionError(13, "Permission denied"))
        assert isinstance(mapped, PrinterConnectionError)
        assert "permission" in str(mapped).lower()

    def test_serial_exception_maps_to_connection_error(self):
        mapped = map_exception(serial.SerialException("could not open port 'COM9'"))
        assert isinstance(mapped, PrinterConnectionError)
        assert "COM9" in str(mapped)

    def test_usb_error_maps_to_connection_error(self):
        mapped = map_exception(usb.core.USBError("Resource busy", errno=16))
        assert isinstance(mapped, PrinterConnectionError)

    def test_value_error_maps_to_config_error(self):
        assert isinstance(map_exception(ValueError("bad value")), PrinterConfigError)

    def test_runtime_unknown_interface_maps_to_config_error(self):
        assert isinstance(map_exception(RuntimeError("Unknown interface: foo")), PrinterConfigError)

    def test_generic_exception_maps_to_job_error(self):
        assert isinstance(map_exception(RuntimeError("something weird happened")), PrintJobError)

    def test_print_error_passes_through(self):
        exc = TransportSendError("already mapped")
        assert map_exception(exc) is exc

    def test_friendly_message_returns_string(self):
        msg = friendly_message(ConnectionRefusedError("nope"))
        assert isinstance(msg, str)
        assert len(msg) > 0

    def test_friendly_message_never_empty(self):
        assert friendly_message(PrintJobError()) == "PrintJobError"

    def test_make_transport_unknown_interface_raises_config_error(self):
        with pytest.raises(PrinterConfigError):
            make_transport("carrier_pigeon")


class TestHierarchy:
    def test_open_and_send_errors_are_distinct(self):
        assert issubclass(TransportOpenError, PrinterConnectionError)
        assert issubclass(TransportSendError, PrintJobError)
        assert not issubclass(TransportOpenError, TransportSendError)
        assert not issubclass(TransportSendError, TransportOpenError)

    def test_everything_is_a_print_error(self):
        for cls in (
            PrinterConnectionError,
            PrinterConfigError,
            PrintJobError,
            ConfigStoreError,
            TransportOpenError,
            TransportSendError,
        ):
            assert issubclass(cls, PrintError)
        assert issubclass(PrintError, Exception)
