from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Optional

import serial  # pyserial
import usb.core  # pyusb
import usb.util

from ..core.encoder import build_test_payload
from ..core.models import (
    NETWORK,
    SERIAL,
    USB,
    NetworkSettings,
    SerialSettings,
    TransportSettings,
    UsbSettings,
)
from .exceptions import (
    PrinterConfigError,
    TransportOpenError,
    TransportSendError,
    friendly_message,
)

_LOGGER = logging.getLogger(__name__)

# Transport lifecycle: closed -> opening -> open -> closed
STATE_CLOSED = "closed"
STATE_OPENING = "opening"
STATE_OPEN = "open"


@dataclass
class TransportTimeouts:
    serial: float = 2.0
    network: float = 5.0
    usb: float = 5.0


class BaseTransport:
    """
    One printer link. At most one handle is held at a time.

    Subclasses implement ``_open``, ``_write`` and ``_close``; the state
    machine and error typing live here so every kind behaves the same.
    """
    kind: str = ""
    settings_type: type = object

    def __init__(self, timeouts: Optional[TransportTimeouts] = None):
        self.timeouts = timeouts or TransportTimeouts()
        self.state = STATE_CLOSED
        self.settings: Optional[TransportSettings] = None

    @property
    def is_open(self) -> bool:
        return self.state == STATE_OPEN

    def describe(self) -> str:
        return f"{self.kind} printer"

    def open(self, settings: TransportSettings) -> None:
        if not isinstance(settings, self.settings_type):
            raise PrinterConfigError(
                f"{self.kind} transport cannot open {type(settings).__name__}"
            )
        if self.state != STATE_CLOSED:
            self.close()

        self.settings = settings
        self.state = STATE_OPENING
        try:
            self._open(settings)
        except Exception as e:
            self.state = STATE_CLOSED
            _LOGGER.error("Failed to open %s: %s", self.describe(), e)
            raise TransportOpenError(f"Could not open {self.describe()}: {friendly_message(e)}") from e
        self.state = STATE_OPEN
        _LOGGER.info("Opened %s", self.describe())

    def send(self, data: bytes) -> None:
        """Deliver *data* and return once the link reports it drained."""
        if not self.is_open:
            raise TransportSendError(f"{self.describe()} is not open.")
        try:
            self._write(bytes(data))
        except Exception as e:
            raise TransportSendError(
                f"Write to {self.describe()} failed: {friendly_message(e)}"
            ) from e

    def close(self) -> None:
        if self.state == STATE_CLOSED:
            return
        try:
            self._close()
        except Exception as e:
            _LOGGER.warning("Error closing %s: %s", self.describe(), e)
        finally:
            self.state = STATE_CLOSED
        _LOGGER.info("Closed %s", self.describe())

    def test(self, payload: Optional[bytes] = None) -> None:
        if payload is None:
            payload = build_test_payload()
        self.send(payload)

    # -- per-kind hooks --

    def _open(self, settings) -> None:
        raise NotImplementedError

    def _write(self, data: bytes) -> None:
        raise NotImplementedError

    def _close(self) -> None:
        raise NotImplementedError


_PARITY = {
    "none": serial.PARITY_NONE,
    "even": serial.PARITY_EVEN,
    "odd": serial.PARITY_ODD,
}
_STOP_BITS = {
    1: serial.STOPBITS_ONE,
    1.5: serial.STOPBITS_ONE_POINT_FIVE,
    2: serial.STOPBITS_TWO,
}
_BYTE_SIZE = {
    5: serial.FIVEBITS,
    6: serial.SIXBITS,
    7: serial.SEVENBITS,
    8: serial.EIGHTBITS,
}


class SerialTransport(BaseTransport):
    kind = SERIAL
    settings_type = SerialSettings

    def __init__(self, timeouts: Optional[TransportTimeouts] = None):
        super().__init__(timeouts)
        self._ser = None

    def describe(self) -> str:
        if self.settings is None:
            return "serial printer"
        s = self.settings
        return f"serial printer {s.port} ({s.baud_rate} {s.data_bits}{s.parity[0].upper()}{s.stop_bits})"

    def _open(self, settings: SerialSettings) -> None:
        timeout = float(self.timeouts.serial)
        self._ser = serial.Serial(
            port=settings.port,
            baudrate=settings.baud_rate,
            bytesize=_BYTE_SIZE[settings.data_bits],
            parity=_PARITY[settings.parity],
            stopbits=_STOP_BITS[settings.stop_bits],
            timeout=timeout,
            write_timeout=timeout,
        )

    def _write(self, data: bytes) -> None:
        written = self._ser.write(data)
        if written is not None and written != len(data):
            raise OSError(f"short write: {written} of {len(data)} bytes")
        # flush() blocks until the OS output buffer has drained
        self._ser.flush()

    def _close(self) -> None:
        ser, self._ser = self._ser, None
        if ser is not None:
            ser.close()


class UsbTransport(BaseTransport):
    """Raw bulk-endpoint printer via PyUSB. Claims interface 0."""
    kind = USB
    settings_type = UsbSettings

    INTERFACE = 0

    def __init__(self, timeouts: Optional[TransportTimeouts] = None):
        super().__init__(timeouts)
        self._dev = None
        self._ep_out = None
        self._claimed = False

    def describe(self) -> str:
        if self.settings is None:
            return "USB printer"
        return f"USB printer {self.settings.vendor_id}:{self.settings.product_id}"

    def _open(self, settings: UsbSettings) -> None:
        dev = usb.core.find(idVendor=settings.vendor_int, idProduct=settings.product_int)
        if dev is None:
            raise RuntimeError("USB printer not found")
        self._dev = dev

        try:
            # Detach kernel driver if needed (Linux)
            try:
                if dev.is_kernel_driver_active(self.INTERFACE):
                    dev.detach_kernel_driver(self.INTERFACE)
            except NotImplementedError:
                pass  # not supported on this platform/backend

            try:
                dev.get_active_configuration()
            except usb.core.USBError:
                dev.set_configuration()
            intf = dev.get_active_configuration()[(self.INTERFACE, 0)]

            usb.util.claim_interface(dev, intf.bInterfaceNumber)
            self._claimed = True

            self._ep_out = usb.util.find_descriptor(
                intf,
                custom_match=lambda ep: usb.util.endpoint_direction(ep.bEndpointAddress)
                == usb.util.ENDPOINT_OUT,
            )
            if self._ep_out is None:
                raise RuntimeError("USB OUT endpoint not found")
        except Exception:
            self._release()
            raise

    def _write(self, data: bytes) -> None:
        written = self._ep_out.write(data, timeout=int(self.timeouts.usb * 1000))
        if written != len(data):
            raise OSError(f"short bulk transfer: {written} of {len(data)} bytes")

    def _close(self) -> None:
        self._release()

    def _release(self) -> None:
        """Release the claim, then the device handle. Each step is best-effort."""
        dev, self._dev = self._dev, None
        self._ep_out = None
        if dev is None:
            return
        if self._claimed:
            self._claimed = False
            try:
                usb.util.release_interface(dev, self.INTERFACE)
            except usb.core.USBError as e:
                _LOGGER.warning("Could not release USB interface: %s", e)
        try:
            usb.util.dispose_resources(dev)
        except usb.core.USBError as e:
            _LOGGER.warning("Could not close USB device: %s", e)


class NetworkTransport(BaseTransport):
    """
    TCP (raw 9100) or share-path printer.

    Holds no handle: each send connects, writes and closes, or writes the
    whole payload to the share path in one go.
    """
    kind = NETWORK
    settings_type = NetworkSettings

    def describe(self) -> str:
        if self.settings is None:
            return "network printer"
        if self.settings.is_share_path:
            return f"shared printer {self.settings.address}"
        return f"network printer {self.settings.address}:{self.settings.port}"

    def _open(self, settings: NetworkSettings) -> None:
        pass

    def _write(self, data: bytes) -> None:
        s = self.settings
        if s.is_share_path:
            with open(s.address, "wb") as f:
                f.write(data)
            return
        timeout = float(self.timeouts.network)
        with socket.create_connection((s.address, s.port), timeout=timeout) as conn:
            conn.settimeout(timeout)
            conn.sendall(data)

    def _close(self) -> None:
        pass


def make_transport(kind: str, timeouts: Optional[TransportTimeouts] = None) -> BaseTransport:
    """Build the transport for *kind*. The set of kinds is closed."""
    if kind == SERIAL:
        return SerialTransport(timeouts)
    if kind == USB:
        return UsbTransport(timeouts)
    if kind == NETWORK:
        return NetworkTransport(timeouts)
    raise PrinterConfigError(f"Unknown interface: {kind}")
