from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Union

from ..printing.exceptions import PrinterConfigError
from .utils import is_share_path, normalize_hex_id


# ---------- Transport kinds ----------

SERIAL = "serial"
USB = "usb"
NETWORK = "network"
KINDS = (SERIAL, USB, NETWORK)

PARITIES = ("none", "even", "odd")
DATA_BITS = (5, 6, 7, 8)
STOP_BITS = (1, 1.5, 2)

DEFAULT_BAUD_RATE = 9600
DEFAULT_NETWORK_PORT = 9100


def _stop_bits(value: Any) -> Union[int, float]:
    try:
        f = float(value)
    except (TypeError, ValueError):
        raise PrinterConfigError(f"Invalid stop bits: {value!r}")
    if f not in STOP_BITS:
        raise PrinterConfigError(f"Stop bits must be one of 1, 1.5, 2 (got {value!r})")
    return 1.5 if f == 1.5 else int(f)


def _int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise PrinterConfigError(f"Invalid {what}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PrinterConfigError(f"Invalid {what}: {value!r}")


# ---------- Per-kind settings ----------

@dataclass(frozen=True)
class SerialSettings:
    port: str
    baud_rate: int = DEFAULT_BAUD_RATE
    data_bits: int = 8
    parity: str = "none"            # none|even|odd
    stop_bits: float = 1            # 1|1.5|2

    def __post_init__(self):
        port = (self.port or "").strip() if isinstance(self.port, str) else ""
        if not port:
            raise PrinterConfigError("Serial port is required.")
        baud = _int(self.baud_rate, "baud rate")
        if baud <= 0:
            raise PrinterConfigError(f"Baud rate must be positive (got {baud}).")
        bits = _int(self.data_bits, "data bits")
        if bits not in DATA_BITS:
            raise PrinterConfigError(f"Data bits must be 5, 6, 7 or 8 (got {bits}).")
        parity = str(self.parity or "none").lower()
        if parity not in PARITIES:
            raise PrinterConfigError(f"Parity must be none, even or odd (got {self.parity!r}).")

        object.__setattr__(self, "port", port)
        object.__setattr__(self, "baud_rate", baud)
        object.__setattr__(self, "data_bits", bits)
        object.__setattr__(self, "parity", parity)
        object.__setattr__(self, "stop_bits", _stop_bits(self.stop_bits))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "port": self.port,
            "baudRate": self.baud_rate,
            "dataBits": self.data_bits,
            "parity": self.parity,
            "stopBits": self.stop_bits,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "SerialSettings":
        return SerialSettings(
            port=d.get("port", ""),
            baud_rate=d.get("baudRate", DEFAULT_BAUD_RATE),
            data_bits=d.get("dataBits", 8),
            parity=d.get("parity", "none"),
            stop_bits=d.get("stopBits", 1),
        )


@dataclass(frozen=True)
class UsbSettings:
    vendor_id: str                  # 4 hex digits, lower-case
    product_id: str

    def __post_init__(self):
        try:
            vid = normalize_hex_id(self.vendor_id)
            pid = normalize_hex_id(self.product_id)
        except ValueError as e:
            raise PrinterConfigError(str(e)) from e
        object.__setattr__(self, "vendor_id", vid)
        object.__setattr__(self, "product_id", pid)

    @property
    def vendor_int(self) -> int:
        return int(self.vendor_id, 16)

    @property
    def product_int(self) -> int:
        return int(self.product_id, 16)

    def to_dict(self) -> Dict[str, Any]:
        return {"vendorId": self.vendor_id, "productId": self.product_id}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "UsbSettings":
        return UsbSettings(vendor_id=d.get("vendorId", ""), product_id=d.get("productId", ""))


@dataclass(frozen=True)
class NetworkSettings:
    address: str                    # host, IP, or \\server\share
    port: int = DEFAULT_NETWORK_PORT

    def __post_init__(self):
        address = self.address.strip() if isinstance(self.address, str) else ""
        if not address:
            raise PrinterConfigError("Network printer address is required.")
        port = _int(self.port, "port")
        if not 1 <= port <= 65535:
            raise PrinterConfigError(f"Port must be between 1 and 65535 (got {port}).")
        object.__setattr__(self, "address", address)
        object.__setattr__(self, "port", port)

    @property
    def is_share_path(self) -> bool:
        return is_share_path(self.address)

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "port": self.port}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "NetworkSettings":
        return NetworkSettings(address=d.get("address", ""), port=d.get("port", DEFAULT_NETWORK_PORT))


TransportSettings = Union[SerialSettings, UsbSettings, NetworkSettings]

_SETTINGS_TYPES = {
    SERIAL: SerialSettings,
    USB: UsbSettings,
    NETWORK: NetworkSettings,
}


# ---------- The persisted record ----------

@dataclass(frozen=True)
class PrinterConfig:
    """
    The single printer configuration record.

    Exactly one settings variant is carried and it always matches ``kind``.
    On disk it is stored as::

        {"type": "serial", "serial": {"port": "COM3", "baudRate": 9600, ...}}
    """
    kind: str
    settings: TransportSettings

    def __post_init__(self):
        expected = _SETTINGS_TYPES.get(self.kind)
        if expected is None:
            raise PrinterConfigError(f"Unknown interface: {self.kind}")
        if not isinstance(self.settings, expected):
            raise PrinterConfigError(
                f"{self.kind} configuration needs {expected.__name__}, "
                f"got {type(self.settings).__name__}"
            )

    @classmethod
    def serial(cls, port: str, baud_rate: int = DEFAULT_BAUD_RATE, data_bits: int = 8,
               parity: str = "none", stop_bits: float = 1) -> "PrinterConfig":
        return cls(SERIAL, SerialSettings(port, baud_rate, data_bits, parity, stop_bits))

    @classmethod
    def usb(cls, vendor_id: Union[int, str], product_id: Union[int, str]) -> "PrinterConfig":
        return cls(USB, UsbSettings(vendor_id, product_id))

    @classmethod
    def network(cls, address: str, port: int = DEFAULT_NETWORK_PORT) -> "PrinterConfig":
        return cls(NETWORK, NetworkSettings(address, port))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, self.kind: self.settings.to_dict()}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "PrinterConfig":
        if not isinstance(d, dict):
            raise PrinterConfigError("Printer configuration must be a JSON object.")
        kind = str(d.get("type") or "").lower()
        settings_type = _SETTINGS_TYPES.get(kind)
        if settings_type is None:
            raise PrinterConfigError(f"Unknown interface: {d.get('type')!r}")
        block = d.get(kind)
        if not isinstance(block, dict):
            raise PrinterConfigError(f"Invalid {kind} configuration")
        return PrinterConfig(kind, settings_type.from_dict(block))


DEFAULT_NETWORK_CONFIG = PrinterConfig.network("\\\\localhost\\receipt", DEFAULT_NETWORK_PORT)


# ---------- Enumeration results ----------

@dataclass(frozen=True)
class SerialPortInfo:
    path: str
    manufacturer: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UsbDeviceInfo:
    vendor_id: str
    product_id: str
    manufacturer: Optional[str] = None
    product: Optional[str] = None
    is_network_fallback: bool = False
    description: str = ""

    @property
    def label(self) -> str:
        if self.is_network_fallback:
            return self.description
        name = " ".join(p for p in (self.manufacturer, self.product) if p) or "USB Printer"
        return f"{name} ({self.vendor_id.upper()}:{self.product_id.upper()})"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


NETWORK_FALLBACK_DEVICE = UsbDeviceInfo(
    vendor_id="0000",
    product_id="0000",
    is_network_fallback=True,
    description="Network Printer (Windows Shared Printer)",
)
