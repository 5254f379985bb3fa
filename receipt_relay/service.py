"""
PrinterService: the operations the UI is allowed to call.

Owns the config store, the active-transport context, the write scheduler
and the connection tester. Nothing outside this object touches a transport
directly.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .core.encoder import DEFAULT_LINE_WIDTH
from .core.models import (
    DEFAULT_NETWORK_CONFIG,
    NETWORK,
    SERIAL,
    USB,
    NetworkSettings,
    PrinterConfig,
    SerialPortInfo,
    SerialSettings,
    UsbDeviceInfo,
    UsbSettings,
)
from .printing import registry
from .printing.config_store import ConfigStore
from .printing.context import PrinterContext
from .printing.exceptions import PrinterConfigError
from .printing.scheduler import WriteScheduler
from .printing.tester import ConnectionTester
from .printing.transports import TransportTimeouts

_LOGGER = logging.getLogger(__name__)


class PrinterService:
    def __init__(
        self,
        store: Optional[ConfigStore] = None,
        context: Optional[PrinterContext] = None,
        timeouts: Optional[TransportTimeouts] = None,
        line_width: int = DEFAULT_LINE_WIDTH,
    ):
        self.store = store or ConfigStore()
        self.context = context or PrinterContext(timeouts)
        self.scheduler = WriteScheduler(self.context)
        self.tester = ConnectionTester(
            self.store, self.context, self.scheduler, line_width=line_width
        )

    # ---------------- enumeration ----------------

    def list_serial_ports(self) -> List[SerialPortInfo]:
        return registry.list_serial_ports()

    def list_usb_devices(self) -> List[UsbDeviceInfo]:
        return registry.list_usb_devices()

    # ---------------- configuration ----------------

    def get_config(self) -> Optional[PrinterConfig]:
        return self.store.load()

    def save_config(self, cfg: PrinterConfig) -> bool:
        self.store.save(cfg)
        return True

    def save_serial_config(self, config: Union[SerialSettings, Mapping[str, Any]]) -> bool:
        if not isinstance(config, SerialSettings):
            config = SerialSettings.from_dict(dict(config))
        return self.save_config(PrinterConfig(SERIAL, config))

    def save_usb_config(self, config: Union[UsbSettings, UsbDeviceInfo, Mapping[str, Any]]) -> bool:
        """Save a USB printer; the network fallback entry saves the default share instead."""
        if isinstance(config, UsbDeviceInfo):
            if config.is_network_fallback:
                return self.save_config(DEFAULT_NETWORK_CONFIG)
            config = UsbSettings(config.vendor_id, config.product_id)
        elif not isinstance(config, UsbSettings):
            data: Dict[str, Any] = dict(config)
            if data.get("isNetworkFallback") or data.get("is_network_fallback"):
                return self.save_config(DEFAULT_NETWORK_CONFIG)
            config = UsbSettings.from_dict(data)
        return self.save_config(PrinterConfig(USB, config))

    def save_network_config(self, config: Union[NetworkSettings, Mapping[str, Any]]) -> bool:
        if not isinstance(config, NetworkSettings):
            config = NetworkSettings.from_dict(dict(config))
        return self.save_config(PrinterConfig(NETWORK, config))

    # ---------------- printing ----------------

    def connect(self) -> None:
        """Open the transport for the stored config so ``write_raw`` has somewhere to go."""
        cfg = self.store.load()
        if cfg is None:
            raise self.store.load_error or PrinterConfigError("No printer configuration found")
        self.context.activate(cfg)

    def disconnect(self) -> None:
        self.context.deactivate()

    def is_connected(self) -> bool:
        return self.context.is_open()

    def test_connection(self) -> bool:
        return self.tester.test()

    def write_raw(self, payload: Union[bytes, bytearray, str]) -> bool:
        return self.scheduler.enqueue(payload)

    def shutdown(self) -> None:
        # Close before joining the worker so a blocked write fails fast.
        if self.context.is_open():
            _LOGGER.info("Closing printer on shutdown")
        self.context.deactivate()
        self.scheduler.shutdown()
