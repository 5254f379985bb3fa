"""
Tests for serial/USB enumeration. pyserial and pyusb are patched; no
hardware is touched.
"""
from __future__ import annotations

from types import SimpleNamespace

import pytest
import usb.core

from receipt_relay.core.models import NETWORK_FALLBACK_DEVICE
from receipt_relay.printing import registry


def _port(device, manufacturer=None):
    return SimpleNamespace(device=device, manufacturer=manufacturer)


def _usb(vid, pid, i_mfr=0, i_prod=0):
    return SimpleNamespace(idVendor=vid, idProduct=pid, iManufacturer=i_mfr, iProduct=i_prod)


class TestSerialPorts:
    def test_lists_ports_with_manufacturer(self, monkeypatch):
        monkeypatch.setattr(
            registry.serial.tools.list_ports,
            "comports",
            lambda: [_port("COM3", "FTDI"), _port("/dev/ttyUSB0", "")],
        )
        ports = registry.list_serial_ports()
        assert [p.path for p in ports] == ["COM3", "/dev/ttyUSB0"]
        assert ports[0].manufacturer == "FTDI"
        assert ports[1].manufacturer is None

    def test_enumeration_failure_is_empty_list(self, monkeypatch):
        def _boom():
            raise OSError("no access")

        monkeypatch.setattr(registry.serial.tools.list_ports, "comports", _boom)
        assert registry.list_serial_ports() == []


class TestUsbDevices:
    @pytest.fixture()
    def usb_devices(self, monkeypatch):
        devices = []
        strings = {}

        def _find(find_all=False, **kwargs):
            assert find_all
            return iter(devices)

        def _get_string(dev, index):
            if index not in strings:
                raise usb.core.USBError("Access denied")
            return strings[index]

        monkeypatch.setattr(registry.usb.core, "find", _find)
        monkeypatch.setattr(registry.usb.util, "get_string", _get_string)
        return devices, strings

    def test_only_printer_vendors_are_listed(self, usb_devices):
        devices, strings = usb_devices
        strings.update({1: "EPSON", 2: "TM-T20II"})
        devices.extend([
            _usb(0x046D, 0xC52B),              # Logitech receiver
            _usb(0x04B8, 0x0E15, 1, 2),        # Epson
            _usb(0x0519, 0x0003),              # Star, no strings
        ])

        found = registry.list_usb_devices()
        assert [(d.vendor_id, d.product_id) for d in found] == [("04b8", "0e15"), ("0519", "0003")]
        assert found[0].manufacturer == "EPSON"
        assert found[0].product == "TM-T20II"
        assert found[0].label == "EPSON TM-T20II (04B8:0E15)"
        assert found[1].manufacturer is None
        assert not any(d.is_network_fallback for d in found)

    def test_unreadable_strings_are_none(self, usb_devices):
        devices, _ = usb_devices
        devices.append(_usb(0x04B8, 0x0202, 1, 2))
        (dev,) = registry.list_usb_devices()
        assert dev.manufacturer is None
        assert dev.product is None

    def test_no_printers_gives_single_network_fallback(self, usb_devices):
        devices, _ = usb_devices
        devices.append(_usb(0x046D, 0xC52B))
        assert registry.list_usb_devices() == [NETWORK_FALLBACK_DEVICE]

    def test_empty_bus_gives_single_network_fallback(self, usb_devices):
        found = registry.list_usb_devices()
        assert len(found) == 1
        assert found[0].is_network_fallback
        assert found[0].description == "Network Printer (Windows Shared Printer)"

    def test_enumeration_failure_gives_network_fallback(self, monkeypatch):
        def _boom(**kwargs):
            raise usb.core.NoBackendError("No backend available")

        monkeypatch.setattr(registry.usb.core, "find", _boom)
        assert registry.list_usb_devices() == [NETWORK_FALLBACK_DEVICE]

    def test_vendor_allow_list(self):
        for vid in (0x04B8, 0x04F9, 0x03F0, 0x04A9, 0x047E):
            assert vid in registry.PRINTER_VENDOR_IDS
