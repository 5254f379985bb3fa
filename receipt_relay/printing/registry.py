"""Serial and USB candidates for the printer pickers."""

from __future__ import annotations

import logging
from typing import List, Optional

import serial.tools.list_ports
import usb.core
import usb.util

from ..core.models import NETWORK_FALLBACK_DEVICE, SerialPortInfo, UsbDeviceInfo

_LOGGER = logging.getLogger(__name__)

PRINTER_VENDOR_IDS: frozenset = frozenset({
    0x04B8,  # Seiko Epson Corp (TM-T88, TM-T20, TM-T70)
    0x04F9,  # Brother Industries
    0x03F0,  # HP
    0x04A9,  # Canon
    0x047E,  # Agere / some Zebra-branded OEM units
    0x0519,  # Star Micronics (TSP100, TSP650)
    0x0A5F,  # Zebra Technologies
    0x1504,  # Bixolon (SRP series)
    0x1D90,  # Citizen (CT-E351, CT-S310)
    0x2730,  # Citizen (CT-S2000/4000)
    0x0DD4,  # Custom Engineering (K80)
    0x0FE6,  # Generic POS-58/80 receipt printers
    0x0416,  # Winbond (generic Chinese POS printers)
})


def list_serial_ports() -> List[SerialPortInfo]:
    try:
        ports = serial.tools.list_ports.comports()
        return [SerialPortInfo(path=p.device, manufacturer=p.manufacturer or None) for p in ports]
    except Exception as e:
        _LOGGER.error("Error listing serial ports: %s", e)
        return []


def _usb_string(device, index) -> Optional[str]:
    if not index:
        return None
    try:
        return usb.util.get_string(device, index) or None
    except (usb.core.USBError, ValueError, NotImplementedError) as e:
        # Descriptor strings need the device opened; permissions often forbid it.
        _LOGGER.debug("Could not read USB string %s: %s", index, e)
        return None


def list_usb_devices() -> List[UsbDeviceInfo]:
    """
    Connected USB devices from known printer vendors.

    When nothing matches, or enumeration itself fails, the result is a single
    NETWORK_FALLBACK_DEVICE so the UI can offer network setup instead.
    """
    try:
        printers = []
        for device in usb.core.find(find_all=True) or ():
            if device.idVendor not in PRINTER_VENDOR_IDS:
                continue
            printers.append(UsbDeviceInfo(
                vendor_id=f"{device.idVendor:04x}",
                product_id=f"{device.idProduct:04x}",
                manufacturer=_usb_string(device, getattr(device, "iManufacturer", 0)),
                product=_usb_string(device, getattr(device, "iProduct", 0)),
            ))
    except Exception as e:
        _LOGGER.error("Error listing USB devices: %s", e)
        return [NETWORK_FALLBACK_DEVICE]

    if not printers:
        _LOGGER.info("No USB printers found, suggesting network printer configuration")
        return [NETWORK_FALLBACK_DEVICE]
    return printers
