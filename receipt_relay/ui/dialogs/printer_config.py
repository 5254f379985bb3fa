# receipt_relay/ui/dialogs/printer_config.py
"""Dialog for choosing and saving the printer connection."""
from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6 import QtWidgets

from ...core.models import (
    DATA_BITS,
    DEFAULT_BAUD_RATE,
    DEFAULT_NETWORK_PORT,
    NETWORK,
    PARITIES,
    SERIAL,
    STOP_BITS,
    USB,
    NetworkSettings,
    PrinterConfig,
    SerialSettings,
)
from ...printing.exceptions import PrintError, friendly_message

if TYPE_CHECKING:
    from ...service import PrinterService

BAUD_RATES = (2400, 4800, 9600, 19200, 38400, 57600, 115200)


def selected_serial_port(combo: QtWidgets.QComboBox) -> str:
    """
    Port path for an editable port combo.

    A listed entry maps to its device path; anything typed that does not
    match an entry is taken as the path itself.
    """
    text = combo.currentText().strip()
    idx = combo.findText(text)
    if idx >= 0 and combo.itemData(idx):
        return combo.itemData(idx)
    return text


def show_printer_config_dialog(
    service: PrinterService,
    parent: QtWidgets.QWidget | None = None,
) -> PrinterConfig | None:
    """
    Show a modal dialog to pick a serial, USB or network printer.

    Device lists come from *service* when the dialog opens. On OK the
    choice is saved through the service and the saved config is returned;
    *None* if cancelled.
    """
    current = service.get_config()

    d = QtWidgets.QDialog(parent)
    d.setWindowTitle("Printer Configuration")
    form = QtWidgets.QFormLayout(d)

    iface = QtWidgets.QComboBox()
    iface_map = {
        SERIAL: "Serial (RS-232)",
        USB: "USB Direct",
        NETWORK: "Network (LAN / Shared)",
    }
    iface_rev = {v: k for k, v in iface_map.items()}
    iface.addItems(iface_map.values())
    iface.setCurrentText(iface_map[current.kind if current else NETWORK])

    # ---- serial ----
    serial_cfg = current.settings if current and current.kind == SERIAL else None
    serial_port = QtWidgets.QComboBox()
    serial_port.setEditable(True)
    for info in service.list_serial_ports():
        label = f"{info.path} — {info.manufacturer}" if info.manufacturer else info.path
        serial_port.addItem(label, info.path)
    if serial_cfg:
        idx = serial_port.findData(serial_cfg.port)
        if idx >= 0:
            serial_port.setCurrentIndex(idx)
        else:
            serial_port.setEditText(serial_cfg.port)

    baud = QtWidgets.QComboBox()
    baud.setEditable(True)
    baud.addItems([str(b) for b in BAUD_RATES])
    baud.setCurrentText(str(serial_cfg.baud_rate if serial_cfg else DEFAULT_BAUD_RATE))

    data_bits = QtWidgets.QComboBox()
    data_bits.addItems([str(b) for b in DATA_BITS])
    data_bits.setCurrentText(str(serial_cfg.data_bits if serial_cfg else 8))

    parity = QtWidgets.QComboBox()
    parity.addItems(PARITIES)
    parity.setCurrentText(serial_cfg.parity if serial_cfg else "none")

    stop_bits = QtWidgets.QComboBox()
    stop_bits.addItems([str(b) for b in STOP_BITS])
    stop_bits.setCurrentText(str(serial_cfg.stop_bits if serial_cfg else 1))

    # ---- usb ----
    usb_devices = service.list_usb_devices()
    usb_combo = QtWidgets.QComboBox()
    for dev in usb_devices:
        usb_combo.addItem(dev.label)
    if current and current.kind == USB:
        for i, dev in enumerate(usb_devices):
            if (dev.vendor_id, dev.product_id) == (current.settings.vendor_id, current.settings.product_id):
                usb_combo.setCurrentIndex(i)
                break

    # ---- network ----
    net_cfg = current.settings if current and current.kind == NETWORK else None
    host = QtWidgets.QLineEdit(net_cfg.address if net_cfg else "")
    host.setPlaceholderText("192.168.1.50, printer.local or \\\\server\\share")
    port = QtWidgets.QSpinBox()
    port.setRange(1, 65535)
    port.setValue(int(net_cfg.port if net_cfg else DEFAULT_NETWORK_PORT))

    form.addRow("Interface:", iface)
    form.addRow("Serial port:", serial_port)
    form.addRow("Baud rate:", baud)
    form.addRow("Data bits:", data_bits)
    form.addRow("Parity:", parity)
    form.addRow("Stop bits:", stop_bits)
    form.addRow("USB printer:", usb_combo)
    form.addRow("Host / share:", host)
    form.addRow("Port:", port)

    serial_rows = (serial_port, baud, data_bits, parity, stop_bits)
    network_rows = (host, port)

    def _sync_rows():
        kind = iface_rev.get(iface.currentText(), NETWORK)
        for w in serial_rows:
            form.setRowVisible(w, kind == SERIAL)
        form.setRowVisible(usb_combo, kind == USB)
        for w in network_rows:
            form.setRowVisible(w, kind == NETWORK)

    iface.currentTextChanged.connect(lambda _t: _sync_rows())
    _sync_rows()

    btns = QtWidgets.QDialogButtonBox(
        QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel
    )
    form.addRow(btns)

    result: PrinterConfig | None = None

    def _apply():
        nonlocal result
        kind = iface_rev.get(iface.currentText(), NETWORK)
        try:
            if kind == SERIAL:
                path = selected_serial_port(serial_port)
                service.save_serial_config(SerialSettings(
                    port=path,
                    baud_rate=int(baud.currentText() or 0),
                    data_bits=int(data_bits.currentText()),
                    parity=parity.currentText(),
                    stop_bits=float(stop_bits.currentText()),
                ))
            elif kind == USB:
                idx = usb_combo.currentIndex()
                if idx < 0:
                    raise ValueError("No USB printer selected.")
                service.save_usb_config(usb_devices[idx])
            else:
                service.save_network_config(NetworkSettings(host.text().strip(), int(port.value())))
        except (PrintError, ValueError) as e:
            QtWidgets.QMessageBox.warning(d, "Printer Configuration", friendly_message(e))
            return
        result = service.get_config()
        d.accept()

    btns.accepted.connect(_apply)
    btns.rejected.connect(d.reject)
    d.exec()

    return result
