# receipt_relay/ui/dialogs/__init__.py
"""
Dialog builders.

Re-exports only — implementations live in sibling modules.
"""
from .printer_config import show_printer_config_dialog

__all__ = [
    "show_printer_config_dialog",
]
