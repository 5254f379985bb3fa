from __future__ import annotations

import json
import logging
import os
from typing import Optional

from PySide6 import QtCore

from ..core.models import PrinterConfig
from .exceptions import ConfigStoreError, PrinterConfigError

_LOGGER = logging.getLogger(__name__)

CONFIG_FILENAME = "printer-config.json"
CONFIG_PATH_ENV = "RECEIPT_RELAY_CONFIG"


def default_config_path() -> str:
    """
    Where the printer record lives.

    Resolution order:
    1. RECEIPT_RELAY_CONFIG (if set)
    2. <AppDataLocation>/printer-config.json
    3. ~/.receipt_relay/printer-config.json when Qt reports no location
    """
    override = os.environ.get(CONFIG_PATH_ENV, "").strip()
    if override:
        return os.path.expanduser(override)
    data_dir = QtCore.QStandardPaths.writableLocation(
        QtCore.QStandardPaths.AppDataLocation
    )
    if not data_dir:
        data_dir = os.path.join(os.path.expanduser("~"), ".receipt_relay")
    return os.path.join(data_dir, CONFIG_FILENAME)


class ConfigStore:
    """
    The single persisted PrinterConfig, with an in-memory copy.

    ``load`` never raises: a missing, unreadable or undecodable file means
    "unconfigured". ``save`` replaces the file atomically and only updates
    the cache once the new file is in place.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or default_config_path()
        self._cache: Optional[PrinterConfig] = None
        self.load_error: Optional[PrinterConfigError] = None

    def load(self) -> Optional[PrinterConfig]:
        if self._cache is None:
            self._cache = self._read()
        return self._cache

    def save(self, cfg: PrinterConfig) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = self.path + ".tmp"
        try:
            os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(cfg.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            _LOGGER.error("Error saving printer config to %s: %s", self.path, e)
            try:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
            except OSError:
                _LOGGER.debug("Could not remove %s", tmp_path)
            raise ConfigStoreError(f"Could not save printer configuration: {e}") from e

        self._cache = cfg
        self.load_error = None
        _LOGGER.info("Saved %s printer configuration to %s", cfg.kind, self.path)

    def invalidate(self) -> None:
        """Forget the cached record so the next ``load`` reads the file again."""
        self._cache = None

    def _read(self) -> Optional[PrinterConfig]:
        self.load_error = None
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _LOGGER.error("Error loading printer config %s: %s", self.path, e)
            return None
        try:
            return PrinterConfig.from_dict(data)
        except PrinterConfigError as e:
            _LOGGER.error("Ignoring invalid printer config %s: %s", self.path, e)
            self.load_error = e
            return None
