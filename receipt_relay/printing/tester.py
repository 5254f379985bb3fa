from __future__ import annotations

import logging
from typing import Callable, Optional

from ..core.encoder import DEFAULT_LINE_WIDTH, build_test_payload
from ..core.models import PrinterConfig
from .config_store import ConfigStore
from .context import PrinterContext
from .exceptions import PrinterConfigError, PrintJobError
from .scheduler import WriteScheduler

_LOGGER = logging.getLogger(__name__)


class ConnectionTester:
    """
    Prints the diagnostic page on the configured printer.

    This is the one path where failures reach the caller: every problem
    (no config, bad config, open failure, write failure) is raised as a
    ``PrintError``.
    """

    def __init__(
        self,
        store: ConfigStore,
        context: PrinterContext,
        scheduler: Optional[WriteScheduler] = None,
        payload_builder: Callable[..., bytes] = build_test_payload,
        line_width: int = DEFAULT_LINE_WIDTH,
        idle_timeout_ms: int = 10000,
    ):
        self._store = store
        self._context = context
        self._scheduler = scheduler
        self._build = payload_builder
        self.line_width = line_width
        self.idle_timeout_ms = idle_timeout_ms

    def test(self) -> bool:
        cfg = self._resolve_config()

        # The transport is about to be reopened; let queued writes finish first.
        if self._scheduler is not None and not self._scheduler.wait_until_idle(self.idle_timeout_ms):
            raise PrintJobError("Pending print jobs did not finish; try again.")

        payload = self._build(cfg, line_width=self.line_width)
        transport = self._context.activate(cfg)
        transport.test(payload)
        _LOGGER.info("Test print sent to %s", transport.describe())
        return True

    def _resolve_config(self) -> PrinterConfig:
        cfg = self._store.load()
        if cfg is not None:
            return cfg
        if self._store.load_error is not None:
            raise self._store.load_error
        raise PrinterConfigError("No printer configuration found")
