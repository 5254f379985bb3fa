from __future__ import annotations

import logging
from typing import Callable, Optional

from ..core.models import PrinterConfig
from .transports import BaseTransport, TransportTimeouts, make_transport

_LOGGER = logging.getLogger(__name__)


class PrinterContext:
    """
    Owner of the single active transport.

    Only one transport handle is ever live: ``activate`` closes whatever is
    open before the next ``open`` begins.
    """

    def __init__(
        self,
        timeouts: Optional[TransportTimeouts] = None,
        factory: Callable[..., BaseTransport] = make_transport,
    ):
        self.timeouts = timeouts or TransportTimeouts()
        self._factory = factory
        self._transport: Optional[BaseTransport] = None
        self._config: Optional[PrinterConfig] = None

    @property
    def transport(self) -> Optional[BaseTransport]:
        return self._transport

    @property
    def config(self) -> Optional[PrinterConfig]:
        return self._config

    def is_open(self) -> bool:
        return self._transport is not None and self._transport.is_open

    def activate(self, cfg: PrinterConfig) -> BaseTransport:
        """Open the transport for *cfg* and make it the active one."""
        current = self._transport
        if current is not None and current.kind == cfg.kind:
            transport = current  # open() closes the old handle itself
        else:
            if current is not None:
                _LOGGER.info("Switching printer transport %s -> %s", current.kind, cfg.kind)
                current.close()
            transport = self._factory(cfg.kind, self.timeouts)

        self._transport = transport
        self._config = cfg
        try:
            transport.open(cfg.settings)
        except Exception:
            self._transport = None
            self._config = None
            raise
        return transport

    def deactivate(self) -> None:
        transport, self._transport = self._transport, None
        self._config = None
        if transport is not None:
            transport.close()
