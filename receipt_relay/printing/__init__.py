# Error types only: core.models imports this package.

from .exceptions import (
    PrintError,
    PrinterConnectionError,
    PrinterConfigError,
    PrintJobError,
    ConfigStoreError,
    TransportOpenError,
    TransportSendError,
    map_exception,
    friendly_message,
)
