"""
Error classification for the analysis client.

Selection errors are rejected at the store, fetch errors are settled at the
fetcher boundary, and system failures propagate to the caller.
"""

from .fetch import (
    FetchFailure,
    MalformedPayloadError,
    StaleResponseError,
)
from .selection import InvalidSelection
from .system_failures import (
    ConfigurationError,
    ExportError,
    SystemFailureError,
)

__all__ = [
    # Selection
    "InvalidSelection",
    # Fetch
    "FetchFailure",
    "MalformedPayloadError",
    "StaleResponseError",
    # System Failures
    "SystemFailureError",
    "ConfigurationError",
    "ExportError",
]
