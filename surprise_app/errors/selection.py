"""
Parameter selection error classifications.

Raised when a caller tries to move the parameter store outside of the
enumerated domains of indicator, market or horizon.
"""

from typing import Any, Optional, Sequence


class InvalidSelection(ValueError):
    """A parameter was set to a value outside of its enumerated domain."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, allowed: Optional[Sequence[str]] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.field = field
        self.value = value
        self.allowed = tuple(allowed or ())
        self.context = context or {}
        self.recoverable = True
