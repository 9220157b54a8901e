"""
System failure error classifications for unrecoverable errors.

These exceptions represent failures that the client cannot work around on
its own, such as an unusable configuration or an export target that cannot
be written.
"""

from typing import Any, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable client failures."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ConfigurationError(SystemFailureError):
    """Configuration values that make the client unusable."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class ExportError(SystemFailureError):
    """A tabular export could not be written."""

    def __init__(self, message: str, filename: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.filename = filename
        self.target = target
