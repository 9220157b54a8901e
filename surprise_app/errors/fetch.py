"""
Dataset fetch error classifications.

These exceptions categorize what can go wrong between issuing a dataset
request and applying its result. All of them are recoverable: the fetcher
settles its state and the view degrades instead of failing.
"""

from typing import Any, Optional


class FetchFailure(Exception):
    """Network error or non-success HTTP status for a dataset request."""

    def __init__(self, message: str, kind: Optional[str] = None,
                 endpoint: Optional[str] = None, status_code: Optional[int] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.kind = kind
        self.endpoint = endpoint
        self.status_code = status_code
        self.context = context or {}
        self.recoverable = True


class MalformedPayloadError(FetchFailure):
    """A 2xx response whose body is not JSON or does not match the dataset shape."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class StaleResponseError(Exception):
    """A response arrived for a request that has since been superseded."""

    def __init__(self, message: str, kind: Optional[str] = None,
                 generation: Optional[int] = None,
                 latest_generation: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.generation = generation
        self.latest_generation = latest_generation
        self.recoverable = True
