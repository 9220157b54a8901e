"""
State data models for dataset fetches and the loading state machine.

This module defines immutable records for the per-dataset fetch lifecycle
(PENDING → LOADED | FAILED) and the phases of the loading escalation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FetchStatus(str, Enum):
    """Lifecycle of one dataset request."""
    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"


class LoadingPhase(str, Enum):
    """Phases of the loading escalation state machine."""
    IDLE = "idle"
    LOADING = "loading"
    ESCALATED = "escalated"


@dataclass(frozen=True)
class FetchState(Generic[T]):
    """Fetch state for one dataset kind."""

    status: FetchStatus
    data: Optional[T] = None
    last_error: Optional[str] = None

    # Generation and dependency values the request was issued with
    generation: int = 0
    params: tuple[str, ...] = ()

    @property
    def settled(self) -> bool:
        """True once the request has either loaded or failed."""
        return self.status != FetchStatus.PENDING

    @property
    def failed(self) -> bool:
        return self.status == FetchStatus.FAILED

    @property
    def has_data(self) -> bool:
        return self.data is not None

    @classmethod
    def initial(cls, data: Optional[T] = None) -> "FetchState[T]":
        """State at mount, before the first request is issued."""
        return cls(status=FetchStatus.PENDING, data=data)

    def with_pending(self, generation: int, params: tuple[str, ...],
                     keep_data: bool) -> "FetchState[T]":
        """New pending state for a freshly issued request."""
        return FetchState(
            status=FetchStatus.PENDING,
            data=self.data if keep_data else None,
            last_error=None,
            generation=generation,
            params=params
        )

    def with_data(self, data: T) -> "FetchState[T]":
        return FetchState(
            status=FetchStatus.LOADED,
            data=data,
            last_error=None,
            generation=self.generation,
            params=self.params
        )

    def with_failure(self, error: str, fallback: Optional[T]) -> "FetchState[T]":
        return FetchState(
            status=FetchStatus.FAILED,
            data=fallback,
            last_error=error,
            generation=self.generation,
            params=self.params
        )
