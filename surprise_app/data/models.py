"""
Dataset models for the statistics service responses.

This module defines immutable structures for the five dataset kinds after
parsing from the service's JSON payloads. Numbers are passed through as the
service computed them; nothing here derives statistics.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class StatsSummary:
    """Aggregate release counts for one indicator."""
    total_releases: int = 0
    beat_expectation: int = 0
    miss_expectation: int = 0
    beat_pct: float = 0
    miss_pct: float = 0
    avg_surprise: str = "+0.00 pp"     # Preformatted by the service
    avg_surprise_raw: float = 0.0
    years: str = "2 years"             # Descriptive span, e.g. "10 years"


DEFAULT_STATS = StatsSummary()


@dataclass(frozen=True)
class ScatterPoint:
    """One release: surprise on x, market reaction on y."""
    date: str
    actual: float
    consensus: float
    x: float                # Surprise (actual - consensus)
    y: float                # Market reaction (%)
    direction: str          # Above, Below or In-line


@dataclass(frozen=True)
class ScatterStats:
    """Regression fit statistics for the scatter dataset."""
    r_squared: Optional[float] = None
    p_value: Optional[float] = None
    significant: bool = False


@dataclass(frozen=True)
class ScatterDataset:
    """Release points plus fit statistics."""
    points: tuple[ScatterPoint, ...]
    stats: Optional[ScatterStats] = None

    @property
    def is_empty(self) -> bool:
        return not self.points

    def by_direction(self, direction: str) -> tuple[ScatterPoint, ...]:
        return tuple(p for p in self.points if p.direction == direction)


@dataclass(frozen=True)
class ConditionalRow:
    """Average reaction of one asset to surprises in one direction."""
    asset: str
    direction: str
    avg_reaction: Optional[float]
    median_reaction: Optional[float] = None
    std_reaction: Optional[float] = None
    count: int = 0


@dataclass(frozen=True)
class ConditionalDataset:
    rows: tuple[ConditionalRow, ...]

    @property
    def is_empty(self) -> bool:
        return not self.rows


@dataclass(frozen=True)
class PathPoint:
    """Cumulative reaction at a given number of days after the release."""
    window_days: int
    reaction: float
    window: Optional[str] = None        # Service label, e.g. "T+1"


@dataclass(frozen=True)
class AveragePath:
    direction: str
    path: tuple[PathPoint, ...]


@dataclass(frozen=True)
class EventPath:
    date: str
    direction: str
    path: tuple[PathPoint, ...]


@dataclass(frozen=True)
class PathDataset:
    """Average and per-release reaction paths."""
    averages: tuple[AveragePath, ...]
    individual: tuple[EventPath, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.averages and not self.individual


@dataclass(frozen=True)
class HistogramDataset:
    """Raw surprise values with their summary moments."""
    values: tuple[float, ...]
    count: int
    mean: float
    std: float

    @property
    def is_empty(self) -> bool:
        return not self.values
