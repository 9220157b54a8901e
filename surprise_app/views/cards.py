"""Stat cards and loading messages."""

from dataclasses import dataclass
from typing import Optional

from ..data.models import DEFAULT_STATS, StatsSummary


@dataclass(frozen=True)
class StatCard:
    label: str
    value: str
    sub: str
    trend: Optional[str] = None     # "up" or "down" for beat/miss cards


@dataclass(frozen=True)
class LoadingMessage:
    message: str
    submessage: str


STATS_LOADING = LoadingMessage(
    message="Fetching market data...",
    submessage="The backend server may take 30-60 seconds to start on first visit.",
)

STATS_LOADING_ESCALATED = LoadingMessage(
    message="Still loading, almost there...",
    submessage=(
        "The free server is waking up. This only happens on the first visit; "
        "after this, everything loads instantly."
    ),
)

CHART_LOADING = LoadingMessage(
    message="Rendering chart...",
    submessage="Crunching the numbers for your analysis.",
)


def stat_cards(stats: Optional[StatsSummary]) -> list[StatCard]:
    """The four summary cards, falling back to the zero-state summary."""
    stats = stats or DEFAULT_STATS
    return [
        StatCard(label="Total Releases", value=str(stats.total_releases), sub=stats.years),
        StatCard(
            label="Beat Expectation",
            value=str(stats.beat_expectation),
            sub=f"{stats.beat_pct}%",
            trend="up",
        ),
        StatCard(
            label="Miss Expectation",
            value=str(stats.miss_expectation),
            sub=f"{stats.miss_pct}%",
            trend="down",
        ),
        StatCard(label="Avg Surprise", value=stats.avg_surprise, sub="mean deviation"),
    ]


def loading_message(escalated: bool) -> LoadingMessage:
    return STATS_LOADING_ESCALATED if escalated else STATS_LOADING
