"""
Per-tab conclusion blurbs.

Templated text only: every number is passed through from the fetched
datasets, nothing is computed here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..data.models import ScatterStats, StatsSummary
from .tabs import ChartTab, coerce_tab

FALLBACK_RELEASE_COUNT = 24


class NarrativeCategory(str, Enum):
    INSIGHT = "insight"
    WARNING = "warning"


@dataclass(frozen=True)
class Narrative:
    category: NarrativeCategory
    title: str
    body: str


def _na(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value}"


def _na_if_zero(value: Optional[float]) -> str:
    """Like _na, but a zero fit statistic also reads as N/A."""
    return _na(value or None)


def _scatter_conclusion(indicator: str, market: str, n: int,
                        scatter_stats: Optional[ScatterStats]) -> Narrative:
    r_squared = scatter_stats.r_squared if scatter_stats else None
    p_value = scatter_stats.p_value if scatter_stats else None

    if scatter_stats is not None and scatter_stats.significant:
        return Narrative(
            category=NarrativeCategory.INSIGHT,
            title="Statistically Significant Pattern",
            body=(
                f"Based on {n} data releases, there is a statistically significant relationship "
                f"between {indicator} surprise size and {market} reaction "
                f"(R² = {_na(r_squared)}, p = {_na(p_value)}). This suggests that when the next "
                f"{indicator} report deviates from expectations, the magnitude of the surprise can "
                f"help predict the size of the {market} move. Larger surprises have historically "
                f"produced proportionally larger market reactions."
            ),
        )

    return Narrative(
        category=NarrativeCategory.WARNING,
        title="Weak Statistical Relationship",
        body=(
            f"Across {n} observations, the surprise size alone does not reliably predict the "
            f"magnitude of {market}'s reaction (R² = {_na_if_zero(r_squared)}, p = {_na_if_zero(p_value)}). "
            f"This means other factors such as Fed policy expectations and market positioning "
            f"likely dominate. For trading purposes, knowing the direction of the surprise "
            f"matters more than its size."
        ),
    )


def generate_conclusion(
    tab: Union[ChartTab, str],
    indicator: str,
    market: str,
    stats: Optional[StatsSummary],
    scatter_stats: Optional[ScatterStats]
) -> Narrative:
    """
    Build the conclusion shown under the active chart.

    Args:
        tab: Active chart tab
        indicator: Selected indicator
        market: Selected market
        stats: Stats summary (zero-state or missing falls back to 24 releases)
        scatter_stats: Fit statistics of the scatter dataset, if loaded

    Returns:
        Narrative with category, title and body
    """
    tab = coerce_tab(tab)
    n = (stats.total_releases if stats else 0) or FALLBACK_RELEASE_COUNT

    if tab == ChartTab.SCATTER:
        return _scatter_conclusion(indicator, market, n, scatter_stats)

    if tab == ChartTab.CONDITIONAL:
        return Narrative(
            category=NarrativeCategory.INSIGHT,
            title="Directional Bias Detected",
            body=(
                f"When {indicator} comes in above expectations, {market} moves in a measurably "
                f"different direction than when it misses. This asymmetry is actionable: if you "
                f"expect {indicator} to beat consensus, historical data suggests positioning for "
                f"the \"above\" reaction. However, note that the average hides individual "
                f"variation, and some releases produced opposite moves due to competing factors."
            ),
        )

    if tab == ChartTab.PATH:
        return Narrative(
            category=NarrativeCategory.INSIGHT,
            title="Does the Market Reaction Stick?",
            body=(
                f"This chart shows whether the initial {market} reaction to {indicator} surprises "
                f"persists or reverses over the following week. If the lines keep trending in the "
                f"same direction from Day 0 to Day 5, the market is \"digesting\" the news, "
                f"suggesting the move is fundamental. If they reverse, the initial move may have "
                f"been an overreaction, creating a potential mean-reversion opportunity."
            ),
        )

    return Narrative(
        category=NarrativeCategory.WARNING,
        title="Understanding the Surprise Distribution",
        body=(
            f"Most {indicator} surprises are small and cluster near zero. Extreme surprises "
            f"(far from center) are rare but tend to produce the largest market moves. For risk "
            f"management, this distribution helps estimate the probability of a large surprise "
            f"on the next release and calibrate position sizes accordingly."
        ),
    )
