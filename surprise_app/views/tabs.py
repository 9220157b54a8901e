"""Chart tab identifiers and their fixed copy."""

from enum import Enum
from typing import Union

from ..fetch.fetcher import DatasetKind


class ChartTab(str, Enum):
    """Mutually exclusive chart tabs."""
    SCATTER = "scatter"
    CONDITIONAL = "conditional"
    PATH = "path"
    HISTOGRAM = "histogram"


TAB_DATASETS: dict[ChartTab, DatasetKind] = {
    ChartTab.SCATTER: DatasetKind.SCATTER,
    ChartTab.CONDITIONAL: DatasetKind.CONDITIONAL,
    ChartTab.PATH: DatasetKind.PATH,
    ChartTab.HISTOGRAM: DatasetKind.HISTOGRAM,
}

TAB_LABELS: dict[ChartTab, str] = {
    ChartTab.SCATTER: "Surprise vs Reaction",
    ChartTab.CONDITIONAL: "Above vs Below",
    ChartTab.PATH: "Reaction Path",
    ChartTab.HISTOGRAM: "Distribution",
}

CHART_TITLES: dict[ChartTab, str] = {
    ChartTab.SCATTER: "Surprise Size vs Market Reaction",
    ChartTab.CONDITIONAL: "Average Reaction: Above vs Below Expectations",
    ChartTab.PATH: "Reaction Path Over Time (T+0 to T+5)",
    ChartTab.HISTOGRAM: "Distribution of Surprises",
}

READING_GUIDES: dict[ChartTab, str] = {
    ChartTab.SCATTER: (
        "Each dot is one release. X-axis = surprise magnitude, Y-axis = market move. "
        "A clear upward trend means bigger surprises cause bigger moves."
    ),
    ChartTab.CONDITIONAL: (
        "Bars show the average market move when data came in higher vs lower than expected. "
        "Error bars show statistical uncertainty. Stars indicate significance (*** p<0.01)."
    ),
    ChartTab.PATH: (
        "Lines show cumulative market moves from T+0 (release day) through T+5, split by "
        "surprise direction. Shows whether initial reactions stick or reverse."
    ),
    ChartTab.HISTOGRAM: (
        "Shows how often each size of surprise has occurred. Taller bars = more common "
        "outcomes. Helps gauge whether extreme surprises are rare or routine."
    ),
}

SURPRISE_UNITS = {
    "CPI": "pp",
    "NFP": "K jobs",
    "ISM PMI": "pts",
}

SIGNIFICANCE_LEGEND = "Significance levels: *** p<0.01 · ** p<0.05 · * p<0.1"


def coerce_tab(tab: Union[ChartTab, str]) -> ChartTab:
    return tab if isinstance(tab, ChartTab) else ChartTab(tab)
