"""
Tab dispatch.

Maps the active tab and the fetch state of the dataset it needs onto one of
three presentations. Switching tabs only re-runs this mapping; it never
issues a request, since every dataset is fetched eagerly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from ..data.models import HistogramDataset, ScatterDataset, StatsSummary
from ..fetch.fetcher import DatasetKind
from ..state.models import FetchState
from ..state.parameters import Parameters
from .cards import CHART_LOADING, LoadingMessage
from .narrative import Narrative, generate_conclusion
from .tabs import (
    CHART_TITLES,
    READING_GUIDES,
    SIGNIFICANCE_LEGEND,
    SURPRISE_UNITS,
    TAB_DATASETS,
    TAB_LABELS,
    ChartTab,
    coerce_tab,
)


class TabPresentation(str, Enum):
    CHART_LOADING = "chart_loading"
    CHART_READY = "chart_ready"
    CHART_ABSENT = "chart_absent"


@dataclass(frozen=True)
class TabView:
    """Everything needed to draw the active tab."""
    tab: ChartTab
    presentation: TabPresentation
    label: str
    title: str
    subtitle: str
    dataset: Any = None
    caption: Optional[str] = None
    narrative: Optional[Narrative] = None
    footnote: Optional[str] = None
    degraded: bool = False          # Settled as failed rather than empty
    loading_message: Optional[LoadingMessage] = None


def is_empty_dataset(data: Any) -> bool:
    return data is None or bool(getattr(data, "is_empty", False))


def build_footnote(tab: ChartTab, dataset: Any, indicator: str) -> Optional[str]:
    """Summary line printed under the chart, if the tab has one."""
    if tab == ChartTab.HISTOGRAM and isinstance(dataset, HistogramDataset):
        unit = SURPRISE_UNITS.get(indicator, "")
        return (
            f"Count: {dataset.count} releases · "
            f"Mean surprise: {dataset.mean:.2f} {unit} · "
            f"Std Dev: {dataset.std:.2f} {unit}"
        )

    if tab == ChartTab.SCATTER and isinstance(dataset, ScatterDataset) and dataset.stats:
        stats = dataset.stats
        verdict = "significant" if stats.significant else "not significant"
        return f"R² = {stats.r_squared}, p = {stats.p_value} ({verdict}). {SIGNIFICANCE_LEGEND}"

    return None


def dispatch_tab(
    tab: Union[ChartTab, str],
    state: FetchState,
    params: Parameters,
    narrative: Optional[Narrative] = None
) -> TabView:
    """
    Decide how the tab renders given its dataset's fetch state.

    - pending → CHART_LOADING
    - settled with data → CHART_READY (caption, narrative, footnote)
    - settled without data, or with an empty dataset → CHART_ABSENT
    """
    tab = coerce_tab(tab)
    common = {
        "tab": tab,
        "label": TAB_LABELS[tab],
        "title": CHART_TITLES[tab],
        "subtitle": f"{params.indicator} → {params.market} ({params.horizon})",
    }

    if not state.settled:
        return TabView(
            presentation=TabPresentation.CHART_LOADING,
            loading_message=CHART_LOADING,
            **common
        )

    if is_empty_dataset(state.data):
        return TabView(
            presentation=TabPresentation.CHART_ABSENT,
            degraded=state.failed,
            **common
        )

    return TabView(
        presentation=TabPresentation.CHART_READY,
        dataset=state.data,
        caption=READING_GUIDES[tab],
        narrative=narrative,
        footnote=build_footnote(tab, state.data, params.indicator),
        **common
    )


class TabDispatcher:
    """Renders the active tab from the full set of fetch states."""

    def render(
        self,
        tab: Union[ChartTab, str],
        states: Mapping[DatasetKind, FetchState],
        params: Parameters
    ) -> TabView:
        tab = coerce_tab(tab)
        state = states[TAB_DATASETS[tab]]

        narrative = None
        if state.settled and not is_empty_dataset(state.data):
            narrative = self.conclusion(tab, states, params)

        return dispatch_tab(tab, state, params, narrative)

    def conclusion(
        self,
        tab: Union[ChartTab, str],
        states: Mapping[DatasetKind, FetchState],
        params: Parameters
    ) -> Narrative:
        stats = states[DatasetKind.STATS].data
        scatter = states[DatasetKind.SCATTER].data
        return generate_conclusion(
            tab,
            params.indicator,
            params.market,
            stats if isinstance(stats, StatsSummary) else None,
            scatter.stats if isinstance(scatter, ScatterDataset) else None,
        )
