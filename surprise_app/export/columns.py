"""
Column descriptors and row builders for the raw data tables.

Column specs are plain records passed explicitly to the serializer, so a
table's shape never depends on closures captured elsewhere.
"""

from dataclasses import asdict, dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from ..data.models import ConditionalDataset, HistogramDataset, PathDataset, ScatterDataset
from ..state.parameters import Parameters
from ..views.tabs import ChartTab, coerce_tab

Formatter = Callable[[Any], str]
Row = Mapping[str, Any]

MISSING_CELL = "—"


@dataclass(frozen=True)
class ColumnSpec:
    key: str
    label: str
    formatter: Optional[Formatter] = None


def fixed(digits: int) -> Formatter:
    """Formatter rendering a number with a fixed number of decimals."""
    def format_value(value: Any) -> str:
        return f"{float(value):.{digits}f}"
    return format_value


SCATTER_COLUMNS = (
    ColumnSpec("date", "Date"),
    ColumnSpec("actual", "Actual", fixed(2)),
    ColumnSpec("consensus", "Expected", fixed(2)),
    ColumnSpec("x", "Surprise", fixed(4)),
    ColumnSpec("y", "Market Move (%)", fixed(4)),
    ColumnSpec("direction", "Direction"),
)

CONDITIONAL_COLUMNS = (
    ColumnSpec("asset", "Asset"),
    ColumnSpec("direction", "Direction"),
    ColumnSpec("avg_reaction", "Avg Reaction (%)", fixed(4)),
    ColumnSpec("median_reaction", "Median (%)", fixed(4)),
    ColumnSpec("std_reaction", "Std Dev", fixed(4)),
    ColumnSpec("count", "N"),
)

PATH_COLUMNS = (
    ColumnSpec("date", "Date"),
    ColumnSpec("direction", "Direction"),
    ColumnSpec("window", "Window"),
    ColumnSpec("window_days", "Days"),
    ColumnSpec("reaction", "Cumulative Reaction (%)", fixed(4)),
)

HISTOGRAM_COLUMNS = (
    ColumnSpec("index", "#"),
    ColumnSpec("value", "Surprise Value", fixed(4)),
)


def scatter_rows(dataset: ScatterDataset) -> list[dict[str, Any]]:
    return [asdict(point) for point in dataset.points]


def conditional_rows(dataset: ConditionalDataset) -> list[dict[str, Any]]:
    return [asdict(row) for row in dataset.rows]


def path_rows(dataset: PathDataset) -> list[dict[str, Any]]:
    """One row per (release, day) of the individual reaction paths."""
    return [
        {
            "date": event.date,
            "direction": event.direction,
            "window": point.window,
            "window_days": point.window_days,
            "reaction": point.reaction,
        }
        for event in dataset.individual
        for point in event.path
    ]


def histogram_rows(dataset: HistogramDataset) -> list[dict[str, Any]]:
    return [{"index": i, "value": value} for i, value in enumerate(dataset.values, start=1)]


@dataclass(frozen=True)
class TabExport:
    """Inputs for exporting one tab's raw data."""
    title: str
    rows: list[dict[str, Any]]
    columns: tuple[ColumnSpec, ...]
    filename: str


def export_filename(tab: Union[ChartTab, str], params: Parameters) -> str:
    """File stem: indicator, then the tab's other dependency (if any), then the kind."""
    tab = coerce_tab(tab)
    if tab in (ChartTab.SCATTER, ChartTab.PATH):
        return f"{params.indicator}_{params.market}_{tab.value}"
    if tab == ChartTab.CONDITIONAL:
        return f"{params.indicator}_{params.horizon}_{tab.value}"
    return f"{params.indicator}_{tab.value}"


def build_tab_export(tab: Union[ChartTab, str], dataset: Any, params: Parameters) -> TabExport:
    """Rows, columns, title and filename for the raw data of a tab."""
    tab = coerce_tab(tab)
    filename = export_filename(tab, params)

    if tab == ChartTab.SCATTER:
        return TabExport("Raw Data — Surprise vs Reaction", scatter_rows(dataset),
                         SCATTER_COLUMNS, filename)
    if tab == ChartTab.CONDITIONAL:
        return TabExport("Raw Data — Above vs Below Averages", conditional_rows(dataset),
                         CONDITIONAL_COLUMNS, filename)
    if tab == ChartTab.PATH:
        return TabExport("Raw Data — Reaction Paths", path_rows(dataset),
                         PATH_COLUMNS, filename)
    return TabExport("Raw Data — Surprise Distribution", histogram_rows(dataset),
                     HISTOGRAM_COLUMNS, filename)


def display_cell(row: Row, column: ColumnSpec) -> str:
    """Cell text for the on-screen table; missing values show a dash."""
    value = row.get(column.key)
    if value is None:
        return MISSING_CELL
    return column.formatter(value) if column.formatter else str(value)


def render_table(title: str, rows: Sequence[Row],
                 columns: Sequence[ColumnSpec]) -> tuple[str, list[list[str]]]:
    """Heading and display rows for the collapsible raw data table."""
    heading = f"{title} ({len(rows)} rows)"
    body = [[column.label for column in columns]]
    body.extend([display_cell(row, column) for column in columns] for row in rows)
    return heading, body
