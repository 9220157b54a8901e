"""
Parsers for the statistics service JSON payloads.

This module decodes response bodies and converts them into the dataset models
with type conversion and shape checks. Any mismatch raises
MalformedPayloadError so the fetcher can settle the dataset as failed.
"""

from typing import Any, Callable, Optional

import orjson

from ..errors import MalformedPayloadError
from .models import (
    AveragePath,
    ConditionalDataset,
    ConditionalRow,
    EventPath,
    HistogramDataset,
    PathDataset,
    PathPoint,
    ScatterDataset,
    ScatterPoint,
    ScatterStats,
    StatsSummary,
)


def parse_json_payload(raw_data: bytes) -> Any:
    """
    Decode a raw JSON response body.

    Args:
        raw_data: Raw response bytes

    Returns:
        Decoded JSON value

    Raises:
        MalformedPayloadError: If the body is not valid JSON
    """
    try:
        return orjson.loads(raw_data)
    except orjson.JSONDecodeError as e:
        raise MalformedPayloadError(
            f"Invalid JSON: {e}",
            raw_data=raw_data[:200].decode("utf-8", errors="replace"),
            expected_format="json"
        ) from e


def _require(payload: Any, key: str, expected: str) -> Any:
    if not isinstance(payload, dict):
        raise MalformedPayloadError(
            f"Expected object for {expected}, got {type(payload).__name__}",
            expected_format=expected
        )
    if key not in payload:
        raise MalformedPayloadError(
            f"Missing field '{key}' in {expected}",
            expected_format=expected
        )
    return payload[key]


def _as_list(value: Any, expected: str) -> list:
    if not isinstance(value, list):
        raise MalformedPayloadError(
            f"Expected list for {expected}, got {type(value).__name__}",
            expected_format=expected
        )
    return value


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedPayloadError(
            f"Field '{name}' must be numeric, got {value!r}",
            expected_format=name
        )
    return value


def _optional_number(value: Any, name: str) -> Optional[float]:
    return None if value is None else _number(value, name)


def parse_stats(payload: Any) -> StatsSummary:
    """Parse the /api/stats payload."""
    expected = "stats summary"
    return StatsSummary(
        total_releases=int(_number(_require(payload, "totalReleases", expected), "totalReleases")),
        beat_expectation=int(_number(_require(payload, "beatExpectation", expected), "beatExpectation")),
        miss_expectation=int(_number(_require(payload, "missExpectation", expected), "missExpectation")),
        beat_pct=_number(payload.get("beatPct", 0), "beatPct"),
        miss_pct=_number(payload.get("missPct", 0), "missPct"),
        avg_surprise=str(payload.get("avgSurprise", "+0.00 pp")),
        avg_surprise_raw=_number(payload.get("avgSurpriseRaw", 0.0), "avgSurpriseRaw"),
        years=str(payload.get("years", "")),
    )


def parse_scatter(payload: Any) -> ScatterDataset:
    """Parse the /api/scatter payload."""
    expected = "scatter dataset"
    points = []
    for raw in _as_list(_require(payload, "points", expected), "scatter points"):
        points.append(ScatterPoint(
            date=str(_require(raw, "date", "scatter point")),
            actual=_number(_require(raw, "actual", "scatter point"), "actual"),
            consensus=_number(_require(raw, "consensus", "scatter point"), "consensus"),
            x=_number(_require(raw, "x", "scatter point"), "x"),
            y=_number(_require(raw, "y", "scatter point"), "y"),
            direction=str(_require(raw, "direction", "scatter point")),
        ))

    stats = None
    raw_stats = payload.get("stats")
    if raw_stats is not None:
        if not isinstance(raw_stats, dict):
            raise MalformedPayloadError("Scatter stats must be an object", expected_format=expected)
        stats = ScatterStats(
            r_squared=_optional_number(raw_stats.get("rSquared"), "rSquared"),
            p_value=_optional_number(raw_stats.get("pValue"), "pValue"),
            significant=bool(raw_stats.get("significant", False)),
        )

    return ScatterDataset(points=tuple(points), stats=stats)


def parse_conditional(payload: Any) -> ConditionalDataset:
    """Parse the /api/conditional payload (a bare list of rows)."""
    rows = []
    for raw in _as_list(payload, "conditional dataset"):
        median = raw.get("medianReaction", raw.get("medReaction")) if isinstance(raw, dict) else None
        rows.append(ConditionalRow(
            asset=str(_require(raw, "asset", "conditional row")),
            direction=str(_require(raw, "direction", "conditional row")),
            avg_reaction=_optional_number(_require(raw, "avgReaction", "conditional row"), "avgReaction"),
            median_reaction=_optional_number(median, "medianReaction"),
            std_reaction=_optional_number(raw.get("stdReaction"), "stdReaction"),
            count=int(_number(raw.get("count", 0), "count")),
        ))
    return ConditionalDataset(rows=tuple(rows))


def _parse_path_points(raw_path: Any) -> tuple[PathPoint, ...]:
    points = []
    for raw in _as_list(raw_path, "reaction path"):
        window = raw.get("window") if isinstance(raw, dict) else None
        points.append(PathPoint(
            window_days=int(_number(_require(raw, "windowDays", "path point"), "windowDays")),
            reaction=_number(_require(raw, "reaction", "path point"), "reaction"),
            window=None if window is None else str(window),
        ))
    return tuple(points)


def parse_path(payload: Any) -> PathDataset:
    """Parse the /api/path payload."""
    expected = "path dataset"
    averages = tuple(
        AveragePath(
            direction=str(_require(raw, "direction", "average path")),
            path=_parse_path_points(_require(raw, "path", "average path")),
        )
        for raw in _as_list(_require(payload, "averages", expected), "path averages")
    )
    individual = tuple(
        EventPath(
            date=str(_require(raw, "date", "event path")),
            direction=str(_require(raw, "direction", "event path")),
            path=_parse_path_points(_require(raw, "path", "event path")),
        )
        for raw in _as_list(payload.get("individual", []), "path individual")
    )
    return PathDataset(averages=averages, individual=individual)


def parse_histogram(payload: Any) -> HistogramDataset:
    """Parse the /api/histogram payload."""
    expected = "histogram dataset"
    values = tuple(
        _number(v, "values")
        for v in _as_list(_require(payload, "values", expected), "histogram values")
    )
    return HistogramDataset(
        values=values,
        count=int(_number(payload.get("count", len(values)), "count")),
        mean=_number(_require(payload, "mean", expected), "mean"),
        std=_number(_require(payload, "std", expected), "std"),
    )


PayloadParser = Callable[[Any], Any]
