"""Pytest configuration and shared fixtures."""

import asyncio
from dataclasses import replace
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from surprise_app.config.defaults import ClientConfig, LoadingParams, get_default_config

BASE_URL = "http://testserver"

STATS_PAYLOAD = {
    "totalReleases": 120,
    "beatExpectation": 58,
    "missExpectation": 47,
    "beatPct": 48.3,
    "missPct": 39.2,
    "avgSurprise": "+0.03 pp",
    "avgSurpriseRaw": 0.0312,
    "years": "10 years",
}

SCATTER_PAYLOAD = {
    "points": [
        {"date": "2023-01-12", "actual": 6.5, "consensus": 6.2, "x": 0.3, "y": 1.1, "direction": "Above"},
    ],
    "stats": {"rSquared": 0.42, "pValue": 0.03, "significant": True},
}

CONDITIONAL_PAYLOAD = [
    {"asset": "S&P 500", "direction": "Above", "avgReaction": -0.41234, "medReaction": -0.3,
     "stdReaction": 0.9, "count": 58},
    {"asset": "S&P 500", "direction": "Below", "avgReaction": 0.28, "medReaction": None,
     "stdReaction": None, "count": 47},
]

PATH_PAYLOAD = {
    "averages": [
        {"direction": "Above", "path": [
            {"window": "T+0", "windowDays": 0, "reaction": -0.2},
            {"window": "T+1", "windowDays": 1, "reaction": -0.35},
        ]},
    ],
    "individual": [
        {"date": "2023-01-12", "direction": "Above", "path": [
            {"window": "T+0", "windowDays": 0, "reaction": -0.5},
            {"window": "T+1", "windowDays": 1, "reaction": -0.7},
        ]},
        {"date": "2023-02-14", "direction": "Below", "path": [
            {"window": "T+0", "windowDays": 0, "reaction": 0.4},
        ]},
    ],
}

HISTOGRAM_PAYLOAD = {"values": [0.1, -0.2, 0.0, 0.3], "count": 4, "mean": 0.05, "std": 0.2}

PAYLOADS: dict[str, Any] = {
    "/api/stats": STATS_PAYLOAD,
    "/api/scatter": SCATTER_PAYLOAD,
    "/api/conditional": CONDITIONAL_PAYLOAD,
    "/api/path": PATH_PAYLOAD,
    "/api/histogram": HISTOGRAM_PAYLOAD,
}

Payload = Union[Any, Callable[[httpx.Request], Any]]


class FakeStatsService:
    """
    In-process stand-in for the statistics service.

    Answers from canned payloads, records every request, and can be told to
    fail an endpoint or delay individual responses.
    """

    def __init__(self, payloads: Optional[dict[str, Payload]] = None):
        self.payloads: dict[str, Payload] = dict(PAYLOADS if payloads is None else payloads)
        self.failures: dict[str, int] = {}
        self.delays: dict[str, list[float]] = {}
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        failure = self.failures.get(path)
        payload = self.payloads[path]

        pending = self.delays.get(path)
        if pending:
            await asyncio.sleep(pending.pop(0))

        if failure is not None:
            return httpx.Response(failure, text="Internal Server Error")

        if callable(payload):
            payload = payload(request)
        return httpx.Response(200, json=payload)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def count(self, path: str) -> int:
        return self.paths().count(path)


def scatter_payload_for(request: httpx.Request) -> dict[str, Any]:
    """Scatter payload whose single point records the market it was asked for."""
    market = request.url.params["market"]
    return {
        "points": [
            {"date": market, "actual": 1.0, "consensus": 0.5, "x": 0.5, "y": 0.2, "direction": "Above"},
        ],
        "stats": {"rSquared": 0.1, "pValue": 0.4, "significant": False},
    }


def make_config(base_url: str = BASE_URL, escalation_delay: float = 15.0) -> ClientConfig:
    defaults = get_default_config()
    return replace(
        defaults,
        api=replace(defaults.api, base_url=base_url),
        loading=LoadingParams(escalation_delay_seconds=escalation_delay),
    )


@pytest.fixture
def service() -> FakeStatsService:
    """Fake statistics service with canned payloads."""
    return FakeStatsService()
