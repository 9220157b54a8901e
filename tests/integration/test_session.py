"""
End-to-end tests for the analysis session.

Each test drives a real session against an in-process fake of the statistics
service and asserts on the requests issued and the resulting views.
"""

import asyncio
from pathlib import Path

import pytest

from conftest import FakeStatsService, make_config, scatter_payload_for

from surprise_app.errors import InvalidSelection
from surprise_app.fetch.fetcher import DatasetKind
from surprise_app.session import AnalysisSession
from surprise_app.state.models import FetchStatus, LoadingPhase
from surprise_app.views.cards import STATS_LOADING, STATS_LOADING_ESCALATED
from surprise_app.views.dispatcher import TabPresentation
from surprise_app.views.narrative import NarrativeCategory
from surprise_app.views.tabs import ChartTab

ENDPOINTS = ["/api/stats", "/api/scatter", "/api/conditional", "/api/path", "/api/histogram"]


def run_session(service: FakeStatsService, scenario, escalation_delay: float = 15.0,
                page_url=None, base_url=None, download_dir=None):
    """Start a session against service, run scenario(session) and close it."""
    config = make_config(escalation_delay=escalation_delay) if base_url is None \
        else make_config(base_url=base_url, escalation_delay=escalation_delay)

    async def main():
        session = AnalysisSession(
            config=config,
            page_url=page_url,
            download_dir=download_dir,
            transport=service.transport(),
        )
        async with session:
            return await scenario(session)

    return asyncio.run(main())


class TestMount:
    """Test the initial fetch on start."""

    def test_one_request_per_endpoint(self, service):
        async def scenario(session):
            await session.wait_settled()
            return session.states

        states = run_session(service, scenario)

        assert sorted(service.paths()) == sorted(ENDPOINTS)
        assert all(state.status == FetchStatus.LOADED for state in states.values())

    def test_everything_pending_right_after_start(self, service):
        async def scenario(session):
            pending = session.is_loading, session.loading_phase, session.stats_loading_message()
            cards = session.stat_cards()
            await session.wait_settled()
            return pending, cards, session.is_loading, session.stats_loading_message()

        pending, cards, loading_after, message_after = run_session(service, scenario)

        assert pending == (True, LoadingPhase.LOADING, STATS_LOADING)
        assert cards[0].value == "0"
        assert loading_after is False
        assert message_after is None

    def test_deep_link_seeds_parameters_and_origin(self, service):
        async def scenario(session):
            await session.wait_settled()
            return session.params

        params = run_session(
            service, scenario, base_url="",
            page_url="http://testserver/analysis?indicator=NFP&market=VIX&horizon=Bogus"
        )

        assert (params.indicator, params.market, params.horizon) == ("NFP", "VIX", "Same day")
        stats_request = service.requests[service.paths().index("/api/stats")]
        assert stats_request.url.host == "testserver"
        assert dict(stats_request.url.params) == {"indicator": "NFP"}


class TestSelectionRefresh:
    """Test that a selection change refreshes exactly the dependent datasets."""

    @pytest.mark.parametrize("field,value,expected", [
        ("horizon", "Week later", ["/api/conditional", "/api/scatter"]),
        ("market", "10Y Bonds", ["/api/path", "/api/scatter"]),
        ("indicator", "NFP", sorted(ENDPOINTS)),
    ])
    def test_changed_field_refreshes_dependents(self, service, field, value, expected):
        async def scenario(session):
            await session.wait_settled()
            before = len(service.requests)
            session.select(field, value)
            await session.wait_settled()
            return sorted(service.paths()[before:])

        assert run_session(service, scenario) == expected

    def test_selecting_current_value_issues_nothing(self, service):
        async def scenario(session):
            await session.wait_settled()
            before = len(service.requests)
            changed = session.select("market", "S&P 500")
            await session.wait_settled()
            return changed, len(service.requests) - before

        assert run_session(service, scenario) == (False, 0)

    def test_invalid_selection_rejected(self, service):
        async def scenario(session):
            await session.wait_settled()
            before = len(service.requests)
            with pytest.raises(InvalidSelection):
                session.select("market", "Bitcoin")
            ignored = session.try_select("horizon", "Next month")
            await session.wait_settled()
            return ignored, session.params.market, len(service.requests) - before

        assert run_session(service, scenario) == (False, "S&P 500", 0)

    def test_rapid_changes_keep_latest_response(self):
        """A slow response for an earlier market never replaces the later one."""
        service = FakeStatsService()
        service.payloads["/api/scatter"] = scatter_payload_for
        service.delays["/api/scatter"] = [0.0, 0.15, 0.0]

        async def scenario(session):
            await session.wait_settled()
            session.select("market", "VIX")
            session.select("market", "10Y Bonds")
            await session.wait_settled()
            return session.state_of(DatasetKind.SCATTER)

        state = run_session(service, scenario)

        assert service.count("/api/scatter") == 3
        assert state.status == FetchStatus.LOADED
        assert state.data.points[0].date == "10Y Bonds"


class TestLoadingEscalation:
    """Test the long-wait message."""

    def test_escalates_when_loading_outlasts_delay(self):
        service = FakeStatsService()
        service.delays["/api/stats"] = [0.3]

        async def scenario(session):
            await asyncio.sleep(0.15)
            during = session.loading_phase, session.stats_loading_message()
            await session.wait_settled()
            return during, session.loading_phase

        (phase, message), after = run_session(service, scenario, escalation_delay=0.05)

        assert phase == LoadingPhase.ESCALATED
        assert message == STATS_LOADING_ESCALATED
        assert after == LoadingPhase.IDLE

    def test_no_escalation_when_settled_early(self, service):
        async def scenario(session):
            await session.wait_settled()
            await asyncio.sleep(0.3)
            return session.loading_phase, session.escalator.episode

        phase, episodes = run_session(service, scenario, escalation_delay=0.1)

        assert phase == LoadingPhase.IDLE
        assert episodes == 1

    def test_selection_starts_new_episode(self, service):
        async def scenario(session):
            await session.wait_settled()
            session.select("indicator", "ISM PMI")
            during = session.loading_phase
            await session.wait_settled()
            return during, session.loading_phase, session.escalator.episode

        assert run_session(service, scenario) == (LoadingPhase.LOADING, LoadingPhase.IDLE, 2)


class TestTabViews:
    """Test rendering, narratives and degraded tabs."""

    def test_significant_scatter_narrative(self, service):
        async def scenario(session):
            await session.wait_settled()
            return session.render(ChartTab.SCATTER), session.conclusion("scatter")

        view, narrative = run_session(service, scenario)

        assert view.presentation == TabPresentation.CHART_READY
        assert narrative.category == NarrativeCategory.INSIGHT
        assert narrative.title == "Statistically Significant Pattern"
        assert view.narrative == narrative

    def test_failed_scatter_renders_absent_and_keeps_stats(self, service):
        service.failures["/api/scatter"] = 500

        async def scenario(session):
            await session.wait_settled()
            return (
                session.render("scatter"),
                session.render("histogram"),
                session.stat_cards(),
                session.state_of(DatasetKind.SCATTER),
            )

        scatter_view, histogram_view, cards, scatter_state = run_session(service, scenario)

        assert scatter_state.settled and scatter_state.data is None
        assert scatter_view.presentation == TabPresentation.CHART_ABSENT
        assert scatter_view.degraded is True
        assert histogram_view.presentation == TabPresentation.CHART_READY
        assert cards[0].label == "Total Releases"
        assert cards[0].value == "120"

    def test_stats_failure_after_load_keeps_prior_cards(self, service):
        async def scenario(session):
            await session.wait_settled()
            service.failures["/api/stats"] = 500
            session.select("indicator", "NFP")
            await session.wait_settled()
            return session.stat_cards(), session.state_of(DatasetKind.STATS)

        cards, state = run_session(service, scenario)

        assert state.failed
        assert cards[0].value == "120"

    def test_tab_switch_issues_no_request(self, service):
        async def scenario(session):
            await session.wait_settled()
            before = len(service.requests)
            views = []
            for tab in ChartTab:
                session.set_active_tab(tab)
                views.append(session.render())
            await asyncio.sleep(0)
            return views, len(service.requests) - before, session.active_tab

        views, new_requests, active = run_session(service, scenario)

        assert new_requests == 0
        assert active == ChartTab.HISTOGRAM
        assert [view.tab for view in views] == list(ChartTab)

    def test_raw_table(self, service):
        async def scenario(session):
            await session.wait_settled()
            return session.raw_table(ChartTab.PATH)

        heading, body = run_session(service, scenario)

        assert heading == "Raw Data — Reaction Paths (3 rows)"
        assert body[0] == ["Date", "Direction", "Window", "Days", "Cumulative Reaction (%)"]


class TestExport:
    """Test CSV export from a live session."""

    def test_export_active_tab(self, service, tmp_path: Path):
        async def scenario(session):
            await session.wait_settled()
            session.set_active_tab("histogram")
            return session.export_tab()

        target = run_session(service, scenario, download_dir=tmp_path)

        assert target == tmp_path / "CPI_histogram.csv"
        lines = target.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "#,Surprise Value"
        assert len(lines) == 5

    def test_export_without_data_returns_none(self, service, tmp_path: Path):
        service.failures["/api/conditional"] = 500

        async def scenario(session):
            await session.wait_settled()
            return session.export_tab(ChartTab.CONDITIONAL)

        assert run_session(service, scenario, download_dir=tmp_path) is None
        assert list(tmp_path.iterdir()) == []


class TestTeardown:
    """Test that closing the session discards in-flight work."""

    def test_close_discards_in_flight_responses(self):
        service = FakeStatsService()
        for path in ENDPOINTS:
            service.delays[path] = [0.1]

        async def main():
            session = AnalysisSession(config=make_config(escalation_delay=0.05),
                                      transport=service.transport())
            await session.start()
            await session.aclose()
            await asyncio.sleep(0.2)
            return session

        session = asyncio.run(main())

        assert all(not state.settled for state in session.states.values())
        assert session.loading_phase == LoadingPhase.LOADING
        assert not session.escalator.timer_armed

    def test_selection_after_close_issues_nothing(self, service):
        async def main():
            session = AnalysisSession(config=make_config(), transport=service.transport())
            async with session:
                await session.wait_settled()
            before = len(service.requests)
            session.select("indicator", "NFP")
            await asyncio.sleep(0)
            return len(service.requests) - before

        assert asyncio.run(main()) == 0

    def test_select_outside_running_loop_leaves_selection_unchanged(self, service):
        async def main():
            session = AnalysisSession(config=make_config(), transport=service.transport())
            await session.start()
            await session.wait_settled()
            return session

        session = asyncio.run(main())
        before = len(service.requests)

        with pytest.raises(RuntimeError, match="event loop"):
            session.select("indicator", "NFP")
        with pytest.raises(RuntimeError, match="event loop"):
            session.try_select("market", "VIX")

        assert (session.params.indicator, session.params.market) == ("CPI", "S&P 500")
        assert len(service.requests) == before

        asyncio.run(session.aclose())


class TestConfiguration:
    """Test how a session resolves its configuration when none is passed."""

    def test_environment_overrides_page_origin(self, service, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("SURPRISE_API_URL", "http://api.example:9000")

        async def main():
            session = AnalysisSession(
                config_dir=tmp_path,
                page_url="http://page.example/analysis?indicator=NFP",
                transport=service.transport(),
            )
            base_url, indicator = session.client.base_url, session.params.indicator
            await session.aclose()
            return base_url, indicator

        assert asyncio.run(main()) == ("http://api.example:9000", "NFP")

    def test_config_file_is_read(self, service, monkeypatch, tmp_path: Path):
        monkeypatch.delenv("SURPRISE_API_URL", raising=False)
        (tmp_path / "client.yaml").write_text(
            "api:\n  base_url: http://stats.internal:8080\n"
            "loading:\n  escalation_delay_seconds: 2\n",
            encoding="utf-8",
        )

        async def main():
            session = AnalysisSession(config_dir=tmp_path, transport=service.transport())
            result = session.client.base_url, session.escalator.delay_seconds
            await session.aclose()
            return result

        assert asyncio.run(main()) == ("http://stats.internal:8080", 2)
