"""
Analysis session coordinator.

Wires the parameter store, the five dataset fetchers, the loading escalator
and the view layer together:

    select → changed fields → affected fetchers refresh → fetch states
           → loading signal → escalator
    render / conclusion / export are pulled on demand.

All methods run on the event loop thread; select() must be called while the
loop is running because it schedules refresh tasks.
"""

import asyncio
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional, Union

import httpx
import structlog

from .api.client import StatsApiClient
from .config.defaults import ClientConfig
from .config.loader import ConfigLoader
from .data.models import DEFAULT_STATS, StatsSummary
from .errors import InvalidSelection
from .export.columns import build_tab_export, render_table
from .export.exporter import TabularExporter
from .fetch.fetcher import DatasetFetcher, DatasetKind, create_fetchers
from .state.escalation import LoadingEscalator
from .state.models import FetchState, LoadingPhase
from .state.parameters import ParameterField, Parameters, ParameterStore
from .views.cards import LoadingMessage, StatCard, loading_message, stat_cards
from .views.dispatcher import TabDispatcher, TabView
from .views.narrative import Narrative
from .views.tabs import TAB_DATASETS, ChartTab, coerce_tab

logger = structlog.get_logger(__name__)

CHART_KINDS = tuple(TAB_DATASETS.values())


class AnalysisSession:
    """
    Client-side orchestration for one analysis page.

    Manages the pipeline:
    Selection → Fetchers → Loading State → Tab View / Narrative / Export
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        store: Optional[ParameterStore] = None,
        client: Optional[StatsApiClient] = None,
        page_url: Optional[str] = None,
        download_dir: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        config_dir: Optional[Path] = None
    ) -> None:
        """
        Initialize the session; no request is issued until start().

        Args:
            config: Explicit configuration. When omitted it is loaded from
                config_dir (or the bundled config directory) and the
                environment.
            config_dir: Directory holding client.yaml
        """
        self.config = config or ConfigLoader.create(config_dir).load()
        self.page_url = page_url

        if store is None:
            defaults = Parameters(**asdict(self.config.selection))
            store = ParameterStore.from_query(page_url, defaults)
        self.store = store

        self._owns_client = client is None
        self.client = client or StatsApiClient.from_config(
            self.config.api, page_url=page_url, transport=transport
        )

        self.fetchers: dict[DatasetKind, DatasetFetcher] = create_fetchers(
            self.client, self._on_fetch_state
        )
        self.escalator = LoadingEscalator(self.config.loading.escalation_delay_seconds)
        self.dispatcher = TabDispatcher()
        self.exporter = TabularExporter.from_config(self.config.export, download_dir)

        self._active_tab = ChartTab.SCATTER
        self._unsubscribe = None
        self._scheduling = False
        self._started = False
        self._closed = False

        logger.info(
            "Analysis session initialized",
            base_url=self.client.base_url,
            **{field.value: self.store.get(field) for field in ParameterField}
        )

    async def start(self) -> None:
        """Subscribe to the store and fetch every dataset for the current selection."""
        if self._started or self._closed:
            return
        self._started = True
        self._unsubscribe = self.store.subscribe(self._on_selection)
        self._refresh(list(self.fetchers.values()), self.store.current)

    @property
    def params(self) -> Parameters:
        return self.store.current

    def select(self, field: Union[ParameterField, str], value: str) -> bool:
        """
        Change one parameter; affected datasets refresh in the background.

        Raises:
            InvalidSelection: If value is outside the field's domain
            RuntimeError: If the session is running but called outside the event loop
        """
        self._ensure_loop()
        return self.store.select(field, value)

    def try_select(self, field: Union[ParameterField, str], value: str) -> bool:
        """Like select(), but logs and ignores invalid selections."""
        self._ensure_loop()
        try:
            return self.store.select(field, value)
        except InvalidSelection as e:
            logger.warning(
                "Ignoring invalid selection",
                field=e.field,
                value=e.value,
                allowed=list(e.allowed)
            )
            return False

    @property
    def active_tab(self) -> ChartTab:
        return self._active_tab

    def set_active_tab(self, tab: Union[ChartTab, str]) -> ChartTab:
        """Switch tabs. Purely local: never issues a request."""
        self._active_tab = coerce_tab(tab)
        return self._active_tab

    def state_of(self, kind: Union[DatasetKind, str]) -> FetchState:
        return self.fetchers[DatasetKind(kind)].state

    @property
    def states(self) -> dict[DatasetKind, FetchState]:
        return {kind: fetcher.state for kind, fetcher in self.fetchers.items()}

    @property
    def stats(self) -> StatsSummary:
        return self.state_of(DatasetKind.STATS).data or DEFAULT_STATS

    @property
    def is_loading(self) -> bool:
        """Stats not yet settled, or any chart dataset still pending."""
        if not self.state_of(DatasetKind.STATS).settled:
            return True
        return any(not self.state_of(kind).settled for kind in CHART_KINDS)

    @property
    def loading_phase(self) -> LoadingPhase:
        return self.escalator.phase

    def stats_loading_message(self) -> Optional[LoadingMessage]:
        """Message for the stat card area while stats are loading, else None."""
        if self.state_of(DatasetKind.STATS).settled:
            return None
        return loading_message(self.escalator.escalated)

    def stat_cards(self) -> list[StatCard]:
        return stat_cards(self.stats)

    def render(self, tab: Optional[Union[ChartTab, str]] = None) -> TabView:
        return self.dispatcher.render(tab or self._active_tab, self.states, self.params)

    def conclusion(self, tab: Optional[Union[ChartTab, str]] = None) -> Narrative:
        return self.dispatcher.conclusion(tab or self._active_tab, self.states, self.params)

    def raw_table(self, tab: Optional[Union[ChartTab, str]] = None) -> Optional[tuple[str, list[list[str]]]]:
        """Heading and display rows of the tab's raw data table, if loaded."""
        tab = coerce_tab(tab or self._active_tab)
        data = self.state_of(TAB_DATASETS[tab]).data
        if data is None:
            return None
        bundle = build_tab_export(tab, data, self.params)
        return render_table(bundle.title, bundle.rows, bundle.columns)

    def export_tab(self, tab: Optional[Union[ChartTab, str]] = None) -> Optional[Path]:
        """Write the tab's raw data as CSV; returns None when nothing is loaded."""
        tab = coerce_tab(tab or self._active_tab)
        data = self.state_of(TAB_DATASETS[tab]).data
        if data is None:
            logger.warning("Nothing to export for tab", tab=tab.value)
            return None

        bundle = build_tab_export(tab, data, self.params)
        return self.exporter.export(bundle.title, bundle.rows, bundle.columns, bundle.filename)

    async def wait_settled(self) -> None:
        """Wait for every outstanding request to finish."""
        for fetcher in self.fetchers.values():
            await fetcher.wait()

    async def aclose(self) -> None:
        """Tear down: stop timers, discard in-flight results, close the client."""
        if self._closed:
            return
        self._closed = True

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        self.escalator.close()
        for fetcher in self.fetchers.values():
            fetcher.close()
        await self.wait_settled()

        if self._owns_client:
            await self.client.aclose()

        logger.info("Analysis session closed")

    async def __aenter__(self) -> "AnalysisSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _ensure_loop(self) -> None:
        # The store must stay unchanged when no refresh can be scheduled
        if self._unsubscribe is None or self._closed:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError as e:
            raise RuntimeError(
                "AnalysisSession.select() must be called while the event loop is running"
            ) from e

    def _on_selection(self, old: Parameters, new: Parameters,
                      changed: frozenset[ParameterField]) -> None:
        if self._closed:
            return

        affected = [f for f in self.fetchers.values() if f.needs_refresh(new)]
        logger.debug(
            "Selection changed",
            changed=sorted(field.value for field in changed),
            refreshing=[f.kind.value for f in affected]
        )
        if affected:
            self._refresh(affected, new)

    def _refresh(self, fetchers: list[DatasetFetcher], params: Parameters) -> None:
        self._scheduling = True
        try:
            for fetcher in fetchers:
                fetcher.schedule(params)
        finally:
            self._scheduling = False
        self.escalator.restart(self.is_loading)

    def _on_fetch_state(self, kind: DatasetKind, state: FetchState) -> None:
        if self._scheduling or self._closed:
            return
        self.escalator.update(self.is_loading)
