"""
Dependency-keyed dataset fetchers.

Each dataset kind is a pure function of a subset of the selection. A fetcher
re-issues its request only when that subset changes, tags every request with
a generation number, and discards any response whose generation has been
superseded by the time it arrives.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from ..api.client import (
    CONDITIONAL_ENDPOINT,
    HISTOGRAM_ENDPOINT,
    PATH_ENDPOINT,
    SCATTER_ENDPOINT,
    STATS_ENDPOINT,
    StatsApiClient,
)
from ..data.models import DEFAULT_STATS
from ..data.parsers import (
    PayloadParser,
    parse_conditional,
    parse_histogram,
    parse_path,
    parse_scatter,
    parse_stats,
)
from ..errors import FetchFailure, StaleResponseError
from ..logging.config import get_fetch_logger, log_fetch_outcome
from ..state.models import FetchState
from ..state.parameters import ParameterField, Parameters

fetch_logger = get_fetch_logger(__name__)


class DatasetKind(str, Enum):
    """Distinct fetch/render units."""
    STATS = "stats"
    SCATTER = "scatter"
    CONDITIONAL = "conditional"
    PATH = "path"
    HISTOGRAM = "histogram"


@dataclass(frozen=True)
class DatasetSpec:
    """How to fetch one dataset kind."""
    kind: DatasetKind
    endpoint: str
    dependencies: tuple[ParameterField, ...]
    parser: PayloadParser
    retain_on_failure: bool = False     # Keep prior data through reloads and failures
    initial_data: Any = None


DATASET_SPECS: dict[DatasetKind, DatasetSpec] = {
    DatasetKind.STATS: DatasetSpec(
        kind=DatasetKind.STATS,
        endpoint=STATS_ENDPOINT,
        dependencies=(ParameterField.INDICATOR,),
        parser=parse_stats,
        retain_on_failure=True,
        initial_data=DEFAULT_STATS,
    ),
    DatasetKind.SCATTER: DatasetSpec(
        kind=DatasetKind.SCATTER,
        endpoint=SCATTER_ENDPOINT,
        dependencies=(ParameterField.INDICATOR, ParameterField.MARKET, ParameterField.HORIZON),
        parser=parse_scatter,
    ),
    DatasetKind.CONDITIONAL: DatasetSpec(
        kind=DatasetKind.CONDITIONAL,
        endpoint=CONDITIONAL_ENDPOINT,
        dependencies=(ParameterField.INDICATOR, ParameterField.HORIZON),
        parser=parse_conditional,
    ),
    DatasetKind.PATH: DatasetSpec(
        kind=DatasetKind.PATH,
        endpoint=PATH_ENDPOINT,
        dependencies=(ParameterField.INDICATOR, ParameterField.MARKET),
        parser=parse_path,
    ),
    DatasetKind.HISTOGRAM: DatasetSpec(
        kind=DatasetKind.HISTOGRAM,
        endpoint=HISTOGRAM_ENDPOINT,
        dependencies=(ParameterField.INDICATOR,),
        parser=parse_histogram,
    ),
}

StateListener = Callable[[DatasetKind, FetchState], None]


class DatasetFetcher:
    """Fetches one dataset kind and tracks its FetchState."""

    def __init__(
        self,
        spec: DatasetSpec,
        client: StatsApiClient,
        on_change: Optional[StateListener] = None
    ):
        self.spec = spec
        self.client = client
        self.on_change = on_change
        self._state: FetchState = FetchState.initial(spec.initial_data)
        self._generation = 0
        self._issued: Optional[tuple[str, ...]] = None
        self._tasks: set[asyncio.Task] = set()
        self._closed = False
        self.refresh_count = 0

    @property
    def kind(self) -> DatasetKind:
        return self.spec.kind

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def needs_refresh(self, params: Parameters) -> bool:
        """True if params differ from the last issued request on any dependency."""
        if self._closed:
            return False
        return self._issued != params.project(self.spec.dependencies)

    def query_for(self, params: Parameters) -> dict[str, str]:
        return {field.value: params.get(field) for field in self.spec.dependencies}

    async def refresh(self, params: Parameters) -> FetchState:
        """Issue a request for params and apply its result if still current."""
        if self._closed:
            return self._state

        generation = self._begin(params)
        return await self._complete(generation, params)

    def _begin(self, params: Parameters) -> int:
        """Start a new generation and mark the state pending."""
        self._generation += 1
        issued = params.project(self.spec.dependencies)
        self._issued = issued
        self.refresh_count += 1

        self._set_state(self._state.with_pending(
            self._generation, issued, keep_data=self.spec.retain_on_failure
        ))
        return self._generation

    async def _complete(self, generation: int, params: Parameters) -> FetchState:
        issued = params.project(self.spec.dependencies)
        error: Optional[FetchFailure] = None
        data: Any = None
        try:
            payload = await self.client.get_json(
                self.spec.endpoint, self.query_for(params), kind=self.kind.value
            )
            data = self.spec.parser(payload)
        except FetchFailure as e:
            error = e
        except Exception as e:
            fetch_logger.error(
                "Unexpected error during dataset fetch",
                dataset_kind=self.kind.value,
                generation=generation,
                error=str(e),
                error_type=type(e).__name__
            )
            error = FetchFailure(
                f"Unexpected error: {e}", kind=self.kind.value, endpoint=self.spec.endpoint
            )

        try:
            self._ensure_current(generation)
        except StaleResponseError as e:
            log_fetch_outcome(
                fetch_logger,
                kind=self.kind.value,
                generation=generation,
                outcome="stale",
                context={"latest_generation": e.latest_generation, "params": list(issued)}
            )
            return self._state

        if error is not None:
            log_fetch_outcome(
                fetch_logger,
                kind=self.kind.value,
                generation=generation,
                outcome="failed",
                context={
                    "endpoint": self.spec.endpoint,
                    "status_code": error.status_code,
                    "error": str(error),
                    "params": list(issued),
                }
            )
            fallback = self._state.data if self.spec.retain_on_failure else None
            self._set_state(self._state.with_failure(str(error), fallback))
            return self._state

        log_fetch_outcome(
            fetch_logger,
            kind=self.kind.value,
            generation=generation,
            outcome="loaded",
            context={"params": list(issued)}
        )
        self._set_state(self._state.with_data(data))
        return self._state

    def schedule(self, params: Parameters) -> Optional[asyncio.Task]:
        """
        Issue a request for params as a task on the running loop.

        The state turns pending before this returns, so callers can read the
        aggregate loading signal right away.
        """
        if self._closed:
            return None

        loop = asyncio.get_running_loop()
        generation = self._begin(params)
        task = loop.create_task(
            self._complete(generation, params), name=f"refresh-{self.kind.value}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def wait(self) -> None:
        """Wait until no refresh task for this kind is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Invalidate in-flight requests and cancel their tasks."""
        self._closed = True
        self._generation += 1
        for task in list(self._tasks):
            task.cancel()

    def _ensure_current(self, generation: int) -> None:
        if self._closed or generation != self._generation:
            raise StaleResponseError(
                f"Response for {self.kind.value} generation {generation} superseded",
                kind=self.kind.value,
                generation=generation,
                latest_generation=self._generation
            )

    def _set_state(self, state: FetchState) -> None:
        self._state = state
        if self.on_change is not None:
            self.on_change(self.kind, state)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            fetch_logger.error(
                "Dataset refresh task crashed",
                dataset_kind=self.kind.value,
                error=str(exc),
                exc_info=exc
            )


def create_fetchers(
    client: StatsApiClient,
    on_change: Optional[StateListener] = None
) -> dict[DatasetKind, DatasetFetcher]:
    """One fetcher per dataset kind, in declaration order."""
    return {
        kind: DatasetFetcher(spec, client, on_change)
        for kind, spec in DATASET_SPECS.items()
    }
