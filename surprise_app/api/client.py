"""Async HTTP GET client for the statistics service."""

from typing import Any, Optional
from urllib.parse import urlparse

import httpx
import structlog

from ..config.defaults import ApiParams
from ..data.parsers import parse_json_payload
from ..errors import ConfigurationError, FetchFailure, MalformedPayloadError

logger = structlog.get_logger(__name__)

STATS_ENDPOINT = "/api/stats"
SCATTER_ENDPOINT = "/api/scatter"
CONDITIONAL_ENDPOINT = "/api/conditional"
PATH_ENDPOINT = "/api/path"
HISTOGRAM_ENDPOINT = "/api/histogram"


def resolve_base_url(base_url: str, page_url: Optional[str] = None) -> str:
    """
    Resolve the service base URL.

    An empty base URL means "same origin": the scheme and host of the page URL
    the session was opened from.

    Raises:
        ConfigurationError: If neither URL yields an absolute origin
    """
    if base_url:
        return base_url.rstrip("/")

    if page_url:
        parsed = urlparse(page_url)
        if parsed.scheme and parsed.netloc:
            return f"{parsed.scheme}://{parsed.netloc}"

    raise ConfigurationError(
        "No API base URL configured and no page URL to derive the origin from",
        field="api.base_url",
        value=base_url
    )


class StatsApiClient:
    """Unauthenticated GET client returning decoded JSON bodies."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        user_agent: str = "surprise-app/0.1",
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        parsed = urlparse(base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(f"Invalid URL: {base_url}", field="api.base_url", value=base_url)

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            transport=transport,
        )
        self.request_count = 0

    @classmethod
    def from_config(
        cls,
        api: ApiParams,
        page_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "StatsApiClient":
        return cls(
            resolve_base_url(api.base_url, page_url),
            timeout_seconds=api.timeout_seconds,
            user_agent=api.user_agent,
            transport=transport,
        )

    async def get_json(self, endpoint: str, params: dict[str, str],
                       kind: Optional[str] = None) -> Any:
        """
        GET an endpoint and decode its JSON body.

        Raises:
            FetchFailure: On network errors and non-2xx responses
            MalformedPayloadError: If the body is not valid JSON
        """
        self.request_count += 1
        try:
            response = await self._client.get(endpoint, params=params)
        except httpx.TimeoutException as e:
            raise FetchFailure(
                f"Request timed out: {e}",
                kind=kind,
                endpoint=endpoint,
                context={"params": params}
            ) from e
        except httpx.RequestError as e:
            raise FetchFailure(
                f"Network error: {e}",
                kind=kind,
                endpoint=endpoint,
                context={"params": params}
            ) from e

        if not response.is_success:
            raise FetchFailure(
                f"HTTP {response.status_code}: {response.text[:200]}",
                kind=kind,
                endpoint=endpoint,
                status_code=response.status_code,
                context={"params": params}
            )

        try:
            return parse_json_payload(response.content)
        except MalformedPayloadError as e:
            e.kind = kind
            e.endpoint = endpoint
            e.status_code = response.status_code
            raise

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "StatsApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
