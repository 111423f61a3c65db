"""Base connector infrastructure for upstream data sources.

Provides the BaseConnector abstract class with:
- Async HTTP client via httpx
- Attempt budget via tenacity (a single attempt by default: the next
  scheduled tick is the only recovery path)
- Structured logging via structlog
- Translation of transport / HTTP failures into UpstreamUnavailable
"""

import abc
import inspect
from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from pizzint.core.exceptions import CollectorError, UpstreamUnavailable


class BaseConnector(abc.ABC):
    """Abstract base class for upstream API connectors.

    Subclasses MUST override:
        SOURCE_NAME: str - identifier (e.g., "PIZZINT")
        BASE_URL: str - base API URL

    Constructor arguments override the class defaults so that the runner
    can wire timeouts and attempt budgets from Settings.

    Usage::

        async with MyConnector() as conn:
            payload = await conn.fetch()
    """

    # Subclasses MUST override
    SOURCE_NAME: str = ""
    BASE_URL: str = ""

    # Subclasses MAY override
    MAX_ATTEMPTS: int = 1
    TIMEOUT_SECONDS: float = 30.0

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.base_url = base_url or self.BASE_URL
        self.timeout_seconds = timeout_seconds or self.TIMEOUT_SECONDS
        self.max_attempts = max(1, max_attempts or self.MAX_ATTEMPTS)
        self._client: httpx.AsyncClient | None = None
        self.log = structlog.get_logger().bind(connector=self.SOURCE_NAME)

    async def __aenter__(self) -> "BaseConnector":
        """Create and configure the httpx async client."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout_seconds),
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        """Close the httpx async client if open."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the active httpx client.

        Raises:
            CollectorError: If the client has not been initialized via __aenter__.
        """
        if self._client is None:
            raise CollectorError(
                f"{self.SOURCE_NAME}: HTTP client not initialized. "
                "Use 'async with connector:' context manager."
            )
        return self._client

    async def _request(
        self, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        """HTTP request within the attempt budget.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: URL path (relative to base_url) or absolute URL.
            **kwargs: Additional arguments passed to httpx.AsyncClient.request.

        Returns:
            The httpx.Response object.

        Raises:
            UpstreamUnavailable: If the last attempt failed on transport
                or returned an HTTP error status.
        """
        try:
            return await self._request_with_retry(method, url, **kwargs)
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailable(
                f"{self.SOURCE_NAME}: HTTP {exc.response.status_code} from {exc.request.url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(
                f"{self.SOURCE_NAME}: {type(exc).__name__}: {exc}"
            ) from exc

    async def _request_with_retry(
        self, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        """Execute an HTTP request under a tenacity attempt budget.

        Uses AsyncRetrying so that the instance attempt budget is read at
        runtime rather than decoration time.

        Retries on: httpx.HTTPStatusError, httpx.TransportError.
        Backoff: exponential with jitter (initial=1s, max=30s, jitter=5s).
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(
                (httpx.HTTPStatusError, httpx.TransportError)
            ),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(initial=1, max=30, jitter=5),
            reraise=True,
        ):
            with attempt:
                self.log.debug(
                    "http_request",
                    method=method,
                    url=url,
                    attempt=attempt.retry_state.attempt_number,
                )
                response = self.client.request(method, url, **kwargs)
                if inspect.isawaitable(response):
                    response = await response
                response.raise_for_status()
                return response

        # Should not be reached, but satisfies type checker
        raise UpstreamUnavailable(f"{self.SOURCE_NAME}: Request failed")  # pragma: no cover

    @abc.abstractmethod
    async def fetch(self, **kwargs: Any) -> list[dict[str, Any]]:
        """Fetch the current records from the upstream source.

        Returns:
            List of record dicts.
        """
        ...
