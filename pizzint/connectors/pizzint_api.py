"""pizzint.watch connector -- live popularity of pizzerias near the Pentagon.

Fetches the dashboard feed, one GET per collection tick. The response is
``{"success": bool, "data": [{"current_popularity": number | null, ...}]}``.

Key design decisions:
- The envelope is validated here; aggregation happens in the collector.
- A body that is not JSON is a MalformedPayload, not an upstream outage.
"""

from __future__ import annotations

from typing import Any

from pizzint.collector.aggregator import parse_payload
from pizzint.connectors.base import BaseConnector
from pizzint.core.exceptions import MalformedPayload


class PizzintConnector(BaseConnector):
    """Connector for the pizzint.watch dashboard data API.

    ``endpoint`` may be a full URL (``Settings.pizzint_api_url``) or a path
    relative to BASE_URL.

    Usage::

        async with PizzintConnector() as conn:
            locations = await conn.fetch()
    """

    SOURCE_NAME: str = "PIZZINT"
    BASE_URL: str = "https://www.pizzint.watch"
    DASHBOARD_PATH: str = "/api/dashboard-data"

    def __init__(self, endpoint: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.endpoint: str = endpoint or self.DASHBOARD_PATH

    async def fetch(self, **kwargs: Any) -> list[dict[str, Any]]:
        """Fetch the location list from the dashboard endpoint.

        Returns:
            The ``data`` list of location records.

        Raises:
            UpstreamUnavailable: On transport failure or HTTP error status.
            MalformedPayload: If the body is not JSON or the envelope is invalid.
        """
        response = await self._request("GET", self.endpoint)
        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedPayload(
                f"{self.SOURCE_NAME}: response body is not JSON"
            ) from exc

        locations = parse_payload(body)
        self.log.info("payload_fetched", locations=len(locations))
        return locations
