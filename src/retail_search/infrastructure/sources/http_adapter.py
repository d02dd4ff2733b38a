"""
HTTP Source Adapter - JSON search endpoint over httpx.

Calls ``GET {base_url}{search_path}?q=<description>&location=<code>`` and
expects either a JSON list of item objects or ``{"products": [...]}``.
Items are parsed with
``Item.from_dict``; the source name is forced onto every item.

Any failure is raised as SourceError so the orchestrator records it in this
source's slot.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from typing_extensions import Self

from retail_search.domain.entities import Item, Query
from retail_search.shared.async_utils import RateLimiter
from retail_search.shared.exceptions import SourceError

logger = logging.getLogger(__name__)


class HttpSourceAdapter:
    """
    Source adapter for a retailer that exposes a JSON search API.

    Example:
        adapter = HttpSourceAdapter("flipkart", base_url="https://search.example.com")
        items = await adapter.fetch(query)
    """

    def __init__(
        self,
        name: str,
        *,
        base_url: str,
        search_path: str = "/search",
        timeout: float = 30.0,
        rate: float = 5.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize adapter.

        Args:
            name: Source name
            base_url: API base URL
            search_path: Path of the search endpoint
            timeout: Transport timeout (the orchestrator's deadline still applies)
            rate: Maximum requests per second
            headers: Default headers for all requests
            client: Optional preconfigured httpx client
        """
        self.name = name
        self._url = f"{base_url.rstrip('/')}{search_path}"
        self._rate_limiter = RateLimiter(rate=rate, per=1.0)
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers=headers or {},
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )

    def _params(self, query: Query) -> dict[str, Any]:
        params: dict[str, Any] = {"q": query.description, "location": query.location_code}
        if query.budget:
            params["min_price"] = query.budget.min_price
            params["max_price"] = query.budget.max_price
        if query.filters.brands:
            params["brand"] = ",".join(sorted(query.filters.brands))
        return params

    async def fetch(self, query: Query) -> list[Item]:
        async with self._rate_limiter:
            try:
                response = await self._client.get(self._url, params=self._params(query))
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as e:
                raise SourceError(self.name, f"HTTP {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise SourceError(self.name, f"Request failed: {e}") from e
            except ValueError as e:
                raise SourceError(self.name, "Malformed JSON response", retryable=False) from e

        return self._parse(payload)

    def _parse(self, payload: Any) -> list[Item]:
        if isinstance(payload, dict):
            payload = payload.get("products", payload.get("items"))
        if not isinstance(payload, list):
            raise SourceError(self.name, "Unexpected response shape", retryable=False)

        items: list[Item] = []
        for raw in payload:
            try:
                items.append(Item.from_dict(raw, source=self.name))
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"{self.name}: skipping malformed item: {e}")
        logger.info(f"{self.name}: parsed {len(items)} items")
        return items

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
