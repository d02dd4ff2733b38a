"""
SearchOrchestrator - Parallel multi-source product search.

Fans one query out to every configured source concurrently:

    SearchResultSet (all sources pending)
        └── TaskGroup
            ├── task(amazon)   -> deadline(delivery gate -> fetch) -> slot
            ├── task(flipkart) -> deadline(delivery gate -> fetch) -> slot
            └── ...

Each task owns exactly one slot and writes it once. Adapter exceptions and
deadline expiry are caught at the task boundary and recorded as an ``error``
SourceResult, so one failing source never affects the others and nothing
escapes ``search_all``. There is no retry and no global deadline: the
wall-clock time of a search is bounded by the slowest source's own deadline.

The deadline covers the delivery check as well as the fetch. On expiry the
in-flight lookup or adapter coroutine is cancelled through
``asyncio.wait_for``. Adapters that block the event loop or shield their
work cannot be interrupted; their late results are ignored.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING

from retail_search.domain.entities import Item, Query, SearchResultSet, SourceResult
from retail_search.shared.async_utils import run_with_deadline
from retail_search.shared.exceptions import SourceError, SourceTimeoutError

if TYPE_CHECKING:
    from retail_search.infrastructure.delivery import DeliveryGate
    from retail_search.infrastructure.sources import SourceAdapter

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_TIMEOUT = 10.0  # seconds


class SearchOrchestrator:
    """
    Drives parallel source fetches and aggregates their outcomes.

    Args:
        adapters: Source name -> adapter; the key order defines the source set
        delivery_gate: Optional gate consulted before each fetch
        source_timeout: Per-source deadline in seconds
    """

    def __init__(
        self,
        adapters: Mapping[str, SourceAdapter],
        *,
        delivery_gate: DeliveryGate | None = None,
        source_timeout: float = DEFAULT_SOURCE_TIMEOUT,
    ) -> None:
        if source_timeout <= 0:
            msg = f"source_timeout must be positive, got {source_timeout}"
            raise ValueError(msg)
        self._adapters = dict(adapters)
        self._delivery_gate = delivery_gate
        self._source_timeout = source_timeout

    @property
    def sources(self) -> list[str]:
        return list(self._adapters)

    @property
    def source_timeout(self) -> float:
        return self._source_timeout

    async def search_all(self, query: Query) -> SearchResultSet:
        """
        Search every configured source concurrently.

        Never raises for source failures; the returned set always has one
        settled entry per configured source.
        """
        logger.info(f"Starting cross-source search for: \"{query.description}\"")
        start = time.perf_counter()
        results = SearchResultSet.pending(self._adapters)

        async with asyncio.TaskGroup() as tg:
            for source in self._adapters:
                tg.create_task(self._settle(source, query, results), name=f"search:{source}")

        elapsed = time.perf_counter() - start
        logger.info(f"Cross-source search completed in {elapsed:.2f}s. Results: {results.counts()}")
        return results

    async def search_one(self, source: str, query: Query) -> list[Item]:
        """
        Search a single source under its deadline.

        Raises:
            SourceError: unknown source or adapter failure
            SourceTimeoutError: deadline elapsed
        """
        return await run_with_deadline(self._fetch(source, query), self._source_timeout, source=source)

    async def _fetch(self, source: str, query: Query) -> list[Item]:
        adapter = self._adapters.get(source)
        if adapter is None:
            raise SourceError(source, f"Unknown source. Must be one of: {', '.join(self._adapters)}", retryable=False)

        logger.info(f"Searching {source} for: \"{query.description}\"")
        try:
            items = await adapter.fetch(query)
        except SourceError:
            raise
        except Exception as e:
            raise SourceError(source, str(e) or type(e).__name__) from e
        return list(items)

    async def _gate_and_fetch(self, source: str, query: Query) -> SourceResult:
        if self._delivery_gate is not None and not await self._delivery_gate.is_deliverable(
            query.location_code, source
        ):
            logger.info(f"{source} does not deliver to {query.location_code}")
            return SourceResult.not_deliverable(f"{source} does not deliver to this location")
        return SourceResult.succeeded(await self._fetch(source, query))

    async def _settle(self, source: str, query: Query, results: SearchResultSet) -> None:
        """Resolve one source's slot under its deadline; never raises."""
        try:
            result = await run_with_deadline(
                self._gate_and_fetch(source, query), self._source_timeout, source=source
            )
            results.settle(source, result)
        except SourceTimeoutError as e:
            logger.warning(f"Search timed out for {source}: {e}")
            results.settle(source, SourceResult.failed(e.reason))
        except SourceError as e:
            logger.error(f"Error searching {source}: {e}")
            results.settle(source, SourceResult.failed(e.reason))
        except Exception as e:
            logger.exception(f"Unexpected failure while searching {source}")
            results.settle(source, SourceResult.failed(str(e) or "Search failed"))
