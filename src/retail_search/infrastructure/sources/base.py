"""
Source adapter contract.

A SourceAdapter is the pluggable fetch capability for one retailer. The
orchestrator only needs ``fetch(query) -> list[Item]``; adapters may raise
any exception (SourceError preferred) and may be slow - the orchestrator
applies the deadline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from retail_search.domain.entities import Item, Query


@runtime_checkable
class SourceAdapter(Protocol):
    """Fetch capability for one named source."""

    name: str

    async def fetch(self, query: Query) -> list[Item]: ...
