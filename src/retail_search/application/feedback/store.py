"""
Feedback Store - Storage boundary for accepted feedback events.

The aggregator only appends and reads back; a durable or bounded store can
replace the in-memory default without touching the analytics code.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from retail_search.domain.entities import FeedbackEvent


@runtime_checkable
class FeedbackStore(Protocol):
    """Append-only event log with per-item and per-query lookup."""

    def append(self, event: FeedbackEvent) -> None: ...

    def all(self) -> list[FeedbackEvent]: ...

    def by_item(self, item_id: str) -> list[FeedbackEvent]: ...

    def by_query(self, query_id: str) -> list[FeedbackEvent]: ...

    def __len__(self) -> int: ...


class InMemoryFeedbackStore:
    """
    Process-local store. Grows without bound.

    Events are kept in insertion order; item and query indexes hold
    positions into the log.
    """

    def __init__(self) -> None:
        self._events: list[FeedbackEvent] = []
        self._by_item: dict[str, list[int]] = defaultdict(list)
        self._by_query: dict[str, list[int]] = defaultdict(list)

    def append(self, event: FeedbackEvent) -> None:
        position = len(self._events)
        self._events.append(event)
        self._by_item[event.item_id].append(position)
        self._by_query[event.query_id].append(position)

    def all(self) -> list[FeedbackEvent]:
        return list(self._events)

    def by_item(self, item_id: str) -> list[FeedbackEvent]:
        return [self._events[i] for i in self._by_item.get(item_id, ())]

    def by_query(self, query_id: str) -> list[FeedbackEvent]:
        return [self._events[i] for i in self._by_query.get(query_id, ())]

    def __len__(self) -> int:
        return len(self._events)
