"""
FeedbackAggregator - Relevance feedback ingestion and analytics.

Validation is strict and happens before anything is stored: an event is
either accepted whole or rejected with InvalidFeedbackError.

Analytics are recomputed from the full log on every call:

- summary: totals and overall relevance rate
- by_item / by_query: per-entity verdict counts and rate (first-seen order)
- recent: events with ``timestamp > now - 24h``
- trends: this week (``ts > now - 7d``) vs last week
  (``now - 14d < ts <= now - 7d``); an empty window has rate 0

Rates are percentages rounded to 2 decimals.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from retail_search.domain.entities import (
    EntityBreakdown,
    FeedbackAnalytics,
    FeedbackEvent,
    FeedbackSummary,
    FeedbackTrend,
    RecentActivity,
    TrendDirection,
    Verdict,
    WindowStats,
    relevance_rate,
)
from retail_search.shared.exceptions import InvalidFeedbackError

from .store import FeedbackStore, InMemoryFeedbackStore

logger = logging.getLogger(__name__)

DAY = 24 * 60 * 60
WEEK = 7 * DAY

_ALIASES = {
    "item_id": ("item_id", "itemId", "product_id", "productId"),
    "query_id": ("query_id", "queryId"),
    "verdict": ("verdict", "type"),
    "timestamp": ("timestamp",),
}


def _pick(raw: Mapping[str, Any], name: str) -> Any:
    for key in _ALIASES[name]:
        if key in raw:
            return raw[key]
    return None


def _window(events: Iterable[FeedbackEvent]) -> WindowStats:
    events = list(events)
    relevant = sum(1 for e in events if e.is_relevant)
    return WindowStats(count=len(events), relevance_rate=relevance_rate(relevant, len(events)))


def _breakdowns(events: list[FeedbackEvent], key: Callable[[FeedbackEvent], str]) -> tuple[EntityBreakdown, ...]:
    counts: dict[str, list[int]] = {}
    for event in events:
        bucket = counts.setdefault(key(event), [0, 0])
        bucket[0 if event.is_relevant else 1] += 1
    return tuple(
        EntityBreakdown(entity_id=entity_id, relevant=relevant, not_relevant=not_relevant)
        for entity_id, (relevant, not_relevant) in counts.items()
    )


class FeedbackAggregator:
    """
    Validates, stores and analyses relevance feedback.

    Args:
        store: Event storage (in-memory by default)
        clock: Returns "now" in epoch seconds; injectable for tests
    """

    def __init__(
        self,
        store: FeedbackStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store if store is not None else InMemoryFeedbackStore()
        self._clock = clock

    @property
    def store(self) -> FeedbackStore:
        return self._store

    def __len__(self) -> int:
        return len(self._store)

    # ── Ingestion ───────────────────────────────────────────────────────

    def validate(self, event: FeedbackEvent | Mapping[str, Any]) -> FeedbackEvent:
        """
        Normalise and validate an event without storing it.

        Raises:
            InvalidFeedbackError: missing/non-string ids, unknown verdict,
                or a negative, non-finite or non-numeric timestamp
        """
        if isinstance(event, FeedbackEvent):
            raw: Mapping[str, Any] = event.to_dict()
            raw = {**raw, "verdict": event.verdict}
        elif isinstance(event, Mapping):
            raw = event
        else:
            msg = f"Feedback must be a FeedbackEvent or a mapping, got {type(event).__name__}"
            raise InvalidFeedbackError(msg, value=event)

        item_id = _pick(raw, "item_id")
        if not isinstance(item_id, str) or not item_id.strip():
            raise InvalidFeedbackError("Item ID is required and must be a string", field_name="item_id", value=item_id)

        query_id = _pick(raw, "query_id")
        if not isinstance(query_id, str) or not query_id.strip():
            raise InvalidFeedbackError(
                "Query ID is required and must be a string", field_name="query_id", value=query_id
            )

        verdict = _pick(raw, "verdict")
        if not isinstance(verdict, Verdict):
            try:
                verdict = Verdict(verdict)
            except (TypeError, ValueError):
                msg = 'Verdict must be either "relevant" or "not_relevant"'
                raise InvalidFeedbackError(msg, field_name="verdict", value=verdict) from None

        timestamp = _pick(raw, "timestamp")
        if timestamp is None:
            timestamp = self._clock()
        elif (
            isinstance(timestamp, bool)
            or not isinstance(timestamp, int | float)
            or not math.isfinite(timestamp)
            or timestamp < 0
        ):
            raise InvalidFeedbackError(
                "Timestamp must be a finite non-negative number", field_name="timestamp", value=timestamp
            )

        return FeedbackEvent(item_id=item_id, verdict=verdict, query_id=query_id, timestamp=float(timestamp))

    def submit(self, event: FeedbackEvent | Mapping[str, Any]) -> FeedbackEvent:
        """Validate and append one event; rejected events are never stored."""
        accepted = self.validate(event)
        self._store.append(accepted)
        logger.info(
            f"Feedback stored for item {accepted.item_id}: {accepted.verdict.value}. "
            f"Total feedback count: {len(self._store)}"
        )
        return accepted

    # ── Queries ─────────────────────────────────────────────────────────

    def by_item(self, item_id: str) -> list[FeedbackEvent]:
        return self._store.by_item(item_id)

    def by_query(self, query_id: str) -> list[FeedbackEvent]:
        return self._store.by_query(query_id)

    def analytics(self) -> FeedbackAnalytics:
        """Recompute analytics from the full event log."""
        events = self._store.all()
        now = self._clock()

        relevant = sum(1 for e in events if e.is_relevant)
        summary = FeedbackSummary(
            total=len(events),
            relevant_count=relevant,
            not_relevant_count=len(events) - relevant,
            relevance_rate=relevance_rate(relevant, len(events)),
        )

        recent_events = [e for e in events if e.timestamp > now - DAY]
        recent_relevant = sum(1 for e in recent_events if e.is_relevant)
        recent = RecentActivity(
            count=len(recent_events),
            relevant=recent_relevant,
            not_relevant=len(recent_events) - recent_relevant,
        )

        analytics = FeedbackAnalytics(
            summary=summary,
            by_item=_breakdowns(events, lambda e: e.item_id),
            by_query=_breakdowns(events, lambda e: e.query_id),
            recent=recent,
            trends=self._trend(events, now),
        )
        logger.info(
            f"Analytics generated: {summary.relevance_rate:.2f}% relevance rate from {summary.total} feedback entries"
        )
        return analytics

    @staticmethod
    def _trend(events: list[FeedbackEvent], now: float) -> FeedbackTrend:
        this_week = [e for e in events if e.timestamp > now - WEEK]
        last_week = [e for e in events if now - 2 * WEEK < e.timestamp <= now - WEEK]

        current, previous = _window(this_week), _window(last_week)
        delta = _raw_rate(this_week) - _raw_rate(last_week)
        if delta > 0:
            direction = TrendDirection.IMPROVING
        elif delta < 0:
            direction = TrendDirection.DECLINING
        else:
            direction = TrendDirection.STABLE
        return FeedbackTrend(this_week=current, last_week=previous, direction=direction, change=round(abs(delta), 2))


def _raw_rate(events: list[FeedbackEvent]) -> float:
    if not events:
        return 0.0
    return sum(1 for e in events if e.is_relevant) / len(events) * 100
