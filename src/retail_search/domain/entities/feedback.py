"""
Feedback Entities - Relevance Signals and Derived Analytics

Key Entities:
    - FeedbackEvent: One relevance verdict for an item shown for a query
    - FeedbackAnalytics: Summary, per-item/per-query breakdowns, recent
      activity and week-over-week trend, recomputed from the full log

All rates are percentages rounded to 2 decimals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Verdict(Enum):
    """Relevance verdict recorded by a user."""

    RELEVANT = "relevant"
    NOT_RELEVANT = "not_relevant"


class TrendDirection(Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass(frozen=True)
class FeedbackEvent:
    """
    An accepted feedback event. Append-only.

    Attributes:
        item_id: Item the verdict refers to
        verdict: relevant / not_relevant
        query_id: Query the item was shown for
        timestamp: Epoch seconds (ingestion time when not supplied)
    """

    item_id: str
    verdict: Verdict
    query_id: str
    timestamp: float

    @property
    def is_relevant(self) -> bool:
        return self.verdict is Verdict.RELEVANT

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "verdict": self.verdict.value,
            "query_id": self.query_id,
            "timestamp": self.timestamp,
        }


def relevance_rate(relevant: int, total: int) -> float:
    """Percentage of relevant verdicts, 0 for an empty population."""
    if total <= 0:
        return 0.0
    return round(relevant / total * 100, 2)


@dataclass(frozen=True)
class FeedbackSummary:
    total: int = 0
    relevant_count: int = 0
    not_relevant_count: int = 0
    relevance_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_feedback": self.total,
            "relevant_count": self.relevant_count,
            "not_relevant_count": self.not_relevant_count,
            "relevance_rate": self.relevance_rate,
        }


@dataclass(frozen=True)
class EntityBreakdown:
    """Verdict counts for one item or one query."""

    entity_id: str
    relevant: int = 0
    not_relevant: int = 0

    @property
    def total(self) -> int:
        return self.relevant + self.not_relevant

    @property
    def relevance_rate(self) -> float:
        return relevance_rate(self.relevant, self.total)

    def to_dict(self, id_key: str = "id") -> dict[str, Any]:
        return {
            id_key: self.entity_id,
            "relevant": self.relevant,
            "not_relevant": self.not_relevant,
            "relevance_rate": self.relevance_rate,
        }


@dataclass(frozen=True)
class RecentActivity:
    """Feedback received in the trailing 24 hours."""

    count: int = 0
    relevant: int = 0
    not_relevant: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"count": self.count, "relevant": self.relevant, "not_relevant": self.not_relevant}


@dataclass(frozen=True)
class WindowStats:
    count: int = 0
    relevance_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "relevance_rate": self.relevance_rate}


@dataclass(frozen=True)
class FeedbackTrend:
    """This week (last 7 days) vs last week (8-14 days ago)."""

    this_week: WindowStats = field(default_factory=WindowStats)
    last_week: WindowStats = field(default_factory=WindowStats)
    direction: TrendDirection = TrendDirection.STABLE
    change: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "this_week": self.this_week.to_dict(),
            "last_week": self.last_week.to_dict(),
            "trend": {"direction": self.direction.value, "change": self.change},
        }


@dataclass(frozen=True)
class FeedbackAnalytics:
    """Analytics derived from the complete feedback log."""

    summary: FeedbackSummary = field(default_factory=FeedbackSummary)
    by_item: tuple[EntityBreakdown, ...] = ()
    by_query: tuple[EntityBreakdown, ...] = ()
    recent: RecentActivity = field(default_factory=RecentActivity)
    trends: FeedbackTrend = field(default_factory=FeedbackTrend)

    def item(self, item_id: str) -> EntityBreakdown | None:
        for breakdown in self.by_item:
            if breakdown.entity_id == item_id:
                return breakdown
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "by_item": [b.to_dict("item_id") for b in self.by_item],
            "by_query": [b.to_dict("query_id") for b in self.by_query],
            "recent": self.recent.to_dict(),
            "trends": self.trends.to_dict(),
        }
