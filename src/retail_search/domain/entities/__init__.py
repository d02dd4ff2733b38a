"""Domain entities for Retail Search."""

from .delivery import DeliveryDetail, LocationInfo
from .feedback import (
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
from .product import DeliveryInfo, Highlight, HighlightKind, Item
from .query import BudgetRange, Query, QueryFilters
from .search import SearchResultSet, SourceResult, SourceStatus

__all__ = [
    # Product
    "Item",
    "DeliveryInfo",
    "Highlight",
    "HighlightKind",
    # Query
    "Query",
    "BudgetRange",
    "QueryFilters",
    # Search results
    "SearchResultSet",
    "SourceResult",
    "SourceStatus",
    # Feedback
    "FeedbackEvent",
    "Verdict",
    "FeedbackAnalytics",
    "FeedbackSummary",
    "EntityBreakdown",
    "RecentActivity",
    "WindowStats",
    "FeedbackTrend",
    "TrendDirection",
    "relevance_rate",
    # Delivery
    "LocationInfo",
    "DeliveryDetail",
]
