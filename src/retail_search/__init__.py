"""
Retail Search - Cross-Retailer Product Search and Recommendation

Fans a product query out to several retailer sources in parallel, ranks
and explains the combined results, and folds relevance feedback back into
the ranking.

Usage:
    from retail_search import create_container

    service = create_container().service()
    query = service.build_query("running shoes under 3000", "110001")
    recommendation = await service.recommend(query)

    for item in recommendation.ranked:
        print(f"{item.match_score:.0f}% {item.name}: {item.explanation}")

Features:
    - Per-source deadlines with isolated failures
    - Location validation with a 24 h expiring lookup cache
    - Weighted, explainable scoring with batch highlights
    - Feedback analytics and feedback-driven penalties
"""

from .application import (
    FeedbackAggregator,
    IntentParser,
    Recommendation,
    RetailSearchService,
    ScoringConfig,
    ScoringEngine,
    SearchOrchestrator,
)
from .config import Settings
from .container import ApplicationContainer, create_container
from .domain.entities import FeedbackEvent, Item, Query, SearchResultSet, SourceResult, SourceStatus

__version__ = "0.1.0"

__all__ = [
    # Wiring
    "ApplicationContainer",
    "create_container",
    "Settings",
    # Services
    "RetailSearchService",
    "Recommendation",
    "SearchOrchestrator",
    "ScoringEngine",
    "ScoringConfig",
    "FeedbackAggregator",
    "IntentParser",
    # Entities
    "Item",
    "Query",
    "SearchResultSet",
    "SourceResult",
    "SourceStatus",
    "FeedbackEvent",
]
