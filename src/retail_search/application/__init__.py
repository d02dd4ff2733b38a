"""
Application Layer - Use Cases and Business Logic Orchestration

Contains:
- search: Intent parsing, parallel source search, scoring
- feedback: Feedback ingestion and analytics
- service: Facade combining search, delivery and feedback
"""

from .feedback import FeedbackAggregator, FeedbackStore, InMemoryFeedbackStore
from .search import (
    FeedbackPolicy,
    IntentParser,
    NoFeedbackPolicy,
    ParsedIntent,
    RelevancePenaltyPolicy,
    ScoringConfig,
    ScoringEngine,
    SearchOrchestrator,
)
from .service import Recommendation, RetailSearchService

__all__ = [
    # Search
    "IntentParser",
    "ParsedIntent",
    "SearchOrchestrator",
    "ScoringConfig",
    "ScoringEngine",
    "FeedbackPolicy",
    "NoFeedbackPolicy",
    "RelevancePenaltyPolicy",
    # Feedback
    "FeedbackAggregator",
    "FeedbackStore",
    "InMemoryFeedbackStore",
    # Service
    "RetailSearchService",
    "Recommendation",
]
