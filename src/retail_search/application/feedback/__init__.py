"""
Relevance Feedback

- FeedbackStore: append/query storage boundary
- InMemoryFeedbackStore: default process-local store
- FeedbackAggregator: validation, ingestion and analytics
"""

from .aggregator import FeedbackAggregator
from .store import FeedbackStore, InMemoryFeedbackStore

__all__ = [
    "FeedbackAggregator",
    "FeedbackStore",
    "InMemoryFeedbackStore",
]
