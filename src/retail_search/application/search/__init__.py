"""
Cross-Source Search

This module fans a query out to every retailer source and turns the
aggregated items into ranked, explained recommendations.

Key Components:
- IntentParser: Extracts product type, budget and features from free text
- SearchOrchestrator: Parallel per-source fetch with individual deadlines
- ScoringEngine: Scores, explains, ranks and highlights items

Architecture:
    Free text
        │
        ▼
    ┌────────────────────┐
    │   IntentParser     │  ← Budget, features, brand, size/color
    └─────────┬──────────┘
              │ Query
              ▼
    ┌────────────────────┐
    │ SearchOrchestrator │  ← DeliveryGate check + deadline per source
    └─────────┬──────────┘
              │
    ┌─────────┼─────────┐
    ▼         ▼         ▼
  amazon  flipkart   myntra ...  ← Parallel tasks
    │         │         │
    └─────────┼─────────┘
              ▼
    ┌────────────────────┐
    │   ScoringEngine    │  ← Weighted score + explanation + highlights
    └─────────┬──────────┘
              ▼
    Item[] (ranked)
"""

from __future__ import annotations

from .feedback_policy import FeedbackPolicy, NoFeedbackPolicy, RelevancePenaltyPolicy
from .intent_parser import IntentParser, ParsedIntent
from .orchestrator import DEFAULT_SOURCE_TIMEOUT, SearchOrchestrator
from .scoring import ScoreBreakdown, ScoreDimension, ScoringConfig, ScoringEngine, parse_eta_days

__all__ = [
    "DEFAULT_SOURCE_TIMEOUT",
    "FeedbackPolicy",
    "IntentParser",
    "NoFeedbackPolicy",
    "ParsedIntent",
    "RelevancePenaltyPolicy",
    "ScoreBreakdown",
    "ScoreDimension",
    "ScoringConfig",
    "ScoringEngine",
    "SearchOrchestrator",
    "parse_eta_days",
]
