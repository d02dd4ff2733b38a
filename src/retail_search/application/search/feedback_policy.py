"""
Feedback Policies - How relevance feedback retunes the ScoringConfig.

A policy is a pure function ``adjust(config, analytics) -> ScoringConfig``;
the ScoringEngine swaps in whatever it returns. Policies never mutate the
config they are given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from retail_search.domain.entities import FeedbackAnalytics

    from .scoring import ScoringConfig

logger = logging.getLogger(__name__)


class FeedbackPolicy(Protocol):
    """Strategy that derives a new ScoringConfig from feedback analytics."""

    def adjust(self, config: ScoringConfig, analytics: FeedbackAnalytics) -> ScoringConfig: ...


class NoFeedbackPolicy:
    """Leaves the config untouched."""

    def adjust(self, config: ScoringConfig, analytics: FeedbackAnalytics) -> ScoringConfig:
        return config


@dataclass(frozen=True)
class RelevancePenaltyPolicy:
    """
    Penalise items users keep marking as not relevant.

    An item with at least ``min_events`` verdicts and a relevance rate below
    ``threshold`` (percent) loses ``(threshold - rate) / threshold * max_penalty``
    points of match score. Penalties are recomputed from scratch on every
    call, so an item whose rate recovers loses its penalty.
    """

    min_events: int = 3
    threshold: float = 50.0
    max_penalty: float = 20.0

    def penalty_for(self, rate: float) -> float:
        if self.threshold <= 0 or rate >= self.threshold:
            return 0.0
        return round((self.threshold - rate) / self.threshold * self.max_penalty, 2)

    def adjust(self, config: ScoringConfig, analytics: FeedbackAnalytics) -> ScoringConfig:
        penalties: dict[str, float] = {}
        for breakdown in analytics.by_item:
            if breakdown.total < self.min_events:
                continue
            penalty = self.penalty_for(breakdown.relevance_rate)
            if penalty > 0:
                penalties[breakdown.entity_id] = penalty

        if penalties:
            logger.info(f"Penalising {len(penalties)} items with low relevance feedback")
        return replace(config, item_penalties=penalties)
