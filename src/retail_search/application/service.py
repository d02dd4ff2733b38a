"""
RetailSearchService - Facade over search, delivery and feedback.

This is the surface an outer layer (HTTP routes, CLI) talks to:

- search(query) -> SearchResultSet
- recommend(query) -> Recommendation (search + rank + highlights)
- validate_delivery / get_delivery_info
- submit_feedback / get_analytics
- refresh_weights: feed analytics back into the ScoringEngine
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from retail_search.domain.entities import SearchResultSet, SourceResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    from retail_search.domain.entities import (
        DeliveryDetail,
        FeedbackAnalytics,
        FeedbackEvent,
        Item,
        Query,
    )
    from retail_search.infrastructure.delivery import DeliveryGate

    from .feedback import FeedbackAggregator
    from .search import IntentParser, ScoringConfig, ScoringEngine, SearchOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recommendation:
    """
    Outcome of ``recommend``.

    ``results`` holds every source's slot; successful slots carry the scored
    items in rank order. ``ranked`` is the cross-source ranking.
    """

    query: Query
    results: SearchResultSet
    ranked: list[Item] = field(default_factory=list)

    @property
    def top_pick(self) -> Item | None:
        return self.ranked[0] if self.ranked else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query.to_dict(),
            "results": self.results.to_dict(),
            "recommendations": [item.to_dict() for item in self.ranked],
            "total": len(self.ranked),
        }


class RetailSearchService:
    """
    Coordinates the orchestrator, scoring engine, delivery gate and feedback.

    Args:
        orchestrator: Parallel source search
        scoring: Ranking, explanations and highlights
        delivery_gate: Location validation and delivery terms
        feedback: Feedback ingestion and analytics
        intent_parser: Free text to Query
    """

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        scoring: ScoringEngine,
        delivery_gate: DeliveryGate,
        feedback: FeedbackAggregator,
        intent_parser: IntentParser,
    ) -> None:
        self._orchestrator = orchestrator
        self._scoring = scoring
        self._delivery_gate = delivery_gate
        self._feedback = feedback
        self._intent_parser = intent_parser

    @property
    def sources(self) -> list[str]:
        return self._orchestrator.sources

    # ── Search ──────────────────────────────────────────────────────────

    def build_query(self, text: str, location_code: str, *, query_id: str | None = None) -> Query:
        """Parse free text into a Query (raises InvalidQueryError)."""
        return self._intent_parser.parse(text).to_query(location_code, query_id=query_id)

    async def search(self, query: Query) -> SearchResultSet:
        return await self._orchestrator.search_all(query)

    async def recommend(self, query: Query) -> Recommendation:
        """
        Search all sources, then rank and highlight the successful items.

        Failed and not-deliverable sources keep their slots but contribute
        nothing to the ranking.
        """
        results = await self._orchestrator.search_all(query)

        batch: list[Item] = []
        for source, result in results.items():
            if result.ok:
                batch.extend(item if item.source == source else replace(item, source=source) for item in result.items)

        ranked = self._scoring.assign_highlights(self._scoring.rank(batch, query))

        merged = results.copy()
        for source, result in results.items():
            if result.ok:
                merged.settle(source, SourceResult.succeeded(i for i in ranked if i.source == source))

        logger.info(f"Ranked {len(ranked)} items from {sum(1 for r in results.values() if r.ok)} sources")
        return Recommendation(query=query, results=merged, ranked=ranked)

    # ── Delivery ────────────────────────────────────────────────────────

    async def validate_delivery(self, location_code: str, source: str) -> bool:
        return await self._delivery_gate.is_deliverable(location_code, source)

    async def get_delivery_info(self, location_code: str, source: str) -> DeliveryDetail:
        return await self._delivery_gate.get_delivery_info(location_code, source)

    # ── Feedback ────────────────────────────────────────────────────────

    def submit_feedback(self, event: FeedbackEvent | Mapping[str, Any]) -> FeedbackEvent:
        return self._feedback.submit(event)

    def get_analytics(self) -> FeedbackAnalytics:
        return self._feedback.analytics()

    def refresh_weights(self) -> ScoringConfig:
        """Retune scoring from the current feedback analytics."""
        return self._scoring.learn_from(self._feedback.analytics())
