"""Tests for RetailSearchService: the facade used by outer layers."""

from __future__ import annotations

import pytest

from retail_search.application import (
    FeedbackAggregator,
    IntentParser,
    RelevancePenaltyPolicy,
    RetailSearchService,
    ScoringEngine,
    SearchOrchestrator,
)
from retail_search.domain.entities import HighlightKind, SourceStatus
from retail_search.infrastructure.delivery import DeliveryGate
from retail_search.infrastructure.sources import build_demo_adapters
from retail_search.shared.exceptions import InvalidFeedbackError, InvalidLocationError

from .fakes import FailingAdapter, FakeLookup, SlowAdapter, StaticAdapter, build_item

NOW = 1_700_000_000.0


def make_service(adapters, *, lookup=None, policy=None, timeout=1.0) -> RetailSearchService:
    gate = DeliveryGate(lookup or FakeLookup())
    return RetailSearchService(
        orchestrator=SearchOrchestrator(adapters, delivery_gate=gate, source_timeout=timeout),
        scoring=ScoringEngine(feedback_policy=policy),
        delivery_gate=gate,
        feedback=FeedbackAggregator(clock=lambda: NOW),
        intent_parser=IntentParser(),
    )


class TestRecommend:
    @pytest.mark.asyncio
    async def test_demo_catalogue(self):
        service = make_service(build_demo_adapters(["amazon", "flipkart", "myntra", "meesho"]))
        query = service.build_query("running shoes under 3000", "110001")
        recommendation = await service.recommend(query)

        assert set(recommendation.results) == {"amazon", "flipkart", "myntra", "meesho"}
        assert all(r.status is SourceStatus.SUCCESS for r in recommendation.results.values())
        assert recommendation.ranked
        assert recommendation.top_pick is recommendation.ranked[0]
        assert HighlightKind.TOP_PICK in recommendation.top_pick.highlight_kinds
        scores = [i.match_score for i in recommendation.ranked]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_result_set_carries_ranked_items(self):
        service = make_service(build_demo_adapters(["amazon", "flipkart"]))
        recommendation = await service.recommend(service.build_query("running shoes", "110001"))

        for source in ("amazon", "flipkart"):
            items = recommendation.results[source].items
            assert items
            assert all(i.explanation.startswith("Recommended because") for i in items)
            assert list(items) == [i for i in recommendation.ranked if i.source == source]

    @pytest.mark.asyncio
    async def test_only_successful_sources_are_ranked(self, query):
        service = make_service(
            {
                "A": StaticAdapter("A", [build_item(source="A", item_id=f"A-{n}") for n in range(3)]),
                "B": FailingAdapter("B"),
                "C": SlowAdapter("C", delay=5, items=[build_item(source="C", item_id="C-1")]),
                "D": StaticAdapter("D", []),
            },
            timeout=0.05,
        )
        recommendation = await service.recommend(query)

        assert {i.source for i in recommendation.ranked} == {"A"}
        assert len(recommendation.ranked) == 3
        assert recommendation.results["B"].status is SourceStatus.ERROR
        assert "timeout" in recommendation.results["C"].error.lower()
        assert recommendation.results["D"].items == ()

    @pytest.mark.asyncio
    async def test_no_results(self, query):
        service = make_service({"A": StaticAdapter("A", [])})
        recommendation = await service.recommend(query)
        assert recommendation.ranked == []
        assert recommendation.top_pick is None

    @pytest.mark.asyncio
    async def test_to_dict(self, query):
        service = make_service({"A": StaticAdapter("A", [build_item(source="A")])})
        data = (await service.recommend(query)).to_dict()
        assert data["total"] == 1
        assert data["results"]["A"]["status"] == "success"
        assert data["recommendations"][0]["highlights"]


class TestDelivery:
    @pytest.mark.asyncio
    async def test_validate_delivery(self):
        service = make_service({})
        assert await service.validate_delivery("110001", "amazon") is True
        assert await service.validate_delivery("11", "amazon") is False

    @pytest.mark.asyncio
    async def test_get_delivery_info(self):
        service = make_service({})
        detail = await service.get_delivery_info("110001", "flipkart")
        assert detail.estimated_days == 2

    @pytest.mark.asyncio
    async def test_get_delivery_info_rejects_bad_code(self):
        with pytest.raises(InvalidLocationError):
            await make_service({}).get_delivery_info("abcdef", "flipkart")


class TestFeedbackLoop:
    def test_submit_and_analytics(self):
        service = make_service({})
        service.submit_feedback({"item_id": "amazon-0001", "query_id": "q", "verdict": "relevant"})
        assert service.get_analytics().summary.total == 1

    def test_invalid_feedback_raises(self):
        with pytest.raises(InvalidFeedbackError):
            make_service({}).submit_feedback({"item_id": 1, "query_id": "q", "verdict": "relevant"})

    @pytest.mark.asyncio
    async def test_refresh_weights_demotes_disliked_item(self, query):
        liked = build_item(source="A", item_id="liked")
        disliked = build_item(source="A", item_id="disliked")
        service = make_service({"A": StaticAdapter("A", [disliked, liked])}, policy=RelevancePenaltyPolicy())

        before = await service.recommend(query)
        assert [i.item_id for i in before.ranked] == ["disliked", "liked"]

        for _ in range(3):
            service.submit_feedback({"item_id": "disliked", "query_id": query.query_id, "verdict": "not_relevant"})
        config = service.refresh_weights()

        assert config.item_penalties == {"disliked": 20.0}
        after = await service.recommend(query)
        assert [i.item_id for i in after.ranked] == ["liked", "disliked"]
