"""Tests for SearchOrchestrator: fan-out, deadlines, failure isolation."""

from __future__ import annotations

import asyncio
import time

import pytest

from retail_search.application.search import ScoringEngine, SearchOrchestrator
from retail_search.domain.entities import HighlightKind, SourceStatus
from retail_search.infrastructure.delivery import DeliveryGate, DeliveryProfile
from retail_search.shared.exceptions import SourceError, SourceTimeoutError

from .fakes import FailingAdapter, FakeLookup, SlowAdapter, StaticAdapter, build_item


def items_for(source: str, count: int):
    return [
        build_item(source=source, item_id=f"{source}-{n}", price=2000 + n * 300, rating=4.0 + n / 10)
        for n in range(count)
    ]


class TestConstruction:
    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            SearchOrchestrator({}, source_timeout=0)

    def test_sources_keep_configuration_order(self):
        orchestrator = SearchOrchestrator({"b": StaticAdapter("b"), "a": StaticAdapter("a")})
        assert orchestrator.sources == ["b", "a"]


class TestSearchAll:
    @pytest.mark.asyncio
    async def test_one_entry_per_source(self, query):
        orchestrator = SearchOrchestrator(
            {"a": StaticAdapter("a", items_for("a", 2)), "b": FailingAdapter("b"), "c": StaticAdapter("c")}
        )
        results = await orchestrator.search_all(query)
        assert set(results) == {"a", "b", "c"}
        assert results.is_complete

    @pytest.mark.asyncio
    async def test_empty_source_set(self, query):
        results = await SearchOrchestrator({}).search_all(query)
        assert len(results) == 0

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, query):
        orchestrator = SearchOrchestrator(
            {"a": StaticAdapter("a", items_for("a", 2)), "b": FailingAdapter("b", ValueError("bad payload"))}
        )
        results = await orchestrator.search_all(query)
        assert results["a"].status is SourceStatus.SUCCESS
        assert len(results["a"].items) == 2
        assert results["b"].status is SourceStatus.ERROR
        assert results["b"].error == "bad payload"

    @pytest.mark.asyncio
    async def test_source_error_reason_is_recorded(self, query):
        orchestrator = SearchOrchestrator({"b": FailingAdapter("b", SourceError("b", "HTTP 503"))})
        results = await orchestrator.search_all(query)
        assert results["b"].error == "HTTP 503"

    @pytest.mark.asyncio
    async def test_timeout_marks_error_and_cancels(self, query):
        slow = SlowAdapter("c", delay=5)
        orchestrator = SearchOrchestrator(
            {"a": StaticAdapter("a", items_for("a", 1)), "c": slow},
            source_timeout=0.05,
        )
        results = await orchestrator.search_all(query)
        assert results["a"].status is SourceStatus.SUCCESS
        assert results["c"].status is SourceStatus.ERROR
        assert "timeout" in results["c"].error.lower()
        assert slow.cancelled is True

    @pytest.mark.asyncio
    async def test_sources_run_concurrently(self, query):
        adapters = {name: SlowAdapter(name, delay=0.1) for name in ("a", "b", "c", "d")}
        orchestrator = SearchOrchestrator(adapters, source_timeout=1)
        start = time.perf_counter()
        await orchestrator.search_all(query)
        assert time.perf_counter() - start < 0.35

    @pytest.mark.asyncio
    async def test_wall_clock_bounded_by_deadline(self, query):
        adapters = {name: SlowAdapter(name, delay=5) for name in ("a", "b", "c")}
        orchestrator = SearchOrchestrator(adapters, source_timeout=0.05)
        start = time.perf_counter()
        results = await orchestrator.search_all(query)
        assert time.perf_counter() - start < 0.5
        assert all(r.status is SourceStatus.ERROR for r in results.values())

    @pytest.mark.asyncio
    async def test_concurrent_searches_do_not_share_slots(self, query):
        orchestrator = SearchOrchestrator({"a": StaticAdapter("a", items_for("a", 1))})
        first, second = await asyncio.gather(orchestrator.search_all(query), orchestrator.search_all(query))
        assert first is not second
        assert first["a"] == second["a"]


class TestDeliveryGateIntegration:
    @pytest.mark.asyncio
    async def test_not_deliverable_skips_fetch(self):
        from retail_search.domain.entities import Query

        local = StaticAdapter("local", items_for("local", 1))
        gate = DeliveryGate(FakeLookup(), profiles={"local": DeliveryProfile(serviceable_prefixes=("11",))})
        orchestrator = SearchOrchestrator(
            {"local": local, "amazon": StaticAdapter("amazon", items_for("amazon", 1))},
            delivery_gate=gate,
        )
        results = await orchestrator.search_all(Query(description="running shoes", location_code="560001"))
        assert results["local"].status is SourceStatus.NOT_DELIVERABLE
        assert local.calls == 0
        assert results["amazon"].status is SourceStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_malformed_location_marks_every_source(self):
        from retail_search.domain.entities import Query

        gate = DeliveryGate(FakeLookup())
        orchestrator = SearchOrchestrator({"a": StaticAdapter("a"), "b": StaticAdapter("b")}, delivery_gate=gate)
        results = await orchestrator.search_all(Query(description="shoes", location_code="1234"))
        assert all(r.status is SourceStatus.NOT_DELIVERABLE for r in results.values())

    @pytest.mark.asyncio
    async def test_lookup_outage_still_searches(self, query):
        gate = DeliveryGate(FakeLookup(unreachable=True))
        orchestrator = SearchOrchestrator({"a": StaticAdapter("a", items_for("a", 1))}, delivery_gate=gate)
        results = await orchestrator.search_all(query)
        assert results["a"].status is SourceStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_hanging_lookup_is_bounded_by_deadline(self, query):
        class HangingLookup(FakeLookup):
            async def lookup(self, location_code):
                self.calls.append(location_code)
                await asyncio.sleep(1.0)
                return await super().lookup(location_code)

        adapter = StaticAdapter("a", items_for("a", 1))
        gate = DeliveryGate(HangingLookup())
        orchestrator = SearchOrchestrator({"a": adapter}, delivery_gate=gate, source_timeout=0.1)

        start = time.perf_counter()
        results = await orchestrator.search_all(query)
        elapsed = time.perf_counter() - start

        assert elapsed < 0.5
        assert results["a"].status is SourceStatus.ERROR
        assert "timeout" in results["a"].error.lower()
        assert adapter.calls == 0


class TestSearchOne:
    @pytest.mark.asyncio
    async def test_unknown_source(self, query):
        with pytest.raises(SourceError, match="Unknown source"):
            await SearchOrchestrator({}).search_one("nowhere", query)

    @pytest.mark.asyncio
    async def test_wraps_adapter_errors(self, query):
        orchestrator = SearchOrchestrator({"b": FailingAdapter("b", KeyError("price"))})
        with pytest.raises(SourceError) as exc_info:
            await orchestrator.search_one("b", query)
        assert exc_info.value.source == "b"

    @pytest.mark.asyncio
    async def test_timeout(self, query):
        orchestrator = SearchOrchestrator({"c": SlowAdapter("c", delay=5)}, source_timeout=0.01)
        with pytest.raises(SourceTimeoutError):
            await orchestrator.search_one("c", query)


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_four_sources_mixed_outcomes(self, query):
        orchestrator = SearchOrchestrator(
            {
                "A": StaticAdapter("A", items_for("A", 3)),
                "B": FailingAdapter("B"),
                "C": SlowAdapter("C", delay=5, items=items_for("C", 2)),
                "D": StaticAdapter("D", []),
            },
            source_timeout=0.05,
        )
        results = await orchestrator.search_all(query)

        assert results["A"].status is SourceStatus.SUCCESS
        assert len(results["A"].items) == 3
        assert results["B"].status is SourceStatus.ERROR
        assert results["C"].status is SourceStatus.ERROR
        assert "timeout" in results["C"].error.lower()
        assert results["D"].status is SourceStatus.SUCCESS
        assert results["D"].items == ()

        engine = ScoringEngine()
        batch = results.successful_items()
        assert {i.source for i in batch} == {"A"}

        ranked = engine.assign_highlights(engine.rank(batch, query))
        assert len(ranked) == 3
        assert HighlightKind.TOP_PICK in ranked[0].highlight_kinds
        scores = [i.match_score for i in ranked]
        assert scores == sorted(scores, reverse=True)
