"""Tests for FeedbackAggregator: validation, storage and analytics."""

from __future__ import annotations

import math

import pytest

from retail_search.application.feedback import FeedbackAggregator, FeedbackStore, InMemoryFeedbackStore
from retail_search.application.feedback.aggregator import DAY, WEEK
from retail_search.domain.entities import FeedbackEvent, TrendDirection, Verdict
from retail_search.shared.exceptions import InvalidFeedbackError, ValidationError

NOW = 1_700_000_000.0


@pytest.fixture
def aggregator():
    return FeedbackAggregator(clock=lambda: NOW)


def event(item="amazon-1", verdict="relevant", query="q-1", timestamp=NOW - 60):
    return {"item_id": item, "verdict": verdict, "query_id": query, "timestamp": timestamp}


# ============================================================
# Validation
# ============================================================


class TestValidation:
    @pytest.mark.parametrize(
        ("payload", "field_name"),
        [
            ({"verdict": "relevant", "query_id": "q"}, "item_id"),
            (event(item=42), "item_id"),
            (event(item=""), "item_id"),
            (event(query=None), "query_id"),
            (event(query=["q"]), "query_id"),
            (event(verdict="maybe"), "verdict"),
            (event(verdict=None), "verdict"),
            (event(timestamp=-1), "timestamp"),
            (event(timestamp="yesterday"), "timestamp"),
            (event(timestamp=True), "timestamp"),
            (event(timestamp=math.nan), "timestamp"),
            (event(timestamp=math.inf), "timestamp"),
        ],
    )
    def test_rejected(self, aggregator, payload, field_name):
        with pytest.raises(InvalidFeedbackError) as exc_info:
            aggregator.submit(payload)
        assert exc_info.value.field_name == field_name
        assert isinstance(exc_info.value, ValidationError)
        assert len(aggregator) == 0

    def test_rejected_events_do_not_affect_analytics(self, aggregator):
        aggregator.submit(event())
        with pytest.raises(InvalidFeedbackError):
            aggregator.submit(event(verdict="meh"))
        assert aggregator.analytics().summary.total == 1

    def test_rejects_non_mapping(self, aggregator):
        with pytest.raises(InvalidFeedbackError):
            aggregator.submit("relevant")

    def test_accepts_event_objects(self, aggregator):
        accepted = aggregator.submit(FeedbackEvent("amazon-1", Verdict.NOT_RELEVANT, "q-1", NOW))
        assert accepted.verdict is Verdict.NOT_RELEVANT

    def test_accepts_camel_case_aliases(self, aggregator):
        accepted = aggregator.submit({"productId": "p-1", "queryId": "q-9", "type": "not_relevant"})
        assert accepted.item_id == "p-1"
        assert accepted.query_id == "q-9"
        assert accepted.verdict is Verdict.NOT_RELEVANT

    def test_missing_timestamp_uses_clock(self, aggregator):
        accepted = aggregator.submit({"item_id": "a", "query_id": "q", "verdict": "relevant"})
        assert accepted.timestamp == NOW

    def test_zero_timestamp_allowed(self, aggregator):
        assert aggregator.submit(event(timestamp=0)).timestamp == 0


# ============================================================
# Queries
# ============================================================


class TestQueries:
    def test_by_item_and_query(self, aggregator):
        aggregator.submit(event(item="a", query="q1"))
        aggregator.submit(event(item="b", query="q1"))
        aggregator.submit(event(item="a", query="q2", verdict="not_relevant"))

        assert [e.query_id for e in aggregator.by_item("a")] == ["q1", "q2"]
        assert [e.item_id for e in aggregator.by_query("q1")] == ["a", "b"]
        assert aggregator.by_item("missing") == []

    def test_custom_store(self):
        store = InMemoryFeedbackStore()
        assert isinstance(store, FeedbackStore)
        aggregator = FeedbackAggregator(store, clock=lambda: NOW)
        aggregator.submit(event())
        assert len(store) == 1
        assert aggregator.store is store


# ============================================================
# Analytics
# ============================================================


class TestSummary:
    def test_empty(self, aggregator):
        analytics = aggregator.analytics()
        assert analytics.summary.total == 0
        assert analytics.summary.relevance_rate == 0
        assert analytics.by_item == ()
        assert analytics.trends.direction is TrendDirection.STABLE
        assert analytics.trends.change == 0

    def test_rate_is_rounded_percentage(self, aggregator):
        for verdict in ("relevant", "not_relevant", "not_relevant"):
            aggregator.submit(event(verdict=verdict))
        summary = aggregator.analytics().summary
        assert summary.total == 3
        assert summary.relevant_count == 1
        assert summary.not_relevant_count == 2
        assert summary.relevance_rate == 33.33

    def test_by_item_breakdown(self, aggregator):
        aggregator.submit(event(item="a"))
        aggregator.submit(event(item="a", verdict="not_relevant"))
        aggregator.submit(event(item="b"))
        analytics = aggregator.analytics()

        a = analytics.item("a")
        assert (a.relevant, a.not_relevant, a.relevance_rate) == (1, 1, 50.0)
        assert analytics.item("b").relevance_rate == 100.0
        assert [b.entity_id for b in analytics.by_item] == ["a", "b"]

    def test_by_query_breakdown(self, aggregator):
        aggregator.submit(event(query="q1", verdict="not_relevant"))
        aggregator.submit(event(query="q2"))
        by_query = {b.entity_id: b for b in aggregator.analytics().by_query}
        assert by_query["q1"].relevance_rate == 0
        assert by_query["q2"].relevance_rate == 100

    def test_recomputed_after_submit(self, aggregator):
        aggregator.submit(event())
        assert aggregator.analytics().summary.total == 1
        aggregator.submit(event())
        assert aggregator.analytics().summary.total == 2


class TestWindows:
    def test_recent_is_last_24_hours(self, aggregator):
        aggregator.submit(event(timestamp=NOW - 60))
        aggregator.submit(event(timestamp=NOW - DAY, verdict="not_relevant"))
        aggregator.submit(event(timestamp=NOW - 2 * DAY))
        recent = aggregator.analytics().recent
        assert recent.count == 1
        assert recent.relevant == 1
        assert recent.not_relevant == 0

    def test_week_boundaries(self, aggregator):
        aggregator.submit(event(timestamp=NOW - WEEK + 1))  # this week
        aggregator.submit(event(timestamp=NOW - WEEK))  # last week (inclusive upper bound)
        aggregator.submit(event(timestamp=NOW - 2 * WEEK + 1))  # last week
        aggregator.submit(event(timestamp=NOW - 2 * WEEK))  # older than both
        trends = aggregator.analytics().trends
        assert trends.this_week.count == 1
        assert trends.last_week.count == 2


class TestTrend:
    def test_improving(self, aggregator):
        aggregator.submit(event(timestamp=NOW - DAY))
        aggregator.submit(event(timestamp=NOW - 8 * DAY, verdict="not_relevant"))
        aggregator.submit(event(timestamp=NOW - 9 * DAY))
        trends = aggregator.analytics().trends
        assert trends.this_week.relevance_rate == 100
        assert trends.last_week.relevance_rate == 50
        assert trends.direction is TrendDirection.IMPROVING
        assert trends.change == 50

    def test_declining(self, aggregator):
        aggregator.submit(event(timestamp=NOW - DAY, verdict="not_relevant"))
        aggregator.submit(event(timestamp=NOW - 8 * DAY))
        trends = aggregator.analytics().trends
        assert trends.direction is TrendDirection.DECLINING
        assert trends.change == 100

    def test_equal_rates_are_stable(self, aggregator):
        aggregator.submit(event(timestamp=NOW - DAY))
        aggregator.submit(event(timestamp=NOW - 8 * DAY))
        assert aggregator.analytics().trends.direction is TrendDirection.STABLE

    def test_cold_start_only_old_events(self, aggregator):
        aggregator.submit(event(timestamp=NOW - 30 * DAY))
        trends = aggregator.analytics().trends
        assert trends.this_week.relevance_rate == 0
        assert trends.last_week.relevance_rate == 0
        assert trends.direction is TrendDirection.STABLE

    def test_empty_last_week_counts_as_zero(self, aggregator):
        aggregator.submit(event(timestamp=NOW - DAY))
        trends = aggregator.analytics().trends
        assert trends.direction is TrendDirection.IMPROVING
        assert trends.change == 100

    def test_change_rounded(self, aggregator):
        for verdict in ("relevant", "not_relevant", "not_relevant"):
            aggregator.submit(event(timestamp=NOW - DAY, verdict=verdict))
        trends = aggregator.analytics().trends
        assert trends.change == 33.33


class TestToDict:
    def test_shape(self, aggregator):
        aggregator.submit(event())
        data = aggregator.analytics().to_dict()
        assert data["summary"]["total_feedback"] == 1
        assert data["by_item"][0]["item_id"] == "amazon-1"
        assert data["by_query"][0]["query_id"] == "q-1"
        assert data["trends"]["trend"]["direction"] == "improving"
