"""
ScoringEngine - Relevance scoring, ranking, explanations and highlights.

Scores every item against the query on four dimensions, each in [0, 1]:

1. **price**: budget fit. Full credit inside the budget; credit decays
   linearly with the relative distance outside it and reaches 0 at
   ``price_tolerance`` (default 50%) beyond the nearest bound.
2. **features**: share of the query's terms (extracted features plus
   brand/size/color/spec filter values) mentioned by the item's name, brand,
   description or specifications. Multi-word terms need every word.
3. **delivery**: ETA speed. Normalised against the batch (fastest = 1,
   slowest = 0) when ranking; against ``max_eta_days`` for a lone item.
4. **trust**: ``rating / 5`` scaled by review volume,
   ``0.5 + 0.5 * min(1, log1p(reviews) / log1p(review_saturation))``.

    match_score = clamp(100 * Σ weight_i * credit_i - item_penalty, 0, 100)

Weights are normalised to sum to 1 and live in ScoringConfig so a
FeedbackPolicy can retune them (and per-item penalties) without code
changes.

Example:
    >>> engine = ScoringEngine()
    >>> ranked = engine.assign_highlights(engine.rank(items, query))
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from retail_search.domain.entities import Highlight, HighlightKind, Item, Query

if TYPE_CHECKING:
    from retail_search.domain.entities import FeedbackAnalytics

    from .feedback_policy import FeedbackPolicy

logger = logging.getLogger(__name__)

_WORD = re.compile(r"[a-z0-9]+")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")


# =============================================================================
# Configuration
# =============================================================================


class ScoreDimension(Enum):
    """Dimensions that contribute to the match score."""

    PRICE = "price"
    FEATURES = "features"
    DELIVERY = "delivery"
    TRUST = "trust"


@dataclass
class ScoringConfig:
    """
    Weights and tuning knobs for the ScoringEngine.

    Weights should sum to 1.0 (they are normalised if not).

    Presets:
    - DEFAULT: Balanced weights
    - BUDGET_FOCUSED: Emphasizes price fit
    - SPEED_FOCUSED: Emphasizes delivery speed
    - TRUST_FOCUSED: Emphasizes rating and review volume
    """

    # Dimension weights (should sum to 1.0)
    price_weight: float = 0.35
    feature_weight: float = 0.30
    delivery_weight: float = 0.15
    trust_weight: float = 0.20

    # Relative distance outside the budget at which price credit reaches 0
    price_tolerance: float = 0.5

    # Neutral credit when the query gives nothing to compare against
    no_budget_credit: float = 0.5
    no_feature_credit: float = 0.5

    # Review count at which review confidence saturates
    review_saturation: int = 500

    # ETA (days) that scores 0 when no batch is available for normalisation
    max_eta_days: float = 10.0

    # Explanations: minimum credit for a dimension to be cited, and how many
    reason_threshold: float = 0.5
    max_reasons: int = 3

    # Points subtracted from the match score per item id (feedback driven)
    item_penalties: dict[str, float] = field(default_factory=dict)

    @classmethod
    def default(cls) -> ScoringConfig:
        return cls()

    @classmethod
    def budget_focused(cls) -> ScoringConfig:
        return cls(price_weight=0.50, feature_weight=0.25, delivery_weight=0.10, trust_weight=0.15)

    @classmethod
    def speed_focused(cls) -> ScoringConfig:
        return cls(price_weight=0.25, feature_weight=0.25, delivery_weight=0.35, trust_weight=0.15)

    @classmethod
    def trust_focused(cls) -> ScoringConfig:
        return cls(price_weight=0.25, feature_weight=0.25, delivery_weight=0.10, trust_weight=0.40)

    def normalized_weights(self) -> dict[ScoreDimension, float]:
        """Get normalized weights that sum to 1.0."""
        raw = {
            ScoreDimension.PRICE: max(self.price_weight, 0.0),
            ScoreDimension.FEATURES: max(self.feature_weight, 0.0),
            ScoreDimension.DELIVERY: max(self.delivery_weight, 0.0),
            ScoreDimension.TRUST: max(self.trust_weight, 0.0),
        }
        total = sum(raw.values()) or 1.0
        return {dim: weight / total for dim, weight in raw.items()}


# =============================================================================
# Helpers
# =============================================================================


def parse_eta_days(label: str | None) -> float | None:
    """
    Convert an ETA label to days (upper bound of a range).

    "1-2 days" -> 2, "1 week" -> 7, "Same Day" -> 0, "24 hours" -> 1.
    Returns None when the label carries no usable duration.
    """
    if not label:
        return None
    text = label.lower()
    if "same day" in text or "today" in text:
        return 0.0
    if "next day" in text or "tomorrow" in text:
        return 1.0

    numbers = [float(n) for n in _NUMBER.findall(text)]
    if "week" in text:
        return (max(numbers) if numbers else 1.0) * 7
    if not numbers:
        return None
    if "hour" in text:
        return max(numbers) / 24
    return max(numbers)


def _words(text: str) -> set[str]:
    return set(_WORD.findall(text.lower()))


def _item_words(item: Item) -> set[str]:
    parts = [item.name, item.brand, item.description]
    for key, value in item.specifications.items():
        parts.append(key)
        parts.append(value)
    return _words(" ".join(parts))


def _money(item: Item, amount: float) -> str:
    return f"{item.currency}{amount:,.0f}"


def _join_reasons(reasons: list[str]) -> str:
    if len(reasons) == 1:
        return reasons[0]
    return f"{', '.join(reasons[:-1])} and {reasons[-1]}"


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-dimension credits behind one match score."""

    credits: dict[ScoreDimension, float]
    weights: dict[ScoreDimension, float]
    penalty: float = 0.0
    matched_terms: tuple[str, ...] = ()
    total_terms: int = 0
    eta_days: float | None = None

    @property
    def contributions(self) -> dict[ScoreDimension, float]:
        return {dim: self.weights[dim] * credit for dim, credit in self.credits.items()}

    @property
    def score(self) -> float:
        raw = sum(self.contributions.values()) * 100 - self.penalty
        return round(min(100.0, max(0.0, raw)), 2)


# =============================================================================
# Engine
# =============================================================================


class ScoringEngine:
    """
    Computes match scores, explanations, rankings and highlights.

    Args:
        config: Scoring weights and knobs
        feedback_policy: Strategy used by ``learn_from`` to retune the config
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        feedback_policy: FeedbackPolicy | None = None,
    ) -> None:
        self._config = config or ScoringConfig.default()
        self._feedback_policy = feedback_policy

    @property
    def config(self) -> ScoringConfig:
        return self._config

    # ── Dimensions ──────────────────────────────────────────────────────

    def _price_credit(self, item: Item, query: Query) -> float:
        budget = query.budget
        if budget is None:
            return self._config.no_budget_credit
        if budget.contains(item.price):
            return 1.0

        if item.price > budget.max_price:
            reference = budget.max_price
            distance = item.price - budget.max_price
        else:
            reference = budget.min_price
            distance = budget.min_price - item.price
        if reference <= 0 or self._config.price_tolerance <= 0:
            return 0.0
        return max(0.0, 1.0 - (distance / reference) / self._config.price_tolerance)

    def _feature_credit(self, item: Item, terms: list[str]) -> tuple[float, tuple[str, ...]]:
        if not terms:
            return self._config.no_feature_credit, ()
        item_words = _item_words(item)
        matched = tuple(t for t in terms if _words(t) and _words(t) <= item_words)
        return len(matched) / len(terms), matched

    def _delivery_credit(self, eta: float | None, batch_etas: list[float] | None) -> float:
        if eta is None:
            return 0.0
        if batch_etas:
            fastest, slowest = min(batch_etas), max(batch_etas)
            if slowest == fastest:
                return 1.0
            return max(0.0, min(1.0, 1.0 - (eta - fastest) / (slowest - fastest)))
        if self._config.max_eta_days <= 0:
            return 0.0
        return max(0.0, 1.0 - eta / self._config.max_eta_days)

    def _trust_credit(self, item: Item) -> float:
        rating = min(max(item.rating, 0.0), 5.0) / 5.0
        saturation = max(self._config.review_saturation, 1)
        confidence = min(1.0, math.log1p(max(item.review_count, 0)) / math.log1p(saturation))
        return rating * (0.5 + 0.5 * confidence)

    @staticmethod
    def _eta(item: Item) -> float | None:
        if not item.availability or not item.delivery.available:
            return None
        return parse_eta_days(item.delivery.eta)

    def _batch_etas(self, batch: list[Item] | None) -> list[float] | None:
        if not batch:
            return None
        etas = [eta for eta in (self._eta(i) for i in batch) if eta is not None]
        return etas or None

    # ── Public API ──────────────────────────────────────────────────────

    def breakdown(self, item: Item, query: Query, batch: list[Item] | None = None) -> ScoreBreakdown:
        """Per-dimension credits for ``item`` (batch enables ETA normalisation)."""
        return self._breakdown(item, query, self._batch_etas(batch))

    def _breakdown(self, item: Item, query: Query, batch_etas: list[float] | None) -> ScoreBreakdown:
        terms = query.search_terms
        feature_credit, matched = self._feature_credit(item, terms)
        eta = self._eta(item)
        return ScoreBreakdown(
            credits={
                ScoreDimension.PRICE: self._price_credit(item, query),
                ScoreDimension.FEATURES: feature_credit,
                ScoreDimension.DELIVERY: self._delivery_credit(eta, batch_etas),
                ScoreDimension.TRUST: self._trust_credit(item),
            },
            weights=self._config.normalized_weights(),
            penalty=max(0.0, self._config.item_penalties.get(item.item_id, 0.0)),
            matched_terms=matched,
            total_terms=len(terms),
            eta_days=eta,
        )

    def score(self, item: Item, query: Query, batch: list[Item] | None = None) -> float:
        """Match score in [0, 100]."""
        return self.breakdown(item, query, batch).score

    def explain(self, item: Item, query: Query, batch: list[Item] | None = None) -> str:
        """Human-readable justification naming the top contributing reasons."""
        return self._explain(item, query, self.breakdown(item, query, batch))

    def _explain(self, item: Item, query: Query, breakdown: ScoreBreakdown) -> str:
        eligible = [
            dim
            for dim in ScoreDimension
            if not (dim is ScoreDimension.PRICE and query.budget is None)
            and not (dim is ScoreDimension.FEATURES and breakdown.total_terms == 0)
        ]
        contributions = breakdown.contributions
        ordered = sorted(eligible, key=lambda dim: contributions[dim], reverse=True)

        chosen = [
            dim
            for dim in ordered
            if contributions[dim] > 0 and breakdown.credits[dim] >= self._config.reason_threshold
        ]
        if not chosen and ordered:
            chosen = ordered[:1]
        chosen = chosen[: max(self._config.max_reasons, 1)]

        reasons = [self._reason(dim, item, query, breakdown) for dim in chosen]
        return f"Recommended because {_join_reasons(reasons)}."

    def _reason(self, dim: ScoreDimension, item: Item, query: Query, breakdown: ScoreBreakdown) -> str:
        if dim is ScoreDimension.PRICE and query.budget is not None:
            budget = query.budget
            span = f"{_money(item, budget.min_price)} to {_money(item, budget.max_price)}"
            if budget.contains(item.price):
                return f"its price of {_money(item, item.price)} fits your {span} budget"
            return f"its price of {_money(item, item.price)} is close to your {span} budget"

        if dim is ScoreDimension.FEATURES:
            if not breakdown.matched_terms:
                return f"it is the closest listing for \"{query.description}\""
            matched = ", ".join(breakdown.matched_terms)
            if len(breakdown.matched_terms) == breakdown.total_terms:
                return f"it matches everything you asked for ({matched})"
            return f"it matches {len(breakdown.matched_terms)} of {breakdown.total_terms} features you asked for ({matched})"

        if dim is ScoreDimension.DELIVERY:
            if breakdown.eta_days is None:
                return f"it is available from {item.source}"
            free = " with free delivery" if item.delivery.cost == 0 else ""
            return f"it arrives in {item.delivery.eta}{free}"

        if item.rating <= 0:
            return f"it is sold by {item.brand or item.source}"
        if item.review_count > 0:
            return f"it is rated {item.rating:.1f}/5 across {item.review_count:,} reviews"
        return f"it is rated {item.rating:.1f}/5"

    def rank(self, items: list[Item], query: Query) -> list[Item]:
        """
        Score, explain and sort a batch.

        Sorted by match score, then rating, then review count (all
        descending); Python's stable sort keeps input order for full ties.
        """
        batch = list(items)
        batch_etas = self._batch_etas(batch)
        enriched = []
        for item in batch:
            breakdown = self._breakdown(item, query, batch_etas)
            enriched.append(
                replace(item, match_score=breakdown.score, explanation=self._explain(item, query, breakdown))
            )
        enriched.sort(key=lambda i: (-i.match_score, -i.rating, -i.review_count))
        return enriched

    def assign_highlights(self, items: list[Item]) -> list[Item]:
        """
        Award batch highlights to an already-ranked batch.

        - top_pick: highest match score (earliest on ties)
        - best_value: lowest price per rating point among rated items
        - fastest_delivery: shortest known ETA among deliverable items

        Returns new items; any highlights from a previous batch are replaced.
        """
        batch = list(items)
        if not batch:
            return []

        awarded: dict[int, list[Highlight]] = {i: [] for i in range(len(batch))}

        top = max(range(len(batch)), key=lambda i: (batch[i].match_score, -i))
        awarded[top].append(
            Highlight(HighlightKind.TOP_PICK, f"Highest match score ({batch[top].match_score:.0f}%)")
        )

        rated = [i for i, item in enumerate(batch) if item.rating > 0]
        if rated:
            best = min(rated, key=lambda i: (batch[i].price / batch[i].rating, i))
            ratio = batch[best].price / batch[best].rating
            awarded[best].append(
                Highlight(
                    HighlightKind.BEST_VALUE,
                    f"Best price-to-rating ratio ({_money(batch[best], ratio)} per rating point)",
                )
            )

        timed = [(i, eta) for i, eta in ((i, self._eta(item)) for i, item in enumerate(batch)) if eta is not None]
        if timed:
            fastest, _ = min(timed, key=lambda pair: (pair[1], pair[0]))
            awarded[fastest].append(
                Highlight(HighlightKind.FASTEST_DELIVERY, f"Fastest delivery ({batch[fastest].delivery.eta})")
            )

        return [replace(item, highlights=tuple(awarded[i])) for i, item in enumerate(batch)]

    # ── Feedback loop ───────────────────────────────────────────────────

    def learn_from(self, analytics: FeedbackAnalytics) -> ScoringConfig:
        """
        Retune the config from feedback analytics via the feedback policy.

        Without a policy the config is left unchanged.
        """
        if self._feedback_policy is None:
            return self._config
        self._config = self._feedback_policy.adjust(self._config, analytics)
        logger.info(f"Scoring config updated from feedback: {len(self._config.item_penalties)} item penalties")
        return self._config
