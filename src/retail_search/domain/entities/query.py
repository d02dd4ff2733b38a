"""
Query Entities - Product Search Request

A Query is immutable once built. Construction validates the description,
budget and confidence; the location code is only checked for format by the
DeliveryGate so that an unknown location degrades to ``not_deliverable``
instead of rejecting the whole search.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Any

from retail_search.shared.exceptions import InvalidQueryError

MAX_DESCRIPTION_LENGTH = 500

_WORD = re.compile(r"[a-z0-9]+")
STOPWORDS = frozenset(
    {"a", "an", "and", "for", "the", "with", "of", "in", "to", "my", "under", "below", "less", "than", "rs"}
)


@dataclass(frozen=True)
class BudgetRange:
    """Inclusive price range."""

    min_price: float = 0.0
    max_price: float = 0.0

    def __post_init__(self) -> None:
        if self.min_price < 0 or self.max_price < 0:
            raise InvalidQueryError("Budget bounds must be positive numbers", field_name="budget", value=self)
        if self.min_price > self.max_price:
            raise InvalidQueryError(
                "Budget minimum cannot be greater than maximum", field_name="budget", value=self
            )

    @property
    def span(self) -> float:
        return self.max_price - self.min_price

    def contains(self, price: float) -> bool:
        return self.min_price <= price <= self.max_price

    def to_dict(self) -> dict[str, float]:
        return {"min": self.min_price, "max": self.max_price}


@dataclass(frozen=True)
class QueryFilters:
    """Optional structured filters attached to a query."""

    brands: frozenset[str] = frozenset()
    size: str | None = None
    color: str | None = None
    specifications: dict[str, str] = field(default_factory=dict, hash=False)

    def values(self) -> list[str]:
        """Filter values that should be matched against item text."""
        values = sorted(self.brands)
        if self.size:
            values.append(self.size)
        if self.color:
            values.append(self.color)
        values.extend(self.specifications.values())
        return [v for v in values if v]

    def to_dict(self) -> dict[str, Any]:
        return {
            "brands": sorted(self.brands),
            "size": self.size,
            "color": self.color,
            "specifications": dict(self.specifications),
        }


def _new_query_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Query:
    """
    A product search request.

    Attributes:
        description: Free-text description of the wanted product
        location_code: Delivery location (6-digit postal code)
        budget: Optional price range
        filters: Optional brand/size/color/spec filters
        confidence: Confidence of the intent extraction (0-1)
        features: Feature keywords extracted from the description
        query_id: Identifier used to link feedback events to this query
    """

    description: str
    location_code: str
    budget: BudgetRange | None = None
    filters: QueryFilters = field(default_factory=QueryFilters)
    confidence: float = 1.0
    features: tuple[str, ...] = ()
    query_id: str = field(default_factory=_new_query_id)

    def __post_init__(self) -> None:
        description = (self.description or "").strip()
        if not description:
            raise InvalidQueryError("Description cannot be empty", field_name="description", value=self.description)
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidQueryError(
                f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
                field_name="description",
                value=len(description),
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise InvalidQueryError(
                "Confidence must be a number between 0 and 1", field_name="confidence", value=self.confidence
            )
        object.__setattr__(self, "description", description)
        object.__setattr__(self, "location_code", (self.location_code or "").strip())
        object.__setattr__(self, "features", tuple(f.strip().lower() for f in self.features if f.strip()))

    @property
    def search_terms(self) -> list[str]:
        """
        Terms an item should mention to count as a feature match.

        Extracted features plus filter values; falls back to the content
        words of the description when neither is present.
        """
        terms: list[str] = list(self.features)
        terms.extend(v.lower() for v in self.filters.values())
        if not terms:
            terms = [w for w in _WORD.findall(self.description.lower()) if w not in STOPWORDS and not w.isdigit()]
        return list(dict.fromkeys(terms))

    def to_dict(self) -> dict[str, Any]:
        return {
            "query_id": self.query_id,
            "description": self.description,
            "location_code": self.location_code,
            "budget": self.budget.to_dict() if self.budget else None,
            "filters": self.filters.to_dict(),
            "confidence": self.confidence,
            "features": list(self.features),
        }
