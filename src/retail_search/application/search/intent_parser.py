"""
IntentParser - Rule-based extraction of shopping intent from free text.

Turns "black running shoes under ₹3,000 size 9" into:

    ParsedIntent(
        product_type="running shoes",
        budget=BudgetRange(0, 3000),
        features=["running"],
        brand=None,
        specifications={"size": "9", "color": "black"},
    )

Architecture Decision:
    The parser is stateless and uses keyword lists and patterns only. It
    never calls an external model, so it is safe to run on every request.

Example:
    >>> parser = IntentParser()
    >>> query = parser.parse("nike running shoes under 3000").to_query("110001")
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from retail_search.domain.entities import BudgetRange, Query, QueryFilters

logger = logging.getLogger(__name__)

# Checked in order; the first hit wins
PRODUCT_PHRASES = (
    "running shoes",
    "sports shoes",
    "formal shoes",
    "formal shirt",
    "casual shirt",
    "gaming laptop",
    "smart watch",
)
PRODUCT_KEYWORDS = ("shoes", "shirt", "laptop", "phone", "smartphone", "jeans", "dress", "watch", "bag")

FEATURE_VOCABULARY = (
    "running",
    "formal",
    "casual",
    "gaming",
    "waterproof",
    "wireless",
    "lightweight",
    "cotton",
    "leather",
    "slim fit",
    "fast charging",
    "good camera",
    "noise cancelling",
    "bluetooth",
)

# lowercase alias -> display name
KNOWN_BRANDS = {
    "nike": "Nike",
    "adidas": "Adidas",
    "puma": "Puma",
    "reebok": "Reebok",
    "asics": "Asics",
    "skechers": "Skechers",
    "samsung": "Samsung",
    "apple": "Apple",
    "oneplus": "OnePlus",
    "xiaomi": "Xiaomi",
    "dell": "Dell",
    "hp": "HP",
    "lenovo": "Lenovo",
    "asus": "Asus",
    "titan": "Titan",
    "fossil": "Fossil",
    "casio": "Casio",
    "levi's": "Levi's",
    "allen solly": "Allen Solly",
    "peter england": "Peter England",
}

COLORS = ("black", "white", "blue", "navy", "red", "green", "grey", "gray", "brown", "pink", "yellow")

_BUDGET_RANGE = re.compile(
    r"\bbetween\s*(?:₹|\brs\.?)?\s*(\d+(?:,\d+)*)\s*(?:and|to|-)\s*(?:₹|\brs\.?)?\s*(\d+(?:,\d+)*)"
)
_BUDGET_MAX = re.compile(r"(?:\bunder|\bbelow|\bless than|₹|\brs\.?|\brupees?)\s*(\d+(?:,\d+)*)")
_SIZE = re.compile(r"\bsize\s*[:\-]?\s*(xxl|xl|xs|s|m|l|\d{1,2})\b")
_COLOR = re.compile(r"\b(" + "|".join(COLORS) + r")\b")


def _contains(text: str, phrase: str) -> bool:
    return re.search(rf"(?<![a-z0-9]){re.escape(phrase)}(?![a-z0-9])", text) is not None


def _amount(raw: str) -> float:
    return float(raw.replace(",", ""))


@dataclass
class ParsedIntent:
    """
    Structured intent extracted from a free-text query.

    ``product_type`` is "product" when no known product keyword is present.
    """

    text: str
    product_type: str = "product"
    budget: BudgetRange | None = None
    features: list[str] = field(default_factory=list)
    brand: str | None = None
    specifications: dict[str, str] = field(default_factory=dict)
    confidence: float = 0.3

    def to_query(self, location_code: str, *, query_id: str | None = None) -> Query:
        """Build a Query; product words become search terms alongside features."""
        terms = list(self.features)
        if self.product_type != "product":
            terms.extend(w for w in self.product_type.split() if w not in terms)

        specs = dict(self.specifications)
        filters = QueryFilters(
            brands=frozenset({self.brand}) if self.brand else frozenset(),
            size=specs.pop("size", None),
            color=specs.pop("color", None),
            specifications=specs,
        )
        kwargs: dict[str, Any] = {}
        if query_id:
            kwargs["query_id"] = query_id
        return Query(
            description=self.text,
            location_code=location_code,
            budget=self.budget,
            filters=filters,
            confidence=self.confidence,
            features=tuple(terms),
            **kwargs,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_type": self.product_type,
            "budget": self.budget.to_dict() if self.budget else None,
            "features": list(self.features),
            "brand": self.brand,
            "specifications": dict(self.specifications),
            "confidence": self.confidence,
        }


class IntentParser:
    """Keyword and pattern based intent extraction."""

    def parse(self, text: str) -> ParsedIntent:
        lowered = " ".join(text.lower().split())
        intent = ParsedIntent(text=text.strip())

        intent.product_type = self._product_type(lowered)
        intent.budget = self._budget(lowered)
        intent.features = [f for f in FEATURE_VOCABULARY if _contains(lowered, f)]
        intent.brand = next((name for alias, name in KNOWN_BRANDS.items() if _contains(lowered, alias)), None)
        intent.specifications = self._specifications(lowered)
        intent.confidence = self._confidence(intent)

        logger.debug(f"Parsed intent for \"{text}\": {intent.to_dict()}")
        return intent

    @staticmethod
    def _product_type(text: str) -> str:
        for phrase in PRODUCT_PHRASES:
            if _contains(text, phrase):
                return phrase
        for keyword in PRODUCT_KEYWORDS:
            if _contains(text, keyword):
                return keyword
        return "product"

    @staticmethod
    def _budget(text: str) -> BudgetRange | None:
        if match := _BUDGET_RANGE.search(text):
            low, high = sorted((_amount(match.group(1)), _amount(match.group(2))))
            return BudgetRange(min_price=low, max_price=high)
        if match := _BUDGET_MAX.search(text):
            return BudgetRange(min_price=0.0, max_price=_amount(match.group(1)))
        return None

    @staticmethod
    def _specifications(text: str) -> dict[str, str]:
        specs: dict[str, str] = {}
        if match := _SIZE.search(text):
            specs["size"] = match.group(1).upper()
        if match := _COLOR.search(text):
            specs["color"] = match.group(1)
        return specs

    @staticmethod
    def _confidence(intent: ParsedIntent) -> float:
        score = 0.3
        if intent.product_type != "product":
            score += 0.3
        if intent.budget is not None:
            score += 0.2
        if intent.features:
            score += 0.1
        if intent.brand or intent.specifications:
            score += 0.1
        return round(min(score, 1.0), 2)
