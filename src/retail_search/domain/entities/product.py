"""
Product Entities - Retailer Item Domain Model

Key Entities:
    - Item: One product offer returned by a single source
    - DeliveryInfo: Delivery availability, ETA label and cost for an item
    - Highlight: Batch-level distinguishing label (top pick, best value, ...)

Architecture:
    Items are created raw by source adapters and enriched (match score,
    explanation, highlights) only by the ScoringEngine, which produces new
    instances with ``dataclasses.replace``. Nothing mutates an Item in place.

Example:
    >>> item = Item(source="amazon", item_id="amazon-0001", name="Trail Runner", price=2499)
    >>> item.key
    'amazon:amazon-0001'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class HighlightKind(Enum):
    """Distinguishing labels assigned per search batch."""

    TOP_PICK = "top_pick"
    BEST_VALUE = "best_value"
    FASTEST_DELIVERY = "fastest_delivery"


@dataclass(frozen=True)
class Highlight:
    """A highlight label plus the human-readable reason it was awarded."""

    kind: HighlightKind
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.kind.value, "reason": self.reason}


@dataclass(frozen=True)
class DeliveryInfo:
    """Delivery availability for one item at the query location."""

    available: bool = True
    eta: str = ""  # Label such as "1-2 days" or "Same Day"
    cost: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"available": self.available, "eta": self.eta, "cost": self.cost}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Item:
    """
    A single product offer from one source.

    Attributes:
        source: Name of the source that produced the item
        item_id: Opaque identifier assigned by the source (unique across sources)
        name: Display name
        price: Current price
        brand: Brand name
        original_price: List price before discount (optional)
        currency: Currency tag
        image: Image reference
        description: Free-text description
        specifications: Attribute map (material, size, ...)
        availability: Whether the item is in stock
        delivery: Delivery info at the query location
        rating: Average rating (0-5)
        review_count: Number of reviews
        match_score: Relevance score (0-100), set by the ScoringEngine
        explanation: Why the item was recommended, set by the ScoringEngine
        highlights: Batch highlights, set by the ScoringEngine
        url: Origin URL
        updated_at: Freshness timestamp
    """

    source: str
    item_id: str
    name: str
    price: float
    brand: str = ""
    original_price: float | None = None
    currency: str = "₹"
    image: str = ""
    description: str = ""
    specifications: dict[str, str] = field(default_factory=dict, hash=False)
    availability: bool = True
    delivery: DeliveryInfo = field(default_factory=DeliveryInfo)
    rating: float = 0.0
    review_count: int = 0
    match_score: float = 0.0
    explanation: str = ""
    highlights: tuple[Highlight, ...] = ()
    url: str = ""
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> str:
        """Identity of the item across sources."""
        return f"{self.source}:{self.item_id}"

    @property
    def discount_percent(self) -> float | None:
        """Discount against the original price, or None when not discounted."""
        if not self.original_price or self.original_price <= self.price:
            return None
        return round((self.original_price - self.price) / self.original_price * 100, 2)

    @property
    def highlight_kinds(self) -> set[HighlightKind]:
        return {h.kind for h in self.highlights}

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, source: str | None = None) -> Item:
        """
        Build an Item from a JSON payload.

        Accepts snake_case keys as well as camelCase aliases (``originalPrice``, ``reviewCount``,
        ``deliveryInfo``, ``retailerUrl``, ...).
        """
        delivery_raw = data.get("delivery") or data.get("deliveryInfo") or {}
        updated_raw = data.get("updated_at") or data.get("lastUpdated")
        if isinstance(updated_raw, str):
            updated_at = datetime.fromisoformat(updated_raw.replace("Z", "+00:00"))
        elif isinstance(updated_raw, datetime):
            updated_at = updated_raw
        else:
            updated_at = _utcnow()

        original_price = data.get("original_price", data.get("originalPrice"))
        item_id = data.get("item_id") or data.get("id")
        if item_id is None:
            msg = "Item payload has no id"
            raise ValueError(msg)

        return cls(
            source=source or data.get("source") or data.get("retailer") or "",
            item_id=str(item_id),
            name=str(data.get("name", "")),
            price=float(data.get("price", 0.0)),
            brand=str(data.get("brand", "") or ""),
            original_price=float(original_price) if original_price is not None else None,
            currency=str(data.get("currency", "₹")),
            image=str(data.get("image", "") or ""),
            description=str(data.get("description", "") or ""),
            specifications={
                str(k): str(v) for k, v in (data.get("specifications") or {}).items()
            },
            availability=bool(data.get("availability", True)),
            delivery=DeliveryInfo(
                available=bool(delivery_raw.get("available", True)),
                eta=str(delivery_raw.get("eta", "") or ""),
                cost=float(delivery_raw.get("cost", 0.0) or 0.0),
            ),
            rating=float(data.get("rating", 0.0) or 0.0),
            review_count=int(data.get("review_count", data.get("reviewCount", 0)) or 0),
            url=str(data.get("url") or data.get("retailerUrl") or ""),
            updated_at=updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "id": self.item_id,
            "name": self.name,
            "brand": self.brand,
            "price": self.price,
            "original_price": self.original_price,
            "currency": self.currency,
            "image": self.image,
            "description": self.description,
            "specifications": dict(self.specifications),
            "availability": self.availability,
            "delivery": self.delivery.to_dict(),
            "rating": self.rating,
            "review_count": self.review_count,
            "match_score": self.match_score,
            "explanation": self.explanation,
            "highlights": [h.to_dict() for h in self.highlights],
            "url": self.url,
            "updated_at": self.updated_at.isoformat(),
        }
