"""
Catalog Source Adapter - deterministic in-memory source.

Serves items from a fixed catalogue, filtered by keyword overlap with the
query. Used by the demo container, the CLI and tests. The demo catalogue
derives delivery ETA/cost from each source's DeliveryProfile, so repeated
searches always return identical items.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable
from datetime import datetime, timezone

from retail_search.domain.entities import DeliveryInfo, Item, Query
from retail_search.domain.entities.query import STOPWORDS
from retail_search.infrastructure.delivery.gate import DEFAULT_PROFILE, DEFAULT_PROFILES

logger = logging.getLogger(__name__)

_WORD = re.compile(r"[a-z0-9]+")

# Fixed timestamp keeps demo items reproducible
_CATALOG_TIMESTAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)


class CatalogSourceAdapter:
    """
    Source adapter backed by a list of items.

    Args:
        name: Source name
        items: Catalogue entries (their ``source`` should equal ``name``)
        latency: Artificial delay in seconds before answering
    """

    def __init__(self, name: str, items: Iterable[Item], *, latency: float = 0.0) -> None:
        self.name = name
        self._items = list(items)
        self._latency = latency

    def __repr__(self) -> str:
        return f"CatalogSourceAdapter({self.name!r}, items={len(self._items)})"

    async def fetch(self, query: Query) -> list[Item]:
        if self._latency:
            await asyncio.sleep(self._latency)

        words = set(_WORD.findall(query.description.lower())) - STOPWORDS
        matches = [item for item in self._items if words & _item_words(item)]
        logger.info(f"{self.name}: {len(matches)} catalogue matches for '{query.description}'")
        return matches


def _item_words(item: Item) -> set[str]:
    text = " ".join([item.name, item.brand, item.description, *item.specifications.values()])
    return set(_WORD.findall(text.lower()))


# =============================================================================
# Demo catalogue
# =============================================================================

# (name, brand, base price, original price, rating, reviews, description, specs)
_DEMO_PRODUCTS: list[tuple[str, str, float, float | None, float, int, str, dict[str, str]]] = [
    ("Running Shoes - Premium Quality", "Stride", 2500, 3000, 4.2, 156,
     "Lightweight running shoes with cushioned sole for daily jogging",
     {"material": "Mesh", "size": "9", "color": "Blue"}),
    ("Running Shoes - Best Value", "Pace", 1800, None, 4.0, 89,
     "Breathable running shoes for casual runs and gym",
     {"material": "Knit", "size": "8", "color": "Black"}),
    ("Trail Running Shoes - Top Rated", "Summit", 3200, 4000, 4.5, 234,
     "Waterproof trail running shoes with grip outsole",
     {"material": "Synthetic", "size": "10", "color": "Grey"}),
    ("Formal Shirt - Slim Fit", "Tailor & Co", 1299, 1799, 4.1, 412,
     "Cotton formal shirt for office wear",
     {"material": "Cotton", "size": "L", "color": "White"}),
    ("Casual Shirt - Linen", "Breeze", 999, None, 3.9, 75,
     "Relaxed linen casual shirt for summer",
     {"material": "Linen", "size": "M", "color": "Blue"}),
    ("Smartphone 5G - 128GB", "Nova", 18999, 21999, 4.3, 1520,
     "5G smartphone with good camera and long battery life",
     {"storage": "128GB", "camera": "50MP", "color": "Black"}),
    ("Gaming Laptop - 16GB RAM", "Vertex", 74999, 82999, 4.4, 640,
     "Gaming laptop with dedicated graphics and fast display",
     {"ram": "16GB", "storage": "512GB SSD", "display": "144Hz"}),
    ("Analog Watch - Leather Strap", "Tempo", 2199, 2999, 4.0, 98,
     "Classic analog watch with leather strap for formal occasions",
     {"strap": "Leather", "color": "Brown"}),
]

# Per-source price adjustments keep sources distinguishable
_PRICE_FACTORS = {"amazon": 1.0, "flipkart": 0.97, "myntra": 1.05, "meesho": 0.9}


def _eta_label(days: int) -> str:
    if days <= 1:
        return "1-2 days"
    if days >= 7:
        return "1 week"
    return f"{days - 1}-{days} days"


def demo_catalog(source: str) -> list[Item]:
    """Deterministic demo catalogue for ``source``."""
    profile = DEFAULT_PROFILES.get(source, DEFAULT_PROFILE)
    factor = _PRICE_FACTORS.get(source, 1.0)
    items = []
    for index, (name, brand, price, original, rating, reviews, description, specs) in enumerate(_DEMO_PRODUCTS):
        slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
        items.append(
            Item(
                source=source,
                item_id=f"{source}-{index + 1:04d}",
                name=name,
                brand=brand,
                price=round(price * factor, 2),
                original_price=original,
                image=f"https://images.example.com/{source}/{slug}.jpg",
                description=description,
                specifications=dict(specs),
                delivery=DeliveryInfo(
                    available=True,
                    eta=_eta_label(profile.other_days),
                    cost=profile.other_cost,
                ),
                rating=rating,
                review_count=reviews,
                url=f"https://{source}.example.com/product/{slug}",
                updated_at=_CATALOG_TIMESTAMP,
            )
        )
    return items


def build_demo_adapters(sources: Iterable[str], *, latency: float = 0.0) -> dict[str, CatalogSourceAdapter]:
    """One demo catalogue adapter per source name."""
    return {source: CatalogSourceAdapter(source, demo_catalog(source), latency=latency) for source in sources}
