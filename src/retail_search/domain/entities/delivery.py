"""
Delivery Entities - Location Validation and Delivery Terms
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class LocationInfo:
    """Result of validating a location code."""

    location_code: str
    valid: bool
    city: str | None = None
    state: str | None = None
    fallback: bool = False  # True when the lookup service was unreachable

    @classmethod
    def unverified(cls, location_code: str) -> LocationInfo:
        """Permissive fallback for a well-formed code that could not be looked up."""
        return cls(location_code, True, UNKNOWN, UNKNOWN, fallback=True)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "city": self.city, "state": self.state}


@dataclass(frozen=True)
class DeliveryDetail:
    """Delivery terms of one source at one location."""

    location_code: str
    source: str
    city: str | None
    state: str | None
    available: bool
    estimated_days: int
    cost: float
    options: tuple[str, ...] = ()
    restrictions: tuple[str, ...] = ()

    @property
    def eta_label(self) -> str:
        if self.estimated_days <= 0:
            return "Same Day"
        if self.estimated_days == 1:
            return "1 day"
        return f"{self.estimated_days} days"

    def to_dict(self) -> dict[str, Any]:
        return {
            "location_code": self.location_code,
            "source": self.source,
            "location": {"city": self.city, "state": self.state},
            "delivery": {
                "available": self.available,
                "estimated_days": self.estimated_days,
                "cost": self.cost,
                "options": list(self.options),
                "restrictions": list(self.restrictions),
            },
        }
