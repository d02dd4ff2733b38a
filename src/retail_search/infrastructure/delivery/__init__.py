"""
Delivery Infrastructure

- DeliveryGate: location validation + deterministic delivery terms
- PostalLookupClient: pincode directory lookup over httpx
"""

from .gate import (
    DEFAULT_PROFILES,
    MAJOR_LOCATIONS,
    DeliveryGate,
    DeliveryProfile,
    is_valid_location_format,
)
from .postal_client import LocationLookup, PostalLookupClient

__all__ = [
    "DeliveryGate",
    "DeliveryProfile",
    "DEFAULT_PROFILES",
    "MAJOR_LOCATIONS",
    "is_valid_location_format",
    "LocationLookup",
    "PostalLookupClient",
]
