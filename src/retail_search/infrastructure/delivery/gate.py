"""
DeliveryGate - Location validation and per-source delivery terms.

Flow for every operation:
    1. Format check (6 ASCII digits) - no lookup for malformed codes
    2. Cached directory lookup (24h per-entry expiry)
    3. Lookup outage -> permissive fallback (valid, city/state "Unknown")
    4. Delivery terms composed deterministically from the source's
       DeliveryProfile and whether the location is a major reference location

Availability checking is never a hard blocker for search: ``is_deliverable``
answers False instead of raising.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from retail_search.domain.entities import DeliveryDetail, LocationInfo
from retail_search.infrastructure.cache import ExpiringCache
from retail_search.shared.exceptions import ExternalLookupError, InvalidLocationError

from .postal_client import LocationLookup

logger = logging.getLogger(__name__)

_LOCATION_PATTERN = re.compile(r"[0-9]{6}")

MAJOR_LOCATIONS: frozenset[str] = frozenset({"110001", "400001", "560001", "600001", "700001"})


@dataclass(frozen=True)
class DeliveryProfile:
    """
    Delivery terms of one source.

    Attributes:
        major_days / other_days: Estimated delivery days
        major_cost / other_cost: Delivery cost
        options: Delivery options offered
        restrictions: Restrictions that always apply
        remote_restrictions: Extra restrictions outside major locations
        serviceable_prefixes: Location prefixes served (empty = everywhere)
    """

    major_days: int = 5
    other_days: int = 5
    major_cost: float = 50.0
    other_cost: float = 50.0
    options: tuple[str, ...] = ("Standard",)
    restrictions: tuple[str, ...] = ()
    remote_restrictions: tuple[str, ...] = ()
    serviceable_prefixes: tuple[str, ...] = ()

    def serves(self, location_code: str) -> bool:
        if not self.serviceable_prefixes:
            return True
        return location_code.startswith(self.serviceable_prefixes)


DEFAULT_PROFILE = DeliveryProfile()

DEFAULT_PROFILES: dict[str, DeliveryProfile] = {
    "amazon": DeliveryProfile(
        major_days=1, other_days=3, major_cost=0, other_cost=0,
        options=("Standard", "Prime", "Same Day"),
    ),
    "flipkart": DeliveryProfile(
        major_days=2, other_days=4, major_cost=0, other_cost=40,
        options=("Standard", "Express", "Flipkart Plus"),
    ),
    "myntra": DeliveryProfile(
        major_days=2, other_days=5, major_cost=0, other_cost=50,
        options=("Standard", "Express", "Try & Buy"),
        remote_restrictions=("Try & Buy not available",),
    ),
    "meesho": DeliveryProfile(
        major_days=3, other_days=7, major_cost=30, other_cost=60,
        options=("Standard", "Express"),
        restrictions=("Cash on delivery only",),
    ),
}


def is_valid_location_format(location_code: object) -> bool:
    """True for exactly six ASCII digits."""
    return isinstance(location_code, str) and _LOCATION_PATTERN.fullmatch(location_code) is not None


class DeliveryGate:
    """
    Validates location codes and reports per-source deliverability.

    The lookup cache is the only structure shared across concurrent
    searches; see ExpiringCache for its concurrency guarantees.

    Example:
        gate = DeliveryGate(PostalLookupClient())
        if await gate.is_deliverable("110001", "amazon"):
            ...
    """

    def __init__(
        self,
        lookup: LocationLookup,
        *,
        profiles: Mapping[str, DeliveryProfile] | None = None,
        major_locations: frozenset[str] = MAJOR_LOCATIONS,
        cache: ExpiringCache | None = None,
    ) -> None:
        self._lookup = lookup
        self._profiles = dict(DEFAULT_PROFILES if profiles is None else profiles)
        self._major_locations = major_locations
        self._cache = cache if cache is not None else ExpiringCache(ttl=24 * 60 * 60)

    @property
    def cache(self) -> ExpiringCache:
        return self._cache

    def profile_for(self, source: str) -> DeliveryProfile:
        return self._profiles.get(source, DEFAULT_PROFILE)

    def is_major_location(self, location_code: str) -> bool:
        return location_code in self._major_locations

    async def validate_location(self, location_code: str) -> LocationInfo:
        """
        Validate a location code.

        Raises:
            InvalidLocationError: malformed code (no lookup attempted) or a
                code the directory reports as unknown
        """
        if not is_valid_location_format(location_code):
            raise InvalidLocationError(location_code)

        try:
            return await self._cache.get_or_fetch(
                f"location-{location_code}",
                lambda: self._lookup.lookup(location_code),
            )
        except ExternalLookupError as e:
            logger.error(f"Error validating location {location_code}: {e}")
            return LocationInfo.unverified(location_code)

    async def is_deliverable(self, location_code: str, source: str) -> bool:
        """Best-effort predicate; never raises for bad input."""
        try:
            await self.validate_location(location_code)
        except InvalidLocationError as e:
            logger.info(f"Delivery check for {source} rejected: {e}")
            return False
        return self.profile_for(source).serves(location_code)

    async def get_delivery_info(self, location_code: str, source: str) -> DeliveryDetail:
        """
        Compose delivery terms for ``source`` at ``location_code``.

        Raises:
            InvalidLocationError: when the location fails validation
        """
        logger.info(f"Getting delivery info for {source} to location: {location_code}")
        location = await self.validate_location(location_code)
        profile = self.profile_for(source)
        major = self.is_major_location(location_code)

        restrictions: list[str] = []
        if not major:
            restrictions.append("No same-day delivery")
            restrictions.extend(profile.remote_restrictions)
        restrictions.extend(profile.restrictions)

        return DeliveryDetail(
            location_code=location_code,
            source=source,
            city=location.city,
            state=location.state,
            available=profile.serves(location_code),
            estimated_days=profile.major_days if major else profile.other_days,
            cost=profile.major_cost if major else profile.other_cost,
            options=profile.options,
            restrictions=tuple(restrictions),
        )
