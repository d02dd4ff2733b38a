"""
Postal Lookup Client - India Post pincode directory.

API: https://api.postalpincode.in/pincode/{code}

Response shape (list with one record):
    [{"Status": "Success", "PostOffice": [{"District": "...", "State": "..."}, ...]}]
    [{"Status": "Error", "PostOffice": null}]

Errors:
    - InvalidLocationError when the directory does not know the code
    - ExternalLookupError for transport failures, HTTP errors and
      unexpected payloads
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from typing_extensions import Self

from retail_search.domain.entities import LocationInfo
from retail_search.shared.exceptions import ExternalLookupError, InvalidLocationError

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_URL = "https://api.postalpincode.in/pincode"
DEFAULT_LOOKUP_TIMEOUT = 5.0


class LocationLookup(Protocol):
    """Resolves a well-formed location code to a city/state."""

    async def lookup(self, location_code: str) -> LocationInfo: ...


class PostalLookupClient:
    """
    Client for the public pincode directory.

    Example:
        async with PostalLookupClient() as client:
            info = await client.lookup("110001")
    """

    _service_name = "postal-lookup"

    def __init__(
        self,
        base_url: str = DEFAULT_LOOKUP_URL,
        timeout: float = DEFAULT_LOOKUP_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            base_url: Directory endpoint; the code is appended as a path segment
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (tests inject a MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            headers={"Accept": "application/json"},
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        )

    async def lookup(self, location_code: str) -> LocationInfo:
        """Look up ``location_code`` in the directory."""
        url = f"{self._base_url}/{location_code}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"{self._service_name} HTTP error {e.response.status_code} for {location_code}"
            )
            raise ExternalLookupError(f"HTTP {e.response.status_code}", service=self._service_name) from e
        except httpx.RequestError as e:
            logger.warning(f"{self._service_name} request failed for {location_code}: {e}")
            raise ExternalLookupError(str(e) or type(e).__name__, service=self._service_name) from e
        except ValueError as e:
            raise ExternalLookupError("Malformed JSON response", service=self._service_name) from e

        return self._parse(location_code, payload)

    def _parse(self, location_code: str, payload: Any) -> LocationInfo:
        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            raise ExternalLookupError("Unexpected response shape", service=self._service_name)

        record = payload[0]
        if record.get("Status") != "Success":
            raise InvalidLocationError(location_code, "Invalid location or not found")

        offices = record.get("PostOffice") or []
        if not offices:
            raise ExternalLookupError("Response has no post office entries", service=self._service_name)

        office = offices[0]
        info = LocationInfo(
            location_code=location_code,
            valid=True,
            city=office.get("District"),
            state=office.get("State"),
        )
        logger.info(f"Location {location_code} validated: {info.city}, {info.state}")
        return info

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
