"""
Location Resolver — OpenStreetMap / Nominatim Provider
=======================================================
:class:`OpenStreetMapProvider` backed by Nominatim's ``/search`` and
``/lookup`` endpoints.

References are encoded as the upper-cased first letter of the OSM element
type followed by its id (``N123``, ``W456``, ``R789``), which is the same
form Nominatim's ``osm_ids`` parameter accepts.

Nominatim Usage Policy: every request carries a descriptive
``User-Agent`` (and, when configured, a ``From`` contact address).

Reference:
    https://nominatim.org/release-docs/develop/api/Lookup/
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from location_resolver.exceptions import (
    DecodeError,
    InvalidReferenceError,
    ZeroResultsError,
)
from location_resolver.models import (
    PROVIDER_OSM,
    Address,
    Coordinates,
    LocationSuggestion,
    ResolvedAddress,
)
from location_resolver.provider import (
    DEFAULT_TIMEOUT_SECONDS,
    LocationProvider,
    fetch,
    first_non_empty,
    normalize_endpoint,
    normalize_place_id,
    parse_float,
)
from location_resolver.validators import Validators

logger = logging.getLogger("location_resolver.osm")

DEFAULT_OSM_ENDPOINT = "https://nominatim.openstreetmap.org"
DEFAULT_OSM_USER_AGENT = "location-resolver/1.0"

_OSM_TYPES = {"N": "node", "W": "way", "R": "relation"}


def build_osm_reference(osm_type: str, osm_id: Any) -> str:
    """Encode an OSM element as ``<N|W|R><id>``; ``""`` if either part is missing.

    Example::

        >>> build_osm_reference("relation", 2828)
        'R2828'
    """
    osm_id_str = normalize_place_id(osm_id)
    if not osm_type or not osm_id_str:
        return ""
    return osm_type[0].upper() + osm_id_str


def parse_osm_reference(reference: str) -> tuple[str, str]:
    """Decode ``<N|W|R><id>`` into ``(osm_type, osm_id)``.

    Raises:
        InvalidReferenceError: If the reference is shorter than two
            characters or its prefix is not ``N``, ``W`` or ``R``.

    Example::

        >>> parse_osm_reference("W456")
        ('way', '456')
    """
    if len(reference) < 2:
        raise InvalidReferenceError(
            PROVIDER_OSM, reference, f"invalid osm reference: {reference}"
        )
    prefix = reference[0].upper()
    osm_type = _OSM_TYPES.get(prefix)
    if osm_type is None:
        raise InvalidReferenceError(
            PROVIDER_OSM, reference, f"unknown osm reference prefix: {prefix}"
        )
    return osm_type, reference[1:]


def osm_element_url(osm_type: str, osm_id: Any) -> str:
    """Link to an element on openstreetmap.org."""
    return f"https://www.openstreetmap.org/{osm_type.lower()}/{normalize_place_id(osm_id)}"


class OpenStreetMapProvider(LocationProvider):
    """Location provider powered by OpenStreetMap's Nominatim API.

    **Free to use** — no API key required, but Nominatim's usage policy
    asks for an identifying ``User-Agent`` and a contact address.

    Args:
        endpoint: Base URL; defaults to :data:`DEFAULT_OSM_ENDPOINT`.
        email: Contact address sent as the ``From`` header when set.
        user_agent: Identifies your application to Nominatim.
        session: Optional shared :class:`requests.Session`.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        endpoint: str | None = None,
        email: str = "",
        user_agent: str = DEFAULT_OSM_USER_AGENT,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.endpoint = normalize_endpoint(endpoint, DEFAULT_OSM_ENDPOINT)
        self.timeout = timeout
        self._session = session or requests.Session()
        headers = {"User-Agent": (user_agent or "").strip() or DEFAULT_OSM_USER_AGENT}
        if email and email.strip():
            headers["From"] = email.strip()
        self._headers = headers

    def provider_id(self) -> str:
        return PROVIDER_OSM

    def autocomplete(self, query: str) -> list[LocationSuggestion]:
        """Search Nominatim for up to five places matching *query*."""
        Validators.assert_not_blank(query, "query")

        params = {"q": query, "format": "jsonv2", "addressdetails": "1", "limit": "5"}
        results = self._get("autocomplete", "search", params)

        suggestions: list[LocationSuggestion] = []
        for item in results:
            osm_type = item.get("osm_type") or ""
            osm_id = normalize_place_id(item.get("osm_id"))
            display_name = item.get("display_name") or ""
            suggestions.append(
                LocationSuggestion(
                    text=display_name,
                    provider_ref=build_osm_reference(osm_type, osm_id),
                    provider_url=osm_element_url(osm_type, osm_id),
                    raw={
                        "osm_id": osm_id,
                        "osm_type": osm_type,
                        "display_name": display_name,
                    },
                )
            )
        logger.debug("osm autocomplete returned %d suggestion(s)", len(suggestions))
        return suggestions

    def resolve(self, reference: str) -> ResolvedAddress:
        """Look up a single element by its ``N``/``W``/``R`` reference.

        Raises:
            InvalidReferenceError: If *reference* cannot be parsed.
            ZeroResultsError: If Nominatim returns an empty list.
        """
        Validators.assert_not_blank(reference, "reference")
        osm_type, osm_id = parse_osm_reference(reference.strip())

        params = {
            "format": "jsonv2",
            "addressdetails": "1",
            "osm_ids": f"{osm_type[0].upper()}{osm_id}",
        }
        results = self._get("resolve", "lookup", params)
        if not results:
            raise ZeroResultsError(PROVIDER_OSM, "resolve")

        item = results[0]
        item_type = item.get("osm_type") or ""
        item_id = normalize_place_id(item.get("osm_id"))
        address = item.get("address")
        if not isinstance(address, dict):
            address = {}
        display_name = item.get("display_name") or ""

        return ResolvedAddress(
            formatted=display_name,
            address=map_osm_address(address),
            coordinates=Coordinates(
                latitude=parse_float(item.get("lat")),
                longitude=parse_float(item.get("lon")),
            ),
            provider=PROVIDER_OSM,
            provider_ref=build_osm_reference(item_type, item_id),
            provider_url=osm_element_url(item_type, item_id),
            raw={
                "osm_id": item_id,
                "osm_type": item_type,
                "display_name": display_name,
                "lat": item.get("lat") or "",
                "lon": item.get("lon") or "",
                "address": address,
            },
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get(self, operation: str, path: str, params: dict[str, str]) -> list[dict[str, Any]]:
        response = fetch(
            self._session,
            PROVIDER_OSM,
            operation,
            f"{self.endpoint}/{path}",
            params=params,
            timeout=self.timeout,
            headers=self._headers,
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(PROVIDER_OSM, operation, str(exc)) from exc
        if not isinstance(payload, list):
            raise DecodeError(
                PROVIDER_OSM, operation, f"expected array, got {type(payload).__name__}"
            )
        return [item for item in payload if isinstance(item, dict)]


def map_osm_address(address: dict[str, Any]) -> Address:
    """Map a Nominatim ``address`` object onto an :class:`Address`."""
    return Address(
        street=first_non_empty(address.get("road"), address.get("pedestrian"), address.get("cycleway")),
        number=first_non_empty(address.get("house_number")),
        unit=first_non_empty(address.get("unit")),
        city=first_non_empty(
            address.get("city"),
            address.get("town"),
            address.get("village"),
            address.get("municipality"),
            address.get("suburb"),
            address.get("neighbourhood"),
        ),
        state=first_non_empty(address.get("state"), address.get("county")),
        postal_code=first_non_empty(address.get("postcode")),
        country=first_non_empty(address.get("country")),
    )
