"""
Location Resolver — LocationIQ Provider
========================================
:class:`LocationIQProvider` backed by LocationIQ's ``autocomplete.php``
and ``details.php`` endpoints.

Two quirks shape this module:

* LocationIQ answers some failures with HTTP 200 and a body like
  ``{"error": "Invalid key"}``, so every body is decoded permissively and
  checked for an error object before being treated as malformed.
* The ``address`` field arrives either as a flat object or as a list of
  ``{"name": ..., "type"|"class": ...}`` entries.  :func:`address_lookup`
  folds both shapes into one flat dict before fields are extracted.

References are ``<TYPE>:<id>`` (e.g. ``R:2828``).

Reference:
    https://docs.locationiq.com/reference
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any

import requests

from location_resolver.exceptions import (
    DecodeError,
    InvalidReferenceError,
    ProviderAPIError,
    ZeroResultsError,
)
from location_resolver.models import (
    PROVIDER_LOCATIONIQ,
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

logger = logging.getLogger("location_resolver.locationiq")

DEFAULT_LOCATIONIQ_ENDPOINT = "https://api.locationiq.com/v1"

# LocationIQ's wording for "nothing found".
_NO_MATCH_MESSAGE = "unable to geocode"

_OSM_URL_TYPES = {
    "n": "node",
    "node": "node",
    "w": "way",
    "way": "way",
    "r": "relation",
    "rel": "relation",
    "relation": "relation",
}


def build_locationiq_reference(osm_type: str, osm_id: Any) -> str:
    """Encode an element as ``<TYPE>:<id>``; ``""`` if the type or id is missing.

    Example::

        >>> build_locationiq_reference("relation", "2828")
        'R:2828'
    """
    osm_id_str = normalize_place_id(osm_id)
    osm_type = (osm_type or "").strip()
    if not osm_type or not osm_id_str:
        return ""
    return f"{osm_type[0].upper()}:{osm_id_str}"


def parse_locationiq_reference(reference: str) -> tuple[str, str]:
    """Decode ``<TYPE>:<id>`` into ``(TYPE, id)``.

    Raises:
        InvalidReferenceError: Unless the reference has exactly one ``:``
            with non-blank text on both sides.
    """
    parts = reference.split(":")
    if len(parts) != 2:
        raise InvalidReferenceError(
            PROVIDER_LOCATIONIQ, reference, f"invalid locationiq reference: {reference}"
        )
    osm_type = parts[0].strip().upper()
    osm_id = parts[1].strip()
    if not osm_type or not osm_id:
        raise InvalidReferenceError(
            PROVIDER_LOCATIONIQ, reference, f"invalid locationiq reference: {reference}"
        )
    return osm_type, osm_id


def build_locationiq_url(osm_type: str, osm_id: str) -> str:
    """Link to the element on openstreetmap.org, or ``""`` when unknown."""
    if not osm_type or not osm_id or osm_id == "0":
        return ""
    url_type = _OSM_URL_TYPES.get(osm_type.lower())
    if url_type is None:
        return ""
    return f"https://www.openstreetmap.org/{url_type}/{osm_id}"


def address_lookup(data: Any) -> dict[str, str]:
    """Fold either LocationIQ ``address`` shape into one ``{key: value}`` dict.

    * ``dict`` — string values are kept as-is.
    * ``list`` — each ``{"name", "type"}`` entry becomes ``{type: name}``;
      ``class`` stands in for a missing ``type``.
    * anything else — empty dict.
    """
    if isinstance(data, dict):
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    combined: dict[str, str] = {}
    if isinstance(data, list):
        for item in data:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            if not isinstance(name, str) or not name:
                continue
            entry_type = item.get("type") or item.get("class") or ""
            entry_type = str(entry_type).strip().lower()
            if not entry_type:
                continue
            combined[entry_type] = name
    return combined


def map_locationiq_address(data: Any) -> Address:
    """Map a LocationIQ ``address`` (object or list form) onto an :class:`Address`."""
    lookup = address_lookup(data)
    if not lookup:
        return Address()
    get = lookup.get
    return Address(
        number=first_non_empty(get("house_number"), get("addr_house_number")),
        street=first_non_empty(
            get("road"), get("pedestrian"), get("footway"), get("neighbourhood"), get("residential")
        ),
        unit=first_non_empty(get("unit"), get("suite"), get("level"), get("apartment")),
        city=first_non_empty(
            get("city"),
            get("town"),
            get("village"),
            get("hamlet"),
            get("municipality"),
            get("county"),
            get("state_district"),
        ),
        state=first_non_empty(get("state"), get("region")),
        postal_code=first_non_empty(get("postcode"), get("postal_code")),
        country=first_non_empty(get("country"), get("country_code")),
    )


class LocationIQProvider(LocationProvider):
    """Location provider powered by the LocationIQ API (requires an API key).

    Args:
        api_key: LocationIQ access token.  Checked before every request;
                 a missing key raises :class:`MissingAPIKeyError`.
        endpoint: Base URL; defaults to :data:`DEFAULT_LOCATIONIQ_ENDPOINT`.
        session: Optional shared :class:`requests.Session`.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str = "",
        endpoint: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self.endpoint = normalize_endpoint(endpoint, DEFAULT_LOCATIONIQ_ENDPOINT)
        self.timeout = timeout
        self._session = session or requests.Session()

    def provider_id(self) -> str:
        return PROVIDER_LOCATIONIQ

    def autocomplete(self, query: str) -> list[LocationSuggestion]:
        """Return up to five suggestions for *query*.

        Raises:
            MissingAPIKeyError: If no API key is configured.
            ZeroResultsError: If LocationIQ answers ``Unable to geocode``.
            ProviderAPIError: If LocationIQ returns any other error object.
        """
        Validators.assert_not_blank(query, "query")
        Validators.assert_api_key(self._api_key, PROVIDER_LOCATIONIQ)

        params = {
            "key": self._api_key,
            "q": query,
            "limit": "5",
            "format": "json",
            "normalizeaddress": "1",
        }
        payload = self._get("autocomplete", "autocomplete.php", params)
        if not isinstance(payload, list):
            _raise_for_api_error(payload, "autocomplete")
            raise DecodeError(
                PROVIDER_LOCATIONIQ, "autocomplete", f"expected array, got {type(payload).__name__}"
            )

        suggestions: list[LocationSuggestion] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            osm_type = item.get("osm_type") or ""
            osm_id = normalize_place_id(item.get("osm_id"))
            display_name = item.get("display_name") or ""
            suggestions.append(
                LocationSuggestion(
                    text=display_name,
                    provider_ref=build_locationiq_reference(osm_type, osm_id),
                    provider_url=build_locationiq_url(osm_type, osm_id),
                    raw={
                        "place_id": normalize_place_id(item.get("place_id")),
                        "display_name": display_name,
                        "lat": item.get("lat") or "",
                        "lon": item.get("lon") or "",
                        "osm_id": osm_id,
                        "osm_type": osm_type,
                        "address": item.get("address"),
                    },
                )
            )
        logger.debug("locationiq autocomplete returned %d suggestion(s)", len(suggestions))
        return suggestions

    def resolve(self, reference: str) -> ResolvedAddress:
        """Fetch details for a ``<TYPE>:<id>`` *reference*.

        Raises:
            InvalidReferenceError: If *reference* cannot be parsed.
            ZeroResultsError: If LocationIQ finds no such element.
            ProviderAPIError: If LocationIQ returns an error object.
        """
        Validators.assert_not_blank(reference, "reference")
        Validators.assert_api_key(self._api_key, PROVIDER_LOCATIONIQ)
        osm_type, osm_id = parse_locationiq_reference(reference)

        params = {
            "key": self._api_key,
            "osmtype": osm_type,
            "osmid": osm_id,
            "format": "json",
        }
        payload = self._get("resolve", "details.php", params)

        if isinstance(payload, list):
            if not payload:
                raise ZeroResultsError(PROVIDER_LOCATIONIQ, "resolve")
            payload = payload[0]
        if not isinstance(payload, dict):
            raise DecodeError(
                PROVIDER_LOCATIONIQ, "resolve", f"expected object, got {type(payload).__name__}"
            )
        _raise_for_api_error(payload, "resolve")
        if not payload:
            raise ZeroResultsError(PROVIDER_LOCATIONIQ, "resolve")

        address = map_locationiq_address(payload.get("address"))
        calculated_postcode = payload.get("calculated_postcode")
        if not address.postal_code and isinstance(calculated_postcode, str) and calculated_postcode.strip():
            address = replace(address, postal_code=calculated_postcode.strip())

        result_type = payload.get("osm_type") or ""
        result_id = normalize_place_id(payload.get("osm_id"))
        raw = dict(payload)
        raw["place_id"] = normalize_place_id(payload.get("place_id"))

        return ResolvedAddress(
            formatted=payload.get("display_name") or "",
            address=address,
            coordinates=Coordinates(
                latitude=parse_float(payload.get("lat")),
                longitude=parse_float(payload.get("lon")),
            ),
            provider=PROVIDER_LOCATIONIQ,
            provider_ref=build_locationiq_reference(result_type, result_id),
            provider_url=build_locationiq_url(result_type, result_id),
            raw=raw,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get(self, operation: str, path: str, params: dict[str, str]) -> Any:
        response = fetch(
            self._session,
            PROVIDER_LOCATIONIQ,
            operation,
            f"{self.endpoint}/{path}",
            params=params,
            timeout=self.timeout,
        )
        try:
            return json.loads(response.text)
        except ValueError as exc:
            raise DecodeError(PROVIDER_LOCATIONIQ, operation, str(exc)) from exc


def _error_message(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    message = payload.get("error") or payload.get("message")
    return message if isinstance(message, str) else ""


def _is_no_match(payload: Any) -> bool:
    return _error_message(payload).strip().lower() == _NO_MATCH_MESSAGE


def _raise_for_api_error(payload: Any, operation: str) -> None:
    """Raise if *payload* is a LocationIQ ``{error|message}`` object."""
    message = _error_message(payload)
    if not message:
        return
    if _is_no_match(payload):
        raise ZeroResultsError(PROVIDER_LOCATIONIQ, operation)
    raise ProviderAPIError(PROVIDER_LOCATIONIQ, operation, "", message)
