"""
Location Resolver — Google Maps Provider
=========================================
:class:`GoogleMapsProvider` backed by the Google Places API
(``place/autocomplete`` and ``place/details``).

Google reports errors inside an HTTP 200 body via its ``status`` field;
``ZERO_RESULTS`` on autocomplete is an ordinary empty answer, while on
details it means the ``place_id`` is unknown.

Reference:
    https://developers.google.com/maps/documentation/places/web-service
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote_plus

import requests

from location_resolver.exceptions import (
    DecodeError,
    ProviderAPIError,
    ZeroResultsError,
)
from location_resolver.models import (
    PROVIDER_GOOGLE,
    Address,
    Coordinates,
    LocationSuggestion,
    ResolvedAddress,
)
from location_resolver.provider import (
    DEFAULT_TIMEOUT_SECONDS,
    LocationProvider,
    fetch,
    normalize_endpoint,
    parse_float,
)
from location_resolver.validators import Validators

logger = logging.getLogger("location_resolver.google")

DEFAULT_GOOGLE_ENDPOINT = "https://maps.googleapis.com/maps/api"
DETAILS_FIELDS = "formatted_address,address_component,geometry,url"


def google_place_url(place_id: str) -> str:
    """Build a Google Maps search URL for *place_id*."""
    return (
        "https://www.google.com/maps/search/?api=1&query=place_id:"
        f"{quote_plus(place_id)}"
    )


class GoogleMapsProvider(LocationProvider):
    """Location provider powered by the Google Places API.

    Args:
        api_key: Google Maps API key with the Places API enabled.  Sent as
                 the ``key`` query parameter when set.
        endpoint: Base URL; defaults to :data:`DEFAULT_GOOGLE_ENDPOINT`.
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
        self.endpoint = normalize_endpoint(endpoint, DEFAULT_GOOGLE_ENDPOINT)
        self.timeout = timeout
        self._session = session or requests.Session()

    def provider_id(self) -> str:
        return PROVIDER_GOOGLE

    def autocomplete(self, query: str) -> list[LocationSuggestion]:
        """Return address predictions for *query*.

        ``ZERO_RESULTS`` yields an empty list; any other non-``OK`` status
        raises :class:`ProviderAPIError`.
        """
        Validators.assert_not_blank(query, "query")

        params = {"input": query, "types": "address"}
        payload = self._get("autocomplete", "place/autocomplete/json", params)

        status = payload.get("status", "")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            raise ProviderAPIError(
                PROVIDER_GOOGLE, "autocomplete", status, payload.get("error_message") or ""
            )

        suggestions: list[LocationSuggestion] = []
        for prediction in payload.get("predictions") or []:
            if not isinstance(prediction, dict):
                continue
            description = prediction.get("description") or ""
            place_id = prediction.get("place_id") or ""
            formatting = _object(prediction.get("structured_formatting"), "autocomplete")
            suggestions.append(
                LocationSuggestion(
                    text=description,
                    provider_ref=place_id,
                    provider_url=google_place_url(place_id),
                    raw={
                        "description": description,
                        "place_id": place_id,
                        "structured_formatting": {
                            "main_text": formatting.get("main_text", ""),
                            "secondary_text": formatting.get("secondary_text", ""),
                        },
                    },
                )
            )
        logger.debug("google autocomplete returned %d suggestion(s)", len(suggestions))
        return suggestions

    def resolve(self, reference: str) -> ResolvedAddress:
        """Fetch place details for the ``place_id`` *reference*."""
        Validators.assert_not_blank(reference, "reference")

        params = {"place_id": reference, "fields": DETAILS_FIELDS}
        payload = self._get("resolve", "place/details/json", params)

        status = payload.get("status", "")
        if status == "ZERO_RESULTS":
            raise ZeroResultsError(PROVIDER_GOOGLE, "resolve")
        if status != "OK":
            raise ProviderAPIError(
                PROVIDER_GOOGLE, "resolve", status, payload.get("error_message") or ""
            )

        result = _object(payload.get("result"), "resolve")
        components = result.get("address_components") or []
        if not isinstance(components, list):
            raise DecodeError(
                PROVIDER_GOOGLE, "resolve", f"expected array, got {type(components).__name__}"
            )
        components = [c for c in components if isinstance(c, dict)]
        geometry = _object(result.get("geometry"), "resolve")
        location = _object(geometry.get("location"), "resolve")
        place_id = result.get("place_id") or ""
        formatted = result.get("formatted_address") or ""

        return ResolvedAddress(
            formatted=formatted,
            address=map_google_address(components),
            coordinates=Coordinates(
                latitude=parse_float(location.get("lat")),
                longitude=parse_float(location.get("lng")),
            ),
            provider=PROVIDER_GOOGLE,
            provider_ref=place_id,
            provider_url=result.get("url") or google_place_url(reference),
            raw={
                "place_id": place_id,
                "formatted_address": formatted,
                "address_components": components,
                "geometry": geometry,
            },
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get(self, operation: str, path: str, params: dict[str, str]) -> dict[str, Any]:
        if self._api_key:
            params = {**params, "key": self._api_key}
        response = fetch(
            self._session,
            PROVIDER_GOOGLE,
            operation,
            f"{self.endpoint}/{path}",
            params=params,
            timeout=self.timeout,
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(PROVIDER_GOOGLE, operation, str(exc)) from exc
        if not isinstance(payload, dict):
            raise DecodeError(
                PROVIDER_GOOGLE, operation, f"expected object, got {type(payload).__name__}"
            )
        return payload


def _object(value: Any, operation: str) -> dict[str, Any]:
    """Return a nested JSON object; a missing one is ``{}``, any other type is malformed."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(
            PROVIDER_GOOGLE, operation, f"expected object, got {type(value).__name__}"
        )
    return value


def map_google_address(components: list[dict[str, Any]]) -> Address:
    """Map Google ``address_components`` onto an :class:`Address`.

    City falls back through ``locality``/``postal_town``, then
    ``sublocality``, then ``administrative_area_level_2``.
    """
    street = number = city = state = postal = country = unit = ""
    secondary_city = admin_area_2 = ""

    for comp in components:
        long_name = comp.get("long_name") or ""
        for component_type in comp.get("types") or []:
            if component_type == "street_number":
                number = long_name
            elif component_type == "route":
                street = long_name
            elif component_type in ("sublocality", "sublocality_level_1"):
                if not secondary_city:
                    secondary_city = long_name
            elif component_type == "locality":
                city = long_name
            elif component_type == "postal_town":
                if not city:
                    city = long_name
            elif component_type == "administrative_area_level_1":
                state = long_name
            elif component_type == "administrative_area_level_2":
                admin_area_2 = long_name
            elif component_type == "country":
                country = long_name
            elif component_type == "postal_code":
                postal = long_name
            elif component_type == "subpremise":
                if not unit:
                    unit = long_name

    return Address(
        street=street,
        number=number,
        unit=unit,
        city=city or secondary_city or admin_area_2,
        state=state,
        postal_code=postal,
        country=country,
    )
