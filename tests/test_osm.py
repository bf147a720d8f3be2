"""
Tests — OpenStreetMap Provider
===============================
Unit tests for :class:`~location_resolver.osm.OpenStreetMapProvider` and
the ``N``/``W``/``R`` reference helpers.

All HTTP calls are mocked via the ``responses`` library.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest
import responses as rsps_lib

from location_resolver.exceptions import (
    DecodeError,
    InputValidationError,
    InvalidReferenceError,
    UnexpectedStatusError,
    ZeroResultsError,
)
from location_resolver.osm import (
    DEFAULT_OSM_USER_AGENT,
    OpenStreetMapProvider,
    build_osm_reference,
    map_osm_address,
    parse_osm_reference,
)

SEARCH_URL = "https://nominatim.openstreetmap.org/search"
LOOKUP_URL = "https://nominatim.openstreetmap.org/lookup"


def _lookup_hit() -> list[dict]:
    """Build a mock Nominatim ``/lookup`` response for the Palace of Culture."""
    return [
        {
            "place_id": 123456,
            "osm_type": "way",
            "osm_id": 26944183,
            "lat": "52.2317641",
            "lon": "21.005799675616117",
            "display_name": "Pałac Kultury i Nauki, plac Defilad 1, Warszawa, Polska",
            "address": {
                "house_number": "1",
                "road": "plac Defilad",
                "suburb": "Śródmieście",
                "city": "Warszawa",
                "state": "województwo mazowieckie",
                "postcode": "00-901",
                "country": "Polska",
                "country_code": "pl",
            },
        }
    ]


@pytest.fixture()
def provider() -> OpenStreetMapProvider:
    return OpenStreetMapProvider(email="ops@example.com", user_agent="test-suite/1.0")


# ---------------------------------------------------------------------------
# Reference helpers
# ---------------------------------------------------------------------------


class TestOsmReference:
    @pytest.mark.parametrize(
        "osm_type, osm_id",
        [("node", "123"), ("way", "456"), ("relation", "789"), ("way", "26944183")],
    )
    def test_round_trip(self, osm_type: str, osm_id: str) -> None:
        assert parse_osm_reference(build_osm_reference(osm_type, osm_id)) == (osm_type, osm_id)

    def test_build_format(self) -> None:
        assert build_osm_reference("relation", 2828) == "R2828"
        assert build_osm_reference("way", 12.0) == "W12"

    def test_build_missing_parts(self) -> None:
        assert build_osm_reference("", "1") == ""
        assert build_osm_reference("node", None) == ""

    def test_parse_lowercase_prefix(self) -> None:
        assert parse_osm_reference("n42") == ("node", "42")

    def test_parse_too_short(self) -> None:
        with pytest.raises(InvalidReferenceError) as exc_info:
            parse_osm_reference("N")
        assert exc_info.value.message == "invalid osm reference: N"

    def test_parse_unknown_prefix(self) -> None:
        with pytest.raises(InvalidReferenceError) as exc_info:
            parse_osm_reference("X12")
        assert exc_info.value.message == "unknown osm reference prefix: X"


# ---------------------------------------------------------------------------
# Autocomplete
# ---------------------------------------------------------------------------


class TestOsmAutocomplete:
    @rsps_lib.activate
    def test_returns_suggestions(self, provider: OpenStreetMapProvider) -> None:
        rsps_lib.add(rsps_lib.GET, SEARCH_URL, json=_lookup_hit(), status=200)
        suggestions = provider.autocomplete("plac Defilad 1")
        assert len(suggestions) == 1
        s = suggestions[0]
        assert s.provider_ref == "W26944183"
        assert s.provider_url == "https://www.openstreetmap.org/way/26944183"
        assert s.raw == {
            "osm_id": "26944183",
            "osm_type": "way",
            "display_name": "Pałac Kultury i Nauki, plac Defilad 1, Warszawa, Polska",
        }

    @rsps_lib.activate
    def test_sends_params_and_policy_headers(self, provider: OpenStreetMapProvider) -> None:
        rsps_lib.add(rsps_lib.GET, SEARCH_URL, json=[], status=200)
        assert provider.autocomplete("Warszawa") == []

        request = rsps_lib.calls[0].request
        params = parse_qs(urlparse(request.url).query)
        assert params["q"] == ["Warszawa"]
        assert params["format"] == ["jsonv2"]
        assert params["addressdetails"] == ["1"]
        assert params["limit"] == ["5"]
        assert request.headers["User-Agent"] == "test-suite/1.0"
        assert request.headers["From"] == "ops@example.com"

    @rsps_lib.activate
    def test_default_user_agent_without_email(self) -> None:
        rsps_lib.add(rsps_lib.GET, SEARCH_URL, json=[], status=200)
        OpenStreetMapProvider().autocomplete("Warszawa")
        headers = rsps_lib.calls[0].request.headers
        assert headers["User-Agent"] == DEFAULT_OSM_USER_AGENT
        assert "From" not in headers

    @rsps_lib.activate
    def test_custom_endpoint_trailing_slash(self) -> None:
        rsps_lib.add(rsps_lib.GET, "https://geo.example.com/nominatim/search", json=[], status=200)
        OpenStreetMapProvider(endpoint="https://geo.example.com/nominatim/").autocomplete("x")
        assert len(rsps_lib.calls) == 1

    @rsps_lib.activate
    def test_object_body_is_decode_error(self, provider: OpenStreetMapProvider) -> None:
        rsps_lib.add(rsps_lib.GET, SEARCH_URL, json={"error": "boom"}, status=200)
        with pytest.raises(DecodeError):
            provider.autocomplete("Warszawa")

    @rsps_lib.activate
    def test_blank_query(self, provider: OpenStreetMapProvider) -> None:
        with pytest.raises(InputValidationError):
            provider.autocomplete("")
        assert len(rsps_lib.calls) == 0


# ---------------------------------------------------------------------------
# Resolve
# ---------------------------------------------------------------------------


class TestOsmResolve:
    @rsps_lib.activate
    def test_resolve_maps_address(self, provider: OpenStreetMapProvider) -> None:
        rsps_lib.add(rsps_lib.GET, LOOKUP_URL, json=_lookup_hit(), status=200)
        resolved = provider.resolve("W26944183")

        params = parse_qs(urlparse(rsps_lib.calls[0].request.url).query)
        assert params["osm_ids"] == ["W26944183"]
        assert params["format"] == ["jsonv2"]

        assert resolved.provider == "osm"
        assert resolved.provider_ref == "W26944183"
        assert resolved.address.street == "plac Defilad"
        assert resolved.address.number == "1"
        assert resolved.address.city == "Warszawa"
        assert resolved.address.postal_code == "00-901"
        assert resolved.coordinates.latitude == pytest.approx(52.2317641)
        assert resolved.raw["lat"] == "52.2317641"

    @rsps_lib.activate
    def test_zero_results_is_error(self, provider: OpenStreetMapProvider) -> None:
        rsps_lib.add(rsps_lib.GET, LOOKUP_URL, json=[], status=200)
        with pytest.raises(ZeroResultsError) as exc_info:
            provider.resolve("N1")
        assert exc_info.value.message == "osm resolve zero results"

    @rsps_lib.activate
    def test_bad_reference_sends_nothing(self, provider: OpenStreetMapProvider) -> None:
        with pytest.raises(InvalidReferenceError):
            provider.resolve("Q123")
        assert len(rsps_lib.calls) == 0

    @rsps_lib.activate
    def test_rate_limited_status(self, provider: OpenStreetMapProvider) -> None:
        rsps_lib.add(rsps_lib.GET, LOOKUP_URL, status=429)
        with pytest.raises(UnexpectedStatusError) as exc_info:
            provider.resolve("N1")
        assert exc_info.value.status_code == 429


# ---------------------------------------------------------------------------
# Address mapping
# ---------------------------------------------------------------------------


class TestMapOsmAddress:
    def test_street_fallback_order(self) -> None:
        assert map_osm_address({"pedestrian": "Rynek"}).street == "Rynek"
        assert map_osm_address({"cycleway": "Bike Path"}).street == "Bike Path"

    def test_city_fallback_order(self) -> None:
        assert map_osm_address({"village": "Zakopane", "suburb": "Centrum"}).city == "Zakopane"
        assert map_osm_address({"neighbourhood": "Mokotów"}).city == "Mokotów"

    def test_empty_address(self) -> None:
        address = map_osm_address({})
        assert address.street == "" and address.city == ""
