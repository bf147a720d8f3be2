"""
Tests — LocationIQ Provider
============================
Unit tests for :class:`~location_resolver.locationiq.LocationIQProvider`,
its ``<TYPE>:<id>`` reference helpers and the two ``address`` shapes.

All HTTP calls are mocked via the ``responses`` library.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest
import responses as rsps_lib

from location_resolver.exceptions import (
    DecodeError,
    InvalidReferenceError,
    MissingAPIKeyError,
    ProviderAPIError,
    ZeroResultsError,
)
from location_resolver.locationiq import (
    LocationIQProvider,
    address_lookup,
    build_locationiq_reference,
    build_locationiq_url,
    map_locationiq_address,
    parse_locationiq_reference,
)
from location_resolver.normalizer import build_normalized_location

AUTOCOMPLETE_URL = "https://api.locationiq.com/v1/autocomplete.php"
DETAILS_URL = "https://api.locationiq.com/v1/details.php"

FLAT_ADDRESS = {
    "house_number": "1600",
    "road": "Amphitheatre Parkway",
    "city": "Mountain View",
    "state": "California",
    "postcode": "94043",
    "country": "United States of America",
    "country_code": "us",
}

ARRAY_ADDRESS = [
    {"name": "1600", "type": "house_number"},
    {"name": "Amphitheatre Parkway", "type": "road"},
    {"name": "Mountain View", "type": "city"},
    {"name": "California", "class": "state"},
    {"name": "94043", "type": "postcode"},
    {"name": "United States of America", "type": "country"},
]


def _details(address, **overrides) -> dict:
    """Build a mock ``details.php`` response."""
    body = {
        "place_id": 331976181,
        "osm_type": "way",
        "osm_id": "23733659",
        "lat": "37.4224857",
        "lon": "-122.0855846",
        "display_name": "Google Building 41, 1600, Amphitheatre Parkway, Mountain View, "
                        "Santa Clara County, California, 94043, United States of America",
        "address": address,
    }
    body.update(overrides)
    return body


@pytest.fixture()
def provider() -> LocationIQProvider:
    return LocationIQProvider(api_key="pk.test")


# ---------------------------------------------------------------------------
# Reference helpers
# ---------------------------------------------------------------------------


class TestLocationIQReference:
    @pytest.mark.parametrize(
        "osm_type, osm_id, expected_type",
        [("node", "1", "N"), ("way", "23733659", "W"), ("relation", "2828", "R")],
    )
    def test_round_trip(self, osm_type: str, osm_id: str, expected_type: str) -> None:
        reference = build_locationiq_reference(osm_type, osm_id)
        assert reference == f"{expected_type}:{osm_id}"
        assert parse_locationiq_reference(reference) == (expected_type, osm_id)

    def test_build_numeric_id(self) -> None:
        assert build_locationiq_reference("relation", 2828) == "R:2828"

    def test_build_missing_parts(self) -> None:
        assert build_locationiq_reference("", "2828") == ""
        assert build_locationiq_reference("way", "") == ""

    def test_parse_upper_cases_type(self) -> None:
        assert parse_locationiq_reference("r: 2828") == ("R", "2828")

    @pytest.mark.parametrize("reference", ["R2828", "R:", ":2828", "R:1:2"])
    def test_parse_invalid(self, reference: str) -> None:
        with pytest.raises(InvalidReferenceError) as exc_info:
            parse_locationiq_reference(reference)
        assert exc_info.value.message == f"invalid locationiq reference: {reference}"

    def test_url(self) -> None:
        assert build_locationiq_url("W", "23733659") == "https://www.openstreetmap.org/way/23733659"
        assert build_locationiq_url("relation", "2828") == "https://www.openstreetmap.org/relation/2828"
        assert build_locationiq_url("N", "0") == ""
        assert build_locationiq_url("X", "1") == ""


# ---------------------------------------------------------------------------
# Address shapes
# ---------------------------------------------------------------------------


class TestAddressShapes:
    def test_array_and_object_agree(self) -> None:
        assert map_locationiq_address(ARRAY_ADDRESS) == map_locationiq_address(FLAT_ADDRESS)

    def test_array_shape_fields(self) -> None:
        address = map_locationiq_address(ARRAY_ADDRESS)
        assert address.number == "1600"
        assert address.street == "Amphitheatre Parkway"
        assert address.city == "Mountain View"
        assert address.state == "California"
        assert address.postal_code == "94043"

    def test_lookup_skips_malformed_entries(self) -> None:
        lookup = address_lookup([{"name": "x"}, "junk", {"name": "", "type": "road"}, {"name": "Main", "type": " Road "}])
        assert lookup == {"road": "Main"}

    def test_lookup_other_shapes(self) -> None:
        assert address_lookup(None) == {}
        assert address_lookup("1 Main St") == {}


# ---------------------------------------------------------------------------
# Autocomplete
# ---------------------------------------------------------------------------


class TestLocationIQAutocomplete:
    @rsps_lib.activate
    def test_returns_suggestions(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(
            rsps_lib.GET,
            AUTOCOMPLETE_URL,
            json=[
                {
                    "place_id": "331976181",
                    "osm_id": "23733659",
                    "osm_type": "way",
                    "lat": "37.4224857",
                    "lon": "-122.0855846",
                    "display_name": "Amphitheatre Parkway, Mountain View, CA",
                    "address": {"name": "Amphitheatre Parkway"},
                }
            ],
            status=200,
        )
        suggestions = provider.autocomplete("Amphitheatre")
        assert [s.provider_ref for s in suggestions] == ["W:23733659"]
        assert suggestions[0].provider_url == "https://www.openstreetmap.org/way/23733659"

        params = parse_qs(urlparse(rsps_lib.calls[0].request.url).query)
        assert params["key"] == ["pk.test"]
        assert params["q"] == ["Amphitheatre"]
        assert params["limit"] == ["5"]
        assert params["format"] == ["json"]
        assert params["normalizeaddress"] == ["1"]

    @rsps_lib.activate
    def test_unable_to_geocode_is_zero_results(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, AUTOCOMPLETE_URL, json={"error": "Unable to geocode"}, status=200)
        with pytest.raises(ZeroResultsError) as exc_info:
            provider.autocomplete("zzz")
        assert exc_info.value.message == "locationiq autocomplete zero results"

    @rsps_lib.activate
    def test_error_object_with_200(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, AUTOCOMPLETE_URL, json={"error": "Invalid key"}, status=200)
        with pytest.raises(ProviderAPIError) as exc_info:
            provider.autocomplete("Main St")
        assert exc_info.value.message == "locationiq autocomplete error: Invalid key"

    @rsps_lib.activate
    def test_unexpected_object_is_decode_error(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, AUTOCOMPLETE_URL, json={"foo": "bar"}, status=200)
        with pytest.raises(DecodeError):
            provider.autocomplete("Main St")

    @rsps_lib.activate
    def test_garbage_body_is_decode_error(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, AUTOCOMPLETE_URL, body="not json", status=200)
        with pytest.raises(DecodeError):
            provider.autocomplete("Main St")

    @rsps_lib.activate
    def test_missing_key_checked_before_request(self) -> None:
        with pytest.raises(MissingAPIKeyError) as exc_info:
            LocationIQProvider(api_key="  ").autocomplete("Main St")
        assert exc_info.value.message == "locationiq api key is required"
        assert len(rsps_lib.calls) == 0


# ---------------------------------------------------------------------------
# Resolve
# ---------------------------------------------------------------------------


class TestLocationIQResolve:
    @rsps_lib.activate
    def test_resolve_object_body(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, DETAILS_URL, json=_details(FLAT_ADDRESS), status=200)
        resolved = provider.resolve("W:23733659")

        params = parse_qs(urlparse(rsps_lib.calls[0].request.url).query)
        assert params["osmtype"] == ["W"]
        assert params["osmid"] == ["23733659"]
        assert params["format"] == ["json"]

        assert resolved.provider == "locationiq"
        assert resolved.provider_ref == "W:23733659"
        assert resolved.address.street == "Amphitheatre Parkway"
        assert resolved.raw["place_id"] == "331976181"

    @rsps_lib.activate
    def test_array_address_normalizes_like_object(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, DETAILS_URL, json=_details(FLAT_ADDRESS), status=200)
        rsps_lib.add(rsps_lib.GET, DETAILS_URL, json=_details(ARRAY_ADDRESS), status=200)
        from_object = build_normalized_location(provider.resolve("W:23733659"))
        from_array = build_normalized_location(provider.resolve("W:23733659"))

        for field_name in ("street", "number", "city", "state", "postal_code", "country"):
            assert getattr(from_array, field_name) == getattr(from_object, field_name)
        assert from_array.street == "Amphitheatre Parkway"
        assert from_array.country == "United States of America"

    @rsps_lib.activate
    def test_list_body_takes_first_item(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, DETAILS_URL, json=[_details(FLAT_ADDRESS)], status=200)
        assert provider.resolve("W:23733659").address.number == "1600"

    @rsps_lib.activate
    def test_calculated_postcode_fallback(self, provider: LocationIQProvider) -> None:
        address = {k: v for k, v in FLAT_ADDRESS.items() if k != "postcode"}
        rsps_lib.add(
            rsps_lib.GET,
            DETAILS_URL,
            json=_details(address, calculated_postcode="94043"),
            status=200,
        )
        assert provider.resolve("W:23733659").address.postal_code == "94043"

    @rsps_lib.activate
    @pytest.mark.parametrize("body", [[], {}, {"error": "Unable to geocode"}])
    def test_zero_results_is_error(self, provider: LocationIQProvider, body) -> None:
        rsps_lib.add(rsps_lib.GET, DETAILS_URL, json=body, status=200)
        with pytest.raises(ZeroResultsError):
            provider.resolve("R:2828")

    @rsps_lib.activate
    def test_error_message_object(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, DETAILS_URL, json={"message": "Rate limited"}, status=200)
        with pytest.raises(ProviderAPIError) as exc_info:
            provider.resolve("R:2828")
        assert exc_info.value.provider_message == "Rate limited"

    @rsps_lib.activate
    def test_scalar_body_is_decode_error(self, provider: LocationIQProvider) -> None:
        rsps_lib.add(rsps_lib.GET, DETAILS_URL, json="nope", status=200)
        with pytest.raises(DecodeError):
            provider.resolve("R:2828")

    @rsps_lib.activate
    def test_bad_reference_sends_nothing(self, provider: LocationIQProvider) -> None:
        with pytest.raises(InvalidReferenceError):
            provider.resolve("2828")
        assert len(rsps_lib.calls) == 0

    @rsps_lib.activate
    def test_missing_key_checked_before_request(self) -> None:
        with pytest.raises(MissingAPIKeyError):
            LocationIQProvider().resolve("R:2828")
        assert len(rsps_lib.calls) == 0
