"""
Location Resolver — Data Model
===============================
Immutable value types passed between the provider clients, the
normalizer and callers.

Classes:
    Address             Provider-native structured address fields.
    Coordinates         WGS84 latitude/longitude; ``0.0`` means unknown.
    LocationSuggestion  One autocomplete result.
    ResolvedAddress     One resolved place, with the raw provider payload.
    NormalizedLocation  Canonical, repaired, UI-ready location record.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

PROVIDER_GOOGLE = "google"
PROVIDER_OSM = "osm"
PROVIDER_LOCATIONIQ = "locationiq"


@dataclass(frozen=True)
class Address:
    """Structured address fields exactly as a provider reported them.

    Values are not yet repaired or expanded (``country`` may still be a
    two-letter code, text may still carry mojibake).
    """

    street: str = ""
    number: str = ""
    unit: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude in decimal degrees.

    The zero value doubles as "unknown"; a place exactly on the equator or
    the prime meridian cannot be told apart from a missing coordinate.
    """

    latitude: float = 0.0
    longitude: float = 0.0

    @property
    def is_known(self) -> bool:
        """``True`` when at least one axis is non-zero."""
        return self.latitude != 0 or self.longitude != 0


@dataclass(frozen=True)
class LocationSuggestion:
    """A single autocomplete suggestion.

    Attributes:
        text: Display text for the suggestion.
        provider_ref: Opaque provider reference accepted by ``resolve``.
        provider_url: Link to the place on the provider's map, or ``""``.
        raw: Unmodified fragment of the provider payload.
    """

    text: str
    provider_ref: str
    provider_url: str = ""
    raw: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ResolvedAddress:
    """A place resolved by a provider.

    Attributes:
        formatted: The provider's single-line formatted address.
        address: Provider-parsed structured fields.
        coordinates: Location of the place.
        provider: Provider identifier.
        provider_ref: Canonical reference for this place.
        provider_url: Link to the place on the provider's map.
        raw: Full provider payload, kept for fallback extraction.
    """

    formatted: str = ""
    address: Address = field(default_factory=Address)
    coordinates: Coordinates = field(default_factory=Coordinates)
    provider: str = ""
    provider_ref: str = ""
    provider_url: str = ""
    raw: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NormalizedLocation:
    """Canonical location record built by
    :func:`~location_resolver.normalizer.build_normalized_location`.

    Every text field is either empty or repaired, human-readable UTF-8.
    ``latitude``/``longitude`` are rendered as plain decimal strings so
    they can be dropped straight into form fields.
    """

    provider: str = ""
    provider_ref: str = ""
    provider_url: str = ""
    search_value: str = ""
    selected_text: str = ""
    street: str = ""
    number: str = ""
    unit: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    latitude: str = ""
    longitude: str = ""
    raw_json: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
