"""
Location Resolver
==================
Address autocomplete and normalization over Google Maps Places,
OpenStreetMap Nominatim and LocationIQ.

Public API::

    from location_resolver import LocationService, OpenStreetMapProvider
"""

from location_resolver.config import GeocodeSettings, configure_location_provider
from location_resolver.google import GoogleMapsProvider
from location_resolver.locationiq import LocationIQProvider
from location_resolver.models import (
    Address,
    Coordinates,
    LocationSuggestion,
    NormalizedLocation,
    ResolvedAddress,
)
from location_resolver.normalizer import build_normalized_location
from location_resolver.osm import OpenStreetMapProvider
from location_resolver.provider import LocationProvider
from location_resolver.service import LocationService

__all__ = [
    "Address",
    "Coordinates",
    "GeocodeSettings",
    "GoogleMapsProvider",
    "LocationIQProvider",
    "LocationProvider",
    "LocationService",
    "LocationSuggestion",
    "NormalizedLocation",
    "OpenStreetMapProvider",
    "ResolvedAddress",
    "build_normalized_location",
    "configure_location_provider",
]
__version__ = "1.0.0"
