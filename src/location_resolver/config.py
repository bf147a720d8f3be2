"""
Location Resolver — Configuration
==================================
Environment-driven settings and the factory that turns them into a
provider.

Environment variables::

    LOCATION_PROVIDER          locationiq (default) | google | osm
    LOCATIONIQ_API_KEY         LocationIQ access token
    LOCATIONIQ_ENDPOINT        override https://api.locationiq.com/v1
    GOOGLE_MAPS_API_KEY        Google Maps API key
    GOOGLE_MAPS_ENDPOINT       override https://maps.googleapis.com/maps/api
    NOMINATIM_ENDPOINT         override https://nominatim.openstreetmap.org
    NOMINATIM_EMAIL            contact address sent as the From header
    NOMINATIM_USER_AGENT       User-Agent sent to Nominatim
    LOCATION_PROVIDER_TIMEOUT  per-request timeout in seconds (default 5)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

import requests

from location_resolver.google import GoogleMapsProvider
from location_resolver.locationiq import LocationIQProvider
from location_resolver.models import PROVIDER_GOOGLE, PROVIDER_LOCATIONIQ, PROVIDER_OSM
from location_resolver.osm import DEFAULT_OSM_USER_AGENT, OpenStreetMapProvider
from location_resolver.provider import DEFAULT_TIMEOUT_SECONDS, LocationProvider

logger = logging.getLogger("location_resolver.config")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        parsed = float(val)
    except ValueError:
        logger.warning("Ignoring invalid timeout %r; using %.1fs", val, default)
        return default
    return parsed if parsed > 0 else default


@dataclass(frozen=True)
class GeocodeSettings:
    """Provider selection plus per-provider credentials and endpoints."""

    provider: str = PROVIDER_LOCATIONIQ
    locationiq_api_key: str = ""
    locationiq_endpoint: str = ""
    google_api_key: str = ""
    google_endpoint: str = ""
    osm_endpoint: str = ""
    osm_email: str = ""
    osm_user_agent: str = DEFAULT_OSM_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GeocodeSettings":
        """Read settings from *environ* (defaults to :data:`os.environ`)."""
        env = os.environ if environ is None else environ
        return cls(
            provider=env.get("LOCATION_PROVIDER", "").strip().lower() or PROVIDER_LOCATIONIQ,
            locationiq_api_key=env.get("LOCATIONIQ_API_KEY", "").strip(),
            locationiq_endpoint=env.get("LOCATIONIQ_ENDPOINT", "").strip(),
            google_api_key=env.get("GOOGLE_MAPS_API_KEY", "").strip(),
            google_endpoint=env.get("GOOGLE_MAPS_ENDPOINT", "").strip(),
            osm_endpoint=env.get("NOMINATIM_ENDPOINT", "").strip(),
            osm_email=env.get("NOMINATIM_EMAIL", "").strip(),
            osm_user_agent=env.get("NOMINATIM_USER_AGENT", "").strip() or DEFAULT_OSM_USER_AGENT,
            timeout=_as_float(env.get("LOCATION_PROVIDER_TIMEOUT"), DEFAULT_TIMEOUT_SECONDS),
        )


def configure_location_provider(
    settings: GeocodeSettings | None,
    session: requests.Session | None = None,
) -> LocationProvider | None:
    """Build the provider selected by *settings*.

    Returns ``None`` — geocoding disabled — when *settings* is ``None``,
    when LocationIQ is selected without an API key, or when the provider
    name is unknown.
    """
    if settings is None:
        return None

    name = settings.provider.strip().lower()
    if name in ("", PROVIDER_LOCATIONIQ):
        if not settings.locationiq_api_key.strip():
            logger.info("location provider disabled: LOCATIONIQ_API_KEY not set")
            return None
        provider: LocationProvider = LocationIQProvider(
            api_key=settings.locationiq_api_key,
            endpoint=settings.locationiq_endpoint,
            session=session,
            timeout=settings.timeout,
        )
    elif name == PROVIDER_GOOGLE:
        provider = GoogleMapsProvider(
            api_key=settings.google_api_key,
            endpoint=settings.google_endpoint,
            session=session,
            timeout=settings.timeout,
        )
    elif name == PROVIDER_OSM:
        provider = OpenStreetMapProvider(
            endpoint=settings.osm_endpoint,
            email=settings.osm_email,
            user_agent=settings.osm_user_agent,
            session=session,
            timeout=settings.timeout,
        )
    else:
        logger.warning("location provider disabled: unknown provider %r", settings.provider)
        return None

    logger.info("location provider enabled: %s", provider.provider_id())
    return provider
