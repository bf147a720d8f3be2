"""
Location Resolver — Location Service
=====================================
The seam consumers (HTTP handlers, form builders, the CLI) talk to.  It
wraps whichever :class:`~location_resolver.provider.LocationProvider` is
configured and turns a provider reference into a
:class:`~location_resolver.models.NormalizedLocation`.
"""

from __future__ import annotations

import logging

from location_resolver.exceptions import ProviderUnavailableError
from location_resolver.models import LocationSuggestion, NormalizedLocation, ResolvedAddress
from location_resolver.normalizer import build_normalized_location
from location_resolver.provider import LocationProvider
from location_resolver.validators import Validators

logger = logging.getLogger("location_resolver.service")


class LocationService:
    """Front door for address autocomplete and normalization.

    Args:
        provider: The configured provider, or ``None`` when geocoding is
                  disabled.  Every method then raises
                  :class:`ProviderUnavailableError`.

    Example::

        service = LocationService(OpenStreetMapProvider(email="ops@example.com"))
        suggestions = service.suggest_locations("Marszałkowska 1, Warszawa")
        location = service.normalize_location(
            suggestions[0].provider_ref, suggestions[0].text
        )
    """

    def __init__(self, provider: LocationProvider | None) -> None:
        self._provider = provider

    @property
    def provider_id(self) -> str | None:
        """Identifier of the configured provider, or ``None``."""
        return self._provider.provider_id() if self._provider else None

    def suggest_locations(self, query: str) -> list[LocationSuggestion]:
        """Autocomplete *query* with the configured provider."""
        return self._require_provider().autocomplete(query)

    def resolve_location(self, reference: str) -> ResolvedAddress:
        """Resolve a provider reference without normalizing it."""
        return self._require_provider().resolve(reference)

    def normalize_location(self, provider_ref: str, selected_text: str = "") -> NormalizedLocation:
        """Resolve *provider_ref* and build its canonical location.

        Args:
            provider_ref: Reference taken from a :class:`LocationSuggestion`.
            selected_text: The suggestion text the user picked, if any.

        Raises:
            ProviderUnavailableError: If no provider is configured.
            InputValidationError: If *provider_ref* is blank.
            GeocodingError: If the provider round trip fails.
        """
        provider = self._require_provider()
        Validators.assert_not_blank(provider_ref, "reference")
        resolved = provider.resolve(provider_ref.strip())
        location = build_normalized_location(resolved, selected_text)
        logger.debug(
            "normalized %s reference %s", provider.provider_id(), location.provider_ref
        )
        return location

    def _require_provider(self) -> LocationProvider:
        if self._provider is None:
            raise ProviderUnavailableError()
        return self._provider
