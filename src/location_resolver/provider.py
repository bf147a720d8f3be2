"""
Location Resolver — Provider Interface
=======================================
The capability contract every geocoding provider implements, plus the
small helpers the concrete providers share.

Architecture:
    ``LocationProvider`` is an abstract strategy — callers hold a
    provider and never care which service sits behind it.  The three
    implementations (:mod:`~location_resolver.google`,
    :mod:`~location_resolver.osm`, :mod:`~location_resolver.locationiq`)
    are independent of each other; they share only this interface and the
    module-level helpers below.

Providers keep no mutable state of their own after construction.  They do
hold a :class:`requests.Session`, which requests does not guarantee to be
thread-safe, so threaded callers should build one provider per thread
(or pass each its own ``session``).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from location_resolver.exceptions import (
    RequestBuildError,
    TransportError,
    UnexpectedStatusError,
)
from location_resolver.models import LocationSuggestion, ResolvedAddress

logger = logging.getLogger("location_resolver.provider")

DEFAULT_TIMEOUT_SECONDS = 5.0

# requests raises these while preparing the request, before any I/O.
_REQUEST_BUILD_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
)


class LocationProvider(ABC):
    """Abstract strategy for an external geocoding provider.

    Subclass this and implement all three methods to add a provider.
    Both operations are a single synchronous HTTP round trip bounded by
    the provider's request timeout; nothing is retried or cached.
    """

    @abstractmethod
    def provider_id(self) -> str:
        """Return the identifier (e.g. ``"google"``, ``"osm"``)."""

    @abstractmethod
    def autocomplete(self, query: str) -> list[LocationSuggestion]:
        """Return address suggestions for a free-form *query*.

        Raises:
            InputValidationError: If *query* is blank (no request is sent).
            GeocodingError: For any transport, status, decode or provider
                error.
        """

    @abstractmethod
    def resolve(self, reference: str) -> ResolvedAddress:
        """Resolve a provider *reference* into a structured address.

        Raises:
            InputValidationError: If *reference* is blank or malformed.
            ZeroResultsError: If the provider knows no such place.
            GeocodingError: For any other provider failure.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider_id={self.provider_id()!r})"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def normalize_endpoint(endpoint: str | None, default: str) -> str:
    """Strip trailing slashes from *endpoint*, falling back to *default*."""
    cleaned = (endpoint or "").strip().rstrip("/")
    return cleaned or default


def fetch(
    session: requests.Session,
    provider: str,
    operation: str,
    url: str,
    *,
    params: dict[str, str],
    timeout: float,
    headers: dict[str, str] | None = None,
) -> requests.Response:
    """Perform one GET and map every failure onto the error taxonomy.

    Args:
        session: The provider's HTTP session.
        provider: Provider identifier used in error messages.
        operation: ``"autocomplete"`` or ``"resolve"``.
        url: Absolute URL without query string.
        params: Query parameters.
        timeout: Request timeout in seconds.
        headers: Extra request headers.

    Returns:
        The response, guaranteed to carry HTTP 200.

    Raises:
        RequestBuildError: If the URL or parameters are malformed.
        TransportError: On connection errors and timeouts.
        UnexpectedStatusError: On any status other than 200.
    """
    logger.debug("%s %s GET %s", provider, operation, url)
    try:
        response = session.get(url, params=params, headers=headers, timeout=timeout)
    except _REQUEST_BUILD_ERRORS as exc:
        raise RequestBuildError(provider, operation, str(exc)) from exc
    except requests.RequestException as exc:
        raise TransportError(provider, operation, str(exc)) from exc

    if response.status_code != requests.codes.ok:
        raise UnexpectedStatusError(provider, operation, response.status_code)
    return response


def first_non_empty(*values: Any) -> str:
    """Return the first value that is a non-blank string, stripped."""
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def normalize_place_id(value: Any) -> str:
    """Render a provider identifier that may arrive as a string or a number."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return str(int(value))
    return str(value)


def parse_float(value: Any) -> float:
    """Parse a coordinate that may be a string or a number; ``0.0`` on failure."""
    if value is None or isinstance(value, bool) or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
