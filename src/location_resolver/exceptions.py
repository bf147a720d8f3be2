"""
Location Resolver — Exception Hierarchy
========================================
Every error raised by the provider clients, the service layer and the
batch tool comes from this module so callers can catch at the right level
of granularity: an :class:`InputValidationError` means "fix the input",
a :class:`GeocodingError` means "this provider failed, try another one".

Hierarchy::

    LocationResolverError                 ← catch-all base
    ├── InputValidationError              ← empty query/reference, bad files
    │   ├── InvalidReferenceError         ← unparseable provider reference
    │   ├── ColumnNotFoundError           ← batch CSV column missing
    │   └── ProviderConfigurationError    ← provider cannot be used as set up
    │       ├── MissingAPIKeyError        ← required API key absent
    │       └── ProviderUnavailableError  ← no provider configured at all
    ├── GeocodingError                    ← provider round-trip failures
    │   ├── RequestBuildError             ← URL could not be assembled
    │   ├── TransportError                ← connection / timeout failure
    │   ├── UnexpectedStatusError         ← non-200 HTTP status
    │   ├── DecodeError                   ← body did not match expected JSON
    │   ├── ZeroResultsError              ← provider found nothing
    │   └── ProviderAPIError              ← provider-reported error payload
    └── OutputWriteError                  ← cannot write to output path

Usage::

    from location_resolver.exceptions import GeocodingError

    try:
        provider.resolve(reference)
    except GeocodingError as exc:
        logger.warning("provider %s failed: %s", exc.provider, exc.message)
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class LocationResolverError(Exception):
    """Base exception for the location resolver package.

    Args:
        message: Human-readable description of the error.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class InputValidationError(LocationResolverError):
    """Raised before any network call when an input is unusable.

    This is the parent class for more specific input problems.
    """


class InvalidReferenceError(InputValidationError):
    """Raised when a provider reference cannot be decoded.

    Args:
        provider: Provider identifier (e.g. ``"osm"``).
        reference: The raw reference string that failed to parse.
        reason: Short explanation (e.g. ``"unknown prefix: X"``).

    Example::

        raise InvalidReferenceError("osm", "X12", "unknown osm reference prefix: X")
    """

    def __init__(self, provider: str, reference: str, reason: str) -> None:
        super().__init__(reason)
        self.provider: str = provider
        self.reference: str = reference
        self.reason: str = reason


class ColumnNotFoundError(InputValidationError):
    """Raised when an expected column is absent from a tabular dataset.

    Args:
        column: The name of the missing column.
        available: Column names that ARE present.
    """

    def __init__(self, column: str, available: list[str]) -> None:
        available_str = ", ".join(f"'{c}'" for c in available)
        super().__init__(
            f"Column '{column}' not found. Available columns: {available_str}"
        )
        self.column: str = column
        self.available: list[str] = available


class ProviderConfigurationError(InputValidationError):
    """Raised when a provider is missing configuration it needs to run."""


class MissingAPIKeyError(ProviderConfigurationError):
    """Raised when a provider that requires an API key has none.

    Args:
        provider: Provider identifier (e.g. ``"locationiq"``).
    """

    def __init__(self, provider: str) -> None:
        super().__init__(f"{provider} api key is required")
        self.provider: str = provider


class ProviderUnavailableError(ProviderConfigurationError):
    """Raised by the service layer when no location provider is configured."""

    def __init__(self, message: str = "location provider not configured") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Geocoding
# ---------------------------------------------------------------------------


class GeocodingError(LocationResolverError):
    """Raised when a provider round trip fails for any reason.

    Args:
        provider: Provider identifier (``"google"``, ``"osm"``, ``"locationiq"``).
        operation: ``"autocomplete"`` or ``"resolve"``.
        detail: What went wrong, appended to ``"<provider> <operation>"``.
    """

    def __init__(self, provider: str, operation: str, detail: str) -> None:
        super().__init__(f"{provider} {operation} {detail}")
        self.provider: str = provider
        self.operation: str = operation
        self.detail: str = detail


class RequestBuildError(GeocodingError):
    """Raised when the request URL or parameters cannot be assembled."""

    def __init__(self, provider: str, operation: str, reason: str) -> None:
        super().__init__(provider, operation, f"request build: {reason}")


class TransportError(GeocodingError):
    """Raised on connection failures, timeouts and other transport errors."""

    def __init__(self, provider: str, operation: str, reason: str) -> None:
        super().__init__(provider, operation, f"request: {reason}")


class UnexpectedStatusError(GeocodingError):
    """Raised when the provider answers with a non-200 HTTP status.

    Args:
        status_code: The HTTP status code received.
    """

    def __init__(self, provider: str, operation: str, status_code: int) -> None:
        super().__init__(provider, operation, f"unexpected status: {status_code}")
        self.status_code: int = status_code


class DecodeError(GeocodingError):
    """Raised when the response body does not match the expected JSON shape."""

    def __init__(self, provider: str, operation: str, reason: str) -> None:
        super().__init__(provider, operation, f"decode: {reason}")


class ZeroResultsError(GeocodingError):
    """Raised when the provider explicitly reports that nothing matched."""

    def __init__(self, provider: str, operation: str) -> None:
        super().__init__(provider, operation, "zero results")


class ProviderAPIError(GeocodingError):
    """Raised when the provider embeds its own error status in the payload.

    Args:
        status: Provider status string (e.g. ``"OVER_QUERY_LIMIT"``), or
                ``""`` when the provider only sends a message.
        provider_message: The provider's own error text, or ``""``.

    Example::

        raise ProviderAPIError("google", "autocomplete", "REQUEST_DENIED", "bad key")
    """

    def __init__(
        self,
        provider: str,
        operation: str,
        status: str,
        provider_message: str = "",
    ) -> None:
        if status and provider_message:
            detail = f"{status}: {provider_message}"
        elif status:
            detail = f"status {status}"
        else:
            detail = f"error: {provider_message}"
        super().__init__(provider, operation, detail)
        self.status: str = status
        self.provider_message: str = provider_message


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class OutputWriteError(LocationResolverError):
    """Raised when the batch tool cannot write its output to disk.

    Args:
        output_path: String representation of the path that failed.
        reason: Underlying OS or library error message.
    """

    def __init__(self, output_path: str, reason: str) -> None:
        super().__init__(f"Failed to write output to '{output_path}': {reason}")
        self.output_path: str = output_path
        self.reason: str = reason
