"""
Location Resolver — Batch Normalizer
=====================================
Normalizes every address query in a CSV file through a
:class:`~location_resolver.service.LocationService` and writes one output
row per input row.

For each query the first autocomplete suggestion is resolved and
normalized.  Failed rows stay in the output with empty location fields,
``success=False`` and the error message, so no data is silently lost.

Usage::

    from pathlib import Path
    from location_resolver.batch import BatchLocationNormalizer
    from location_resolver.osm import OpenStreetMapProvider
    from location_resolver.service import LocationService

    BatchLocationNormalizer(
        input_path=Path("data/addresses.csv"),
        output_path=Path("output/normalized.csv"),
        service=LocationService(OpenStreetMapProvider(email="ops@example.com")),
        query_col="address",
    ).run()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import pandas as pd

from location_resolver.base_tool import ResolverTool
from location_resolver.exceptions import (
    LocationResolverError,
    OutputWriteError,
    ProviderConfigurationError,
    ProviderUnavailableError,
)
from location_resolver.models import NormalizedLocation
from location_resolver.service import LocationService
from location_resolver.text_repair import replace_surrogates
from location_resolver.validators import Validators

logger = logging.getLogger("location_resolver.batch")

LOCATION_COLUMNS = [f.name for f in fields(NormalizedLocation)]
OUTPUT_COLUMNS = ["query", "success", "error", *LOCATION_COLUMNS]


@dataclass(frozen=True)
class BatchRowResult:
    """Outcome of normalizing one query.

    Attributes:
        query: The query string as read from the CSV.
        location: The normalized location, or an empty one on failure.
        success: ``True`` if a location was resolved.
        error: Error message when ``success`` is ``False``.
    """

    query: str
    location: NormalizedLocation
    success: bool
    error: str = ""

    def to_row(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "success": self.success,
            "error": replace_surrogates(self.error),
            **self.location.to_dict(),
        }


class BatchLocationNormalizer(ResolverTool):
    """Normalize every address query in a CSV file.

    Args:
        input_path: Path to the input CSV file.
        output_path: Path for the output CSV file.
        service: A configured :class:`LocationService`.
        query_col: Name of the CSV column containing address queries.
        verbose: Enable DEBUG-level logging.
    """

    def __init__(
        self,
        input_path: Path,
        output_path: Path,
        service: LocationService,
        query_col: str = "address",
        *,
        verbose: bool = False,
    ) -> None:
        super().__init__(input_path, output_path, verbose=verbose)
        self.service = service
        self.query_col = query_col
        self._results: list[BatchRowResult] = []

    def validate_inputs(self) -> None:
        """Check the CSV, its query column and the output directory.

        Raises:
            ProviderUnavailableError: If the service has no provider.
            InputValidationError: If the file is missing, not a CSV, or
                lacks the query column.
            OutputWriteError: If the output directory cannot be created.
        """
        if self.service.provider_id is None:
            raise ProviderUnavailableError()
        Validators.assert_file_exists(self.input_path)
        Validators.assert_supported_extension(self.input_path, [".csv"])
        Validators.assert_supported_extension(self.output_path, [".csv"])
        Validators.assert_output_dir_writable(self.output_path)

        df_peek = pd.read_csv(self.input_path, nrows=0)
        Validators.assert_columns_exist(df_peek, [self.query_col])
        logger.debug("Inputs validated successfully.")

    def process(self) -> None:
        """Normalize each row and write the output CSV.

        Raises:
            OutputWriteError: If writing the output file fails.
        """
        df = pd.read_csv(self.input_path, dtype=str, keep_default_na=False)
        total = len(df)
        logger.info(
            "Normalizing %d queries via %s...", total, self.service.provider_id or "no provider"
        )

        results: list[BatchRowResult] = []
        for i, query in enumerate(df[self.query_col].tolist(), start=1):
            logger.debug("[%d/%d] Normalizing: %s", i, total, query)
            result = self.normalize_one(query)
            if not result.success:
                logger.warning("  ✗ Failed: %s — %s", query, result.error)
            results.append(result)

        self._results = results
        self._write_csv(results)

        success_count = sum(1 for r in results if r.success)
        logger.info(
            "Normalization complete: %d/%d succeeded, %d failed.",
            success_count, total, total - success_count,
        )

    def normalize_one(self, query: str) -> BatchRowResult:
        """Autocomplete *query*, then resolve and normalize the top suggestion.

        Per-row input and provider errors are captured in the result;
        a missing provider is not a per-row problem and propagates.
        """
        try:
            suggestions = self.service.suggest_locations(query)
            if not suggestions:
                return BatchRowResult(query, NormalizedLocation(), False, "no suggestions")
            top = suggestions[0]
            location = self.service.normalize_location(top.provider_ref, top.text)
        except ProviderConfigurationError:
            raise
        except LocationResolverError as exc:
            return BatchRowResult(query, NormalizedLocation(), False, exc.message)
        return BatchRowResult(query, location, True)

    def _write_csv(self, results: list[BatchRowResult]) -> None:
        out = pd.DataFrame([r.to_row() for r in results], columns=OUTPUT_COLUMNS)
        try:
            out.to_csv(self.output_path, index=False, encoding="utf-8")
        except (OSError, UnicodeEncodeError) as exc:
            raise OutputWriteError(str(self.output_path), str(exc)) from exc

    @property
    def results(self) -> list[BatchRowResult]:
        """All results from the last run, or ``[]``."""
        return self._results

