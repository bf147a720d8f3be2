"""
Location Resolver — Input Validators
=====================================
Static precondition checks shared by the provider clients and the batch
tool.  Every method raises an exception from
:mod:`location_resolver.exceptions` instead of returning a boolean, so
call sites stay one line long::

    Validators.assert_not_blank(query, "query")
    Validators.assert_api_key(self._api_key, self.provider_id())
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from location_resolver.exceptions import (
    ColumnNotFoundError,
    InputValidationError,
    MissingAPIKeyError,
    OutputWriteError,
)


class Validators:
    """Collection of static precondition checks.

    All methods are ``@staticmethod`` — this class is never instantiated.
    """

    # ------------------------------------------------------------------
    # Provider call checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_not_blank(value: str | None, name: str) -> None:
        """Assert that *value* contains something other than whitespace.

        Args:
            value: The query or reference passed by the caller.
            name: Field name used in the message (``"query"``, ``"reference"``).

        Raises:
            InputValidationError: If *value* is ``None``, empty or blank.

        Example::

            Validators.assert_not_blank(query, "query")
        """
        if value is None or not str(value).strip():
            raise InputValidationError(f"{name} cannot be empty")

    @staticmethod
    def assert_api_key(api_key: str | None, provider: str) -> None:
        """Assert that a provider's API key is configured.

        Args:
            api_key: The configured key (may be ``None``).
            provider: Provider identifier used in the message.

        Raises:
            MissingAPIKeyError: If the key is absent or blank.
        """
        if api_key is None or not api_key.strip():
            raise MissingAPIKeyError(provider)

    # ------------------------------------------------------------------
    # File-system checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_file_exists(path: Path) -> None:
        """Assert that *path* points to an existing regular file.

        Raises:
            InputValidationError: If *path* does not exist or is a directory.
        """
        path = Path(path)
        if not path.exists():
            raise InputValidationError(
                f"Input file not found: '{path}'. "
                "Check that the path is correct and the file exists."
            )
        if path.is_dir():
            raise InputValidationError(
                f"Expected a file but got a directory: '{path}'."
            )

    @staticmethod
    def assert_output_dir_writable(output_path: Path) -> None:
        """Create the parent directory of *output_path* if needed.

        Raises:
            OutputWriteError: If the parent directory cannot be created.
        """
        parent = Path(output_path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteError(str(output_path), str(exc)) from exc

    @staticmethod
    def assert_supported_extension(path: Path, extensions: Sequence[str]) -> None:
        """Assert that *path* has one of the allowed file extensions.

        Args:
            path: File path to check.
            extensions: Allowed extensions, each starting with a dot.

        Raises:
            InputValidationError: If the extension is not in *extensions*.
        """
        path = Path(path)
        suffix = path.suffix.lower()
        allowed = [ext.lower() for ext in extensions]
        if suffix not in allowed:
            raise InputValidationError(
                f"Unsupported file extension '{suffix}' for '{path.name}'. "
                f"Accepted extensions: {', '.join(allowed)}"
            )

    # ------------------------------------------------------------------
    # Tabular data checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_columns_exist(
        df: object,  # pandas DataFrame
        required_columns: Sequence[str],
    ) -> None:
        """Assert that all *required_columns* are present in *df*.

        Raises:
            ColumnNotFoundError: On the first missing column found.
        """
        available = list(df.columns)  # type: ignore[union-attr]
        for col in required_columns:
            if col not in available:
                raise ColumnNotFoundError(col, available)
