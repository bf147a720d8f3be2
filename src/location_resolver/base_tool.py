"""
Location Resolver — Base Tool & Logging
========================================
Abstract base class for file-in / file-out tools built on the location
service, plus the console logging setup shared with the CLI.

Design Pattern:
    Template Method — the public ``run()`` method defines a fixed
    pipeline (validate → process → report) that subclasses fill in by
    implementing ``validate_inputs`` and ``process``.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path

# Package root logger; modules log through child loggers.
logger = logging.getLogger("location_resolver")

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s — %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Attach a console handler to the ``location_resolver`` logger.

    The handler is added only once; repeated calls just adjust the level
    (DEBUG when *verbose*, otherwise INFO).
    """
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


class ResolverTool(ABC):
    """Abstract base class for batch tools.

    Attributes:
        input_path: Path to the primary input file.
        output_path: Path where output will be written.
        verbose: When ``True`` DEBUG-level messages are logged too.
    """

    def __init__(
        self,
        input_path: Path,
        output_path: Path,
        *,
        verbose: bool = False,
    ) -> None:
        self.input_path: Path = Path(input_path)
        self.output_path: Path = Path(output_path)
        self.verbose: bool = verbose

        configure_logging(verbose)

    @abstractmethod
    def validate_inputs(self) -> None:
        """Validate all inputs before processing begins.

        Raises:
            InputValidationError: If a precondition is not satisfied.
        """

    @abstractmethod
    def process(self) -> None:
        """Do the work.  Called by :meth:`run` after validation succeeds."""

    def run(self) -> None:
        """Execute validate → process → report.

        Exceptions from either step propagate unchanged.
        """
        logger.info("Starting %s", self.__class__.__name__)
        start = time.perf_counter()

        self.validate_inputs()
        self.process()

        elapsed = time.perf_counter() - start
        logger.info(
            "%s completed in %.2fs → %s",
            self.__class__.__name__,
            elapsed,
            self.output_path,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"input_path={self.input_path!r}, "
            f"output_path={self.output_path!r})"
        )
