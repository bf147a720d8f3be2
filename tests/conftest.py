"""
Shared pytest fixtures.
"""

from __future__ import annotations

import logging
from typing import Iterator

import pytest

_ENV_VARS = (
    "LOCATION_PROVIDER",
    "LOCATIONIQ_API_KEY",
    "LOCATIONIQ_ENDPOINT",
    "GOOGLE_MAPS_API_KEY",
    "GOOGLE_MAPS_ENDPOINT",
    "NOMINATIM_ENDPOINT",
    "NOMINATIM_EMAIL",
    "NOMINATIM_USER_AGENT",
    "LOCATION_PROVIDER_TIMEOUT",
)


@pytest.fixture(autouse=True)
def quiet_package_logger() -> Iterator[None]:
    """Keep console handlers off the package logger so CLI output stays pure JSON.

    Records still propagate to the root logger, where ``caplog`` sees them.
    """
    pkg_logger = logging.getLogger("location_resolver")
    saved = pkg_logger.handlers[:]
    pkg_logger.handlers = [logging.NullHandler()]
    yield
    pkg_logger.handlers = saved


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every provider-related environment variable."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
