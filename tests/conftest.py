"""Shared pytest configuration."""

from __future__ import annotations

import pytest

from serde_form import DEFAULT_SCHEMA_CACHE


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register form contract pytest options."""
    parser.addoption(
        "--update-goldens",
        action="store_true",
        default=False,
        help="Regenerate form contract snapshots.",
    )


@pytest.fixture(autouse=True)
def _reset_schema_cache() -> None:
    """Start every test with an empty process-wide schema cache."""
    DEFAULT_SCHEMA_CACHE.clear()
