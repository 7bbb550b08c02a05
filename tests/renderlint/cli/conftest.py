"""Fixtures for CLI tests."""

from collections.abc import Iterator

import pytest
from typer.testing import CliRunner

from renderlint.kernel.logging import configure_logging


@pytest.fixture
def runner():
    """Fixture providing a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Rebind log sinks to the real stderr once the runner has released it."""
    yield
    configure_logging(force_reconfigure=True)
