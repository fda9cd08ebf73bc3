"""Shared test fixtures for squid-exporter tests."""

from __future__ import annotations

import pytest

from squid_exporter.base import ScrapeFailedError
from tests.fixtures.fetchers import FakeFetcher


@pytest.fixture()
def fake_fetcher() -> FakeFetcher:
    """A fetcher returning the full sample report."""
    return FakeFetcher()


@pytest.fixture()
def failing_fetcher() -> FakeFetcher:
    """A fetcher that fails like an unreachable squid."""
    return FakeFetcher(error=ScrapeFailedError("Connection failed to squid: refused"))
