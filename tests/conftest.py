"""
Pytest configuration and fixtures for test suite.

This module:
- Skips network tests unless explicitly enabled
- Provides an in-memory fetcher for pipeline tests
"""

import asyncio
import os
from typing import Dict, List, Optional, Union

import pytest

from wordstats.core.schemas import BookSource

RUN_NETWORK_TESTS = bool(os.environ.get("RUN_NETWORK_TESTS"))


class FakeFetcher:
    """Serves canned documents (or raises canned errors) after an optional per-URL delay."""

    def __init__(
        self,
        documents: Dict[str, Union[str, BaseException]],
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.documents = documents
        self.delays = delays or {}
        self.requested: List[str] = []
        self.completed: List[str] = []

    async def fetch(self, url: str) -> str:
        self.requested.append(url)
        await asyncio.sleep(self.delays.get(url, 0))
        value = self.documents[url]
        if isinstance(value, BaseException):
            raise value
        self.completed.append(url)
        return value


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "network: mark test as requiring internet access")


def pytest_collection_modifyitems(config, items):
    """Skip network tests unless RUN_NETWORK_TESTS is set."""
    for item in items:
        if "network" in item.keywords and not RUN_NETWORK_TESTS:
            item.add_marker(pytest.mark.skip(reason="Network tests disabled (set RUN_NETWORK_TESTS=1)"))


@pytest.fixture
def make_fetcher():
    """Factory fixture building a FakeFetcher."""
    return FakeFetcher


@pytest.fixture
def three_sources():
    return [
        BookSource(name="a", url="mem://a"),
        BookSource(name="b", url="mem://b"),
        BookSource(name="c", url="mem://c"),
    ]
