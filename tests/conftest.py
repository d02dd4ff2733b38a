"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import pytest

from retail_search.domain.entities import Query

from .fakes import FakeLookup, build_item


@pytest.fixture
def make_item():
    """Factory for Items with sensible defaults."""
    return build_item


@pytest.fixture
def query():
    """A running shoes query at a major location."""
    return Query(description="running shoes", location_code="110001")


@pytest.fixture
def fake_lookup():
    return FakeLookup()
