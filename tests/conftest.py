"""
Pytest configuration for store-tester tests.

Provides a factory fixture building testers over the in-memory slice store
from ``tests.slice_store``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from store_tester import StoreTester
from tests.slice_store import init_slice_store


@pytest.fixture
def make_tester() -> Callable[..., StoreTester[Any]]:
    """Build a tester over a fresh slice store with a 10ms error timeout."""

    def factory(**overrides: Any) -> StoreTester[Any]:
        options: dict[str, Any] = {
            "init_store": init_slice_store,
            "error_timeout_ms": 10,
            "throw_on_timeout": False,
        }
        options.update(overrides)
        return StoreTester(**options)

    return factory
