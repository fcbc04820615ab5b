"""Pytest configuration for test suite.

Ensures the project root is on ``sys.path`` so imports like
``import cachepool`` resolve correctly regardless of the working directory
pytest chooses.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_syspath() -> None:
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        # Prepend to prefer local sources over site-packages
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_syspath()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def pool(clock):
    """Pool cache on a fake clock whose janitor never ticks during a test."""
    from cachepool.cache.pool import PoolCache

    cache = PoolCache(10, 3600, clock=clock)
    yield cache
    cache.close()
