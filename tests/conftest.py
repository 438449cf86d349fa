"""Shared fixtures for YardOps tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest

from tests.helpers import make_job_input
from yardops import const
from yardops.coordinator import YardOpsCoordinator
from yardops.managers import ReportManager, SeriesManager
from yardops.store import MemoryJobStore


@pytest.fixture
def job_input() -> dict[str, Any]:
    """Weekly bid job starting 2024-01-01."""
    return make_job_input()


@pytest.fixture
async def coordinator() -> AsyncIterator[YardOpsCoordinator]:
    """Coordinator on a memory store with a 4-occurrence window."""
    coord = YardOpsCoordinator(
        {const.CONF_TARGET_FUTURE_COUNT: 4},
        store=MemoryJobStore(),
    )
    await coord.async_setup()
    yield coord
    await coord.async_shutdown()


@pytest.fixture
def store(coordinator: YardOpsCoordinator) -> MemoryJobStore:
    """The coordinator's memory store."""
    assert isinstance(coordinator.store, MemoryJobStore)
    return coordinator.store


@pytest.fixture
def series_manager(coordinator: YardOpsCoordinator) -> SeriesManager:
    """The coordinator's SeriesManager."""
    return coordinator.series_manager


@pytest.fixture
def report_manager(coordinator: YardOpsCoordinator) -> ReportManager:
    """The coordinator's ReportManager."""
    return coordinator.report_manager
