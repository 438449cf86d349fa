"""Tests for YardOpsCoordinator - options, store selection, dispatcher."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from freezegun import freeze_time
import pytest

from tests.helpers import make_job_input
from yardops import const
from yardops.coordinator import YardOpsCoordinator
from yardops.exceptions import ValidationError
from yardops.store import JsonFileJobStore, MemoryJobStore
from yardops.utils.dt_utils import get_default_timezone

# =============================================================================
# TEST: OPTIONS
# =============================================================================


class TestOptions:
    """Test option validation and defaults."""

    def test_defaults(self) -> None:
        """No options: UTC, memory store, per-frequency window."""
        coordinator = YardOpsCoordinator()
        assert coordinator.options[const.CONF_TIME_ZONE] == "UTC"
        assert coordinator.target_future_count is None
        assert isinstance(coordinator.store, MemoryJobStore)

    def test_time_zone_becomes_default(self) -> None:
        """The configured zone decides what "today" is."""
        YardOpsCoordinator({const.CONF_TIME_ZONE: "America/Chicago"})
        assert str(get_default_timezone()) == "America/Chicago"
        YardOpsCoordinator()
        assert str(get_default_timezone()) == "UTC"

    def test_target_coerced(self) -> None:
        """Numeric strings are accepted for the window size."""
        coordinator = YardOpsCoordinator({const.CONF_TARGET_FUTURE_COUNT: "6"})
        assert coordinator.target_future_count == 6

    @pytest.mark.parametrize(
        ("options", "field"),
        [
            ({const.CONF_TARGET_FUTURE_COUNT: 0}, const.CONF_TARGET_FUTURE_COUNT),
            ({const.CONF_TIME_ZONE: "Mars/Olympus_Mons"}, const.CONF_TIME_ZONE),
        ],
    )
    def test_invalid_options(self, options: dict[str, Any], field: str) -> None:
        """Bad options raise ValidationError naming the option."""
        with pytest.raises(ValidationError) as exc_info:
            YardOpsCoordinator(options)
        assert exc_info.value.field == field

    def test_unknown_option_rejected(self) -> None:
        """Typos in option keys are not silently ignored."""
        with pytest.raises(ValidationError):
            YardOpsCoordinator({"target_count": 4})


# =============================================================================
# TEST: STORE SELECTION
# =============================================================================


class TestStoreSelection:
    """Test which store the coordinator builds."""

    async def test_storage_path_uses_json(self, tmp_path: Path) -> None:
        """A storage path persists jobs to that file."""
        path = tmp_path / "yardops.json"
        coordinator = YardOpsCoordinator({const.CONF_STORAGE_PATH: str(path)})
        assert isinstance(coordinator.store, JsonFileJobStore)
        await coordinator.async_setup()

        with freeze_time("2024-01-01 12:00:00"):
            result = await coordinator.series_manager.async_create_job(make_job_input())
        assert result.success
        await coordinator.async_shutdown()

        reopened = YardOpsCoordinator({const.CONF_STORAGE_PATH: str(path)})
        await reopened.async_setup()
        jobs = await reopened.store.async_query_by_series_id("series_test")
        assert len(jobs) == 5
        await reopened.async_shutdown()

    def test_store_override_wins(self, tmp_path: Path) -> None:
        """An explicit store is used even with a storage path."""
        store = MemoryJobStore()
        coordinator = YardOpsCoordinator(
            {const.CONF_STORAGE_PATH: str(tmp_path / "unused.json")}, store=store
        )
        assert coordinator.store is store


# =============================================================================
# TEST: DISPATCHER
# =============================================================================


class TestDispatcher:
    """Test the in-process signal dispatcher."""

    def test_send_reaches_listeners(self) -> None:
        """Every listener of a signal gets the payload."""
        coordinator = YardOpsCoordinator()
        received: list[dict[str, Any]] = []
        coordinator.async_dispatcher_connect("ping", received.append)

        coordinator.async_dispatcher_send("ping", {"n": 1})
        coordinator.async_dispatcher_send("other", {"n": 2})

        assert received == [{"n": 1}]

    def test_unsubscribe(self) -> None:
        """The returned callable disconnects, and is safe to call twice."""
        coordinator = YardOpsCoordinator()
        received: list[dict[str, Any]] = []
        unsub = coordinator.async_dispatcher_connect("ping", received.append)

        unsub()
        unsub()
        coordinator.async_dispatcher_send("ping", {"n": 1})

        assert received == []

    async def test_shutdown_disconnects_managers(self) -> None:
        """After shutdown manager listeners no longer fire."""
        coordinator = YardOpsCoordinator()
        await coordinator.async_setup()
        summary = await coordinator.report_manager.async_get_revenue_summary()

        await coordinator.async_shutdown()
        coordinator.async_dispatcher_send(const.SIGNAL_SUFFIX_JOBS_CHANGED, {})

        assert await coordinator.report_manager.async_get_revenue_summary() is summary

    async def test_signal_invalidates_report_cache(self) -> None:
        """A jobs-changed signal rebuilds the revenue summary."""
        coordinator = YardOpsCoordinator()
        await coordinator.async_setup()
        summary = await coordinator.report_manager.async_get_revenue_summary()

        coordinator.async_dispatcher_send(const.SIGNAL_SUFFIX_JOBS_CHANGED, {})

        assert await coordinator.report_manager.async_get_revenue_summary() is not summary
        await coordinator.async_shutdown()
