"""Tests for ReportManager - routing sheet, revenue summary, series view."""

from __future__ import annotations

from tests.helpers import make_hourly_input, make_job_input
from yardops import const
from yardops.managers import ReportManager, SeriesManager
from yardops.store import MemoryJobStore

# =============================================================================
# TEST: ROUTING SHEET
# =============================================================================


class TestRoutingForDate:
    """Test async_get_routing_for_date."""

    async def test_sheet_for_one_day(
        self, series_manager: SeriesManager, report_manager: ReportManager
    ) -> None:
        """Two customers on the same Monday, sorted by name."""
        await series_manager.async_create_job(
            make_job_input(
                **{
                    const.DATA_JOB_SERIES_ID: "series_zed",
                    const.DATA_JOB_CUSTOMER_ID: "cust-z",
                    const.DATA_JOB_CUSTOMER_NAME: "Zed Brown",
                }
            ),
            today="2024-01-01",
        )
        await series_manager.async_create_job(make_job_input(), today="2024-01-01")

        sheet = await report_manager.async_get_routing_for_date("2024-01-08")

        assert [r[const.DATA_ROUTING_CUSTOMER_NAME] for r in sheet] == [
            "Alice Green",
            "Zed Brown",
        ]
        assert all(r[const.DATA_ROUTING_DATE] == "2024-01-08" for r in sheet)

    async def test_empty_day(self, report_manager: ReportManager) -> None:
        """No jobs, empty sheet."""
        assert await report_manager.async_get_routing_for_date("2024-01-09") == []

    async def test_invalid_date(self, report_manager: ReportManager) -> None:
        """Garbage dates give an empty sheet instead of an error."""
        assert await report_manager.async_get_routing_for_date("not-a-date") == []


# =============================================================================
# TEST: REVENUE SUMMARY
# =============================================================================


class TestRevenueSummary:
    """Test async_get_revenue_summary and its cache."""

    async def test_summary_tracks_invoices(
        self,
        store: MemoryJobStore,
        series_manager: SeriesManager,
        report_manager: ReportManager,
    ) -> None:
        """Sending an invoice invalidates the cached summary."""
        create = await series_manager.async_create_job(
            make_hourly_input(), today="2024-01-01"
        )
        base = await store.async_get(const.COLLECTION_JOBS, create.job_ids[0])

        before = await report_manager.async_get_revenue_summary()
        assert before["total_revenue"] == 0.0
        assert before["scheduled_jobs"] == 5

        await series_manager.async_update_routing_times(
            base["routing_id"], "09:00", "11:30"
        )
        await series_manager.async_mark_invoice_sent(
            base["routing_id"], today="2024-01-01"
        )

        after = await report_manager.async_get_revenue_summary()
        assert after["total_revenue"] == 75.0
        assert after["total_hours"] == 2.5
        assert after["avg_dollars_per_hour"] == 30.0
        assert after["completed_jobs"] == 1
        assert after["scheduled_jobs"] == 4
        assert [m["month"] for m in after["monthly"]] == ["2024-01"]

    async def test_summary_is_cached(
        self, store: MemoryJobStore, report_manager: ReportManager
    ) -> None:
        """Direct store writes bypass the signals, so the cache holds."""
        first = await report_manager.async_get_revenue_summary()
        await store.async_set(
            const.COLLECTION_JOBS,
            "J-x-2024-01-01",
            {
                const.DATA_JOB_ID: "J-x-2024-01-01",
                const.DATA_JOB_STATUS: const.JOB_STATUS_SCHEDULED,
            },
        )
        assert await report_manager.async_get_revenue_summary() is first


# =============================================================================
# TEST: SERIES VIEW
# =============================================================================


class TestSeriesView:
    """Test async_get_series_view."""

    async def test_weekly_view(
        self, series_manager: SeriesManager, report_manager: ReportManager
    ) -> None:
        """Weekly 2024-01-01 with a 4-job window."""
        await series_manager.async_create_job(make_job_input(), today="2024-01-01")

        view = await report_manager.async_get_series_view(
            "series_test", today="2024-01-01"
        )

        assert view is not None
        assert view["base_job_id"] == "J-series_test-2024-01-01"
        assert len(view["jobs"]) == 5
        assert view["total_planned"] == 5
        assert view["next_job"]["scheduled_date"] == "2024-01-01"
        assert view["average_rate"] == 45.0
        assert view["is_paused"] is False
        assert view["projected_dates"] == [
            "2024-01-08",
            "2024-01-15",
            "2024-01-22",
            "2024-01-29",
        ]

    async def test_paused_view(
        self, series_manager: SeriesManager, report_manager: ReportManager
    ) -> None:
        """Pausing shows up on the view."""
        await series_manager.async_create_job(make_job_input(), today="2024-01-01")
        await series_manager.async_pause_series("series_test")

        view = await report_manager.async_get_series_view(
            "series_test", today="2024-01-01"
        )

        assert view is not None
        assert view["is_paused"] is True

    async def test_one_time_has_no_projection(
        self, series_manager: SeriesManager, report_manager: ReportManager
    ) -> None:
        """One-time jobs never project dates."""
        await series_manager.async_create_job(
            make_job_input(
                **{const.DATA_JOB_SERVICE_FREQUENCY: const.FREQUENCY_ONE_TIME}
            ),
            today="2024-01-01",
        )

        view = await report_manager.async_get_series_view(
            "series_test", today="2024-01-01"
        )

        assert view is not None
        assert view["projected_dates"] == []
        assert len(view["jobs"]) == 1

    async def test_unknown_series(self, report_manager: ReportManager) -> None:
        """No jobs, no view."""
        assert await report_manager.async_get_series_view("series_nope") is None
