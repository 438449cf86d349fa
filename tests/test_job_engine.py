"""Tests for JobEngine - pricing, completion math, series queries."""

from __future__ import annotations

from typing import Any

import pytest

from yardops import const
from yardops.engines.job_engine import JobEngine


def _job(**fields: Any) -> dict[str, Any]:
    job: dict[str, Any] = {
        const.DATA_JOB_ID: "J-s-2024-01-01",
        const.DATA_JOB_BASE_JOB_ID: "J-s-2024-01-01",
        const.DATA_JOB_SERIES_ID: "s",
        const.DATA_JOB_SCHEDULED_DATE: "2024-01-01",
        const.DATA_JOB_SERVICE_FREQUENCY: const.FREQUENCY_WEEKLY,
        const.DATA_JOB_BID_TYPE: const.BID_TYPE_BID,
        const.DATA_JOB_RATE: 45.0,
        const.DATA_JOB_STATUS: const.JOB_STATUS_SCHEDULED,
        const.DATA_JOB_IS_RECURRING: True,
    }
    job.update(fields)
    return job


# =============================================================================
# TEST: PRICING
# =============================================================================


class TestPricing:
    """Test rate normalization and revenue."""

    def test_hourly_rate_is_hourly_times_hours(self) -> None:
        """Hourly: rate = hourly_rate * man_hours."""
        assert JobEngine.normalize_rate(const.BID_TYPE_HOURLY, 999, 30, 2.5) == 75.0

    def test_bid_rate_ignores_hours(self) -> None:
        """Bid: rate is the literal amount whatever the hours."""
        assert JobEngine.normalize_rate(const.BID_TYPE_BID, 45, None, 1) == 45.0
        assert JobEngine.normalize_rate(const.BID_TYPE_BID, 45, None, 9) == 45.0

    def test_hourly_case_insensitive(self) -> None:
        """'Hourly' from older records still counts as hourly."""
        assert JobEngine.is_hourly("Hourly")

    def test_dollars_per_hour(self) -> None:
        """Revenue over hours, or a fallback when no hours are known."""
        assert JobEngine.compute_dollars_per_man_hour(75, 2.5) == 30.0
        assert JobEngine.compute_dollars_per_man_hour(45, 0) == 0.0
        assert (
            JobEngine.compute_dollars_per_man_hour(
                60, 0, bid_type=const.BID_TYPE_HOURLY, hourly_rate=30
            )
            == 30.0
        )


# =============================================================================
# TEST: WORKED HOURS
# =============================================================================


class TestWorkedHours:
    """Test arrival/departure to hours."""

    def test_two_and_a_half_hours(self) -> None:
        """09:00 -> 11:30 is 2.5 hours."""
        assert JobEngine.compute_worked_hours("09:00", "11:30") == 2.5

    def test_rounded_to_two_decimals(self) -> None:
        """20 minutes is 0.33 hours."""
        assert JobEngine.compute_worked_hours("08:00", "08:20") == 0.33

    @pytest.mark.parametrize(
        ("arrival", "departure"),
        [("11:30", "09:00"), ("09:00", "09:00"), (None, "10:00"), ("09:00", "")],
    )
    def test_invalid_interval(self, arrival: str | None, departure: str) -> None:
        """No negative or zero-length durations are fabricated."""
        assert JobEngine.compute_worked_hours(arrival, departure) is None


# =============================================================================
# TEST: COMPLETION PLANNING
# =============================================================================


class TestPlanCompletion:
    """Test plan_completion effects."""

    def test_hourly_completion(self) -> None:
        """$30/hr for 2.5 hours: $75 revenue, $30 per man-hour."""
        job = _job(
            **{
                const.DATA_JOB_BID_TYPE: const.BID_TYPE_HOURLY,
                const.DATA_JOB_HOURLY_RATE: 30,
                const.DATA_JOB_RATE: 60,
            }
        )
        routing = {
            const.DATA_ROUTING_ARRIVAL_TIME: "09:00",
            const.DATA_ROUTING_DEPARTURE_TIME: "11:30",
        }
        effect = JobEngine.plan_completion(job, routing, series_paused=False)
        assert effect.man_hours == 2.5
        assert effect.hours_recorded
        assert effect.revenue == 75.0
        assert effect.dollars_per_man_hour == 30.0
        assert effect.spawn_next
        assert effect.next_date == "2024-01-08"

    def test_bid_completion_keeps_flat_rate(self) -> None:
        """Bid revenue stays the bid even after a long visit."""
        routing = {
            const.DATA_ROUTING_ARRIVAL_TIME: "08:00",
            const.DATA_ROUTING_DEPARTURE_TIME: "11:00",
        }
        effect = JobEngine.plan_completion(_job(), routing, series_paused=False)
        assert effect.revenue == 45.0
        assert effect.man_hours == 3.0
        assert effect.dollars_per_man_hour == 15.0

    def test_missing_times_leave_hours_unset(self) -> None:
        """Without times an hourly job keeps its estimate as revenue."""
        job = _job(
            **{
                const.DATA_JOB_BID_TYPE: const.BID_TYPE_HOURLY,
                const.DATA_JOB_HOURLY_RATE: 30,
                const.DATA_JOB_RATE: 60,
            }
        )
        effect = JobEngine.plan_completion(job, {}, series_paused=False)
        assert effect.man_hours == 0.0
        assert not effect.hours_recorded
        assert effect.revenue == 60.0
        assert effect.dollars_per_man_hour == 30.0

    def test_paused_series_does_not_spawn(self) -> None:
        """Completion in a paused series never grows it."""
        effect = JobEngine.plan_completion(_job(), {}, series_paused=True)
        assert not effect.spawn_next
        assert effect.next_date is None

    def test_one_time_does_not_spawn(self) -> None:
        """One-time jobs have no next occurrence."""
        job = _job(
            **{
                const.DATA_JOB_SERVICE_FREQUENCY: const.FREQUENCY_ONE_TIME,
                const.DATA_JOB_IS_RECURRING: False,
            }
        )
        effect = JobEngine.plan_completion(job, {}, series_paused=False)
        assert not effect.spawn_next


# =============================================================================
# TEST: SERIES QUERIES
# =============================================================================


class TestSeriesQueries:
    """Test pause state, counting, and edit scope."""

    def test_series_status_authoritative(self) -> None:
        """series_status wins over the legacy flag."""
        assert JobEngine.is_series_paused(
            {const.DATA_JOB_SERIES_STATUS: const.SERIES_STATUS_PAUSED}
        )
        assert not JobEngine.is_series_paused(
            {
                const.DATA_JOB_SERIES_STATUS: const.SERIES_STATUS_ACTIVE,
                const.DATA_JOB_IS_PAUSED: True,
            }
        )

    def test_legacy_is_paused_read_when_status_missing(self) -> None:
        """Records that predate series_status still pause."""
        assert JobEngine.is_series_paused({const.DATA_JOB_IS_PAUSED: True})
        assert not JobEngine.is_series_paused({})
        assert not JobEngine.is_series_paused(None)

    def test_future_is_strictly_after_today(self) -> None:
        """A job scheduled today is not future."""
        jobs = [
            _job(**{const.DATA_JOB_SCHEDULED_DATE: "2024-01-01"}),
            _job(**{const.DATA_JOB_SCHEDULED_DATE: "2024-01-08"}),
            _job(
                **{
                    const.DATA_JOB_SCHEDULED_DATE: "2024-01-15",
                    const.DATA_JOB_STATUS: const.JOB_STATUS_COMPLETE,
                }
            ),
        ]
        assert JobEngine.count_future_scheduled(jobs, "2024-01-01") == 1

    def test_is_base_job(self) -> None:
        """Base job is job_id == base_job_id."""
        assert JobEngine.is_base_job(_job())
        assert not JobEngine.is_base_job(
            _job(**{const.DATA_JOB_ID: "J-s-2024-01-08"})
        )

    def test_edit_scope(self) -> None:
        """series scope is 'this and future', single is the target only."""
        jobs = [
            _job(**{const.DATA_JOB_ID: f"J-s-{d}", const.DATA_JOB_SCHEDULED_DATE: d})
            for d in ("2024-05-25", "2024-06-01", "2024-06-08")
        ]
        target = jobs[1]
        series = JobEngine.select_edit_scope(jobs, target, const.EDIT_SCOPE_SERIES)
        single = JobEngine.select_edit_scope(jobs, target, const.EDIT_SCOPE_SINGLE)
        assert [j[const.DATA_JOB_ID] for j in series] == ["J-s-2024-06-01", "J-s-2024-06-08"]
        assert [j[const.DATA_JOB_ID] for j in single] == ["J-s-2024-06-01"]
