"""Job Engine - Pure logic for pricing, completion, and series queries.

This engine provides stateless, pure Python functions for:
- Rate normalization by bid type (hourly vs. flat bid)
- Worked-hours and revenue calculation from crew arrival/departure times
- Completion planning (CompletionEffect) when an invoice is marked sent
- Series queries: pause state, future-scheduled counting, edit scope

ARCHITECTURE: This is a pure logic engine. All functions are static methods
that operate on passed-in records. Persistence belongs in SeriesManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import parse_clock_minutes
from ..utils.math_utils import round_money, safe_divide, to_float
from .schedule_engine import RecurrenceEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import JobData


# =============================================================================
# COMPLETION EFFECT DATA STRUCTURE
# =============================================================================


@dataclass
class CompletionEffect:
    """Effect of marking a job's invoice as sent.

    Returned by JobEngine.plan_completion() to describe the job and routing
    updates SeriesManager writes in one batch.

    Attributes:
        man_hours: Worked hours from crew times, 0.0 when unset
        hours_recorded: Whether valid arrival/departure times produced hours
        revenue: Charge for the visit (hourly * hours, or the flat bid)
        dollars_per_man_hour: Revenue per worked hour for the routing record
        spawn_next: Whether the series should grow after completion
        next_date: Next service date when spawn_next is True
    """

    man_hours: float
    hours_recorded: bool
    revenue: float
    dollars_per_man_hour: float
    spawn_next: bool = False
    next_date: str | None = None


# =============================================================================
# JOB ENGINE
# =============================================================================


class JobEngine:
    """Pure logic engine for job pricing, completion, and series queries.

    All methods are static - no instance state.
    """

    # -------------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------------

    @staticmethod
    def is_hourly(bid_type: str | None) -> bool:
        """Return True for hourly pricing (case-insensitive)."""
        return str(bid_type or "").lower() == const.BID_TYPE_HOURLY

    @staticmethod
    def normalize_rate(
        bid_type: str | None,
        rate: Any,
        hourly_rate: Any,
        man_hours: Any,
    ) -> float:
        """Return the flat charge for one occurrence.

        Hourly jobs charge hourly_rate * man_hours; bid jobs charge the
        literal bid amount regardless of hours.

        Examples:
            normalize_rate("hourly", None, 30, 2.5) -> 75.0
            normalize_rate("bid", 45, None, 3) -> 45.0
        """
        if JobEngine.is_hourly(bid_type):
            return round_money(to_float(hourly_rate) * to_float(man_hours))
        return round_money(to_float(rate))

    @staticmethod
    def compute_dollars_per_man_hour(
        revenue: float,
        man_hours: float,
        *,
        bid_type: str | None = None,
        hourly_rate: Any = None,
    ) -> float:
        """Return revenue per man-hour for a routing record.

        With no recorded hours an hourly job reports its hourly rate and a
        bid job reports 0.
        """
        if man_hours > 0:
            return safe_divide(revenue, man_hours)
        if JobEngine.is_hourly(bid_type) and hourly_rate is not None:
            return round_money(to_float(hourly_rate))
        return 0.0

    @staticmethod
    def compute_worked_hours(
        arrival_time: str | None, departure_time: str | None
    ) -> float | None:
        """Return hours between arrival and departure, rounded to 2 decimals.

        Returns:
            Hours as float, or None when either time is missing/malformed or
            departure is not after arrival (no negative durations).

        Example:
            compute_worked_hours("09:00", "11:30") -> 2.5
        """
        arrival = parse_clock_minutes(arrival_time)
        departure = parse_clock_minutes(departure_time)
        if arrival is None or departure is None or departure <= arrival:
            return None
        return round_money((departure - arrival) / const.MINUTES_PER_HOUR)

    @staticmethod
    def compute_revenue(job: Mapping[str, Any], man_hours: float | None) -> float:
        """Return the charge for a visit.

        Hourly: hourly_rate * worked hours; when no hours were recorded the
        job's normalized rate (the estimate) stands. Bid: always the flat rate.
        """
        if JobEngine.is_hourly(job.get(const.DATA_JOB_BID_TYPE)):
            if man_hours is None:
                return round_money(to_float(job.get(const.DATA_JOB_RATE)))
            return round_money(
                to_float(job.get(const.DATA_JOB_HOURLY_RATE)) * man_hours
            )
        return round_money(to_float(job.get(const.DATA_JOB_RATE)))

    @staticmethod
    def plan_routing_metrics(
        job: Mapping[str, Any],
        arrival_time: str | None,
        departure_time: str | None,
    ) -> tuple[float, bool, float, float]:
        """Return (man_hours, hours_recorded, revenue, dollars_per_man_hour)."""
        worked = JobEngine.compute_worked_hours(arrival_time, departure_time)
        revenue = JobEngine.compute_revenue(job, worked)
        man_hours = worked if worked is not None else 0.0
        dollars_per_hour = JobEngine.compute_dollars_per_man_hour(
            revenue,
            man_hours,
            bid_type=job.get(const.DATA_JOB_BID_TYPE),
            hourly_rate=job.get(const.DATA_JOB_HOURLY_RATE),
        )
        return man_hours, worked is not None, revenue, dollars_per_hour

    # -------------------------------------------------------------------------
    # Series queries
    # -------------------------------------------------------------------------

    @staticmethod
    def is_recurring_frequency(frequency: str | None) -> bool:
        """Return True unless the frequency is One-Time/As-Needed (or unknown)."""
        if frequency in const.NON_RECURRING_FREQUENCIES:
            return False
        return RecurrenceEngine.is_recurring(frequency)

    @staticmethod
    def is_base_job(job: Mapping[str, Any]) -> bool:
        """Return True if the job anchors its series."""
        job_id = job.get(const.DATA_JOB_ID)
        return job_id is not None and job_id == job.get(const.DATA_JOB_BASE_JOB_ID)

    @staticmethod
    def is_series_paused(base_job: Mapping[str, Any] | None) -> bool:
        """Return True when the series anchored by `base_job` is paused.

        series_status is authoritative. Legacy records that only carry
        is_paused=True (and no series_status) are read as paused.
        """
        if not base_job:
            return False
        status = base_job.get(const.DATA_JOB_SERIES_STATUS)
        if status:
            return status == const.SERIES_STATUS_PAUSED
        return bool(base_job.get(const.DATA_JOB_IS_PAUSED, False))

    @staticmethod
    def count_future_scheduled(jobs: Iterable[Mapping[str, Any]], today: str) -> int:
        """Count Scheduled jobs dated strictly after `today`."""
        return sum(
            1
            for job in jobs
            if job.get(const.DATA_JOB_STATUS) == const.JOB_STATUS_SCHEDULED
            and str(job.get(const.DATA_JOB_SCHEDULED_DATE, "")) > today
        )

    @staticmethod
    def sort_series(jobs: Iterable[JobData]) -> list[JobData]:
        """Return jobs ordered by scheduled_date ascending (job_id breaks ties)."""
        return sorted(
            jobs,
            key=lambda job: (
                str(job.get(const.DATA_JOB_SCHEDULED_DATE, "")),
                str(job.get(const.DATA_JOB_ID, "")),
            ),
        )

    @staticmethod
    def select_edit_scope(
        series_jobs: Iterable[JobData], target: Mapping[str, Any], scope: str
    ) -> list[JobData]:
        """Return the jobs an edit touches.

        single: only the target. series: the target plus every job in the
        same series dated on or after the target's current date.
        """
        target_id = target.get(const.DATA_JOB_ID)
        if scope != const.EDIT_SCOPE_SERIES:
            return [job for job in series_jobs if job.get(const.DATA_JOB_ID) == target_id]

        cutoff = str(target.get(const.DATA_JOB_SCHEDULED_DATE, ""))
        return [
            job
            for job in JobEngine.sort_series(series_jobs)
            if job.get(const.DATA_JOB_ID) == target_id
            or str(job.get(const.DATA_JOB_SCHEDULED_DATE, "")) >= cutoff
        ]

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    @staticmethod
    def plan_completion(
        job: Mapping[str, Any],
        routing: Mapping[str, Any],
        *,
        series_paused: bool,
    ) -> CompletionEffect:
        """Plan the updates for an invoice marked sent.

        Args:
            job: The job being completed.
            routing: Its routing record (source of arrival/departure times).
            series_paused: Pause state read from the series base job.

        Returns:
            CompletionEffect with hours/revenue and whether to grow the series.
        """
        man_hours, recorded, revenue, dollars_per_hour = JobEngine.plan_routing_metrics(
            job,
            routing.get(const.DATA_ROUTING_ARRIVAL_TIME),
            routing.get(const.DATA_ROUTING_DEPARTURE_TIME),
        )

        frequency = job.get(const.DATA_JOB_SERVICE_FREQUENCY)
        recurring = bool(
            job.get(const.DATA_JOB_IS_RECURRING, False)
        ) and JobEngine.is_recurring_frequency(frequency)

        next_date = None
        if recurring and not series_paused:
            next_date = RecurrenceEngine.advance(
                job.get(const.DATA_JOB_SCHEDULED_DATE, ""), frequency
            )

        return CompletionEffect(
            man_hours=man_hours,
            hours_recorded=recorded,
            revenue=revenue,
            dollars_per_man_hour=dollars_per_hour,
            spawn_next=recurring and not series_paused,
            next_date=next_date,
        )
