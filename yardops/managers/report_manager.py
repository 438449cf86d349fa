"""Report Manager - Read models for the dashboard.

Serves the views the UI shell renders from stored records:
- Daily routing sheet (routing records for one date)
- Revenue analytics (totals and monthly buckets over invoiced routing)
- Series view (occurrences, next visit, projected dates)

Event subscriptions:
- SIGNAL_SUFFIX_JOBS_CHANGED -> _on_records_changed()
- SIGNAL_SUFFIX_INVOICE_SENT -> _on_records_changed()

The revenue summary is cached in memory and rebuilt on the next request after
any of those events. Nothing here is persisted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from .. import const
from ..engines.job_engine import JobEngine
from ..engines.schedule_engine import RecurrenceEngine
from ..engines.statistics_engine import StatisticsEngine
from ..utils.dt_utils import dt_to_iso_date, dt_today_iso
from ..utils.math_utils import safe_divide, to_float
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date

    from ..coordinator import YardOpsCoordinator
    from ..type_defs import RevenueSummary, RoutingData, SeriesView


__all__ = ["ReportManager"]


class ReportManager(BaseManager):
    """Manager for dashboard read models.

    NOT responsible for:
    - Any write to jobs or routing (SeriesManager)
    """

    def __init__(self, coordinator: YardOpsCoordinator) -> None:
        """Initialize the ReportManager.

        Args:
            coordinator: The main YardOps coordinator
        """
        super().__init__(coordinator)
        self._revenue_cache: RevenueSummary | None = None

    async def async_setup(self) -> None:
        """Subscribe to record changes so cached analytics stay current."""
        self.listen(const.SIGNAL_SUFFIX_JOBS_CHANGED, self._on_records_changed)
        self.listen(const.SIGNAL_SUFFIX_INVOICE_SENT, self._on_records_changed)

    def _on_records_changed(self, payload: dict[str, Any]) -> None:
        """Drop the cached revenue summary."""
        const.LOGGER.debug(
            "ReportManager: Invalidating revenue cache (%s)", list(payload.keys())
        )
        self._revenue_cache = None

    async def async_get_routing_for_date(self, date_input: str | date) -> list[RoutingData]:
        """Return the routing sheet for one day, ordered by customer name.

        An unparseable date yields an empty sheet.
        """
        date_iso = dt_to_iso_date(date_input)
        if date_iso is None:
            const.LOGGER.warning("ReportManager: Invalid routing date %r", date_input)
            return []
        records = await self.store.async_all(const.COLLECTION_ROUTING)
        return cast(
            "list[RoutingData]",
            StatisticsEngine.filter_routing_for_date(records, date_iso),
        )

    async def async_get_revenue_summary(self) -> RevenueSummary:
        """Return revenue analytics over invoiced routing records."""
        if self._revenue_cache is None:
            routing = await self.store.async_all(const.COLLECTION_ROUTING)
            jobs = await self.store.async_all(const.COLLECTION_JOBS)
            self._revenue_cache = StatisticsEngine.summarize_revenue(routing, jobs)
        return self._revenue_cache

    async def async_get_series_view(
        self, series_id: str, *, today: str | date | None = None
    ) -> SeriesView | None:
        """Return the series read model, or None if the series has no jobs.

        projected_dates holds the next window of recurrence dates after
        today, computed from the base date whether or not the jobs exist yet.
        """
        jobs = await self.store.async_query_by_series_id(series_id)
        if not jobs:
            return None

        today_iso = dt_to_iso_date(today) or dt_today_iso()

        base_job = next((job for job in jobs if JobEngine.is_base_job(job)), None)
        anchor = base_job or jobs[0]
        scheduled = [
            job for job in jobs
            if job.get(const.DATA_JOB_STATUS) == const.JOB_STATUS_SCHEDULED
        ]
        next_job = next(
            (
                job for job in scheduled
                if str(job.get(const.DATA_JOB_SCHEDULED_DATE, "")) >= today_iso
            ),
            None,
        )
        rates = [to_float(job.get(const.DATA_JOB_RATE)) for job in jobs]

        return {
            "series_id": series_id,
            "base_job_id": base_job[const.DATA_JOB_ID] if base_job else None,
            "jobs": jobs,
            "next_job": next_job,
            "total_planned": len(scheduled),
            "average_rate": safe_divide(sum(rates), len(rates)),
            "is_paused": JobEngine.is_series_paused(base_job),
            "projected_dates": self._project_dates(anchor, today_iso),
        }

    def _project_dates(self, anchor: Mapping[str, Any], today_iso: str) -> list[str]:
        frequency = anchor.get(const.DATA_JOB_SERVICE_FREQUENCY)
        if not JobEngine.is_recurring_frequency(frequency):
            return []

        engine = RecurrenceEngine(
            {
                "frequency": frequency,
                "base_date": anchor.get(const.DATA_JOB_SCHEDULED_DATE, ""),
            }
        )
        window = self.coordinator.target_future_count or const.DEFAULT_TARGET_FUTURE_COUNTS.get(
            frequency, const.DEFAULT_TARGET_FUTURE_COUNT
        )

        projected: list[str] = []
        cursor: str | None = today_iso
        while cursor is not None and len(projected) < window:
            cursor = engine.get_next_occurrence(cursor)
            if cursor is not None:
                projected.append(cursor)
        return projected
