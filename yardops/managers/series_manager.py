"""Series Manager - Stateful recurring-series operations.

This manager owns every write that creates, grows, pauses, edits, completes,
or removes jobs in a series:
- Rolling future window maintenance (maintain / create occurrence)
- Pause and resume with catch-up fill
- Invoice sent -> job Complete -> next occurrence
- Single and "this and future" edits
- Paired job/routing deletion
- Race condition protection via asyncio.Lock (one lock per series)

ARCHITECTURE:
- SeriesManager = STATEFUL workflow orchestration, talks to the store
- RecurrenceEngine / JobEngine = pure date and pricing logic (STATELESS)
- data_builders = record construction and business validation
- ReportManager listens to JOBS_CHANGED / INVOICE_SENT signals

Every public method returns an OperationResult. YardOps errors raised inside
are logged and converted at the boundary. Multi-record changes go through one
StoreBatch; the only follow-up write is the series refill after a completion,
which is reported in the result message when it fails.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.job_engine import JobEngine
from ..engines.schedule_engine import RecurrenceEngine
from ..exceptions import (
    ConsistencyViolation,
    NotFoundError,
    OperationResult,
    ValidationError,
    YardOpsError,
)
from ..utils.dt_utils import (
    dt_now_iso,
    dt_to_iso_date,
    dt_today_iso,
    parse_clock_minutes,
)
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date

    from ..coordinator import YardOpsCoordinator
    from ..store import StoreBatch
    from ..type_defs import JobData


__all__ = ["SeriesManager"]


class SeriesManager(BaseManager):
    """Manager for recurring job series.

    Responsibilities:
    - Keep target_future_count Scheduled occurrences after today
    - Enforce at most one job per (series_id, scheduled_date)
    - Keep each job and its routing record in lockstep

    NOT responsible for:
    - Revenue analytics or routing sheets (ReportManager)
    - Deciding when to run; every call is explicit
    """

    def __init__(self, coordinator: YardOpsCoordinator) -> None:
        """Initialize the SeriesManager.

        Args:
            coordinator: The main YardOps coordinator
        """
        super().__init__(coordinator)
        self._series_locks: dict[str, asyncio.Lock] = {}

    async def async_setup(self) -> None:
        """Set up the series manager.

        SeriesManager only emits events; there is nothing to subscribe to.
        """
        const.LOGGER.debug("SeriesManager: Setup complete")

    # =========================================================================
    # Public operations
    # =========================================================================

    async def async_maintain_series(
        self,
        base_job: Mapping[str, Any],
        series_jobs: list[JobData] | None = None,
        target_future_count: int | None = None,
        *,
        today: str | date | None = None,
    ) -> OperationResult:
        """Top up the series so `target_future_count` future occurrences exist.

        Args:
            base_job: The series anchor (job_id == base_job_id).
            series_jobs: Live jobs of the series sorted by date. Read from the
                store when None.
            target_future_count: Window size; configured default when None.
            today: Evaluation date; local today when None.

        Returns:
            OperationResult with job_ids of the created occurrences. A second
            call with no state change in between creates nothing.
        """
        try:
            series_id = self._require_series_id(base_job)
            if target_future_count is not None and target_future_count < 1:
                raise ValidationError(
                    "Target future count must be at least 1",
                    field=const.FIELD_TARGET_FUTURE_COUNT,
                )
            async with self._get_lock(series_id):
                created = await self._async_maintain(
                    base_job, series_jobs, target_future_count, self._today(today)
                )
        except YardOpsError as err:
            return self._error_result("maintain_series", err)

        if created:
            self.emit(const.SIGNAL_SUFFIX_JOBS_CHANGED, series_id=series_id)
        return OperationResult.ok(
            f"Created {len(created)} occurrence(s)", job_ids=created
        )

    async def async_create_occurrence(
        self, template_job: Mapping[str, Any], scheduled_date: str | date
    ) -> OperationResult:
        """Create one occurrence of the template's series on `scheduled_date`.

        Silent no-op (success, no job_ids) when the series already has a job
        on that date or the series is paused.
        """
        try:
            series_id = self._require_series_id(template_job)
            date_iso = dt_to_iso_date(scheduled_date)
            if date_iso is None:
                raise ValidationError(
                    f"Invalid scheduled date: {scheduled_date}",
                    field=const.DATA_JOB_SCHEDULED_DATE,
                )
            async with self._get_lock(series_id):
                job_id = await self._async_create_occurrence(template_job, date_iso)
        except YardOpsError as err:
            return self._error_result("create_occurrence", err)

        if job_id is None:
            return OperationResult.ok("Occurrence not created")
        self.emit(const.SIGNAL_SUFFIX_JOBS_CHANGED, series_id=series_id)
        return OperationResult.ok("Occurrence created", job_ids=[job_id])

    async def async_pause_series(self, series_id: str) -> OperationResult:
        """Pause a series. Only the base job's series_status changes."""
        try:
            async with self._get_lock(series_id):
                base_job, _ = await self._async_get_base_job(series_id)
                if (
                    base_job.get(const.DATA_JOB_SERIES_STATUS)
                    == const.SERIES_STATUS_PAUSED
                ):
                    return OperationResult.ok("Series already paused")
                await self.store.async_update(
                    const.COLLECTION_JOBS,
                    base_job[const.DATA_JOB_ID],
                    {
                        const.DATA_JOB_SERIES_STATUS: const.SERIES_STATUS_PAUSED,
                        const.DATA_JOB_UPDATED_AT: dt_now_iso(),
                    },
                )
        except YardOpsError as err:
            return self._error_result("pause_series", err)

        const.LOGGER.info("Series %s paused", series_id)
        self.emit(
            const.SIGNAL_SUFFIX_SERIES_STATUS_CHANGED,
            series_id=series_id,
            series_status=const.SERIES_STATUS_PAUSED,
        )
        return OperationResult.ok("Series paused", jobs_affected=1)

    async def async_resume_series(
        self, series_id: str, *, today: str | date | None = None
    ) -> OperationResult:
        """Resume a series and refill its future window.

        The fill continues from the latest existing occurrence, so a series
        that was paused for months backfills the dates it missed.
        """
        try:
            async with self._get_lock(series_id):
                base_job, _ = await self._async_get_base_job(series_id)
                changes: dict[str, Any] = {
                    const.DATA_JOB_SERIES_STATUS: const.SERIES_STATUS_ACTIVE,
                    const.DATA_JOB_UPDATED_AT: dt_now_iso(),
                }
                if const.DATA_JOB_IS_PAUSED in base_job:
                    changes[const.DATA_JOB_IS_PAUSED] = False
                await self.store.async_update(
                    const.COLLECTION_JOBS, base_job[const.DATA_JOB_ID], changes
                )
                const.LOGGER.info("Series %s resumed", series_id)

                base_job, series_jobs = await self._async_get_base_job(series_id)
                created = await self._async_maintain(
                    base_job, series_jobs, None, self._today(today)
                )
        except YardOpsError as err:
            return self._error_result("resume_series", err)

        self.emit(
            const.SIGNAL_SUFFIX_SERIES_STATUS_CHANGED,
            series_id=series_id,
            series_status=const.SERIES_STATUS_ACTIVE,
        )
        if created:
            self.emit(const.SIGNAL_SUFFIX_JOBS_CHANGED, series_id=series_id)
        return OperationResult.ok(
            f"Series resumed, created {len(created)} occurrence(s)",
            job_ids=created,
            jobs_affected=1,
        )

    async def async_on_invoice_marked_sent(
        self,
        job: Mapping[str, Any],
        routing: Mapping[str, Any] | None = None,
        *,
        today: str | date | None = None,
    ) -> OperationResult:
        """Complete a job whose invoice was sent and grow its series.

        Steps:
            1. Worked hours from routing arrival/departure (unset when invalid)
            2. Revenue: hourly_rate * hours (hourly) or the flat rate (bid)
            3. Job -> Complete with actual_rate, routing -> sent (one batch)
            4. Recurring and not paused: create the next date, then maintain
        """
        try:
            job_id = job.get(const.DATA_JOB_ID)
            if not job_id:
                raise ValidationError("Job id is required", field=const.DATA_JOB_ID)
            series_id = str(job.get(const.DATA_JOB_SERIES_ID) or job_id)

            async with self._get_lock(series_id):
                stored_job = await self.store.async_get(const.COLLECTION_JOBS, job_id)
                routing_id = (routing or {}).get(const.DATA_ROUTING_ID) or stored_job.get(
                    const.DATA_JOB_ROUTING_ID
                )
                if not routing_id:
                    raise NotFoundError(const.COLLECTION_ROUTING, f"for job {job_id}")
                stored_routing = await self.store.async_get(
                    const.COLLECTION_ROUTING, routing_id
                )

                base_job: Mapping[str, Any] | None
                try:
                    base_job, _ = await self._async_get_base_job(series_id)
                except NotFoundError:
                    const.LOGGER.debug(
                        "SeriesManager: Job %s has no base job, treating as active",
                        job_id,
                    )
                    base_job = None

                effect = JobEngine.plan_completion(
                    stored_job,
                    stored_routing,
                    series_paused=JobEngine.is_series_paused(base_job),
                )
                now_iso = dt_now_iso()

                batch = self.store.batch()
                batch.update(
                    const.COLLECTION_JOBS,
                    job_id,
                    {
                        const.DATA_JOB_STATUS: const.JOB_STATUS_COMPLETE,
                        const.DATA_JOB_ACTUAL_RATE: effect.revenue,
                        const.DATA_JOB_COMPLETED_AT: now_iso,
                        const.DATA_JOB_UPDATED_AT: now_iso,
                    },
                )
                batch.update(
                    const.COLLECTION_ROUTING,
                    routing_id,
                    {
                        const.DATA_ROUTING_INVOICE_STATUS: const.INVOICE_STATUS_SENT,
                        const.DATA_ROUTING_MAN_HOURS: effect.man_hours,
                        const.DATA_ROUTING_REVENUE: effect.revenue,
                        const.DATA_ROUTING_DOLLARS_PER_MAN_HOUR: effect.dollars_per_man_hour,
                        const.DATA_ROUTING_UPDATED_AT: now_iso,
                    },
                )
                await batch.async_commit()
                const.LOGGER.info(
                    "Job %s complete: %.2f revenue over %.2f hours",
                    job_id,
                    effect.revenue,
                    effect.man_hours,
                )

                # The completion is committed; a refill failure does not undo it
                created: list[str] = []
                refill_error: YardOpsError | None = None
                if effect.spawn_next and effect.next_date:
                    try:
                        series_jobs = await self.store.async_query_by_series_id(
                            series_id
                        )
                        next_id = await self._async_create_occurrence(
                            stored_job,
                            effect.next_date,
                            known_dates=self._series_dates(series_jobs),
                        )
                        if next_id:
                            created.append(next_id)
                        created.extend(
                            await self._async_maintain(
                                base_job or stored_job,
                                None,
                                None,
                                self._today(today),
                            )
                        )
                    except YardOpsError as err:
                        refill_error = err
                        const.LOGGER.error(
                            "Job %s completed but refilling series %s failed: %s",
                            job_id,
                            series_id,
                            err,
                        )
        except YardOpsError as err:
            return self._error_result("on_invoice_marked_sent", err)

        self.emit(
            const.SIGNAL_SUFFIX_INVOICE_SENT,
            job_id=job_id,
            routing_id=routing_id,
            revenue=effect.revenue,
        )
        self.emit(const.SIGNAL_SUFFIX_JOBS_CHANGED, series_id=series_id)
        message = "Invoice marked sent"
        if refill_error is not None:
            message = f"Invoice marked sent; series refill failed: {refill_error}"
        return OperationResult.ok(message, job_ids=created, jobs_affected=1)

    async def async_mark_invoice_sent(
        self, routing_id: str, *, today: str | date | None = None
    ) -> OperationResult:
        """Load a routing record and its job, then complete the job."""
        try:
            routing = await self.store.async_get(const.COLLECTION_ROUTING, routing_id)
            job = await self.store.async_get(
                const.COLLECTION_JOBS, routing[const.DATA_ROUTING_JOB_ID]
            )
        except YardOpsError as err:
            return self._error_result("mark_invoice_sent", err)
        return await self.async_on_invoice_marked_sent(job, routing, today=today)

    async def async_edit_job(
        self, updated_job: Mapping[str, Any], scope: str = const.EDIT_SCOPE_SINGLE
    ) -> OperationResult:
        """Edit one job, or the job and every later job of its series.

        single: the job's editable fields and its routing revenue fields.
        series: additionally copies service/pricing/notes onto every series
        job dated on or after the target. A new scheduled_date only moves the
        target itself. All writes land in one batch.

        Returns:
            OperationResult with jobs_affected.
        """
        try:
            if scope not in const.EDIT_SCOPE_OPTIONS:
                raise ValidationError(f"Unknown edit scope: {scope}", field=const.FIELD_SCOPE)
            job_id = updated_job.get(const.DATA_JOB_ID)
            if not job_id:
                raise ValidationError("Job id is required", field=const.DATA_JOB_ID)

            existing = await self.store.async_get(const.COLLECTION_JOBS, job_id)
            series_id = str(existing.get(const.DATA_JOB_SERIES_ID) or job_id)

            async with self._get_lock(series_id):
                existing = await self.store.async_get(const.COLLECTION_JOBS, job_id)
                series_jobs = await self.store.async_query_by_series_id(series_id)
                target_changes = db.build_job_edit(existing, updated_job)

                new_date = target_changes.get(const.DATA_JOB_SCHEDULED_DATE)
                if new_date and new_date != existing.get(const.DATA_JOB_SCHEDULED_DATE):
                    for other in series_jobs:
                        if (
                            other.get(const.DATA_JOB_ID) != job_id
                            and other.get(const.DATA_JOB_SCHEDULED_DATE) == new_date
                        ):
                            raise ValidationError(
                                const.ERROR_DUPLICATE_OCCURRENCE_FMT.format(
                                    series_id, new_date
                                ),
                                field=const.DATA_JOB_SCHEDULED_DATE,
                            )

                targets = JobEngine.select_edit_scope(
                    series_jobs or [existing], existing, scope
                )
                propagated = {
                    key: value
                    for key, value in updated_job.items()
                    if key in const.JOB_SERIES_PROPAGATED_FIELDS
                }

                batch = self.store.batch()
                for job in targets:
                    current_id = job[const.DATA_JOB_ID]
                    changes = dict(
                        target_changes
                        if current_id == job_id
                        else db.build_job_edit(job, propagated)
                    )

                    routing_id = job.get(const.DATA_JOB_ROUTING_ID)
                    if routing_id and await self.store.async_exists(
                        const.COLLECTION_ROUTING, routing_id
                    ):
                        routing = await self.store.async_get(
                            const.COLLECTION_ROUTING, routing_id
                        )
                        routing_changes = db.build_routing_edit(
                            {**job, **changes}, routing
                        )
                        # Invoiced revenue and the job's actual rate move together
                        if (
                            routing.get(const.DATA_ROUTING_INVOICE_STATUS)
                            == const.INVOICE_STATUS_SENT
                            and const.DATA_ROUTING_REVENUE in routing_changes
                        ):
                            changes[const.DATA_JOB_ACTUAL_RATE] = routing_changes[
                                const.DATA_ROUTING_REVENUE
                            ]
                        batch.update(
                            const.COLLECTION_ROUTING, routing_id, routing_changes
                        )
                    batch.update(const.COLLECTION_JOBS, current_id, changes)
                await batch.async_commit()
        except YardOpsError as err:
            return self._error_result("edit_job", err)

        const.LOGGER.info(
            "Edited %s job(s) in series %s (scope=%s)", len(targets), series_id, scope
        )
        self.emit(const.SIGNAL_SUFFIX_JOBS_CHANGED, series_id=series_id)
        return OperationResult.ok(
            f"Updated {len(targets)} job(s)", jobs_affected=len(targets)
        )

    async def async_create_job(
        self, job_input: Mapping[str, Any], *, today: str | date | None = None
    ) -> OperationResult:
        """Create a base job (manual entry or lead conversion).

        Recurring jobs get their initial future window right away.
        """
        try:
            job = db.build_job(job_input)
            series_id = job["series_id"]
            async with self._get_lock(series_id):
                if await self.store.async_query_by_series_id(series_id):
                    raise ValidationError(
                        f"Series '{series_id}' already exists",
                        field=const.DATA_JOB_SERIES_ID,
                    )
                routing = db.build_routing(job)
                batch = self.store.batch()
                batch.set(const.COLLECTION_JOBS, job["job_id"], dict(job))
                batch.set(const.COLLECTION_ROUTING, routing["routing_id"], dict(routing))
                await batch.async_commit()
                const.LOGGER.info(
                    "Created job %s for customer %s on %s",
                    job["job_id"],
                    job["customer_id"],
                    job["scheduled_date"],
                )

                created = [job["job_id"]]
                if job["is_recurring"]:
                    created.extend(
                        await self._async_maintain(
                            job, [job], None, self._today(today)
                        )
                    )
        except YardOpsError as err:
            return self._error_result("create_job", err)

        self.emit(const.SIGNAL_SUFFIX_JOBS_CHANGED, series_id=series_id)
        return OperationResult.ok(f"Created {len(created)} job(s)", job_ids=created)

    async def async_delete_job(self, job_id: str) -> OperationResult:
        """Delete one job together with its routing record.

        A base job can only be removed while it is the last job of its
        series; use async_delete_series otherwise.
        """
        try:
            job = await self.store.async_get(const.COLLECTION_JOBS, job_id)
            series_id = str(job.get(const.DATA_JOB_SERIES_ID) or job_id)
            async with self._get_lock(series_id):
                job = await self.store.async_get(const.COLLECTION_JOBS, job_id)
                if JobEngine.is_base_job(job):
                    series_jobs = await self.store.async_query_by_series_id(series_id)
                    if any(other[const.DATA_JOB_ID] != job_id for other in series_jobs):
                        raise ValidationError(
                            "Cannot delete the base job of a series that still has "
                            "occurrences; delete the series instead",
                            field=const.DATA_JOB_ID,
                        )
                batch = self.store.batch()
                batch.delete(const.COLLECTION_JOBS, job_id)
                await self._queue_routing_delete(batch, job)
                await batch.async_commit()
        except YardOpsError as err:
            return self._error_result("delete_job", err)

        const.LOGGER.info("Deleted job %s", job_id)
        self.emit(const.SIGNAL_SUFFIX_JOBS_CHANGED, series_id=series_id)
        return OperationResult.ok("Job deleted", jobs_affected=1)

    async def async_delete_series(self, series_id: str) -> OperationResult:
        """Delete every job of a series and all of their routing records."""
        try:
            async with self._get_lock(series_id):
                series_jobs = await self.store.async_query_by_series_id(series_id)
                if not series_jobs:
                    raise NotFoundError(const.COLLECTION_JOBS, series_id)
                batch = self.store.batch()
                for job in series_jobs:
                    batch.delete(const.COLLECTION_JOBS, job[const.DATA_JOB_ID])
                    await self._queue_routing_delete(batch, job)
                await batch.async_commit()
        except YardOpsError as err:
            return self._error_result("delete_series", err)

        const.LOGGER.info("Deleted series %s (%s jobs)", series_id, len(series_jobs))
        self.emit(const.SIGNAL_SUFFIX_JOBS_CHANGED, series_id=series_id)
        return OperationResult.ok(
            f"Deleted {len(series_jobs)} job(s)", jobs_affected=len(series_jobs)
        )

    async def async_update_routing_times(
        self,
        routing_id: str,
        arrival_time: str | None,
        departure_time: str | None,
    ) -> OperationResult:
        """Record crew arrival/departure and recompute hours and revenue.

        The job is not completed; that happens when the invoice is sent. Once
        the invoice is out, the job's actual_rate follows the new revenue in
        the same batch.
        """
        try:
            for field, value in (
                (const.FIELD_ARRIVAL_TIME, arrival_time),
                (const.FIELD_DEPARTURE_TIME, departure_time),
            ):
                if value and parse_clock_minutes(value) is None:
                    raise ValidationError(f"Invalid time: {value}", field=field)

            routing = await self.store.async_get(const.COLLECTION_ROUTING, routing_id)
            job = await self.store.async_get(
                const.COLLECTION_JOBS, routing[const.DATA_ROUTING_JOB_ID]
            )
            man_hours, recorded, revenue, dollars_per_hour = (
                JobEngine.plan_routing_metrics(job, arrival_time, departure_time)
            )
            if not recorded:
                const.LOGGER.debug(
                    "SeriesManager: Routing %s has no valid worked interval", routing_id
                )
            now_iso = dt_now_iso()
            batch = self.store.batch()
            batch.update(
                const.COLLECTION_ROUTING,
                routing_id,
                {
                    const.DATA_ROUTING_ARRIVAL_TIME: arrival_time or None,
                    const.DATA_ROUTING_DEPARTURE_TIME: departure_time or None,
                    const.DATA_ROUTING_MAN_HOURS: man_hours,
                    const.DATA_ROUTING_REVENUE: revenue,
                    const.DATA_ROUTING_DOLLARS_PER_MAN_HOUR: dollars_per_hour,
                    const.DATA_ROUTING_UPDATED_AT: now_iso,
                },
            )
            invoiced = (
                routing.get(const.DATA_ROUTING_INVOICE_STATUS)
                == const.INVOICE_STATUS_SENT
            )
            if invoiced:
                batch.update(
                    const.COLLECTION_JOBS,
                    job[const.DATA_JOB_ID],
                    {
                        const.DATA_JOB_ACTUAL_RATE: revenue,
                        const.DATA_JOB_UPDATED_AT: now_iso,
                    },
                )
            await batch.async_commit()
        except YardOpsError as err:
            return self._error_result("update_routing_times", err)

        if invoiced:
            self.emit(
                const.SIGNAL_SUFFIX_JOBS_CHANGED,
                series_id=job.get(const.DATA_JOB_SERIES_ID),
            )
        return OperationResult.ok("Routing times updated", jobs_affected=1)

    # =========================================================================
    # Internal helpers (caller holds the series lock)
    # =========================================================================

    async def _async_maintain(
        self,
        base_job: Mapping[str, Any],
        series_jobs: list[JobData] | None,
        target_future_count: int | None,
        today: str,
    ) -> list[str]:
        """Run the extension loop and return the created job ids."""
        series_id = self._require_series_id(base_job)
        frequency = base_job.get(const.DATA_JOB_SERVICE_FREQUENCY)

        if not base_job.get(
            const.DATA_JOB_IS_RECURRING, True
        ) or not JobEngine.is_recurring_frequency(frequency):
            const.LOGGER.debug(
                "SeriesManager: Series %s is not recurring (%s)", series_id, frequency
            )
            return []

        if series_jobs is None:
            series_jobs = await self.store.async_query_by_series_id(series_id)
        if not series_jobs:
            const.LOGGER.debug("SeriesManager: Series %s is empty", series_id)
            return []

        stored_base = next(
            (job for job in series_jobs if JobEngine.is_base_job(job)), None
        )
        if JobEngine.is_series_paused(stored_base or base_job):
            const.LOGGER.debug("SeriesManager: Series %s is paused", series_id)
            return []

        target = self._resolve_target(frequency, target_future_count)
        future_count = JobEngine.count_future_scheduled(series_jobs, today)
        if future_count >= target:
            return []

        known_dates = self._series_dates(series_jobs)
        last_date = max(known_dates)
        max_iterations = max(const.MAX_SERIES_EXTENSION_ITERATIONS, target)
        template = stored_base or base_job
        created: list[str] = []

        iteration = 0
        while future_count < target:
            if iteration >= max_iterations:
                const.LOGGER.warning(
                    "SeriesManager: Series %s stopped after %s iterations "
                    "(%s of %s future occurrences)",
                    series_id,
                    max_iterations,
                    future_count,
                    target,
                )
                break
            iteration += 1

            next_date = RecurrenceEngine.advance(last_date, frequency)
            if next_date is None:
                break
            last_date = next_date
            if next_date in known_dates:
                continue

            job_id = await self._async_create_occurrence(
                template, next_date, known_dates=known_dates
            )
            known_dates.add(next_date)
            if job_id:
                created.append(job_id)
            if next_date > today:
                future_count += 1

        const.LOGGER.debug(
            "SeriesManager: Series %s maintained, %s created, %s future",
            series_id,
            len(created),
            future_count,
        )
        return created

    async def _async_create_occurrence(
        self,
        template: Mapping[str, Any],
        scheduled_date: str,
        *,
        known_dates: set[str] | None = None,
    ) -> str | None:
        """Write one occurrence and its routing record; None when skipped."""
        series_id = self._require_series_id(template)

        try:
            base_job, series_jobs = await self._async_get_base_job(series_id)
        except NotFoundError:
            base_job, series_jobs = None, None
        if JobEngine.is_series_paused(base_job or template):
            const.LOGGER.debug(
                "SeriesManager: Series %s paused, %s not created", series_id, scheduled_date
            )
            return None

        if known_dates is None:
            known_dates = self._series_dates(series_jobs or [])

        job = db.build_occurrence(template, scheduled_date)
        try:
            if scheduled_date in known_dates or await self.store.async_exists(
                const.COLLECTION_JOBS, job["job_id"]
            ):
                raise ConsistencyViolation(series_id, scheduled_date)
        except ConsistencyViolation as err:
            const.LOGGER.warning("SeriesManager: %s, skipping", err)
            return None

        routing = db.build_routing(job)
        batch = self.store.batch()
        batch.set(const.COLLECTION_JOBS, job["job_id"], dict(job))
        batch.set(const.COLLECTION_ROUTING, routing["routing_id"], dict(routing))
        await batch.async_commit()
        const.LOGGER.info(
            "Created occurrence %s for series %s", job["job_id"], series_id
        )
        return job["job_id"]

    async def _async_get_base_job(
        self, series_id: str
    ) -> tuple[JobData, list[JobData]]:
        """Return (base_job, series_jobs).

        Raises:
            NotFoundError: If the series has no job with job_id == base_job_id.
        """
        series_jobs = await self.store.async_query_by_series_id(series_id)
        for job in series_jobs:
            if JobEngine.is_base_job(job):
                return job, series_jobs
        raise NotFoundError(
            const.COLLECTION_JOBS,
            series_id,
            const.ERROR_BASE_JOB_NOT_FOUND_FMT.format(series_id),
        )

    async def _queue_routing_delete(
        self, batch: StoreBatch, job: Mapping[str, Any]
    ) -> None:
        routing_id = job.get(const.DATA_JOB_ROUTING_ID)
        if routing_id and await self.store.async_exists(
            const.COLLECTION_ROUTING, routing_id
        ):
            batch.delete(const.COLLECTION_ROUTING, routing_id)
        else:
            const.LOGGER.debug(
                "SeriesManager: Job %s has no routing record", job.get(const.DATA_JOB_ID)
            )

    def _resolve_target(self, frequency: str | None, override: int | None) -> int:
        """Return the window size: explicit > configured > per-frequency default."""
        if override is not None:
            return override
        configured = self.coordinator.target_future_count
        if configured is not None:
            return configured
        return const.DEFAULT_TARGET_FUTURE_COUNTS.get(
            frequency or "", const.DEFAULT_TARGET_FUTURE_COUNT
        )

    def _get_lock(self, series_id: str) -> asyncio.Lock:
        """Get or create the lock for a series.

        Args:
            series_id: The series identifier

        Returns:
            asyncio.Lock for this series
        """
        if series_id not in self._series_locks:
            self._series_locks[series_id] = asyncio.Lock()
        return self._series_locks[series_id]

    @staticmethod
    def _require_series_id(job: Mapping[str, Any]) -> str:
        series_id = job.get(const.DATA_JOB_SERIES_ID)
        if not series_id:
            raise ValidationError(
                "Job is not part of a series", field=const.DATA_JOB_SERIES_ID
            )
        return str(series_id)

    @staticmethod
    def _series_dates(series_jobs: list[JobData]) -> set[str]:
        return {
            str(job[const.DATA_JOB_SCHEDULED_DATE])
            for job in series_jobs
            if job.get(const.DATA_JOB_SCHEDULED_DATE)
        }

    @staticmethod
    def _today(today: str | date | None) -> str:
        if today is None:
            return dt_today_iso()
        today_iso = dt_to_iso_date(today)
        if today_iso is None:
            raise ValidationError(f"Invalid evaluation date: {today}")
        return today_iso

    @staticmethod
    def _error_result(operation: str, err: YardOpsError) -> OperationResult:
        if isinstance(err, ValidationError):
            const.LOGGER.warning("%s rejected: %s", operation, err)
        else:
            const.LOGGER.error("%s failed: %s", operation, err)
        return OperationResult.from_error(err)
