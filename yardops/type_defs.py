"""Type definitions for YardOps data structures.

Records are stored and passed around as plain dicts (they come straight out of
the store and go straight back in). TypedDict gives static checking of the
fixed keys without changing that runtime shape.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime null checks and .get()
defaults stay in the engines and managers.

IMPORTANT: This file must NOT import from managers or the coordinator.
Only import from typing.
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

JobId = str  # "J-{series_id}-{scheduled_date}" for generated occurrences
SeriesId = str  # "series_<uuid hex>"
RoutingId = str  # "{date}-{customer_id}-{job_id}"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
ClockTime = str  # "HH:MM" 24h

ServiceFrequency = Literal["Weekly", "Bi-Weekly", "Monthly", "One-Time", "As-Needed"]
BidType = Literal["bid", "hourly"]
JobStatus = Literal["Scheduled", "Pending", "Complete"]
SeriesStatus = Literal["active", "paused"]
InvoiceStatus = Literal["no", "pending", "sent"]
EditScope = Literal["single", "series"]


# =============================================================================
# Entity Types
# =============================================================================


class JobData(TypedDict):
    """One scheduled service occurrence.

    `series_status` is only authoritative on the base job
    (job_id == base_job_id). `is_paused` only appears on legacy records.
    """

    job_id: JobId
    series_id: SeriesId
    base_job_id: JobId
    customer_id: str
    property_id: str | None
    customer_name: str
    service_address: str
    service_type: str
    scheduled_date: ISODate
    service_frequency: ServiceFrequency
    bid_type: BidType
    rate: float
    estimated_rate: float
    actual_rate: float | None
    hourly_rate: float | None
    man_hours: float
    notes: str
    status: JobStatus
    is_recurring: bool
    series_status: SeriesStatus
    is_paused: NotRequired[bool]
    routing_id: RoutingId
    created_at: ISODatetime
    updated_at: ISODatetime
    completed_at: ISODatetime | None


class RoutingData(TypedDict):
    """Field-crew execution record paired with exactly one job."""

    routing_id: RoutingId
    job_id: JobId
    date: ISODate
    customer_id: str
    customer_name: str
    service_address: str
    job_type: str
    arrival_time: ClockTime | None
    departure_time: ClockTime | None
    man_hours: float
    bid_type: BidType
    estimated_revenue: float
    revenue: float
    dollars_per_man_hour: float
    invoice_status: InvoiceStatus
    created_at: ISODatetime
    updated_at: ISODatetime


# =============================================================================
# Report Types
# =============================================================================


class MonthlyRevenueBlock(TypedDict):
    """Revenue aggregate for one calendar month of invoiced routing."""

    month: str  # "YYYY-MM"
    revenue: float
    hours: float
    job_count: int
    avg_dollars_per_hour: float


class RevenueSummary(TypedDict):
    """Dashboard-level revenue analytics."""

    total_revenue: float
    total_hours: float
    avg_dollars_per_hour: float
    completed_jobs: int
    scheduled_jobs: int
    monthly: list[MonthlyRevenueBlock]


class SeriesView(TypedDict):
    """Read model for one series (list of occurrences plus summary)."""

    series_id: SeriesId
    base_job_id: JobId | None
    jobs: list[JobData]
    next_job: JobData | None
    total_planned: int
    average_rate: float
    is_paused: bool
    projected_dates: list[ISODate]


class ScheduleConfig(TypedDict, total=False):
    """Recurrence configuration for a RecurrenceEngine instance."""

    frequency: str
    base_date: ISODate
