"""Record lifecycle helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Record field defaults
- Business logic validation
- Complete job / routing record building
- Deterministic identifiers

### Build Functions
Each record type has a `build_<record>()` function that:
- Takes input with DATA_* keys
- Derives identifiers and normalized fields (rate, is_recurring)
- Sets timestamps (created_at, updated_at)
- Returns a complete record dict ready for storage

### Validation Functions
`validate_job_data()` returns a dict of {field: message} (empty if valid).
`build_job()` raises ValidationError with the first problem found.

Consumers:
- managers/series_manager.py (create, occurrence, edit)
- services.py (input already shape-checked by voluptuous)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast
import uuid

from . import const
from .engines.job_engine import JobEngine
from .exceptions import ValidationError
from .utils.dt_utils import dt_now_iso, dt_to_iso_date
from .utils.math_utils import round_money, to_float

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .type_defs import JobData, RoutingData


# ==============================================================================
# IDENTIFIERS
# ==============================================================================


def new_series_id() -> str:
    """Return a fresh series identifier."""
    return f"{const.SERIES_ID_PREFIX}{uuid.uuid4().hex}"


def job_id_for(series_id: str, scheduled_date: str) -> str:
    """Return the deterministic job id for a series occurrence.

    The same (series, date) pair always maps to the same id, so creating an
    occurrence twice targets the same record.
    """
    return const.JOB_ID_FORMAT.format(series_id=series_id, scheduled_date=scheduled_date)


def routing_id_for(date_iso: str, customer_id: str, job_id: str) -> str:
    """Return the composite routing key (date + customer + job)."""
    return const.ROUTING_ID_FORMAT.format(
        date=date_iso, customer_id=customer_id, job_id=job_id
    )


# ==============================================================================
# VALIDATION
# ==============================================================================


def _is_non_negative_number(value: Any) -> bool:
    """Return True for numbers (or numeric strings) >= 0."""
    if isinstance(value, bool):
        return False
    try:
        return float(value) >= 0
    except (TypeError, ValueError):
        return False


def validate_job_data(data: Mapping[str, Any], *, is_update: bool = False) -> dict[str, str]:
    """Validate job business rules.

    Args:
        data: Job data dict with DATA_* keys
        is_update: True for edits (only provided fields are checked)

    Returns:
        Dict of errors: {field: message}. Empty dict means validation passed.

    Validation Rules:
        1. customer_id present (create)
        2. scheduled_date present (create) and a valid calendar date
        3. service_frequency in the recognized enum
        4. bid_type in the recognized enum
        5. rate / hourly_rate / man_hours numeric and >= 0 when provided;
           hourly jobs need a positive hourly_rate
    """
    errors: dict[str, str] = {}

    def _check(key: str) -> bool:
        return not is_update or key in data

    # === 1. Customer ===
    if not is_update and not str(data.get(const.DATA_JOB_CUSTOMER_ID) or "").strip():
        errors[const.DATA_JOB_CUSTOMER_ID] = "Customer is required"

    # === 2. Scheduled date ===
    if _check(const.DATA_JOB_SCHEDULED_DATE):
        raw_date = data.get(const.DATA_JOB_SCHEDULED_DATE)
        if not raw_date:
            errors[const.DATA_JOB_SCHEDULED_DATE] = "Scheduled date is required"
        elif dt_to_iso_date(raw_date) is None:
            errors[const.DATA_JOB_SCHEDULED_DATE] = f"Invalid scheduled date: {raw_date}"

    # === 3. Frequency ===
    if const.DATA_JOB_SERVICE_FREQUENCY in data and (
        data[const.DATA_JOB_SERVICE_FREQUENCY] not in const.FREQUENCY_OPTIONS
    ):
        errors[const.DATA_JOB_SERVICE_FREQUENCY] = (
            f"Unknown service frequency: {data[const.DATA_JOB_SERVICE_FREQUENCY]}"
        )

    # === 4. Bid type ===
    if const.DATA_JOB_BID_TYPE in data and (
        data[const.DATA_JOB_BID_TYPE] not in const.BID_TYPE_OPTIONS
    ):
        errors[const.DATA_JOB_BID_TYPE] = f"Unknown bid type: {data[const.DATA_JOB_BID_TYPE]}"

    # === 5. Money / hours ===
    for key in (const.DATA_JOB_RATE, const.DATA_JOB_HOURLY_RATE, const.DATA_JOB_MAN_HOURS):
        value = data.get(key)
        if value is None or value == "":
            continue
        if not _is_non_negative_number(value):
            errors[key] = f"{key} must be a non-negative number"

    if (
        not is_update
        and const.DATA_JOB_HOURLY_RATE not in errors
        and _lacks_hourly_rate(data)
    ):
        errors[const.DATA_JOB_HOURLY_RATE] = "Hourly jobs need a positive hourly rate"

    return errors


def _lacks_hourly_rate(data: Mapping[str, Any]) -> bool:
    """Return True for an hourly job without a positive hourly rate."""
    return (
        JobEngine.is_hourly(data.get(const.DATA_JOB_BID_TYPE))
        and to_float(data.get(const.DATA_JOB_HOURLY_RATE)) <= 0
    )


def _raise_first(errors: dict[str, str]) -> None:
    """Raise ValidationError for the first error, if any."""
    if errors:
        field, message = next(iter(errors.items()))
        raise ValidationError(message, field=field)


# ==============================================================================
# JOBS
# ==============================================================================


def build_job(user_input: Mapping[str, Any]) -> JobData:
    """Build a complete base job from creation input.

    The job anchors a new series: base_job_id == job_id, series_status active.
    The job id is derived from (series_id, scheduled_date) like every other
    occurrence.

    Raises:
        ValidationError: If business rules fail.
    """
    _raise_first(validate_job_data(user_input))

    scheduled_date = cast("str", dt_to_iso_date(user_input[const.DATA_JOB_SCHEDULED_DATE]))
    series_id = str(user_input.get(const.DATA_JOB_SERIES_ID) or new_series_id())
    job_id = job_id_for(series_id, scheduled_date)
    customer_id = str(user_input[const.DATA_JOB_CUSTOMER_ID]).strip()

    frequency = user_input.get(const.DATA_JOB_SERVICE_FREQUENCY, const.FREQUENCY_WEEKLY)
    bid_type = user_input.get(const.DATA_JOB_BID_TYPE, const.BID_TYPE_BID)
    hourly = JobEngine.is_hourly(bid_type)
    man_hours = round_money(to_float(user_input.get(const.DATA_JOB_MAN_HOURS)))
    rate = JobEngine.normalize_rate(
        bid_type,
        user_input.get(const.DATA_JOB_RATE),
        user_input.get(const.DATA_JOB_HOURLY_RATE),
        man_hours,
    )
    now_iso = dt_now_iso()

    return {
        "job_id": job_id,
        "series_id": series_id,
        "base_job_id": job_id,
        "customer_id": customer_id,
        "property_id": user_input.get(const.DATA_JOB_PROPERTY_ID),
        "customer_name": str(user_input.get(const.DATA_JOB_CUSTOMER_NAME) or "").strip(),
        "service_address": str(user_input.get(const.DATA_JOB_SERVICE_ADDRESS) or ""),
        "service_type": str(
            user_input.get(const.DATA_JOB_SERVICE_TYPE) or const.DEFAULT_SERVICE_TYPE
        ),
        "scheduled_date": scheduled_date,
        "service_frequency": frequency,
        "bid_type": bid_type,
        "rate": rate,
        "estimated_rate": rate,
        "actual_rate": None,
        "hourly_rate": (
            round_money(to_float(user_input.get(const.DATA_JOB_HOURLY_RATE)))
            if hourly
            else None
        ),
        "man_hours": man_hours,
        "notes": str(user_input.get(const.DATA_JOB_NOTES) or ""),
        "status": user_input.get(const.DATA_JOB_STATUS, const.JOB_STATUS_SCHEDULED),
        "is_recurring": JobEngine.is_recurring_frequency(frequency),
        "series_status": const.SERIES_STATUS_ACTIVE,
        "routing_id": routing_id_for(scheduled_date, customer_id, job_id),
        "created_at": now_iso,
        "updated_at": now_iso,
        "completed_at": None,
    }


def build_occurrence(template: Mapping[str, Any], scheduled_date: str) -> JobData:
    """Clone a series job's service parameters onto a new date.

    Identity fields (series, base job, customer) and pricing come from the
    template; status, completion, and timestamps are reset.
    """
    series_id = str(template[const.DATA_JOB_SERIES_ID])
    job_id = job_id_for(series_id, scheduled_date)
    customer_id = str(template.get(const.DATA_JOB_CUSTOMER_ID, ""))
    bid_type = template.get(const.DATA_JOB_BID_TYPE, const.BID_TYPE_BID)
    rate = JobEngine.normalize_rate(
        bid_type,
        template.get(const.DATA_JOB_RATE, template.get(const.DATA_JOB_ESTIMATED_RATE)),
        template.get(const.DATA_JOB_HOURLY_RATE),
        template.get(const.DATA_JOB_MAN_HOURS),
    )
    now_iso = dt_now_iso()

    return {
        "job_id": job_id,
        "series_id": series_id,
        "base_job_id": str(template.get(const.DATA_JOB_BASE_JOB_ID, "")),
        "customer_id": customer_id,
        "property_id": template.get(const.DATA_JOB_PROPERTY_ID),
        "customer_name": str(template.get(const.DATA_JOB_CUSTOMER_NAME, "")),
        "service_address": str(template.get(const.DATA_JOB_SERVICE_ADDRESS, "")),
        "service_type": str(
            template.get(const.DATA_JOB_SERVICE_TYPE) or const.DEFAULT_SERVICE_TYPE
        ),
        "scheduled_date": scheduled_date,
        "service_frequency": template.get(
            const.DATA_JOB_SERVICE_FREQUENCY, const.FREQUENCY_WEEKLY
        ),
        "bid_type": bid_type,
        "rate": rate,
        "estimated_rate": rate,
        "actual_rate": None,
        "hourly_rate": template.get(const.DATA_JOB_HOURLY_RATE),
        "man_hours": round_money(to_float(template.get(const.DATA_JOB_MAN_HOURS))),
        "notes": str(template.get(const.DATA_JOB_NOTES, "")),
        "status": const.JOB_STATUS_SCHEDULED,
        "is_recurring": True,
        "series_status": const.SERIES_STATUS_ACTIVE,
        "routing_id": routing_id_for(scheduled_date, customer_id, job_id),
        "created_at": now_iso,
        "updated_at": now_iso,
        "completed_at": None,
    }


def build_job_edit(existing: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Return the partial job update for an edit, with rate re-normalized.

    Only JOB_EDITABLE_FIELDS present in `updates` are taken. Pricing is
    recomputed from the merged record so hourly jobs keep
    rate == hourly_rate * man_hours and bid jobs keep their flat rate.

    Raises:
        ValidationError: If business rules fail.
    """
    _raise_first(validate_job_data(updates, is_update=True))

    changes: dict[str, Any] = {
        key: updates[key] for key in const.JOB_EDITABLE_FIELDS if key in updates
    }
    if const.DATA_JOB_SCHEDULED_DATE in changes:
        changes[const.DATA_JOB_SCHEDULED_DATE] = dt_to_iso_date(
            changes[const.DATA_JOB_SCHEDULED_DATE]
        )
    if const.DATA_JOB_NOTES in changes:
        changes[const.DATA_JOB_NOTES] = str(changes[const.DATA_JOB_NOTES] or "")

    merged = {**existing, **changes}
    if _lacks_hourly_rate(merged):
        raise ValidationError(
            "Hourly jobs need a positive hourly rate", field=const.DATA_JOB_HOURLY_RATE
        )
    bid_type = merged.get(const.DATA_JOB_BID_TYPE, const.BID_TYPE_BID)
    man_hours = round_money(to_float(merged.get(const.DATA_JOB_MAN_HOURS)))
    rate = JobEngine.normalize_rate(
        bid_type,
        merged.get(const.DATA_JOB_RATE),
        merged.get(const.DATA_JOB_HOURLY_RATE),
        man_hours,
    )

    changes[const.DATA_JOB_MAN_HOURS] = man_hours
    changes[const.DATA_JOB_RATE] = rate
    changes[const.DATA_JOB_ESTIMATED_RATE] = rate
    if JobEngine.is_hourly(bid_type):
        changes[const.DATA_JOB_HOURLY_RATE] = round_money(
            to_float(merged.get(const.DATA_JOB_HOURLY_RATE))
        )
    changes[const.DATA_JOB_UPDATED_AT] = dt_now_iso()
    return changes


# ==============================================================================
# ROUTING
# ==============================================================================


def build_routing(job: Mapping[str, Any]) -> RoutingData:
    """Build the routing record paired with a job.

    Revenue starts at the job's normalized rate; crew times are empty until
    the visit happens.
    """
    rate = round_money(to_float(job.get(const.DATA_JOB_RATE)))
    man_hours = round_money(to_float(job.get(const.DATA_JOB_MAN_HOURS)))
    scheduled_date = str(job[const.DATA_JOB_SCHEDULED_DATE])
    invoice_status = (
        const.INVOICE_STATUS_PENDING
        if job.get(const.DATA_JOB_STATUS) == const.JOB_STATUS_PENDING
        else const.INVOICE_STATUS_NO
    )
    now_iso = dt_now_iso()

    return {
        "routing_id": str(
            job.get(const.DATA_JOB_ROUTING_ID)
            or routing_id_for(
                scheduled_date,
                str(job.get(const.DATA_JOB_CUSTOMER_ID, "")),
                str(job[const.DATA_JOB_ID]),
            )
        ),
        "job_id": str(job[const.DATA_JOB_ID]),
        "date": scheduled_date,
        "customer_id": str(job.get(const.DATA_JOB_CUSTOMER_ID, "")),
        "customer_name": str(job.get(const.DATA_JOB_CUSTOMER_NAME, "")),
        "service_address": str(job.get(const.DATA_JOB_SERVICE_ADDRESS, "")),
        "job_type": str(job.get(const.DATA_JOB_SERVICE_TYPE, "")),
        "arrival_time": None,
        "departure_time": None,
        "man_hours": man_hours,
        "bid_type": job.get(const.DATA_JOB_BID_TYPE, const.BID_TYPE_BID),
        "estimated_revenue": rate,
        "revenue": rate,
        "dollars_per_man_hour": JobEngine.compute_dollars_per_man_hour(rate, man_hours),
        "invoice_status": invoice_status,
        "created_at": now_iso,
        "updated_at": now_iso,
    }


def build_routing_edit(
    job: Mapping[str, Any], routing: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Return the routing fields derived from an edited job.

    Planned hours and rate only fill in for a visit that has no recorded
    times. With valid arrival/departure the actuals are recomputed from the
    edited pricing; a sent invoice without times keeps its figures.
    """
    rate = round_money(to_float(job.get(const.DATA_JOB_RATE)))
    changes: dict[str, Any] = {
        const.DATA_ROUTING_JOB_TYPE: job.get(const.DATA_JOB_SERVICE_TYPE, ""),
        const.DATA_ROUTING_BID_TYPE: job.get(const.DATA_JOB_BID_TYPE, const.BID_TYPE_BID),
        const.DATA_ROUTING_ESTIMATED_REVENUE: rate,
        const.DATA_ROUTING_UPDATED_AT: dt_now_iso(),
    }

    routing = routing or {}
    man_hours, recorded, revenue, dollars_per_hour = JobEngine.plan_routing_metrics(
        job,
        routing.get(const.DATA_ROUTING_ARRIVAL_TIME),
        routing.get(const.DATA_ROUTING_DEPARTURE_TIME),
    )
    invoiced = routing.get(const.DATA_ROUTING_INVOICE_STATUS) == const.INVOICE_STATUS_SENT
    if not recorded and not invoiced:
        man_hours = round_money(to_float(job.get(const.DATA_JOB_MAN_HOURS)))
        revenue = rate
        dollars_per_hour = JobEngine.compute_dollars_per_man_hour(rate, man_hours)

    if recorded or not invoiced:
        changes[const.DATA_ROUTING_MAN_HOURS] = man_hours
        changes[const.DATA_ROUTING_REVENUE] = revenue
        changes[const.DATA_ROUTING_DOLLARS_PER_MAN_HOUR] = dollars_per_hour
    if const.DATA_JOB_SCHEDULED_DATE in job:
        changes[const.DATA_ROUTING_DATE] = job[const.DATA_JOB_SCHEDULED_DATE]
    return changes
