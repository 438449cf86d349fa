# File: const.py
"""Constants for the YardOps recurrence core.

This file centralizes record keys, enum values, defaults, and error types for
consistency across engines, managers, and services.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
YARDOPS_TITLE = "YardOps"

# Logger
LOGGER = logging.getLogger(__package__)

# Storage and Versioning
SCHEMA_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Options (runtime configuration)
# ------------------------------------------------------------------------------------------------
CONF_TARGET_FUTURE_COUNT = "target_future_count"
CONF_TIME_ZONE = "time_zone"
CONF_STORAGE_PATH = "storage_path"

DEFAULT_TIME_ZONE_NAME = "UTC"

# ------------------------------------------------------------------------------------------------
# Collections
# ------------------------------------------------------------------------------------------------
COLLECTION_JOBS = "jobs"
COLLECTION_ROUTING = "routing"

COLLECTIONS = [COLLECTION_JOBS, COLLECTION_ROUTING]

DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_SAVED = "last_saved"

# ------------------------------------------------------------------------------------------------
# Job record keys
# ------------------------------------------------------------------------------------------------
DATA_JOB_ID = "job_id"
DATA_JOB_SERIES_ID = "series_id"
DATA_JOB_BASE_JOB_ID = "base_job_id"
DATA_JOB_CUSTOMER_ID = "customer_id"
DATA_JOB_PROPERTY_ID = "property_id"
DATA_JOB_CUSTOMER_NAME = "customer_name"
DATA_JOB_SERVICE_ADDRESS = "service_address"
DATA_JOB_SERVICE_TYPE = "service_type"
DATA_JOB_SCHEDULED_DATE = "scheduled_date"
DATA_JOB_SERVICE_FREQUENCY = "service_frequency"
DATA_JOB_BID_TYPE = "bid_type"
DATA_JOB_RATE = "rate"
DATA_JOB_ESTIMATED_RATE = "estimated_rate"
DATA_JOB_ACTUAL_RATE = "actual_rate"
DATA_JOB_HOURLY_RATE = "hourly_rate"
DATA_JOB_MAN_HOURS = "man_hours"
DATA_JOB_NOTES = "notes"
DATA_JOB_STATUS = "status"
DATA_JOB_IS_RECURRING = "is_recurring"
DATA_JOB_SERIES_STATUS = "series_status"
DATA_JOB_IS_PAUSED = "is_paused"  # Legacy flag, read-only
DATA_JOB_ROUTING_ID = "routing_id"
DATA_JOB_CREATED_AT = "created_at"
DATA_JOB_UPDATED_AT = "updated_at"
DATA_JOB_COMPLETED_AT = "completed_at"

# Fields an edit may change (single scope)
JOB_EDITABLE_FIELDS = [
    DATA_JOB_SERVICE_TYPE,
    DATA_JOB_SCHEDULED_DATE,
    DATA_JOB_BID_TYPE,
    DATA_JOB_RATE,
    DATA_JOB_HOURLY_RATE,
    DATA_JOB_MAN_HOURS,
    DATA_JOB_NOTES,
]

# Fields propagated to later occurrences on a series edit
JOB_SERIES_PROPAGATED_FIELDS = [
    DATA_JOB_SERVICE_TYPE,
    DATA_JOB_BID_TYPE,
    DATA_JOB_RATE,
    DATA_JOB_HOURLY_RATE,
    DATA_JOB_MAN_HOURS,
    DATA_JOB_NOTES,
]

# ------------------------------------------------------------------------------------------------
# Routing record keys
# ------------------------------------------------------------------------------------------------
DATA_ROUTING_ID = "routing_id"
DATA_ROUTING_JOB_ID = "job_id"
DATA_ROUTING_DATE = "date"
DATA_ROUTING_CUSTOMER_ID = "customer_id"
DATA_ROUTING_CUSTOMER_NAME = "customer_name"
DATA_ROUTING_SERVICE_ADDRESS = "service_address"
DATA_ROUTING_JOB_TYPE = "job_type"
DATA_ROUTING_ARRIVAL_TIME = "arrival_time"
DATA_ROUTING_DEPARTURE_TIME = "departure_time"
DATA_ROUTING_MAN_HOURS = "man_hours"
DATA_ROUTING_BID_TYPE = "bid_type"
DATA_ROUTING_ESTIMATED_REVENUE = "estimated_revenue"
DATA_ROUTING_REVENUE = "revenue"
DATA_ROUTING_DOLLARS_PER_MAN_HOUR = "dollars_per_man_hour"
DATA_ROUTING_INVOICE_STATUS = "invoice_status"
DATA_ROUTING_CREATED_AT = "created_at"
DATA_ROUTING_UPDATED_AT = "updated_at"

# ------------------------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------------------------
FREQUENCY_WEEKLY = "Weekly"
FREQUENCY_BIWEEKLY = "Bi-Weekly"
FREQUENCY_MONTHLY = "Monthly"
FREQUENCY_ONE_TIME = "One-Time"
FREQUENCY_AS_NEEDED = "As-Needed"

FREQUENCY_OPTIONS = [
    FREQUENCY_WEEKLY,
    FREQUENCY_BIWEEKLY,
    FREQUENCY_MONTHLY,
    FREQUENCY_ONE_TIME,
    FREQUENCY_AS_NEEDED,
]

NON_RECURRING_FREQUENCIES = frozenset({FREQUENCY_ONE_TIME, FREQUENCY_AS_NEEDED})

BID_TYPE_BID = "bid"
BID_TYPE_HOURLY = "hourly"

BID_TYPE_OPTIONS = [BID_TYPE_BID, BID_TYPE_HOURLY]

JOB_STATUS_SCHEDULED = "Scheduled"
JOB_STATUS_PENDING = "Pending"
JOB_STATUS_COMPLETE = "Complete"

SERIES_STATUS_ACTIVE = "active"
SERIES_STATUS_PAUSED = "paused"

INVOICE_STATUS_NO = "no"
INVOICE_STATUS_PENDING = "pending"
INVOICE_STATUS_SENT = "sent"

EDIT_SCOPE_SINGLE = "single"
EDIT_SCOPE_SERIES = "series"

EDIT_SCOPE_OPTIONS = [EDIT_SCOPE_SINGLE, EDIT_SCOPE_SERIES]

DEFAULT_SERVICE_TYPE = "Mowing"

# ------------------------------------------------------------------------------------------------
# Recurrence
# ------------------------------------------------------------------------------------------------
DEFAULT_TARGET_FUTURE_COUNT = 4

# Window size per frequency; all frequencies keep the same number of occurrences
DEFAULT_TARGET_FUTURE_COUNTS: dict[str, int] = {
    FREQUENCY_WEEKLY: DEFAULT_TARGET_FUTURE_COUNT,
    FREQUENCY_BIWEEKLY: DEFAULT_TARGET_FUTURE_COUNT,
    FREQUENCY_MONTHLY: DEFAULT_TARGET_FUTURE_COUNT,
}

# Hard bound on one maintain_series extension loop
MAX_SERIES_EXTENSION_ITERATIONS = 24

# Safety limit for projection loops
MAX_DATE_CALCULATION_ITERATIONS = 100

DAYS_PER_WEEK = 7
DAYS_PER_BIWEEK = 14
MINUTES_PER_HOUR = 60

# Identifier formats
JOB_ID_FORMAT = "J-{series_id}-{scheduled_date}"
ROUTING_ID_FORMAT = "{date}-{customer_id}-{job_id}"
SERIES_ID_PREFIX = "series_"

# ------------------------------------------------------------------------------------------------
# Error types
# ------------------------------------------------------------------------------------------------
ERROR_TYPE_VALIDATION = "validation"
ERROR_TYPE_NOT_FOUND = "not_found"
ERROR_TYPE_PERSISTENCE = "persistence"
ERROR_TYPE_CONSISTENCY = "consistency"

ERROR_BASE_JOB_NOT_FOUND_FMT = "Base job for series '{}' not found"
ERROR_RECORD_NOT_FOUND_FMT = "{} record '{}' not found"
ERROR_DUPLICATE_OCCURRENCE_FMT = "Series '{}' already has an occurrence on {}"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_CREATE_JOB = "create_job"
SERVICE_EDIT_JOB = "edit_job"
SERVICE_PAUSE_SERIES = "pause_series"
SERVICE_RESUME_SERIES = "resume_series"
SERVICE_MAINTAIN_SERIES = "maintain_series"
SERVICE_MARK_INVOICE_SENT = "mark_invoice_sent"
SERVICE_UPDATE_ROUTING_TIMES = "update_routing_times"
SERVICE_DELETE_JOB = "delete_job"
SERVICE_DELETE_SERIES = "delete_series"

FIELD_SCOPE = "scope"
FIELD_SERIES_ID = "series_id"
FIELD_JOB_ID = "job_id"
FIELD_ROUTING_ID = "routing_id"
FIELD_ARRIVAL_TIME = "arrival_time"
FIELD_DEPARTURE_TIME = "departure_time"
FIELD_TARGET_FUTURE_COUNT = "target_future_count"

# ------------------------------------------------------------------------------------------------
# Events (manager-to-manager signals)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_JOBS_CHANGED = "jobs_changed"
SIGNAL_SUFFIX_INVOICE_SENT = "invoice_sent"
SIGNAL_SUFFIX_SERIES_STATUS_CHANGED = "series_status_changed"
