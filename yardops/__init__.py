"""YardOps: recurring job series for a lawn-care and snow-removal business.

Keeps a rolling window of scheduled occurrences for each recurring job,
pauses and resumes series, completes jobs when invoices are sent, and
propagates edits across a series. A UI shell drives it through
YardOpsCoordinator or services.async_call_service.
"""

from .coordinator import OPTIONS_SCHEMA, YardOpsCoordinator
from .exceptions import (
    ConsistencyViolation,
    NotFoundError,
    OperationResult,
    PersistenceError,
    ValidationError,
    YardOpsError,
)
from .store import JobStore, JsonFileJobStore, MemoryJobStore, StoreBatch

__all__ = [
    "OPTIONS_SCHEMA",
    "ConsistencyViolation",
    "JobStore",
    "JsonFileJobStore",
    "MemoryJobStore",
    "NotFoundError",
    "OperationResult",
    "PersistenceError",
    "StoreBatch",
    "ValidationError",
    "YardOpsCoordinator",
    "YardOpsError",
]
