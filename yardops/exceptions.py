"""Error taxonomy and operation results for YardOps.

Managers raise these internally and convert them to an OperationResult at the
public boundary, so callers get a success flag, a human-readable message, and
an error classification instead of an exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from . import const


class YardOpsError(Exception):
    """Base class for all YardOps errors.

    Attributes:
        error_type: ERROR_TYPE_* classification reported to callers
    """

    error_type: str = const.ERROR_TYPE_PERSISTENCE


class ValidationError(YardOpsError):
    """Malformed input; raised before any persistence is attempted.

    Attributes:
        field: Record key that failed validation (None for whole-record errors)
    """

    error_type = const.ERROR_TYPE_VALIDATION

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable reason
            field: DATA_* key of the offending field, if any
        """
        self.field = field
        super().__init__(message)


class NotFoundError(YardOpsError):
    """A referenced record does not exist."""

    error_type = const.ERROR_TYPE_NOT_FOUND

    def __init__(self, collection: str, record_id: str, message: str | None = None) -> None:
        """Initialize NotFoundError.

        Args:
            collection: COLLECTION_* name that was searched
            record_id: Key that was not found
            message: Optional override for the default message
        """
        self.collection = collection
        self.record_id = record_id
        super().__init__(
            message or const.ERROR_RECORD_NOT_FOUND_FMT.format(collection, record_id)
        )


class PersistenceError(YardOpsError):
    """The store failed to read or write. No retry is attempted by the core."""

    error_type = const.ERROR_TYPE_PERSISTENCE


class ConsistencyViolation(YardOpsError):
    """A second occurrence was about to be created for a series/date pair.

    Internal only: managers skip the write when they catch this.
    """

    error_type = const.ERROR_TYPE_CONSISTENCY

    def __init__(self, series_id: str, scheduled_date: str) -> None:
        """Initialize ConsistencyViolation."""
        self.series_id = series_id
        self.scheduled_date = scheduled_date
        super().__init__(
            const.ERROR_DUPLICATE_OCCURRENCE_FMT.format(series_id, scheduled_date)
        )


@dataclass
class OperationResult:
    """Outcome of a public SeriesManager/ReportManager operation.

    Attributes:
        success: True when the operation completed (including silent no-ops)
        message: Human-readable summary for user feedback
        error_type: ERROR_TYPE_* when success is False
        job_ids: Jobs created by the operation, in creation order
        jobs_affected: Jobs updated or deleted by the operation
    """

    success: bool
    message: str = ""
    error_type: str | None = None
    job_ids: list[str] = field(default_factory=list)
    jobs_affected: int = 0

    @classmethod
    def ok(
        cls,
        message: str = "",
        *,
        job_ids: list[str] | None = None,
        jobs_affected: int = 0,
    ) -> OperationResult:
        """Build a success result."""
        return cls(
            success=True,
            message=message,
            job_ids=list(job_ids or []),
            jobs_affected=jobs_affected,
        )

    @classmethod
    def from_error(cls, err: YardOpsError) -> OperationResult:
        """Build a failure result from a YardOps error."""
        return cls(success=False, message=str(err), error_type=err.error_type)

    def __bool__(self) -> bool:
        """Return success."""
        return self.success
