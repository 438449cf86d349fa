"""Schedule Engine for YardOps.

Service-date arithmetic for recurring job series:
- fixed-length frequencies (Weekly, Bi-Weekly) are plain calendar-day offsets
- Monthly keeps the day-of-month with calendar rollover (see
  dt_utils.dt_add_months_rollover)
- One-Time / As-Needed have no next date

IMPORTANT: This module must NOT import from managers or the coordinator.
Only import from const.py, type_defs.py, and utils.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, ClassVar

from .. import const
from ..utils.dt_utils import dt_add_days, dt_add_months_rollover, dt_to_iso_date

if TYPE_CHECKING:
    from ..type_defs import ScheduleConfig


class RecurrenceEngine:
    """Recurrence calculations for service frequencies.

    `advance()` is the single rule every extension loop uses. An instance
    anchored on a base date projects a series forward for read models.

    Example:
        RecurrenceEngine.advance("2024-01-01", "Weekly") -> "2024-01-08"

        engine = RecurrenceEngine({"frequency": "Weekly", "base_date": "2024-01-01"})
        engine.get_occurrences("2024-01-01", "2024-01-31")
        -> ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22", "2024-01-29"]
    """

    # Calendar-day step for fixed-length frequencies
    FREQUENCY_TO_DAYS: ClassVar[dict[str, int]] = {
        const.FREQUENCY_WEEKLY: const.DAYS_PER_WEEK,
        const.FREQUENCY_BIWEEKLY: const.DAYS_PER_BIWEEK,
    }

    # Frequencies stepped by calendar month
    FREQUENCY_TO_MONTHS: ClassVar[dict[str, int]] = {
        const.FREQUENCY_MONTHLY: 1,
    }

    def __init__(self, config: ScheduleConfig) -> None:
        """Initialize the recurrence engine with configuration.

        Args:
            config: ScheduleConfig TypedDict containing frequency and base_date.
        """
        self._config = config
        self._frequency = config.get("frequency", const.FREQUENCY_ONE_TIME)
        self._base_date = dt_to_iso_date(config.get("base_date"))

    @staticmethod
    def is_recurring(frequency: str | None) -> bool:
        """Return True when the frequency produces a next date."""
        return (
            frequency in RecurrenceEngine.FREQUENCY_TO_DAYS
            or frequency in RecurrenceEngine.FREQUENCY_TO_MONTHS
        )

    @staticmethod
    def advance(current: str | date, frequency: str | None) -> str | None:
        """Return the next service date after `current` for a frequency.

        Args:
            current: ISO date string or date of the current occurrence.
            frequency: One of the FREQUENCY_* constants.

        Returns:
            Next ISO date, or None for One-Time/As-Needed, unknown frequencies,
            and unparseable dates. Callers treat None as "stop extending".
        """
        if frequency in RecurrenceEngine.FREQUENCY_TO_DAYS:
            return dt_add_days(current, RecurrenceEngine.FREQUENCY_TO_DAYS[frequency])
        if frequency in RecurrenceEngine.FREQUENCY_TO_MONTHS:
            return dt_add_months_rollover(
                current, RecurrenceEngine.FREQUENCY_TO_MONTHS[frequency]
            )
        const.LOGGER.debug(
            "RecurrenceEngine: Frequency %s has no next date", frequency
        )
        return None

    def get_next_occurrence(self, after: str | date) -> str | None:
        """Return the first occurrence strictly after `after`.

        Occurrences are generated by stepping from the base date, so Monthly
        rollover drift follows the same path the series itself takes.

        Returns:
            ISO date, or None if no base date, not recurring, or the safety
            limit is reached.
        """
        if not self._base_date:
            const.LOGGER.debug(
                "RecurrenceEngine: No base_date provided, cannot calculate"
            )
            return None

        reference = dt_to_iso_date(after)
        if reference is None:
            return None

        current: str | None = self._base_date
        iteration = 0
        while current is not None and current <= reference:
            iteration += 1
            if iteration > const.MAX_DATE_CALCULATION_ITERATIONS:
                const.LOGGER.warning(
                    "RecurrenceEngine: Max iterations reached for %s", self._frequency
                )
                return None
            current = self.advance(current, self._frequency)
        return current

    def get_occurrences(
        self, start: str | date, end: str | date, limit: int = 100
    ) -> list[str]:
        """Generate occurrences within an inclusive date range.

        Args:
            start: Range start.
            end: Range end.
            limit: Maximum occurrences to return (safety limit).

        Returns:
            List of ISO dates in ascending order. A non-recurring schedule
            yields only its base date when that falls inside the range.
        """
        start_iso = dt_to_iso_date(start)
        end_iso = dt_to_iso_date(end)
        if not self._base_date or start_iso is None or end_iso is None:
            return []

        occurrences: list[str] = []
        current: str | None = self._base_date
        iteration = 0
        while current is not None and current <= end_iso and iteration < limit:
            iteration += 1
            if current >= start_iso:
                occurrences.append(current)
            current = self.advance(current, self._frequency)

        return occurrences
