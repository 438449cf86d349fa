"""Statistics Engine - Revenue analytics over routing records.

Aggregates invoiced routing into the figures the dashboard charts show:
- Totals: revenue, worked hours, average dollars per man-hour
- Monthly buckets keyed "YYYY-MM", sorted chronologically

Design Principles:
    - Stateless: operates on record lists passed in, never reads the store
    - Only routing with invoice_status == sent counts as earned revenue
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.math_utils import round_money, safe_divide, to_float

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import MonthlyRevenueBlock, RevenueSummary


class StatisticsEngine:
    """Revenue aggregation for invoiced routing records.

    Example:
        summary = StatisticsEngine.summarize_revenue(routing_records, jobs)
        summary["total_revenue"]  # 1250.0
        summary["monthly"][0]     # {"month": "2024-05", "revenue": 300.0, ...}
    """

    @staticmethod
    def is_invoiced(routing: Mapping[str, Any]) -> bool:
        """Return True once the routing record's invoice has been sent."""
        return routing.get(const.DATA_ROUTING_INVOICE_STATUS) == const.INVOICE_STATUS_SENT

    @staticmethod
    def get_month_key(date_str: str | None) -> str | None:
        """Return "YYYY-MM" for an ISO date string, or None."""
        if not date_str or len(date_str) < 7:
            return None
        return date_str[:7]

    @staticmethod
    def summarize_revenue(
        routing_records: Iterable[Mapping[str, Any]],
        jobs: Iterable[Mapping[str, Any]] = (),
    ) -> RevenueSummary:
        """Build dashboard revenue analytics.

        Args:
            routing_records: All routing records (non-invoiced are ignored).
            jobs: All jobs, used for the scheduled-job count.

        Returns:
            RevenueSummary with totals and chronologically sorted months.
        """
        completed = [r for r in routing_records if StatisticsEngine.is_invoiced(r)]

        total_revenue = 0.0
        total_hours = 0.0
        months: dict[str, dict[str, Any]] = {}

        for routing in completed:
            revenue = to_float(routing.get(const.DATA_ROUTING_REVENUE))
            hours = to_float(routing.get(const.DATA_ROUTING_MAN_HOURS))
            total_revenue += revenue
            total_hours += hours

            month = StatisticsEngine.get_month_key(routing.get(const.DATA_ROUTING_DATE))
            if month is None:
                const.LOGGER.debug(
                    "StatisticsEngine: Routing %s has no date, excluded from months",
                    routing.get(const.DATA_ROUTING_ID),
                )
                continue

            bucket = months.setdefault(
                month, {"revenue": 0.0, "hours": 0.0, "per_job_rates": []}
            )
            bucket["revenue"] += revenue
            bucket["hours"] += hours
            bucket["per_job_rates"].append(safe_divide(revenue, hours))

        monthly: list[MonthlyRevenueBlock] = []
        for month in sorted(months):
            bucket = months[month]
            rates = bucket["per_job_rates"]
            monthly.append(
                {
                    "month": month,
                    "revenue": round_money(bucket["revenue"]),
                    "hours": round_money(bucket["hours"]),
                    "job_count": len(rates),
                    "avg_dollars_per_hour": safe_divide(sum(rates), len(rates)),
                }
            )

        scheduled = sum(
            1
            for job in jobs
            if job.get(const.DATA_JOB_STATUS) == const.JOB_STATUS_SCHEDULED
        )

        return {
            "total_revenue": round_money(total_revenue),
            "total_hours": round_money(total_hours),
            "avg_dollars_per_hour": safe_divide(total_revenue, total_hours),
            "completed_jobs": len(completed),
            "scheduled_jobs": scheduled,
            "monthly": monthly,
        }

    @staticmethod
    def filter_routing_for_date(
        routing_records: Iterable[Mapping[str, Any]], date_iso: str
    ) -> list[Mapping[str, Any]]:
        """Return the day's routing sheet ordered by customer name."""
        return sorted(
            (r for r in routing_records if r.get(const.DATA_ROUTING_DATE) == date_iso),
            key=lambda r: str(r.get(const.DATA_ROUTING_CUSTOMER_NAME, "")),
        )
