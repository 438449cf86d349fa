"""Engine modules for YardOps.

Contains pure computation engines:
- job_engine: Rate normalization, completion planning, series queries
- schedule_engine: Service-date arithmetic and series projection
- statistics_engine: Revenue analytics aggregation
"""

# Use relative imports within package to avoid mypy module resolution issues
from .job_engine import CompletionEffect, JobEngine
from .schedule_engine import RecurrenceEngine
from .statistics_engine import StatisticsEngine

__all__ = [
    "CompletionEffect",
    "JobEngine",
    "RecurrenceEngine",
    "StatisticsEngine",
]
