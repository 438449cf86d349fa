"""Test helpers for YardOps tests.

    from tests.helpers import make_job_input, make_hourly_input, FailingJobStore
"""

from tests.helpers.builders import job_dates, make_hourly_input, make_job_input
from tests.helpers.stores import FailingJobStore

__all__ = ["FailingJobStore", "job_dates", "make_hourly_input", "make_job_input"]
