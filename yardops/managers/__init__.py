"""Manager modules for YardOps.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and own every call into the store.
"""

from .base_manager import BaseManager
from .report_manager import ReportManager
from .series_manager import SeriesManager

__all__ = [
    "BaseManager",
    "ReportManager",
    "SeriesManager",
]
