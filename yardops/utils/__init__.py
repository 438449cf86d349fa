# File: utils/__init__.py
"""Pure Python utilities for YardOps.

Nothing in this package touches the store or the managers, so every function
can be unit tested on its own.

Submodules:
    - dt_utils: Service-date arithmetic, clock-time parsing, "today"
    - math_utils: Money rounding and safe division

Usage:
    from . import dt_utils
    from .math_utils import round_money
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
