from __future__ import annotations

from .blenkinsop import fib_blenkinsop
from .doubling import fib_doubling
from .series import fib_series
from .table import FIB_TABLE, TABLE_MAX, fib_table
from .takahashi import fib_takahashi

__all__ = [
    "FIB_TABLE",
    "TABLE_MAX",
    "fib_blenkinsop",
    "fib_doubling",
    "fib_series",
    "fib_table",
    "fib_takahashi",
]
