# src/bigfib/algorithms/series.py
from __future__ import annotations

from bigfib.registry import algorithm


@algorithm(
    name="series",
    description="Direct summation of the recurrence; lowest overhead for small n.",
    complexity="O(n) add",
    rank=1,
)
def fib_series(n: int, num=int):
    """F(n) by n steps of (a, b) -> (b, a + b)."""
    a, b = num(0), num(1)
    for _ in range(n):
        a, b = b, a + b
    return a
