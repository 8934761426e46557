# src/bigfib/algorithms/blenkinsop.py
from __future__ import annotations

from bigfib.registry import algorithm
from bigfib.utility import highest_bit_position


@algorithm(
    name="blenkinsop",
    description="Doubling identities scanned from the top bit (Blenkinsop).",
    complexity="O(log n) mul, <=3 per bit",
    rank=2,
)
def fib_blenkinsop(n: int, num=int):
    """
    F(n) from the doubling identities

        F(2k)   = F(k) * (F(k-1) + F(k+1))
        F(2k+1) = F(k)^2 + F(k+1)^2

    The top bit of n gives k = 1, so (f1, f2) = (F(k-1), F(k)) starts at (0, 1).
    Each lower bit doubles k and adds the bit.
    """
    if n < 1:
        return num(0)

    f1, f2 = num(0), num(1)

    for h in range(highest_bit_position(n), 0, -1):
        f3 = f1 + f2                       # F(k+1)
        if (n >> (h - 1)) & 1:
            # k -> 2k+1: (F(2k), F(2k+1))
            f1, f2 = (f1 + f3) * f2, f2 * f2 + f3 * f3
        else:
            # k -> 2k: (F(2k-1), F(2k))
            f1, f2 = f1 * f1 + f2 * f2, (f1 + f3) * f2
    return f2
