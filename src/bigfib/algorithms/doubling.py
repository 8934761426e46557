# src/bigfib/algorithms/doubling.py
from __future__ import annotations

from bigfib.registry import algorithm

# Scan width of the bit loop; wider indices extend it to their own bit length.
WORD_BITS = 64


@algorithm(
    name="doubling",
    description="Textbook fast doubling over a fixed word of index bits (benchmark reference).",
    complexity="O(log n) mul, 3 per bit",
    rank=9,
    dispatchable=False,
)
def fib_doubling(n: int, num=int):
    # https://www.nayuki.io/page/fast-fibonacci-algorithms
    if n < 1:
        return num(0)
    a, b = num(0), num(1)
    for pos in range(max(WORD_BITS, n.bit_length()) - 1, -1, -1):
        # (F(k), F(k+1)) -> (F(2k), F(2k+1))
        a2 = a * a
        a, b = ((a * b) << 1) - a2, b * b + a2
        if (n >> pos) & 1:
            a, b = b, a + b
    return a
