# src/bigfib/bench.py
"""
Timing harness for the evaluators and re-measurement of the dispatch crossovers.

The crossovers in the default profile were measured on one machine; the
relative cost of additions and multiplications differs between interpreters,
CPUs and backends, so ``calibrate()`` finds them again by bisection.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from time import perf_counter

from bigfib.algorithms.table import TABLE_MAX
from bigfib.dispatch import Thresholds, resolve_backend
from bigfib.progress import Progress
from bigfib.registry import discover, get_algorithm
from bigfib.runtime import CFG
from bigfib.runtime import debug as _debug

# Upper end of the search window for each crossover
SERIES_SEARCH_MAX = 2_000
BLENKINSOP_SEARCH_MAX = 50_000


@dataclass(frozen=True)
class BenchRow:
    n: int
    algorithm: str
    seconds: float


def time_call(fn: Callable[..., object], n: int, repeat: int = 3, *, num=int) -> float:
    """Best-of-`repeat` wall time of fn(n, num) in seconds."""
    best = float("inf")
    for _ in range(max(1, int(repeat))):
        t0 = perf_counter()
        fn(n, num)
        best = min(best, perf_counter() - t0)
    return best


def compare(
    sizes: Iterable[int],
    names: Iterable[str] | None = None,
    *,
    repeat: int | None = None,
    backend: str | None = None,
    progress: bool = False,
) -> list[BenchRow]:
    """Time every algorithm (or the named ones) at every size; table is skipped past its range."""
    idx = discover()
    sizes = list(sizes)
    names = list(names) if names is not None else idx.names()
    repeat = int(repeat if repeat is not None else CFG("BENCHMARK.REPEAT", 3))
    num = resolve_backend(backend)

    bar = Progress(len(sizes) * len(names), enabled=progress)
    rows: list[BenchRow] = []
    try:
        for n in sizes:
            for name in names:
                fn = get_algorithm(name)
                bar.step(f"{name} n={n}")
                lim = idx.limits.get(fn.algorithm_name)
                if lim is not None and n > lim:
                    continue
                secs = time_call(fn, n, repeat, num=num)
                _debug(f"bench {fn.algorithm_name:<11} n={n:<10} {secs:.6f}s")
                rows.append(BenchRow(n=n, algorithm=fn.algorithm_name, seconds=secs))
    finally:
        bar.done()
    return rows


def find_crossover(
    below: str,
    above: str,
    lo: int,
    hi: int,
    *,
    repeat: int = 5,
    num=int,
    on_probe: Callable[[int], None] | None = None,
) -> int:
    """
    Smallest n in [lo, hi] at which `above` is at least as fast as `below`.

    Assumes a single crossing: `below` wins at lo and `above` wins at hi. When
    `above` already wins at lo, lo is returned; when `below` still wins at hi,
    hi is returned.
    """
    f_below = get_algorithm(below)
    f_above = get_algorithm(above)

    def above_wins(n: int) -> bool:
        if on_probe is not None:
            on_probe(n)
        return time_call(f_above, n, repeat, num=num) <= time_call(f_below, n, repeat, num=num)

    if above_wins(lo):
        return lo
    if not above_wins(hi):
        return hi
    # invariant: below wins at lo, above wins at hi
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if above_wins(mid):
            hi = mid
        else:
            lo = mid
    return hi


def calibrate(*, repeat: int | None = None, backend: str | None = None, progress: bool = True) -> Thresholds:
    """
    Re-measure both dispatch crossovers on this machine.

    Returns Thresholds whose limits are the last n at which the cheaper-overhead
    algorithm still wins.
    """
    repeat = int(repeat if repeat is not None else CFG("BENCHMARK.REPEAT", 5))
    num = resolve_backend(backend)

    # two bisections of ~log2(window) probes each
    bar = Progress(2 * (BLENKINSOP_SEARCH_MAX.bit_length() + 2), enabled=progress)
    try:
        series_cross = find_crossover(
            "series", "blenkinsop", TABLE_MAX + 1, SERIES_SEARCH_MAX,
            repeat=repeat, num=num, on_probe=lambda n: bar.step(f"series/blenkinsop n={n}"),
        )
        blenk_cross = find_crossover(
            "blenkinsop", "takahashi", max(series_cross, TABLE_MAX + 1), BLENKINSOP_SEARCH_MAX,
            repeat=repeat, num=num, on_probe=lambda n: bar.step(f"blenkinsop/takahashi n={n}"),
        )
    finally:
        bar.done()

    _debug(f"calibrate: series->blenkinsop at {series_cross}, blenkinsop->takahashi at {blenk_cross}")
    series_max = series_cross - 1
    return Thresholds(series_max=series_max, blenkinsop_max=max(series_max, blenk_cross - 1))
