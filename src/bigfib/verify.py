# src/bigfib/verify.py
from __future__ import annotations

from dataclasses import dataclass, field

import gmpy2

from bigfib.registry import discover, get_algorithm


def reference(n: int) -> int:
    """F(n) from GMP's own mpz_fib_ui; 0 for n < 1."""
    if n < 1:
        return 0
    return int(gmpy2.fib(n))


@dataclass
class CheckReport:
    n: int
    expected: int
    results: dict[str, int] = field(default_factory=dict)   # algorithm -> value
    skipped: list[str] = field(default_factory=list)        # n outside the algorithm's limit

    @property
    def mismatches(self) -> list[str]:
        return [name for name, v in self.results.items() if v != self.expected]

    @property
    def ok(self) -> bool:
        return not self.mismatches


def cross_check(n: int, names: list[str] | None = None, *, num=int) -> CheckReport:
    """Evaluate F(n) with every (or the named) algorithm and compare to the GMP reference."""
    idx = discover()
    report = CheckReport(n=n, expected=reference(n))
    for name in names or idx.names():
        fn = get_algorithm(name)
        name = fn.algorithm_name
        lim = idx.limits.get(name)
        if lim is not None and n > lim:
            report.skipped.append(name)
            continue
        report.results[name] = int(fn(n, num))
    return report
