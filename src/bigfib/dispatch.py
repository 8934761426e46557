# src/bigfib/dispatch.py
"""
Algorithm selection for F(n).

The index domain is split into four regions, each served by the evaluator that
was fastest there on the reference machine:

    n <= 92                  table lookup
    92 < n <= SERIES_MAX     linear series
    .. <= BLENKINSOP_MAX     Blenkinsop doubling
    above                    Takahashi Lucas-sequence doubling

The breakpoints are tuning values; ``bigfib calibrate`` re-measures them.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass

import gmpy2

from bigfib.algorithms.blenkinsop import fib_blenkinsop
from bigfib.algorithms.series import fib_series
from bigfib.algorithms.table import FIB_TABLE, TABLE_MAX
from bigfib.algorithms.takahashi import fib_takahashi
from bigfib.registry import get_algorithm
from bigfib.runtime import CFG
from bigfib.utility import UserInputError, typename

DEFAULT_SERIES_MAX = 100
DEFAULT_BLENKINSOP_MAX = 5504

BACKENDS: dict[str, Callable[[int], object]] = {
    "int": int,
    "gmpy2": gmpy2.mpz,
}


@dataclass(frozen=True)
class Thresholds:
    series_max: int = DEFAULT_SERIES_MAX
    blenkinsop_max: int = DEFAULT_BLENKINSOP_MAX

    def __post_init__(self):
        for fld in ("series_max", "blenkinsop_max"):
            v = getattr(self, fld)
            if isinstance(v, bool) or not isinstance(v, int):
                raise UserInputError(f"threshold {fld} must be an integer, got {typename(v)}.")
            if v < 0:
                raise UserInputError(f"threshold {fld} must be >= 0, got {v}.")
        if self.series_max > self.blenkinsop_max:
            raise UserInputError(
                f"threshold series_max ({self.series_max}) exceeds blenkinsop_max ({self.blenkinsop_max})."
            )

    @classmethod
    def from_section(cls, section: object) -> Thresholds:
        """Build from a [THRESHOLDS] table (SERIES_MAX / BLENKINSOP_MAX); missing keys keep the defaults."""
        if not isinstance(section, dict):
            raise UserInputError(f"[THRESHOLDS] must be a table, got {typename(section)}.")
        return cls(
            series_max=section.get("SERIES_MAX", DEFAULT_SERIES_MAX),
            blenkinsop_max=section.get("BLENKINSOP_MAX", DEFAULT_BLENKINSOP_MAX),
        )

    @classmethod
    def from_config(cls) -> Thresholds:
        """Thresholds of the active profile."""
        return cls.from_section(CFG("THRESHOLDS", {}))


DEFAULT_THRESHOLDS = Thresholds()


def resolve_backend(name: str | None = None) -> Callable[[int], object]:
    """Integer constructor for a backend name; None reads ARITHMETIC.BACKEND."""
    key = str(name if name is not None else CFG("ARITHMETIC.BACKEND", "int")).strip().lower()
    try:
        return BACKENDS[key]
    except KeyError:
        raise UserInputError(
            f"unknown arithmetic backend '{key}'. Known: {', '.join(BACKENDS)}."
        ) from None


def select_algorithm(n: int, thresholds: Thresholds | None = None) -> str:
    """Name of the evaluator the dispatcher uses for index n."""
    th = thresholds or Thresholds.from_config()
    if n <= TABLE_MAX:
        return "table"
    if n <= th.series_max:
        return "series"
    if n <= th.blenkinsop_max:
        return "blenkinsop"
    return "takahashi"


_EVALUATORS = {
    "series": fib_series,
    "blenkinsop": fib_blenkinsop,
    "takahashi": fib_takahashi,
}


def fibonacci(n: int, *, thresholds: Thresholds | None = None, backend: str | None = None) -> int:
    """
    Return F(n) exactly, with F(0) = 0 and F(1) = 1.

    Indices below 1 give 0. The evaluator is chosen from ``thresholds``
    (default: the active profile) and runs on the integer type of ``backend``;
    the result is always a Python int.
    """
    n = operator.index(n)
    if n < 1:
        return 0
    if n <= TABLE_MAX:
        return FIB_TABLE[n]

    name = select_algorithm(n, thresholds)
    num = resolve_backend(backend)
    return int(_EVALUATORS[name](n, num))


def evaluate(name: str, n: int, *, backend: str | None = None) -> int:
    """Run one named evaluator directly, bypassing selection."""
    n = operator.index(n)
    fn = get_algorithm(name)
    num = resolve_backend(backend)
    try:
        return int(fn(n, num))
    except IndexError as e:
        raise UserInputError(f"algorithm '{fn.algorithm_name}': {e}.") from None
