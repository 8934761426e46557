# tests/test_fibonacci.py
"""
Tests for the dispatcher: clamping, table range, region boundaries, recurrence.

Run: pytest -v
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from sympy import fibonacci as sym_fib

from bigfib import APPLY, Thresholds, fibonacci, reference, select_algorithm
from bigfib.algorithms import FIB_TABLE, TABLE_MAX, fib_blenkinsop, fib_series, fib_takahashi
from bigfib.utility import dec_digits, fib_digits_estimate

F100 = 354224848179261915075

KNOWN_VALUES = [
    (0, 0),
    (1, 1),
    (2, 1),
    (10, 55),
    (50, 12586269025),
    (92, 7540113804746346429),
    (93, 12200160415121876738),
    (100, F100),
]

KNOWN_IDS = [f"F({n})" for n, _ in KNOWN_VALUES]


@pytest.mark.parametrize("n,expected", KNOWN_VALUES, ids=KNOWN_IDS)
def test_known_values(n, expected):
    assert fibonacci(n) == expected


@pytest.mark.parametrize("n", [0, -1, -2, -93, -10**30])
def test_non_positive_index_gives_zero(n):
    assert fibonacci(n) == 0


def test_table_matches_recurrence():
    assert len(FIB_TABLE) == 93
    assert TABLE_MAX == 92
    assert FIB_TABLE[:2] == (0, 1)
    for i in range(2, len(FIB_TABLE)):
        assert FIB_TABLE[i] == FIB_TABLE[i - 1] + FIB_TABLE[i - 2]
    # every entry fits a signed 64-bit word, the next value does not
    assert FIB_TABLE[-1] < 2**63 <= FIB_TABLE[-1] + FIB_TABLE[-2]


def test_whole_table_served_by_dispatcher():
    assert [fibonacci(i) for i in range(TABLE_MAX + 1)] == list(FIB_TABLE)


def test_result_is_plain_int():
    for n in (5, 95, 3000, 10_000):
        assert type(fibonacci(n)) is int
    assert type(fibonacci(10_000, backend="gmpy2")) is int


@pytest.mark.parametrize(
    "n,name",
    [
        (-5, "table"),
        (0, "table"),
        (92, "table"),
        (93, "series"),
        (100, "series"),
        (101, "blenkinsop"),
        (5504, "blenkinsop"),
        (5505, "takahashi"),
        (10**7, "takahashi"),
    ],
)
def test_region_selection(n, name):
    assert select_algorithm(n, Thresholds()) == name


def test_boundary_100_agrees_across_evaluators():
    assert fib_series(100) == fib_blenkinsop(100) == fibonacci(100) == F100


@pytest.mark.parametrize("n", [5503, 5504, 5505, 5506])
def test_boundary_5504_agrees_across_evaluators(n):
    assert fib_blenkinsop(n) == fib_takahashi(n) == fibonacci(n) == int(sym_fib(n))


@pytest.mark.parametrize("n", [5, 94, 95, 101, 3000, 5505, 10_000])
def test_recurrence_law(n):
    assert fibonacci(n) == fibonacci(n - 1) + fibonacci(n - 2)


def test_index_accepts_index_like_objects():
    class Idx:
        def __index__(self):
            return 30

    assert fibonacci(Idx()) == 832040
    assert fibonacci(True) == 1


@pytest.mark.parametrize("bad", [2.0, "10", None])
def test_non_integer_index_is_type_error(bad):
    with pytest.raises(TypeError):
        fibonacci(bad)


def test_custom_thresholds_do_not_change_values():
    moved = Thresholds(series_max=0, blenkinsop_max=200)
    for n in (93, 150, 201, 6000):
        assert fibonacci(n, thresholds=moved) == fibonacci(n)


def test_profile_thresholds_are_used():
    APPLY({"THRESHOLDS": {"SERIES_MAX": 120, "BLENKINSOP_MAX": 130}})
    assert select_algorithm(110) == "series"
    assert select_algorithm(125) == "blenkinsop"
    assert select_algorithm(131) == "takahashi"
    assert fibonacci(131) == int(sym_fib(131))


def test_repeated_calls_are_identical():
    first = fibonacci(20_000)
    assert all(fibonacci(20_000) == first for _ in range(5))


def test_concurrent_calls_are_identical():
    ns = [95, 3000, 5504, 5505, 20_000] * 8
    with ThreadPoolExecutor(max_workers=8) as pool:
        got = list(pool.map(fibonacci, ns))
    expected = {n: int(sym_fib(n)) for n in set(ns)}
    assert got == [expected[n] for n in ns]


@pytest.mark.parametrize("n", [2, 10, 93, 1000, 12_345, 100_000])
def test_digit_growth(n):
    assert dec_digits(fibonacci(n)) == fib_digits_estimate(n)


@pytest.mark.slow
def test_ten_millionth_digit_count():
    value = fibonacci(10_000_000, backend="gmpy2")
    assert dec_digits(value) == 2_089_877
    assert value == reference(10_000_000)
