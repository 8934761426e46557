# src/bigfib/utility.py
from __future__ import annotations

import sys
from math import log10, sqrt

from bigfib.runtime import CFG

# log10 of the golden ratio and of sqrt(5), used by the digit estimate
_LOG10_PHI = log10((1 + sqrt(5)) / 2)
_LOG10_SQRT5 = log10(sqrt(5))


class UserInputError(Exception):
    pass


def highest_bit_position(n: int) -> int:
    """0-indexed position of the most significant set bit, i.e. floor(log2(n)). Requires n >= 1."""
    return n.bit_length() - 1


def dec_digits(n: int) -> int:
    """Number of decimal digits of |n| (1 for 0), from the bit length instead of str(n)."""
    n = abs(n)
    digits = max(1, n.bit_length() * 30103 // 100000)
    while digits > 1 and n < 10 ** (digits - 1):
        digits -= 1
    while n >= 10 ** digits:
        digits += 1
    return digits


def fib_digits_estimate(n: int) -> int:
    """
    Decimal digit count of F(n) from Binet's formula: floor(n*log10(phi) - log10(sqrt 5)) + 1.

    Exact for every n >= 2 except within float rounding of a power of ten, which
    never happens in practice; returns 1 for n < 2.
    """
    if n < 2:
        return 1
    return int(n * _LOG10_PHI - _LOG10_SQRT5) + 1


def _profile_digit_limit() -> int:
    """BEHAVIOUR.MAX_DIGITS of the active profile; 0 means unlimited."""
    try:
        return max(0, int(CFG("BEHAVIOUR.MAX_DIGITS", 100_000)))
    except (TypeError, ValueError):
        return 0


def sync_int_str_limit() -> None:
    """
    Let str(int) go up to BEHAVIOUR.MAX_DIGITS digits (0 = unlimited).

    Python refuses conversions above 4300 digits by default, far below typical
    Fibonacci output. Process-wide, so only the CLI calls this.
    """
    limit = _profile_digit_limit()
    if limit == 0:
        sys.set_int_max_str_digits(0)
    elif limit > sys.get_int_max_str_digits() > 0:
        sys.set_int_max_str_digits(limit)


def stringify_guarded(n: int, label: str = "value") -> str:
    """Return str(n) or raise a friendly user error if it exceeds the digit guard."""
    # the interpreter guard counts too when it is the tighter one
    limits = [x for x in (_profile_digit_limit(), sys.get_int_max_str_digits()) if x > 0]
    if limits and dec_digits(n) > min(limits):
        raise UserInputError(
            f"{label} has more than {min(limits)} decimal digits. "
            "Increase BEHAVIOUR.MAX_DIGITS in the profile or use --digits."
        )
    return str(n)


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(tree: dict, prefix: str = "") -> dict[str, object]:
    """{"A": {"B": 1}} -> {"A.B": 1}, for dumping a profile one key per line."""
    flat: dict[str, object] = {}
    for name, value in tree.items():
        path = f"{prefix}{name}"
        if isinstance(value, dict):
            flat.update(flatten_dotted(value, path + "."))
        else:
            flat[path] = value
    return flat
