# src/bigfib/fmt.py
from __future__ import annotations

import re

from colorama import Fore, Style

from bigfib.runtime import CFG
from bigfib.utility import dec_digits, stringify_guarded

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str | None) -> str:
    return _ANSI.sub("", text or "")


def abbr_int_fast(n: int, head: int = 10, tail: int = 10, threshold: int = 35, ellipsis: str = "…") -> str:
    """Show a long integer as its first `head` and last `tail` digits, never converting all of it."""
    digits = dec_digits(n)
    if digits <= threshold or head + tail >= digits:
        return str(n)
    mag = abs(n)
    lead = mag // 10 ** (digits - head)
    trail = mag % 10 ** tail
    return f"{'-' if n < 0 else ''}{lead}{ellipsis}{trail:0{tail}d}"


def format_value(value: int, *, full: bool = False) -> str:
    """
    Render F(n) for display.

    full=True prints every digit (guarded by BEHAVIOUR.MAX_DIGITS); otherwise
    long values are abbreviated with FORMATTING.NUM_ABBR_*.
    """
    if full:
        return stringify_guarded(value, label="F(n)")
    return abbr_int_fast(
        value,
        int(CFG("FORMATTING.NUM_ABBR_HEAD", 20)),
        int(CFG("FORMATTING.NUM_ABBR_TAIL", 20)),
        int(CFG("FORMATTING.NUM_ABBR_THRESHOLD", 60)),
        CFG("FORMATTING.ELLIPSIS", "…"),
    )


def format_duration(seconds: float) -> str:
    """12.3 µs, 250.00 ms, 1.500 s, then m:ss.mmm and h:mm:ss.mmm."""
    if seconds < 1e-3:
        return f"{seconds * 1e6:.1f} µs"
    if seconds < 1:
        return f"{seconds * 1e3:.2f} ms"
    if seconds < 60:
        return f"{seconds:.3f} s"
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:06.3f}"
    return f"{minutes}:{secs:06.3f}"


def label(text: str) -> str:
    """Bright yellow field label, e.g. 'F(n):'."""
    return f"{Fore.YELLOW}{Style.BRIGHT}{text}{Style.RESET_ALL}"
