# src/bigfib/progress.py
from __future__ import annotations

import sys
import time
from typing import TextIO


class Progress:
    """One-line spinner with a bar, drawn on stderr so piped values stay clean."""

    THROTTLE = 0.05
    BAR_LEN = 24

    def __init__(self, total: int, *, enabled: bool = True, stream: TextIO | None = None):
        self.total = max(1, int(total))
        self.enabled = enabled
        self.stream = stream or sys.stderr
        self.start = time.perf_counter()
        self.last_draw = 0.0
        self.spin = "|/-\\"
        self.i = 0
        self.count = 0

    def step(self, label: str = "") -> None:
        self.count += 1
        self.update(self.count, label)

    def update(self, done: int, label: str = "") -> None:
        if not self.enabled:
            return
        now = time.perf_counter()
        if now - self.last_draw < self.THROTTLE:
            return
        self.last_draw = now
        self.i = (self.i + 1) % len(self.spin)
        frac = min(max(done / self.total, 0.0), 1.0)
        fill = int(frac * self.BAR_LEN)
        bar = "#" * fill + "-" * (self.BAR_LEN - fill)
        self.stream.write(f"\r[{self.spin[self.i]}] [{bar}] {int(frac * 100):3d}%  {label[:50]}")
        self.stream.flush()

    def elapsed(self) -> float:
        return time.perf_counter() - self.start

    def done(self) -> None:
        if not self.enabled:
            return
        self.stream.write("\r" + " " * 80 + "\r")
        self.stream.flush()
