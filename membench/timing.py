"""Wall-clock helpers: a reporting stopwatch and a clock-granularity probe."""

from __future__ import annotations

import sys
import time
from typing import Callable, Optional, TextIO

Clock = Callable[[], float]

_NO_DELTA = 1_000_000


def wall_seconds() -> float:
    """Return the current wall-clock time in seconds."""
    return time.time()


class Timer:
    """Stopwatch that starts on creation and reports its duration when stopped."""

    def __init__(
        self,
        name: str = "no name",
        clock: Clock = time.perf_counter,
        out: Optional[TextIO] = None,
    ) -> None:
        self.name = name
        self._clock = clock
        self._out = out
        self._start = clock()
        self.running = True

    def _write(self, text: str) -> None:
        print(text, file=self._out if self._out is not None else sys.stdout)

    def stop(self) -> int:
        """Stop the timer, report and return the elapsed whole microseconds.

        Stopping a timer that is already stopped reports that and returns 0.
        """
        end = self._clock()
        if not self.running:
            self._write("Timer is already stopped!")
            return 0
        self.running = False
        micros = int((end - self._start) * 1_000_000)
        self._write(f"({self.name}) total Duration: {micros} microseconds")
        self._write(f"({self.name}) total Duration: {micros / 1000.0:g} milliseconds")
        return micros

    def __enter__(self) -> "Timer":
        return self

    def __exit__(self, *args) -> None:
        if self.running:
            self.stop()


def clock_granularity(clock: Clock = wall_seconds, samples: int = 20) -> int:
    """Estimate the clock's granularity in microseconds.

    Collects ``samples`` distinct readings at least a microsecond apart and
    returns the smallest gap between consecutive ones.
    """
    found = []
    for _ in range(samples):
        t1 = clock()
        while True:
            t2 = clock()
            if t2 - t1 >= 1.0e-6:
                break
        found.append(t2)
    deltas = (max(int(1.0e6 * (b - a)), 0) for a, b in zip(found, found[1:]))
    return min([_NO_DELTA, *deltas])