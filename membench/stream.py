"""The STREAM benchmark: sustained bandwidth of the Copy, Scale, Add and Triad kernels."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

import numpy as np

from membench.timing import clock_granularity, wall_seconds

HLINE = "-------------------------------------------------------------"
DEFAULT_ARRAY_SIZE = 10_000_000
DEFAULT_NTIMES = 10
DEFAULT_SCALAR = 3.0
KERNEL_LABELS = ("Copy:      ", "Scale:     ", "Add:       ", "Triad:     ")
_ARRAY_NAMES = ("a", "b", "c")
# Words moved per element by each kernel: Copy and Scale read one array and
# write one, Add and Triad read two and write one.
_WORDS_PER_ELEMENT = (2, 2, 3, 3)


@dataclass
class StreamConfig:
    """Settings for one STREAM run.

    A repeat count of one or less falls back to the default of ten, since the
    first iteration is always discarded.
    """

    array_size: int = DEFAULT_ARRAY_SIZE
    ntimes: int = DEFAULT_NTIMES
    offset: int = 0
    dtype: np.dtype = field(default_factory=lambda: np.dtype(np.float64))
    scalar: float = DEFAULT_SCALAR

    def __post_init__(self) -> None:
        if self.array_size < 1:
            raise ValueError("array_size must be positive")
        if self.ntimes <= 1:
            self.ntimes = DEFAULT_NTIMES
        self.dtype = np.dtype(self.dtype)

    @property
    def bytes_per_word(self) -> int:
        return self.dtype.itemsize

    @property
    def bytes_per_kernel(self) -> List[float]:
        """Bytes each kernel moves in one pass over the arrays."""
        return [
            float(words * self.bytes_per_word * self.array_size)
            for words in _WORDS_PER_ELEMENT
        ]


@dataclass(frozen=True)
class KernelStats:
    """Timing summary of one kernel, excluding its first iteration."""

    label: str
    best_rate_mb_s: float
    avg_time: float
    min_time: float
    max_time: float


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking the arrays against their expected final values.

    ``error_counts`` holds, for each array whose average relative error is
    above ``epsilon``, the number of elements that are off.
    """

    epsilon: float
    expected: Dict[str, float]
    avg_abs_error: Dict[str, float]
    error_counts: Dict[str, int]

    @property
    def passed(self) -> bool:
        return not self.error_counts


class StreamArrays:
    """The three STREAM arrays, initialised to a=1, b=2, c=0."""

    def __init__(self, size: int, dtype=np.float64) -> None:
        if size < 1:
            raise ValueError("size must be positive")
        self.size = size
        self.dtype = np.dtype(dtype)
        self.a = np.full(size, 1.0, dtype=self.dtype)
        self.b = np.full(size, 2.0, dtype=self.dtype)
        self.c = np.zeros(size, dtype=self.dtype)

    def copy(self) -> None:
        """c = a"""
        np.copyto(self.c, self.a)

    def scale(self, scalar: float) -> None:
        """b = scalar * c"""
        np.multiply(self.c, self.dtype.type(scalar), out=self.b)

    def add(self) -> None:
        """c = a + b"""
        np.add(self.a, self.b, out=self.c)

    def triad(self, scalar: float) -> None:
        """a = b + scalar * c"""
        np.multiply(self.c, self.dtype.type(scalar), out=self.a)
        np.add(self.b, self.a, out=self.a)


def _expected(ntimes: int, scalar: float, dtype) -> Tuple[float, float, float]:
    kind = np.dtype(dtype).type
    scalar = kind(scalar)
    aj, bj, cj = kind(1.0), kind(2.0), kind(0.0)
    aj = kind(2.0) * aj  # the timing check doubles a before the main loop
    for _ in range(ntimes):
        cj = aj
        bj = scalar * cj
        cj = aj + bj
        aj = bj + scalar * cj
    return float(aj), float(bj), float(cj)


def expected_values(ntimes: int, scalar: float = DEFAULT_SCALAR) -> Tuple[float, float, float]:
    """Return the values a, b and c should hold after the timing check and ``ntimes`` loops."""
    return _expected(ntimes, scalar, np.float64)


def epsilon_for(dtype) -> float:
    """Return the tolerated average relative error for arrays of ``dtype``."""
    size = np.dtype(dtype).itemsize
    if size == 8:
        return 1.0e-13
    return 1.0e-6


def validate(arrays: StreamArrays, ntimes: int, scalar: float = DEFAULT_SCALAR) -> ValidationResult:
    """Compare each array with the value the kernels should have left in it."""
    epsilon = epsilon_for(arrays.dtype)
    expected = dict(zip(_ARRAY_NAMES, _expected(ntimes, scalar, arrays.dtype)))
    avg_errors: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for name in _ARRAY_NAMES:
        values = getattr(arrays, name).astype(np.float64)
        target = expected[name]
        avg_err = float(np.abs(values - target).sum()) / arrays.size
        avg_errors[name] = avg_err
        if abs(avg_err / target) > epsilon:
            counts[name] = int(np.count_nonzero(np.abs(values / target - 1.0) > epsilon))
    return ValidationResult(epsilon, expected, avg_errors, counts)


def summarize(times: Sequence[Sequence[float]], bytes_moved: Sequence[float]) -> List[KernelStats]:
    """Summarise per-iteration kernel times, skipping each kernel's first iteration."""
    if len(times) != len(bytes_moved):
        raise ValueError("need one byte count per kernel")
    stats = []
    for label, kernel_times, moved in zip(KERNEL_LABELS, times, bytes_moved):
        counted = list(kernel_times)[1:]
        if not counted:
            raise ValueError("at least two iterations are needed")
        best = min(counted)
        rate = 1.0e-6 * moved / best if best > 0 else float("inf")
        stats.append(
            KernelStats(
                label=label,
                best_rate_mb_s=rate,
                avg_time=sum(counted) / len(counted),
                min_time=best,
                max_time=max(counted),
            )
        )
    return stats


def _report_validation(result: ValidationResult, emit) -> None:
    eps = result.epsilon
    for name in _ARRAY_NAMES:
        if name not in result.error_counts:
            continue
        expected = result.expected[name]
        avg_err = result.avg_abs_error[name]
        emit(f"Failed Validation on array {name}[], AvgRelAbsErr > epsilon ({eps:e})")
        emit(
            f"     Expected Value: {expected:e}, AvgAbsErr: {avg_err:e}, "
            f"AvgRelAbsErr: {abs(avg_err) / expected:e}"
        )
        if name != "a":
            emit(f"     AvgRelAbsErr > Epsilon ({eps:e})")
        emit(f"     For array {name}[], {result.error_counts[name]} errors were found.")
    if result.passed:
        emit(f"Solution Validates: avg error less than {eps:e} on all three arrays")


def run_stream(
    config: Optional[StreamConfig] = None, out: Optional[TextIO] = None
) -> Tuple[List[KernelStats], ValidationResult]:
    """Run the benchmark, write its report and return the kernel stats and validation."""
    config = config if config is not None else StreamConfig()
    stream = out if out is not None else sys.stdout

    def emit(text: str = "") -> None:
        print(text, file=stream)

    size = config.array_size
    word = config.bytes_per_word
    emit(HLINE)
    emit("STREAM version 5.10")
    emit(HLINE)
    emit(f"This system uses {word} bytes per array element.")
    emit(HLINE)
    emit(f"Array size = {size} (elements), Offset = {config.offset} (elements)")
    mib = size / 1024.0 / 1024.0
    emit(f"Memory per array = {word * mib:.1f} MiB (= {word * mib / 1024.0:.1f} GiB).")
    emit(
        f"Total memory required = {3.0 * word * mib:.1f} MiB "
        f"(= {3.0 * word * mib / 1024.0:.1f} GiB)."
    )
    emit(f"Each kernel will be executed {config.ntimes} times.")
    emit(" The *best* time for each kernel (excluding the first iteration)")
    emit(" will be used to compute the reported bandwidth.")

    arrays = StreamArrays(size, config.dtype)
    emit(HLINE)

    quantum = clock_granularity(wall_seconds)
    if quantum >= 1:
        emit(f"Your clock granularity/precision appears to be {quantum} microseconds.")
    else:
        emit("Your clock granularity appears to be less than one microsecond.")
        quantum = 1

    t = wall_seconds()
    arrays.a *= arrays.dtype.type(2.0)
    t = 1.0e6 * (wall_seconds() - t)
    emit(f"Each test below will take on the order of {int(t)} microseconds.")
    emit(f"   (= {int(t / quantum)} clock ticks)")
    emit("Increase the size of the arrays if this shows that")
    emit("you are not getting at least 20 clock ticks per test.")
    emit(HLINE)
    emit("WARNING -- The above is only a rough guideline.")
    emit("For best results, please be sure you know the")
    emit("precision of your system timer.")
    emit(HLINE)

    scalar = config.scalar
    kernels = (
        arrays.copy,
        lambda: arrays.scale(scalar),
        arrays.add,
        lambda: arrays.triad(scalar),
    )
    times: List[List[float]] = [[] for _ in kernels]
    for _ in range(config.ntimes):
        for kernel, record in zip(kernels, times):
            start = wall_seconds()
            kernel()
            record.append(wall_seconds() - start)

    stats = summarize(times, config.bytes_per_kernel)
    emit("Function    Best Rate MB/s  Avg time     Min time     Max time")
    for s in stats:
        emit(
            f"{s.label}{s.best_rate_mb_s:12.1f}  {s.avg_time:11.6f}  "
            f"{s.min_time:11.6f}  {s.max_time:11.6f}"
        )
    emit(HLINE)

    result = validate(arrays, config.ntimes, scalar)
    _report_validation(result, emit)
    emit(HLINE)
    return stats, result


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Measure sustainable memory bandwidth with the STREAM kernels."
    )
    parser.add_argument(
        "--array-size", type=int, default=DEFAULT_ARRAY_SIZE,
        help=f"elements per array (default {DEFAULT_ARRAY_SIZE})",
    )
    parser.add_argument(
        "--ntimes", type=int, default=DEFAULT_NTIMES,
        help=f"times each kernel runs (default {DEFAULT_NTIMES})",
    )
    parser.add_argument(
        "--offset", type=int, default=0, help="array offset in elements (default 0)"
    )
    parser.add_argument(
        "--single", action="store_true", help="use single-precision arrays"
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    config = StreamConfig(
        array_size=args.array_size,
        ntimes=args.ntimes,
        offset=args.offset,
        dtype=np.dtype(np.float32 if args.single else np.float64),
    )
    run_stream(config)
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())