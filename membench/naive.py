"""Single-threaded read bandwidth estimate from an XOR pass over a buffer."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence, Tuple

import numpy as np

from membench.timing import Timer

_WORD_BYTES = np.dtype(np.uint64).itemsize


def make_buffer(size_bytes: int) -> np.ndarray:
    """Return a uint64 buffer of ``size_bytes`` bytes holding 0, 1, 2, ..."""
    if size_bytes < 0:
        raise ValueError("buffer size must not be negative")
    return np.arange(size_bytes // _WORD_BYTES, dtype=np.uint64)


def xor_reduce(buffer: np.ndarray) -> int:
    """XOR every element of ``buffer`` together, forcing a full read."""
    return int(np.bitwise_xor.reduce(np.asarray(buffer, dtype=np.uint64)))


def bandwidth_report(bytes_read: int, microseconds: int) -> Tuple[float, float]:
    """Return (gigabits per second, gigabytes per second) for a timed read."""
    seconds = microseconds / 1e6
    bits = bytes_read * 8.0
    if seconds == 0:
        bits_per_second = float("inf") if bits > 0 else float("nan")
    else:
        bits_per_second = bits / seconds
    return bits_per_second / 1e9, bits_per_second / 8e9


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Estimate memory bandwidth by reading a buffer once."
    )
    parser.add_argument(
        "--size-mb", type=int, default=764, help="buffer size in MiB (default 764)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    size_bytes = args.size_mb * 1024 * 1024
    buffer = make_buffer(size_bytes)

    with Timer("Vectorized Read") as timer:
        agg = xor_reduce(buffer)
        micros = timer.stop()
        gbps, gbytes = bandwidth_report(size_bytes, micros)
        print(f"Bandwidth: {gbps:g} Gbps")
        print(f"           {gbytes:g} GB/s")

    print(f"agg: {agg}")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())