"""Multi-threaded strided read bandwidth estimate."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from typing import Callable, List, Optional, Sequence

import numpy as np

CACHE_LINE = 64
PREFETCH_DISTANCE = 4096
_BLOCK = 1 << 20


def strided_sum(data: np.ndarray, start: int, stop: int, step: int = 1) -> int:
    """Sum every ``step``-th byte of ``data`` from ``start`` up to ``stop``."""
    if step < 1:
        raise ValueError("step must be positive")
    return int(data[start:stop:step].sum(dtype=np.uint64))


def _prefetching_sum(data: np.ndarray, start: int, stop: int, step: int) -> int:
    # Walks the range in blocks, touching the byte PREFETCH_DISTANCE ahead of
    # each block before reading it.
    last = len(data) - 1
    total = 0
    for block_start in range(start, stop, _BLOCK):
        block_stop = min(block_start + _BLOCK, stop)
        ahead = min(block_start + PREFETCH_DISTANCE, last)
        if ahead >= 0:
            data[ahead]
        total += strided_sum(data, block_start, block_stop, step)
    return total


def estimate_bandwidth(
    threads_count: int,
    data: np.ndarray,
    prefetch: bool = False,
    clock: Callable[[], float] = time.perf_counter,
) -> float:
    """Read ``data`` with ``threads_count`` threads; return bytes per nanosecond (GB/s)."""
    if threads_count < 1:
        raise ValueError("threads_count must be at least 1")
    volume = len(data)
    segment = volume // threads_count
    reader = _prefetching_sum if prefetch else strided_sum

    start = clock()
    if threads_count == 1:
        reader(data, 0, segment, CACHE_LINE)
    else:
        workers = [
            threading.Thread(
                target=reader,
                args=(data, segment * i, segment * (i + 1), CACHE_LINE),
            )
            for i in range(threads_count)
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
    elapsed_ns = (clock() - start) * 1e9

    if elapsed_ns == 0:
        return float("inf") if volume else float("nan")
    return volume / elapsed_ns


def thread_counts(max_threads: int = 56) -> List[int]:
    """Return the thread counts to try: 1 and every even count up to the limit."""
    return [n for n in range(1, max_threads + 1) if n == 1 or n % 2 == 0]


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Estimate memory bandwidth with increasing thread counts."
    )
    parser.add_argument(
        "--size-mb", type=int, default=2048, help="data volume in MiB (default 2048)"
    )
    parser.add_argument(
        "--max-threads", type=int, default=56, help="largest thread count (default 56)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    data = np.ones(args.size_mb * 1024 * 1024, dtype=np.uint8)
    for threads in thread_counts(args.max_threads):
        plain = estimate_bandwidth(threads, data, prefetch=False)
        print(f"{threads} {plain:.1f} ", end="")
        prefetched = estimate_bandwidth(threads, data, prefetch=True)
        print(f"{prefetched:.1f}")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())