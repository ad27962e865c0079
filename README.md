# membench

membench estimates how quickly a machine can move data through main memory.
It has three benchmarks, each available as a command and as a module:

- **naive** (`membench.naive`): fills a buffer of 64-bit words with 0, 1, 2, …,
  XOR-reduces it in one pass under a `Timer`, and reports the bandwidth in
  Gbps and GB/s, followed by the XOR result.
- **threaded** (`membench.threaded`): sums one byte per 64-byte cache line
  of a buffer of ones. It splits the buffer among 1 and then every even
  number of threads up to a limit. It prints one line per thread count: the
  count, the bandwidth without prefetching and the bandwidth with prefetching
  (in GB/s). The prefetching variant reads the buffer in 1 MiB blocks and
  touches the byte 4096 positions ahead of each block before reading it.
- **stream** (`membench.stream`): runs the Copy, Scale, Add and Triad
  kernels over three arrays. For each kernel it reports the best rate in MB/s
  and the average, minimum and maximum times. The first iteration is left
  out of these figures. It then checks that the arrays hold the values the
  kernels should have left in them.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command-line use

```
membench-naive [--size-mb N]
membench-threaded [--size-mb N] [--max-threads N]
membench-stream [--array-size N] [--ntimes N] [--offset N] [--single]
```

- `membench-naive --size-mb`: buffer size in MiB (default 764).
- `membench-threaded --size-mb`: data volume in MiB (default 2048).
- `membench-threaded --max-threads`: largest thread count tried (default 56).
- `membench-stream --array-size`: elements per array (default 10,000,000).
- `membench-stream --ntimes`: how many times each kernel runs (default 10).
  A value of 1 or less falls back to 10.
- `membench-stream --offset`: printed in the report. It does not change
  how the arrays are laid out.
- `membench-stream --single`: use single-precision (float32) arrays instead
  of float64.

Each command prints its results to standard output. The default buffers are
large, so make sure the machine has enough free memory first.

## Library use

```python
from membench.naive import make_buffer, xor_reduce, bandwidth_report
from membench.timing import Timer

buffer = make_buffer(64 * 1024 * 1024)
with Timer("read") as timer:
    agg = xor_reduce(buffer)
    micros = timer.stop()
gbps, gbytes = bandwidth_report(buffer.nbytes, micros)
```

`Timer` prints its duration when `stop()` is called, or when the `with`
block exits if it is still running. It returns the elapsed time in whole
microseconds. Stopping it a second time prints a notice and returns 0.
`membench.timing.clock_granularity` estimates a clock's resolution in
microseconds.

`membench.threaded.estimate_bandwidth(threads_count, data, prefetch=False)`
returns the bandwidth in bytes per nanosecond (GB/s) for a NumPy byte
array. `membench.threaded.thread_counts` gives the thread counts the command
tries.

`membench.stream.run_stream(config, out)` runs the full STREAM procedure
from a `StreamConfig`, writes the report to `out` (standard output by
default), and returns the list of `KernelStats` and a `ValidationResult`.
The pieces can also be used on their own:

- `StreamArrays` has `copy`, `scale`, `add` and `triad`.
- `summarize` turns per-iteration times into `KernelStats`.
- `validate` checks an array set against `expected_values` within the
  tolerance from `epsilon_for`.

## Limitations

- The STREAM kernels run as single NumPy operations in the calling thread.
  There is no option to spread them over several threads.
- Interpreter and library overhead means the numbers are lower than what
  hand-written compiled loops reach on the same hardware. Use them to compare
  machines or settings against each other, not as absolute peak figures.