"""Memory bandwidth benchmarks: a sequential XOR read, a multithreaded strided read and STREAM."""

__version__ = "0.1.0"
__all__ = ["timing", "naive", "threaded", "stream"]