import numpy as np
import pytest

from membench.threaded import (
    CACHE_LINE,
    estimate_bandwidth,
    main,
    strided_sum,
    thread_counts,
)


def _fake_clock(values):
    it = iter(values)
    return lambda: next(it)


def test_strided_sum_counts_cache_lines():
    data = np.ones(4096, dtype=np.uint8)
    assert strided_sum(data, 0, 4096, CACHE_LINE) == 4096 // CACHE_LINE


def test_strided_sum_default_step_sums_all():
    data = np.ones(1000, dtype=np.uint8)
    assert strided_sum(data, 0, 1000) == 1000


def test_strided_sum_respects_bounds():
    data = np.ones(1000, dtype=np.uint8)
    assert strided_sum(data, 100, 100) == 0
    assert strided_sum(data, 0, 500) + strided_sum(data, 500, 1000) == strided_sum(
        data, 0, 1000
    )


def test_strided_sum_does_not_wrap_at_byte_width():
    data = np.full(512, 255, dtype=np.uint8)
    assert strided_sum(data, 0, 512) == 255 * 512


def test_strided_sum_rejects_bad_step():
    with pytest.raises(ValueError):
        strided_sum(np.ones(8, dtype=np.uint8), 0, 8, 0)


def test_thread_counts_ones_and_evens():
    counts = thread_counts(6)
    assert counts[0] == 1
    assert all(n % 2 == 0 for n in counts[1:])
    assert counts == [1, 2, 4, 6]


def test_thread_counts_default_limit():
    counts = thread_counts()
    assert counts[-1] == 56
    assert len(counts) == 1 + 56 // 2


def test_thread_counts_empty_for_zero():
    assert thread_counts(0) == []


@pytest.mark.parametrize("threads", [1, 3, 4])
@pytest.mark.parametrize("prefetch", [False, True])
def test_estimate_bandwidth_uses_clock(threads, prefetch):
    data = np.ones(8192, dtype=np.uint8)
    result = estimate_bandwidth(threads, data, prefetch, _fake_clock([0.0, 1.0]))
    assert result == pytest.approx(len(data) / 1e9)


def test_estimate_bandwidth_zero_elapsed_is_infinite():
    data = np.ones(256, dtype=np.uint8)
    assert estimate_bandwidth(1, data, False, _fake_clock([2.0, 2.0])) == float("inf")


def test_estimate_bandwidth_real_clock_positive():
    data = np.ones(1 << 16, dtype=np.uint8)
    assert estimate_bandwidth(2, data) > 0


def test_estimate_bandwidth_rejects_zero_threads():
    with pytest.raises(ValueError):
        estimate_bandwidth(0, np.ones(64, dtype=np.uint8))


def test_main_prints_one_line_per_thread_count(capsys):
    assert main(["--size-mb", "1", "--max-threads", "4"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in lines] == ["1", "2", "4"]
    assert all(len(line.split()) == 3 for line in lines)