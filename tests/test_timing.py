import io
import itertools
import time

from membench.timing import Timer, clock_granularity, wall_seconds


def _fake_clock(values):
    it = iter(values)
    return lambda: next(it)


def test_stop_returns_microseconds_and_reports():
    out = io.StringIO()
    timer = Timer("x", clock=_fake_clock([1.0, 1.5]), out=out)
    assert timer.stop() == 500000
    lines = out.getvalue().splitlines()
    assert lines[0] == "(x) total Duration: 500000 microseconds"
    assert lines[1] == "(x) total Duration: 500 milliseconds"


def test_second_stop_reports_already_stopped():
    out = io.StringIO()
    timer = Timer("x", clock=_fake_clock([0.0, 1.0, 2.0]), out=out)
    timer.stop()
    assert timer.stop() == 0
    assert out.getvalue().splitlines()[-1] == "Timer is already stopped!"


def test_default_name():
    out = io.StringIO()
    timer = Timer(clock=_fake_clock([0.0, 0.25]), out=out)
    timer.stop()
    assert out.getvalue().startswith("(no name) total Duration: 250000 microseconds")


def test_context_manager_stops_once():
    out = io.StringIO()
    with Timer("ctx", clock=_fake_clock([0.0, 2.0]), out=out) as timer:
        assert timer.running
    assert not timer.running
    assert len(out.getvalue().splitlines()) == 2


def test_context_manager_after_explicit_stop_does_not_report_again():
    out = io.StringIO()
    with Timer("ctx", clock=_fake_clock([0.0, 1.0]), out=out) as timer:
        timer.stop()
    assert "already stopped" not in out.getvalue()
    assert len(out.getvalue().splitlines()) == 2


def test_wall_seconds_tracks_time():
    before = time.time()
    value = wall_seconds()
    after = time.time()
    assert before <= value <= after


def test_clock_granularity_fake_clock():
    counter = itertools.count()
    step = 2.0**-16
    assert clock_granularity(lambda: next(counter) * step, 20) == 30


def test_clock_granularity_single_sample_gives_ceiling():
    counter = itertools.count()
    assert clock_granularity(lambda: next(counter) * 1.0, 1) == 1000000


def test_clock_granularity_real_clock_is_bounded():
    result = clock_granularity()
    assert 0 <= result <= 1000000