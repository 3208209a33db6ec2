import numpy as np
import pytest

from mobidlsim.download import average_bandwidth, effective_speed, simulate
from mobidlsim.model import Interval, LinkState
from mobidlsim.session import generate_sequence

C = LinkState.CONNECT
D = LinkState.DISCONNECT


def test_effective_speed_combines_radios_only_when_connected():
    assert effective_speed(C, 60.0, 40.0) == 100.0
    assert effective_speed(D, 60.0, 40.0) == 40.0


def test_simulate_decrements_per_interval():
    sequence = [Interval(D, 10.0), Interval(C, 5.0), Interval(D, 20.0)]
    result = simulate(sequence, 200.0, 50.0, 5000.0)
    remaining = [step.remaining for step in result.steps]
    assert remaining == pytest.approx([4500.0, 3250.0, 2250.0])
    assert [step.index for step in result.steps] == [1, 2, 3]
    assert [step.speed for step in result.steps] == [50.0, 250.0, 50.0]
    assert not result.completed
    assert result.shortfall == pytest.approx(2250.0)
    assert result.downloaded == pytest.approx(2750.0)
    assert result.elapsed == pytest.approx(35.0)


def test_simulate_stops_once_payload_is_exhausted():
    sequence = [Interval(C, 10.0), Interval(D, 10.0), Interval(C, 10.0)]
    result = simulate(sequence, 60.0, 40.0, 1000.0)
    assert len(result.steps) == 1
    assert result.completed
    assert result.remaining == pytest.approx(0.0)
    assert result.shortfall == 0.0
    assert result.downloaded == pytest.approx(1000.0)


def test_non_positive_payload_returns_immediately():
    sequence = [Interval(C, 10.0)]
    for payload in (0.0, -3.0):
        result = simulate(sequence, 60.0, 40.0, payload)
        assert result.steps == ()
        assert result.completed


def test_simulate_is_deterministic_and_keeps_no_state():
    rng = np.random.default_rng(5)
    sequence = generate_sequence(C, 60.0, 40.0, 150.0, rng)
    first = simulate(sequence, 200.0, 50.0, 8000.0)
    other = simulate(sequence, 200.0, 50.0, 100.0)
    second = simulate(sequence, 200.0, 50.0, 8000.0)
    assert first == second
    assert other != first


def test_simulate_rejects_negative_speed():
    with pytest.raises(ValueError):
        simulate([Interval(C, 1.0)], -1.0, 40.0, 10.0)


@pytest.mark.parametrize("seed", range(25))
def test_scenario_a_trace_is_monotone_and_covers_session(seed):
    rng = np.random.default_rng(seed)
    sequence = generate_sequence(C if seed % 2 else D, 60.0, 40.0, 150.0, rng)
    assert sum(i.duration for i in sequence) == pytest.approx(150.0, rel=1e-9)

    result = simulate(sequence, 200.0, 50.0, 8000.0)
    remaining = [8000.0] + [step.remaining for step in result.steps]
    assert all(b <= a for a, b in zip(remaining, remaining[1:]))
    assert result.remaining <= 8000.0
    if not result.completed:
        assert result.elapsed == pytest.approx(150.0, rel=1e-9)


def test_average_bandwidth_connect_only_is_exact():
    sequence = [Interval(C, 3.0), Interval(C, 11.5), Interval(C, 0.2)]
    assert average_bandwidth(sequence, 60.0, 40.0) == 100.0
    assert average_bandwidth(sequence, 60.0, 40.0, "time") == pytest.approx(100.0)


def test_average_bandwidth_weightings_differ():
    sequence = [Interval(C, 1.0), Interval(D, 9.0)]
    assert average_bandwidth(sequence, 60.0, 40.0, "interval") == pytest.approx(70.0)
    assert average_bandwidth(sequence, 60.0, 40.0, "time") == pytest.approx(46.0)


def test_average_bandwidth_empty_sequence_is_none():
    assert average_bandwidth([], 60.0, 40.0) is None
    with pytest.raises(ValueError):
        average_bandwidth([Interval(C, 1.0)], 60.0, 40.0, "median")
