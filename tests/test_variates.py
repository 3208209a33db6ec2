import math
import random

import numpy as np
import pytest

from mobidlsim.model import LinkState
from mobidlsim.variates import (
    DegenerateSampleError,
    choose_initial_state,
    draw_exponential,
    draw_pareto,
    draw_uniform,
    draw_uniform_range,
    sample_exponential,
    sample_pareto,
)


def test_exponential_inverse_cdf_matches_closed_form():
    assert sample_exponential(0.0, 10.0) == 0.0
    assert sample_exponential(0.5, 10.0) == pytest.approx(10.0 * math.log(2.0))
    assert sample_exponential(1.0 - math.exp(-1.0), 3.0) == pytest.approx(3.0)


def test_exponential_at_upper_bound_is_infinite():
    assert sample_exponential(1.0, 5.0) == math.inf


def test_pareto_inverse_cdf():
    assert sample_pareto(1.0, 2.0, 220.0) == pytest.approx(220.0)
    assert sample_pareto(0.25, 2.0, 100.0) == pytest.approx(200.0)
    assert sample_pareto(0.0, 2.0, 100.0) == math.inf


@pytest.mark.parametrize("mean", [0.0, -1.0, math.inf, math.nan])
def test_exponential_rejects_invalid_mean(mean):
    with pytest.raises(ValueError):
        sample_exponential(0.5, mean)


def test_pareto_rejects_invalid_parameters():
    with pytest.raises(ValueError):
        sample_pareto(0.5, 0.0, 1.0)
    with pytest.raises(ValueError):
        sample_pareto(0.5, 1.0, -2.0)
    with pytest.raises(TypeError):
        sample_pareto(0.5, True, 1.0)


def test_initial_state_uses_stationary_probability():
    # P(Disconnect) = 60 / (60 + 40) = 0.6
    assert choose_initial_state(60.0, 40.0, 0.59) is LinkState.DISCONNECT
    assert choose_initial_state(60.0, 40.0, 0.6) is LinkState.CONNECT
    assert choose_initial_state(60.0, 40.0, 0.99) is LinkState.CONNECT


def test_initial_state_frequency_converges(rng):
    draws = [choose_initial_state(500.0, 50.0, draw_uniform(rng)) for _ in range(20000)]
    share = sum(state is LinkState.DISCONNECT for state in draws) / len(draws)
    assert share == pytest.approx(500.0 / 550.0, abs=0.01)


def test_draw_uniform_skips_degenerate_values(sequence_source):
    source = sequence_source([0.0, 0.0, 0.25])
    assert draw_uniform(source) == 0.25
    assert source.calls == 3


def test_draw_uniform_skips_upper_bound(sequence_source):
    source = sequence_source([1.0, 0.5])
    assert draw_uniform(source) == 0.5
    assert source.calls == 2


def test_draw_exponential_stays_finite_when_source_hits_one(sequence_source):
    source = sequence_source([1.0, 0.5])
    value = draw_exponential(source, 10.0)
    assert math.isfinite(value)
    assert value == pytest.approx(10.0 * math.log(2.0))
    assert source.calls == 2


def test_draw_uniform_gives_up_after_retry_cap(sequence_source):
    source = sequence_source([0.0])
    with pytest.raises(DegenerateSampleError):
        draw_uniform(source, max_retries=4)
    assert source.calls == 4


def test_draw_uniform_requires_random_method():
    with pytest.raises(TypeError):
        draw_uniform(object())


def test_draws_are_finite_and_positive(rng):
    values = [draw_exponential(rng, 50.0) for _ in range(5000)]
    assert all(0.0 < v < math.inf for v in values)
    assert float(np.mean(values)) == pytest.approx(50.0, rel=0.05)
    sizes = [draw_pareto(rng, 25.0 / 3.0, 220.0) for _ in range(2000)]
    assert min(sizes) >= 220.0


def test_draw_uniform_range_supports_python_random():
    value = draw_uniform_range(random.Random(7), 300.0)
    assert 0.0 < value < 300.0
