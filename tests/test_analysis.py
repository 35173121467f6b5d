import math

import numpy as np
import pytest

from hiring_oracle.analysis import (
    bootstrap_percentile_intervals,
    calculate_confidence_interval,
    histogram_frame,
    percentiles,
    quantile_hf7,
    stage_params_frame,
)
from hiring_oracle.models import CanonicalStage
from hiring_oracle.sampling import SeededRandom


def test_quantile_hf7_interpolates():
    values = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]

    # h = 9 * 0.1 = 0.9 -> 0.1 * 1 + 0.9 * 2
    assert quantile_hf7(values, 0.1) == pytest.approx(1.9)
    assert quantile_hf7(values, 0.5) == pytest.approx(5.5)
    assert quantile_hf7(values, 0.9) == pytest.approx(9.1)
    assert quantile_hf7(values, 0.0) == 1
    assert quantile_hf7(values, 1.0) == 10


@pytest.mark.parametrize("p", [0.05, 0.1, 0.33, 0.5, 0.9, 0.99])
def test_quantile_hf7_matches_numpy_linear(p):
    values = np.sort(np.random.default_rng(3).gamma(2.0, 5.0, size=257))
    assert quantile_hf7(values, p) == pytest.approx(np.quantile(values, p))


def test_quantile_hf7_small_samples():
    assert math.isnan(quantile_hf7([], 0.5))
    assert quantile_hf7([12], 0.9) == 12


def test_percentiles_are_ordered():
    p10, p50, p90 = percentiles(sorted([14, 3, 9, 22, 7, 7, 30, 11]))
    assert p10 <= p50 <= p90


def test_bootstrap_intervals_bracket_point_estimates():
    values = sorted(np.random.default_rng(11).integers(5, 60, size=400).tolist())
    p10, p50, p90 = percentiles(values)

    intervals = bootstrap_percentile_intervals(values, 300, SeededRandom("boot"))

    assert intervals.p10.lower <= p10 <= intervals.p10.upper
    assert intervals.p50.lower <= p50 <= intervals.p50.upper
    assert intervals.p90.lower <= p90 <= intervals.p90.upper


def test_bootstrap_is_deterministic_for_a_seed():
    values = list(range(1, 101))

    first = bootstrap_percentile_intervals(values, 50, SeededRandom("same"))
    second = bootstrap_percentile_intervals(values, 50, SeededRandom("same"))

    assert first == second


def test_bootstrap_of_constant_sample_has_zero_width():
    intervals = bootstrap_percentile_intervals([9] * 40, 25, SeededRandom("flat"))

    assert intervals.p50.lower == intervals.p50.upper == 9


def test_bootstrap_without_resamples_returns_point_estimate():
    intervals = bootstrap_percentile_intervals([1, 2, 3, 4], 0, SeededRandom("none"))

    assert intervals.p50.lower == intervals.p50.upper == pytest.approx(2.5)


def test_wilson_interval():
    lower, upper = calculate_confidence_interval(50, 100)

    assert lower < 0.5 < upper
    assert lower == pytest.approx(0.4038, abs=1e-3)
    assert upper == pytest.approx(0.5962, abs=1e-3)
    assert calculate_confidence_interval(0, 0) == (0.0, 1.0)


def test_stage_params_frame_orders_funnel(stage_params):
    frame = stage_params_frame(reversed(list(stage_params.values())))

    assert list(frame['stage']) == ['SCREEN', 'HM_SCREEN', 'ONSITE', 'OFFER']
    assert frame.loc[0, 'conversion_n'] == 100
    assert frame['conversion_ci_lower'].le(frame['conversion_mean']).all()


def test_histogram_frame_probabilities_sum_to_one():
    frame = histogram_frame([5, 6, 6, 7, 9, 12, 12, 12], bins=4)

    assert len(frame) == 4
    assert frame['count'].sum() == 8
    assert frame['probability'].sum() == pytest.approx(1.0)


def test_histogram_frame_empty():
    frame = histogram_frame([])

    assert frame.empty
    assert list(frame.columns) == ['bin_start', 'bin_end', 'count', 'probability']
