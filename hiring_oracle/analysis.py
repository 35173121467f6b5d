"""Quantiles, bootstrap intervals and summaries for the Hiring Oracle."""

import logging
import math
from typing import Iterable, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats as stats_module

from hiring_oracle.config import (
    BOOTSTRAP_CI_LOWER,
    BOOTSTRAP_CI_UPPER,
    PERCENTILES,
)
from hiring_oracle.models import (
    FUNNEL_ORDER,
    ConfidenceIntervals,
    PercentileInterval,
    StageParams,
)
from hiring_oracle.sampling import UniformSource

logger = logging.getLogger(__name__)


def quantile_hf7(sorted_values: Sequence[float], p: float) -> float:
    """
    Hyndman-Fan Type 7 quantile of an ascending sample.

    h = (n-1)p, j = floor(h), k = min(j+1, n-1), Q = (1-γ)x[j] + γx[k]
    with γ = h - j. Returns NaN for an empty sample.
    """
    n = len(sorted_values)
    if n == 0:
        return float('nan')
    if n == 1:
        return float(sorted_values[0])

    p = min(max(p, 0.0), 1.0)
    h = (n - 1) * p
    j = int(math.floor(h))
    k = min(j + 1, n - 1)
    gamma = h - j
    return float((1 - gamma) * sorted_values[j] + gamma * sorted_values[k])


def percentiles(sorted_values: Sequence[float],
                probabilities: Iterable[float] = PERCENTILES) -> Tuple[float, ...]:
    return tuple(quantile_hf7(sorted_values, p) for p in probabilities)


def bootstrap_percentile_intervals(sorted_values: Sequence[float], n_samples: int,
                                   rng: UniformSource) -> ConfidenceIntervals:
    """
    Bootstrap CIs for the p10/p50/p90 of a sample.

    Resamples with replacement `n_samples` times, takes HF7 percentiles of
    each resample, and reads the 2.5th and 97.5th entries of each sorted
    bootstrap distribution. With no resamples the interval collapses to the
    point estimate.
    """
    values = np.asarray(sorted_values, dtype=float)
    point = percentiles(values)
    n = len(values)

    if n == 0 or n_samples <= 0:
        return ConfidenceIntervals(*(PercentileInterval(p, p) for p in point))

    logger.debug("Bootstrapping %d resamples of %d values", n_samples, n)
    replicates = np.empty((n_samples, len(PERCENTILES)))
    for b in range(n_samples):
        draws = np.fromiter((rng() for _ in range(n)), dtype=float, count=n)
        idx = np.minimum((draws * n).astype(int), n - 1)
        resample = np.sort(values[idx])
        replicates[b] = percentiles(resample)

    replicates.sort(axis=0)
    lower_idx = int(math.floor(n_samples * BOOTSTRAP_CI_LOWER))
    upper_idx = min(int(math.floor(n_samples * BOOTSTRAP_CI_UPPER)), n_samples - 1)

    intervals = [
        PercentileInterval(
            lower=float(replicates[lower_idx, i]),
            upper=float(replicates[upper_idx, i]),
        )
        for i in range(len(PERCENTILES))
    ]
    return ConfidenceIntervals(*intervals)


def calculate_confidence_interval(successes: int, trials: int,
                                  confidence: float = 0.95) -> Tuple[float, float]:
    """Calculate Wilson score confidence interval for a proportion."""
    if trials == 0:
        return (0.0, 1.0)

    p = successes / trials
    z = stats_module.norm.ppf((1 + confidence) / 2)

    denominator = 1 + z**2 / trials
    center = (p + z**2 / (2 * trials)) / denominator
    margin = z * np.sqrt((p * (1 - p) + z**2 / (4 * trials)) / trials) / denominator

    return (float(max(0.0, center - margin)), float(min(1.0, center + margin)))


def stage_params_frame(stage_params: Iterable[StageParams]) -> pd.DataFrame:
    """One row per stage, funnel stages first, for the parameter table widget."""
    order = {stage: i for i, stage in enumerate(FUNNEL_ORDER)}
    rows = []
    for params in sorted(stage_params, key=lambda p: order.get(p.stage, len(order))):
        rows.append({
            'stage': params.stage.value,
            'conversion_mean': params.conversion_rate.mean,
            'conversion_ci_lower': params.conversion_rate.ci95_lower,
            'conversion_ci_upper': params.conversion_rate.ci95_upper,
            'conversion_n': params.conversion_rate.n,
            'duration_mean_days': params.duration.mean,
            'duration_cv': params.duration.cv,
            'duration_shape': params.duration.shape,
            'duration_rate': params.duration.rate,
            'duration_n': params.duration.n,
        })
    columns = [
        'stage', 'conversion_mean', 'conversion_ci_lower', 'conversion_ci_upper',
        'conversion_n', 'duration_mean_days', 'duration_cv', 'duration_shape',
        'duration_rate', 'duration_n',
    ]
    return pd.DataFrame(rows, columns=columns)


def histogram_frame(simulated_days: Sequence[int], bins: int = 20) -> pd.DataFrame:
    """Day-bucket counts and probabilities of the simulated time to next hire."""
    columns = ['bin_start', 'bin_end', 'count', 'probability']
    if len(simulated_days) == 0:
        return pd.DataFrame(columns=columns)

    counts, edges = np.histogram(np.asarray(simulated_days, dtype=float), bins=bins)
    total = counts.sum()
    return pd.DataFrame({
        'bin_start': edges[:-1],
        'bin_end': edges[1:],
        'count': counts,
        'probability': counts / total,
    }, columns=columns)

