"""Bayesian estimators for stage conversion rates and stage durations."""

import math
from typing import Sequence

import numpy as np

from hiring_oracle.config import (
    CREDIBLE_LOWER,
    CREDIBLE_UPPER,
    DEFAULT_PRIOR_STRENGTH,
    FALLBACK_DURATION_MEAN,
    GAMMA_RATE_BOUNDS,
    GAMMA_SHAPE_BOUNDS,
    MIN_DURATION_MEAN,
    MIN_VARIANCE_RATIO,
    PRIOR_DURATION_CV,
    SHRINKAGE_PRIOR_WEIGHT,
)
from hiring_oracle.models import BetaPosterior, GammaDistribution
from hiring_oracle.special import inverse_incomplete_beta


def _clamp(value: float, bounds) -> float:
    low, high = bounds
    return max(low, min(value, high))


def compute_beta_posterior(successes: int, total: int,
                           prior_strength: float = DEFAULT_PRIOR_STRENGTH) -> BetaPosterior:
    """
    Beta-Binomial posterior for a stage's pass rate.

    Prior Beta(s, s) with s = prior_strength; after observing `successes`
    out of `total` the posterior is Beta(s + successes, s + failures).
    Small samples are pulled toward 0.5 and the credible interval narrows
    as `total` grows.

    Args:
        successes: Candidates who passed the stage
        total: Candidates who entered the stage
        prior_strength: Pseudo-observations on each side of the prior

    Returns:
        BetaPosterior with mean, variance and 95% credible bounds
    """
    successes = max(successes, 0)
    failures = max(total - successes, 0)
    alpha = prior_strength + successes
    beta = prior_strength + failures

    mean = alpha / (alpha + beta)
    variance = (alpha * beta) / ((alpha + beta) ** 2 * (alpha + beta + 1))

    ci95_lower = inverse_incomplete_beta(CREDIBLE_LOWER, alpha, beta)
    ci95_upper = inverse_incomplete_beta(CREDIBLE_UPPER, alpha, beta)

    return BetaPosterior(
        alpha=alpha,
        beta=beta,
        mean=mean,
        variance=variance,
        ci95_lower=min(ci95_lower, mean),
        ci95_upper=max(ci95_upper, mean),
        n=int(max(total, 0)),
    )


def fit_gamma_distribution(durations: Sequence[float]) -> GammaDistribution:
    """
    Method-of-moments Gamma fit for stage durations (days).

    E[X] = shape/rate and Var[X] = shape/rate**2, so shape = mean**2/var and
    rate = mean/var. The mean is floored at one day and the variance at
    0.1 * mean so near-constant data cannot blow up the shape. When the
    shape hits its bounds the rate is re-derived from it, keeping
    shape/rate equal to the mean.
    """
    if len(durations) == 0:
        return GammaDistribution(
            shape=1.0,
            rate=1 / FALLBACK_DURATION_MEAN,
            mean=FALLBACK_DURATION_MEAN,
            variance=FALLBACK_DURATION_MEAN ** 2,
            cv=1.0,
            n=0,
        )

    values = np.asarray(durations, dtype=float)
    n = len(values)
    mean = float(np.mean(values))
    variance = float(np.sum((values - mean) ** 2)) / max(1, n - 1)

    safe_mean = max(mean, MIN_DURATION_MEAN)
    safe_variance = max(variance, safe_mean * MIN_VARIANCE_RATIO)

    shape = _clamp(safe_mean ** 2 / safe_variance, GAMMA_SHAPE_BOUNDS)
    rate = _clamp(shape / safe_mean, GAMMA_RATE_BOUNDS)
    cv = math.sqrt(safe_variance) / safe_mean

    return GammaDistribution(
        shape=shape,
        rate=rate,
        mean=safe_mean,
        variance=safe_variance,
        cv=cv,
        n=n,
    )


def gamma_from_prior(mean_days: float, cv: float = PRIOR_DURATION_CV) -> GammaDistribution:
    """Gamma with a given mean and coefficient of variation, used when history is thin."""
    mean = mean_days if mean_days > 0 else FALLBACK_DURATION_MEAN
    if cv <= 0:
        cv = PRIOR_DURATION_CV
    variance = (mean * cv) ** 2
    return GammaDistribution(
        shape=mean ** 2 / variance,
        rate=mean / variance,
        mean=mean,
        variance=variance,
        cv=cv,
        n=0,
    )


def shrink_rate(observed_rate: float, prior_rate: float, n: int,
                prior_weight: float = SHRINKAGE_PRIOR_WEIGHT) -> float:
    """Empirical Bayes shrinkage: (n*observed + m*prior) / (n + m)."""
    if n <= 0:
        return prior_rate
    return (n * observed_rate + prior_weight * prior_rate) / (n + prior_weight)
