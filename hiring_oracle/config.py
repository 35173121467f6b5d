"""Configuration constants for the Hiring Oracle forecast engine."""

import os

DEFAULT_ITERATIONS = int(os.getenv("ORACLE_ITERATIONS", "1000"))
DEFAULT_BOOTSTRAP_SAMPLES = 200
DEFAULT_PRIOR_STRENGTH = 2.0
DEFAULT_MIN_SAMPLE_SIZE = 5
DEFAULT_SEED = os.getenv("ORACLE_SEED", "oracle-default")

# Degenerate forecasts land one year out
FALLBACK_HORIZON_DAYS = 365

# Percentiles reported on every forecast
PERCENTILES = (0.10, 0.50, 0.90)
BOOTSTRAP_CI_LOWER = 0.025
BOOTSTRAP_CI_UPPER = 0.975

# Beta posterior credible interval
CREDIBLE_LOWER = 0.025
CREDIBLE_UPPER = 0.975

# Gamma fitting guards
GAMMA_SHAPE_BOUNDS = (0.1, 100.0)
GAMMA_RATE_BOUNDS = (0.01, 10.0)
MIN_DURATION_MEAN = 1.0
MIN_VARIANCE_RATIO = 0.1
FALLBACK_DURATION_MEAN = 7.0
PRIOR_DURATION_CV = 0.5

# Used when a stage has no parameters at simulation time
MISSING_STAGE_DAYS = 7
MISSING_STAGE_PASS_RATE = 0.5

# Confidence heuristics (observations per stage, success probability)
HIGH_CONFIDENCE_MIN_N = 20
HIGH_CONFIDENCE_MIN_SUCCESS = 0.8
MEDIUM_CONFIDENCE_MIN_N = 10
MEDIUM_CONFIDENCE_MIN_SUCCESS = 0.5
LOW_CONFIDENCE_MIN_N = 5

# Legacy empirical Bayes shrinkage
SHRINKAGE_PRIOR_WEIGHT = 5.0

STAGE_ORDER = (
    "SCREEN",
    "HM_SCREEN",
    "ONSITE",
    "OFFER",
    "HIRED",
)

REQUIRED_STAGES = STAGE_ORDER[:-1]

# Stages outside the simulated funnel that still belong to an open pipeline
STAGE_ENTRY_POINTS = {
    "LEAD": "SCREEN",
    "APPLIED": "SCREEN",
    "FINAL": "OFFER",
}

GLOBAL_STAGE_PRIORS = {
    "LEAD": {"pass_rate": 0.3, "median_days": 3},
    "APPLIED": {"pass_rate": 0.5, "median_days": 2},
    "SCREEN": {"pass_rate": 0.4, "median_days": 5},
    "HM_SCREEN": {"pass_rate": 0.5, "median_days": 7},
    "ONSITE": {"pass_rate": 0.4, "median_days": 10},
    "FINAL": {"pass_rate": 0.6, "median_days": 3},
    "OFFER": {"pass_rate": 0.8, "median_days": 5},
    "HIRED": {"pass_rate": 1.0, "median_days": 0},
    "REJECTED": {"pass_rate": 0.0, "median_days": 0},
    "WITHDREW": {"pass_rate": 0.0, "median_days": 0},
}
