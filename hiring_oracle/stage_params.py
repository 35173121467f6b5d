"""Stage parameter table built from historical stage statistics."""

import logging
import math
from typing import Dict, Iterable

from hiring_oracle.config import (
    DEFAULT_MIN_SAMPLE_SIZE,
    DEFAULT_PRIOR_STRENGTH,
    GLOBAL_STAGE_PRIORS,
    PRIOR_DURATION_CV,
)
from hiring_oracle.estimators import (
    compute_beta_posterior,
    fit_gamma_distribution,
    gamma_from_prior,
)
from hiring_oracle.models import (
    REQUIRED_FUNNEL_STAGES,
    CanonicalStage,
    StageHistoricalData,
    StageParams,
)

logger = logging.getLogger(__name__)


def stage_prior(stage: CanonicalStage) -> Dict[str, float]:
    return GLOBAL_STAGE_PRIORS[CanonicalStage(stage).value]


def default_stage_params(stage: CanonicalStage,
                         prior_strength: float = DEFAULT_PRIOR_STRENGTH) -> StageParams:
    """Parameters for a stage with no history, taken from the global prior."""
    prior = stage_prior(stage)
    pseudo_total = prior_strength * 2
    pseudo_passed = math.floor(prior['pass_rate'] * pseudo_total + 0.5)
    return StageParams(
        stage=CanonicalStage(stage),
        conversion_rate=compute_beta_posterior(pseudo_passed, pseudo_total, prior_strength),
        duration=gamma_from_prior(prior['median_days'], PRIOR_DURATION_CV),
    )


def build_stage_params(historical_data: Iterable[StageHistoricalData],
                       prior_strength: float = DEFAULT_PRIOR_STRENGTH,
                       min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE) -> Dict[CanonicalStage, StageParams]:
    """
    Merge per-stage history with the global priors.

    Every stage in the history gets a Beta posterior for its pass rate and
    either a fitted Gamma (at least `min_sample_size` durations) or the
    prior Gamma. Required funnel stages missing from the history are filled
    from the priors so the simulation never meets an undefined stage.
    """
    params: Dict[CanonicalStage, StageParams] = {}

    for data in historical_data:
        stage = CanonicalStage(data.stage)
        conversion_rate = compute_beta_posterior(data.passed, data.entered, prior_strength)

        if len(data.durations) >= max(min_sample_size, 1):
            duration = fit_gamma_distribution(data.durations)
        else:
            duration = gamma_from_prior(stage_prior(stage)['median_days'], PRIOR_DURATION_CV)
            logger.debug(
                "Stage %s has %d durations (< %d); using prior duration",
                stage.value, len(data.durations), min_sample_size,
            )

        params[stage] = StageParams(
            stage=stage,
            conversion_rate=conversion_rate,
            duration=duration,
        )

    for stage in REQUIRED_FUNNEL_STAGES:
        if stage not in params:
            logger.debug("Stage %s missing from history; injecting prior", stage.value)
            params[stage] = default_stage_params(stage, prior_strength)

    return params
