"""Monte Carlo simulation engine for the Hiring Oracle.

Each trial races every active candidate through the remaining funnel and
keeps the earliest hire, so the day distribution describes the time to the
next hire. Stage pass rates are drawn from their Beta posteriors on every
traversal (Thompson sampling), which carries parameter uncertainty into the
outcome distribution.
"""

import logging
import math
import time
from datetime import date, timedelta
from typing import Iterable, List, Mapping, Optional, Sequence, Set

from hiring_oracle.analysis import (
    bootstrap_percentile_intervals,
    calculate_confidence_interval,
    percentiles,
)
from hiring_oracle.config import (
    FALLBACK_HORIZON_DAYS,
    MISSING_STAGE_DAYS,
    MISSING_STAGE_PASS_RATE,
)
from hiring_oracle.errors import ForecastCancelled
from hiring_oracle.models import (
    DEFAULT_FORECAST_CONFIG,
    FUNNEL_ENTRY_POINTS,
    FUNNEL_ORDER,
    CanonicalStage,
    ConfidenceIntervals,
    ConfidenceLevel,
    ConfidenceThresholds,
    ForecastConfig,
    ForecastDebug,
    ForecastResult,
    PercentileInterval,
    PipelineCandidate,
    StageHistoricalData,
    StageParams,
)
from hiring_oracle.sampling import SeededRandom, UniformSource, sample_beta, sample_gamma
from hiring_oracle.stage_params import build_stage_params

logger = logging.getLogger(__name__)


def funnel_index(stage: CanonicalStage) -> Optional[int]:
    """Position in the simulated funnel, or None for stages outside it."""
    stage = CanonicalStage(stage)
    stage = FUNNEL_ENTRY_POINTS.get(stage, stage)
    if stage in FUNNEL_ORDER:
        return FUNNEL_ORDER.index(stage)
    return None


def remaining_stages(stage: CanonicalStage) -> Sequence[CanonicalStage]:
    index = funnel_index(stage)
    if index is None:
        return ()
    return FUNNEL_ORDER[index:-1]


def simulate_candidate_journey(start_stage: CanonicalStage,
                               stage_params: Mapping[CanonicalStage, StageParams],
                               rng: UniformSource) -> Optional[int]:
    """
    Walk one candidate from `start_stage` to HIRED.

    Returns the elapsed days on a hire, or None when the candidate drops out.
    """
    index = funnel_index(start_stage)
    if index is None:
        return None

    days_elapsed = 0
    for stage in FUNNEL_ORDER[index:-1]:
        params = stage_params.get(stage)

        if params is None:
            days_elapsed += MISSING_STAGE_DAYS
            if rng() > MISSING_STAGE_PASS_RATE:
                return None
            continue

        duration = sample_gamma(params.duration.shape, params.duration.rate, rng)
        days_elapsed += max(1, _round_days(duration))

        pass_rate = sample_beta(
            params.conversion_rate.alpha,
            params.conversion_rate.beta,
            rng,
        )

        if rng() > pass_rate:
            return None

    return days_elapsed


def classify_confidence(min_sample_size: int, success_probability: float,
                        thresholds: ConfidenceThresholds = ConfidenceThresholds()) -> ConfidenceLevel:
    if min_sample_size >= thresholds.high_min_n and success_probability >= thresholds.high_min_success:
        return ConfidenceLevel.HIGH
    if min_sample_size >= thresholds.medium_min_n and success_probability >= thresholds.medium_min_success:
        return ConfidenceLevel.MEDIUM
    if min_sample_size >= thresholds.low_min_n:
        return ConfidenceLevel.LOW
    return ConfidenceLevel.INSUFFICIENT


def _round_days(days: float) -> int:
    # Half-up; round() would send 2.5 to 2
    return int(math.floor(days + 0.5))


def _add_days(start_date: date, days: float) -> date:
    return start_date + timedelta(days=_round_days(days))


def _stages_needed(candidates: Iterable[PipelineCandidate]) -> Set[CanonicalStage]:
    needed = set()
    for candidate in candidates:
        needed.update(remaining_stages(candidate.current_stage))
    return needed


def _min_sample_size(stages: Iterable[CanonicalStage],
                     stage_params: Mapping[CanonicalStage, StageParams]) -> int:
    sizes = [stage_params[stage].conversion_rate.n for stage in stages]
    if not sizes:
        sizes = [params.conversion_rate.n for params in stage_params.values()]
    return min(sizes) if sizes else 0


def _fallback_result(start_date: date, stage_params: Mapping[CanonicalStage, StageParams],
                     config: ForecastConfig, confidence_level: ConfidenceLevel,
                     success_probability_ci, started: float) -> ForecastResult:
    fallback_date = start_date + timedelta(days=FALLBACK_HORIZON_DAYS)
    horizon = PercentileInterval(FALLBACK_HORIZON_DAYS, FALLBACK_HORIZON_DAYS)
    return ForecastResult(
        p10_date=fallback_date,
        p50_date=fallback_date,
        p90_date=fallback_date,
        p10_days=float(FALLBACK_HORIZON_DAYS),
        p50_days=float(FALLBACK_HORIZON_DAYS),
        p90_days=float(FALLBACK_HORIZON_DAYS),
        simulated_days=(),
        success_probability=0.0,
        success_probability_ci=success_probability_ci,
        confidence_level=confidence_level,
        confidence_intervals=ConfidenceIntervals(horizon, horizon, horizon),
        stage_params=tuple(stage_params.values()),
        debug=ForecastDebug(
            iterations=config.iterations,
            bootstrap_samples=0,
            seed=config.seed,
            successful_iterations=0,
            elapsed_ms=(time.perf_counter() - started) * 1000,
        ),
    )


def run_oracle_forecast(pipeline_candidates: Sequence[PipelineCandidate],
                        stage_params: Mapping[CanonicalStage, StageParams],
                        start_date: date,
                        config: ForecastConfig = DEFAULT_FORECAST_CONFIG,
                        cancel_token=None,
                        deadline: Optional[float] = None) -> ForecastResult:
    """
    Forecast the date of the next hire for a pipeline.

    Args:
        pipeline_candidates: Current roster snapshot
        stage_params: Parameter table, usually from build_stage_params
        start_date: Day zero of the forecast (date or datetime)
        config: Iterations, bootstrap samples, seed and confidence thresholds
        cancel_token: Optional object with is_set(), checked between trials
        deadline: Optional wall-clock budget in seconds, checked between trials

    Returns:
        ForecastResult; degenerate pipelines get a fallback one year out

    Raises:
        ForecastCancelled: the token was set or the deadline passed
    """
    started = time.perf_counter()

    if not pipeline_candidates:
        logger.info("Empty pipeline; returning fallback forecast")
        return _fallback_result(start_date, stage_params, config,
                                ConfidenceLevel.INSUFFICIENT, (0.0, 0.0), started)

    active_candidates: List[PipelineCandidate] = [
        c for c in pipeline_candidates if c.is_active
    ]
    if not active_candidates:
        logger.info("All %d candidates are terminal; returning fallback forecast",
                    len(pipeline_candidates))
        return _fallback_result(start_date, stage_params, config,
                                ConfidenceLevel.LOW, (0.0, 0.0), started)

    needed = _stages_needed(active_candidates)
    missing = sorted(stage.value for stage in needed if stage not in stage_params)
    if missing:
        logger.warning("No parameters for stages %s; using %d-day coin-flip defaults",
                       ", ".join(missing), MISSING_STAGE_DAYS)

    rng = SeededRandom(config.seed)
    deadline_at = started + deadline if deadline is not None else None
    first_hire_days: List[int] = []

    for i in range(config.iterations):
        if cancel_token is not None and cancel_token.is_set():
            raise ForecastCancelled(i, "cancel token set")
        if deadline_at is not None and time.perf_counter() > deadline_at:
            raise ForecastCancelled(i, "deadline exceeded")

        min_hire_days = None
        for candidate in active_candidates:
            days = simulate_candidate_journey(candidate.current_stage, stage_params, rng)
            if days is not None and (min_hire_days is None or days < min_hire_days):
                min_hire_days = days

        if min_hire_days is not None:
            first_hire_days.append(min_hire_days)

    successes = len(first_hire_days)
    success_probability = successes / config.iterations
    success_ci = calculate_confidence_interval(successes, config.iterations)

    if successes == 0:
        logger.info("No successful hires in %d iterations; returning fallback forecast",
                    config.iterations)
        return _fallback_result(start_date, stage_params, config,
                                ConfidenceLevel.LOW, success_ci, started)

    first_hire_days.sort()
    p10_days, p50_days, p90_days = percentiles(first_hire_days)

    intervals = bootstrap_percentile_intervals(
        first_hire_days, config.bootstrap_samples, rng.derive("bootstrap"),
    )

    min_n = _min_sample_size(
        [stage for stage in needed if stage in stage_params], stage_params,
    )
    confidence_level = classify_confidence(min_n, success_probability, config.thresholds)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "Forecast complete | candidates=%d iterations=%d success=%.3f p50=%.1fd confidence=%s elapsed=%.0fms",
        len(active_candidates), config.iterations, success_probability,
        p50_days, confidence_level.value, elapsed_ms,
    )

    return ForecastResult(
        p10_date=_add_days(start_date, p10_days),
        p50_date=_add_days(start_date, p50_days),
        p90_date=_add_days(start_date, p90_days),
        p10_days=p10_days,
        p50_days=p50_days,
        p90_days=p90_days,
        simulated_days=tuple(first_hire_days),
        success_probability=success_probability,
        success_probability_ci=success_ci,
        confidence_level=confidence_level,
        confidence_intervals=intervals,
        stage_params=tuple(stage_params.values()),
        debug=ForecastDebug(
            iterations=config.iterations,
            bootstrap_samples=config.bootstrap_samples,
            seed=config.seed,
            successful_iterations=successes,
            elapsed_ms=elapsed_ms,
        ),
    )


def forecast_from_history(historical_data: Iterable[StageHistoricalData],
                          pipeline_candidates: Sequence[PipelineCandidate],
                          start_date: date,
                          config: ForecastConfig = DEFAULT_FORECAST_CONFIG,
                          cancel_token=None,
                          deadline: Optional[float] = None) -> ForecastResult:
    """Build the stage table from history and run the forecast in one call."""
    stage_params = build_stage_params(
        historical_data, config.prior_strength, config.min_sample_size,
    )
    return run_oracle_forecast(
        pipeline_candidates, stage_params, start_date, config,
        cancel_token=cancel_token, deadline=deadline,
    )
