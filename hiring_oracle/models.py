"""Data models for the Hiring Oracle forecast engine."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple, Union

from hiring_oracle.config import (
    DEFAULT_BOOTSTRAP_SAMPLES,
    DEFAULT_ITERATIONS,
    DEFAULT_MIN_SAMPLE_SIZE,
    DEFAULT_PRIOR_STRENGTH,
    DEFAULT_SEED,
    HIGH_CONFIDENCE_MIN_N,
    HIGH_CONFIDENCE_MIN_SUCCESS,
    LOW_CONFIDENCE_MIN_N,
    MEDIUM_CONFIDENCE_MIN_N,
    MEDIUM_CONFIDENCE_MIN_SUCCESS,
    REQUIRED_STAGES,
    STAGE_ENTRY_POINTS,
    STAGE_ORDER,
)
from hiring_oracle.errors import InvalidConfigError


class CanonicalStage(str, Enum):
    LEAD = "LEAD"
    APPLIED = "APPLIED"
    SCREEN = "SCREEN"
    HM_SCREEN = "HM_SCREEN"
    ONSITE = "ONSITE"
    FINAL = "FINAL"
    OFFER = "OFFER"
    HIRED = "HIRED"
    REJECTED = "REJECTED"
    WITHDREW = "WITHDREW"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STAGES


TERMINAL_STAGES = frozenset(
    {CanonicalStage.HIRED, CanonicalStage.REJECTED, CanonicalStage.WITHDREW}
)
FUNNEL_ORDER: Tuple[CanonicalStage, ...] = tuple(CanonicalStage(s) for s in STAGE_ORDER)
REQUIRED_FUNNEL_STAGES: Tuple[CanonicalStage, ...] = tuple(
    CanonicalStage(s) for s in REQUIRED_STAGES
)
FUNNEL_ENTRY_POINTS: Dict[CanonicalStage, CanonicalStage] = {
    CanonicalStage(k): CanonicalStage(v) for k, v in STAGE_ENTRY_POINTS.items()
}


class ConfidenceLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INSUFFICIENT = "INSUFFICIENT"


@dataclass(frozen=True)
class BetaPosterior:
    """Posterior belief about a stage's pass rate.

    alpha: prior + successes
    beta:  prior + failures
    n:     observations behind the posterior (0 means prior only)
    """

    alpha: float
    beta: float
    mean: float
    variance: float
    ci95_lower: float
    ci95_upper: float
    n: int

    @property
    def ci_width(self) -> float:
        return self.ci95_upper - self.ci95_lower


@dataclass(frozen=True)
class GammaDistribution:
    shape: float
    rate: float
    mean: float
    variance: float
    cv: float
    n: int


@dataclass(frozen=True)
class StageParams:
    stage: CanonicalStage
    conversion_rate: BetaPosterior
    duration: GammaDistribution


@dataclass(frozen=True)
class StageHistoricalData:
    """Aggregated history for one stage, as produced by the event generator."""

    stage: CanonicalStage
    entered: int
    passed: int
    durations: Sequence[float] = ()


@dataclass(frozen=True)
class PipelineCandidate:
    candidate_id: str
    current_stage: CanonicalStage

    @property
    def is_active(self) -> bool:
        return not CanonicalStage(self.current_stage).is_terminal


@dataclass(frozen=True)
class ConfidenceThresholds:
    high_min_n: int = HIGH_CONFIDENCE_MIN_N
    high_min_success: float = HIGH_CONFIDENCE_MIN_SUCCESS
    medium_min_n: int = MEDIUM_CONFIDENCE_MIN_N
    medium_min_success: float = MEDIUM_CONFIDENCE_MIN_SUCCESS
    low_min_n: int = LOW_CONFIDENCE_MIN_N


@dataclass(frozen=True)
class ForecastConfig:
    iterations: int = DEFAULT_ITERATIONS
    bootstrap_samples: int = DEFAULT_BOOTSTRAP_SAMPLES
    prior_strength: float = DEFAULT_PRIOR_STRENGTH
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE
    seed: Union[str, int] = DEFAULT_SEED
    thresholds: ConfidenceThresholds = field(default_factory=ConfidenceThresholds)

    def __post_init__(self):
        if self.iterations < 1:
            raise InvalidConfigError(f"iterations must be >= 1, got {self.iterations}")
        if self.bootstrap_samples < 0:
            raise InvalidConfigError(
                f"bootstrap_samples must be >= 0, got {self.bootstrap_samples}"
            )
        if self.prior_strength <= 0:
            raise InvalidConfigError(
                f"prior_strength must be > 0, got {self.prior_strength}"
            )
        if self.min_sample_size < 0:
            raise InvalidConfigError(
                f"min_sample_size must be >= 0, got {self.min_sample_size}"
            )


DEFAULT_FORECAST_CONFIG = ForecastConfig()


@dataclass(frozen=True)
class PercentileInterval:
    lower: float
    upper: float

    @property
    def width(self) -> float:
        return self.upper - self.lower


@dataclass(frozen=True)
class ConfidenceIntervals:
    p10: PercentileInterval
    p50: PercentileInterval
    p90: PercentileInterval


@dataclass(frozen=True)
class ForecastDebug:
    iterations: int
    bootstrap_samples: int
    seed: Union[str, int]
    successful_iterations: int
    elapsed_ms: float


@dataclass(frozen=True)
class ForecastResult:
    p10_date: date
    p50_date: date
    p90_date: date
    p10_days: float
    p50_days: float
    p90_days: float
    simulated_days: Tuple[int, ...]
    success_probability: float
    success_probability_ci: Tuple[float, float]
    confidence_level: ConfidenceLevel
    confidence_intervals: ConfidenceIntervals
    stage_params: Tuple[StageParams, ...]
    debug: ForecastDebug

    @property
    def successful_iterations(self) -> int:
        return self.debug.successful_iterations

    def stage(self, stage: CanonicalStage) -> Optional[StageParams]:
        for params in self.stage_params:
            if params.stage == stage:
                return params
        return None

    def to_legacy(self) -> Dict:
        """Reduce to the shape consumed by the older forecasting widgets."""
        level = self.confidence_level
        if level == ConfidenceLevel.INSUFFICIENT:
            level = ConfidenceLevel.LOW
        return {
            'p10_date': self.p10_date,
            'p50_date': self.p50_date,
            'p90_date': self.p90_date,
            'simulated_days': list(self.simulated_days),
            'confidence_level': level.value,
            'debug': {
                'iterations': self.debug.iterations,
                'seed': self.debug.seed,
            },
        }
