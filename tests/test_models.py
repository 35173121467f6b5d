from datetime import date

import pytest

from hiring_oracle.errors import InvalidConfigError, OracleError
from hiring_oracle.models import (
    CanonicalStage,
    ConfidenceLevel,
    ForecastConfig,
    PipelineCandidate,
)
from hiring_oracle.simulation import run_oracle_forecast


@pytest.mark.parametrize("kwargs", [
    {"iterations": 0},
    {"bootstrap_samples": -1},
    {"prior_strength": 0},
    {"min_sample_size": -2},
])
def test_forecast_config_rejects_invalid_values(kwargs):
    with pytest.raises(InvalidConfigError):
        ForecastConfig(**kwargs)


def test_invalid_config_is_a_value_error():
    with pytest.raises(ValueError):
        ForecastConfig(iterations=-5)
    assert issubclass(InvalidConfigError, OracleError)


def test_forecast_config_defaults():
    config = ForecastConfig()

    assert config.bootstrap_samples == 200
    assert config.prior_strength == 2
    assert config.min_sample_size == 5
    assert config.thresholds.high_min_n == 20


def test_candidate_activity():
    assert PipelineCandidate("c1", CanonicalStage.ONSITE).is_active
    assert PipelineCandidate("c2", CanonicalStage.LEAD).is_active
    assert not PipelineCandidate("c3", CanonicalStage.HIRED).is_active
    assert not PipelineCandidate("c4", "WITHDREW").is_active


def test_result_is_immutable(stage_params, fast_config):
    result = run_oracle_forecast([PipelineCandidate("c1", CanonicalStage.OFFER)],
                                 stage_params, date(2024, 1, 1), fast_config)

    with pytest.raises(AttributeError):
        result.success_probability = 1.0


def test_result_stage_lookup(stage_params, fast_config):
    result = run_oracle_forecast([PipelineCandidate("c1", CanonicalStage.OFFER)],
                                 stage_params, date(2024, 1, 1), fast_config)

    assert result.stage(CanonicalStage.OFFER).conversion_rate.n == 8
    assert result.stage(CanonicalStage.LEAD) is None


def test_to_legacy_maps_insufficient_to_low(stage_params):
    result = run_oracle_forecast([], stage_params, date(2024, 1, 1), ForecastConfig(seed="legacy"))

    legacy = result.to_legacy()

    assert result.confidence_level == ConfidenceLevel.INSUFFICIENT
    assert legacy['confidence_level'] == 'LOW'
    assert legacy['simulated_days'] == []
    assert legacy['debug'] == {'iterations': result.debug.iterations, 'seed': 'legacy'}
    assert legacy['p50_date'] == result.p50_date
