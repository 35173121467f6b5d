from datetime import date

import pytest

from hiring_oracle.models import CanonicalStage, ForecastConfig, StageHistoricalData
from hiring_oracle.stage_params import build_stage_params

START_DATE = date(2024, 1, 1)


@pytest.fixture
def start_date():
    return START_DATE


@pytest.fixture
def funnel_history():
    return [
        StageHistoricalData(CanonicalStage.SCREEN, entered=100, passed=40,
                            durations=[5] * 10),
        StageHistoricalData(CanonicalStage.HM_SCREEN, entered=40, passed=20,
                            durations=[7] * 10),
        StageHistoricalData(CanonicalStage.ONSITE, entered=20, passed=8,
                            durations=[10] * 8),
        StageHistoricalData(CanonicalStage.OFFER, entered=8, passed=7,
                            durations=[5] * 7),
    ]


@pytest.fixture
def stage_params(funnel_history):
    return build_stage_params(funnel_history, prior_strength=2)


@pytest.fixture
def fast_config():
    return ForecastConfig(iterations=500, bootstrap_samples=50, seed="test-seed-1")
