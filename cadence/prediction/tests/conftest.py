"""Shared fixtures and history builders for prediction engine tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from cadence.prediction.base import PeriodRecord
from cadence.prediction.config_loader import PredictionConfig, load_prediction_config
from cadence.prediction.cycle_predictor import CyclePredictor

# Fixed "today" for every engine test
TEST_TODAY = date(2026, 2, 23)


# ---------------------------------------------------------------------------
# History builders
# ---------------------------------------------------------------------------


def make_period(start: date, length: int | None = 5, period_id: int | None = None) -> PeriodRecord:
    """Closed period of ``length`` days, or ongoing when length is None."""
    end = start + timedelta(days=length - 1) if length is not None else None
    return PeriodRecord(start_date=start, end_date=end, period_id=period_id)


def periods_from_gaps(first_start: date, gaps: list[int], length: int = 5) -> list[PeriodRecord]:
    """Build consecutive periods whose start-to-start gaps are ``gaps``."""
    periods = [make_period(first_start, length, period_id=1)]
    start = first_start
    for i, gap in enumerate(gaps, start=2):
        start += timedelta(days=gap)
        periods.append(make_period(start, length, period_id=i))
    return periods


def recent_regular_periods(n: int = 3, cycle: int = 28, length: int = 5) -> list[PeriodRecord]:
    """n regular periods, the last one starting 4 days before TEST_TODAY."""
    last_start = TEST_TODAY - timedelta(days=4)
    first_start = last_start - timedelta(days=cycle * (n - 1))
    return periods_from_gaps(first_start, [cycle] * (n - 1), length)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def prediction_config() -> PredictionConfig:
    """Load the real bundled prediction config for tests."""
    return load_prediction_config()


@pytest.fixture
def predictor(prediction_config: PredictionConfig) -> CyclePredictor:
    return CyclePredictor(prediction_config, clock=lambda: TEST_TODAY)


@pytest.fixture
def regular_periods() -> list[PeriodRecord]:
    return recent_regular_periods()
