"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Annotated

from fastapi import Depends

from cadence.config import Settings, get_settings
from cadence.prediction.config_loader import (
    PredictionConfig,
    get_prediction_config,
    use_prediction_config_path,
)
from cadence.prediction.cycle_predictor import Clock, CyclePredictor


def get_clock() -> Clock:
    """Source of "today".  Tests override this to pin the date."""
    return date.today


def get_engine_config(settings: Annotated[Settings, Depends(get_settings)]) -> PredictionConfig:
    """Engine config from the global singleton.

    ``prediction_config_path`` points the singleton at an override file, so
    ``reload_prediction_config()`` refreshes it like the bundled one.
    """
    if settings.prediction_config_path:
        return use_prediction_config_path(Path(settings.prediction_config_path))
    return get_prediction_config()


def get_predictor(
    config: Annotated[PredictionConfig, Depends(get_engine_config)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> CyclePredictor:
    return CyclePredictor(config=config, clock=clock)


# Annotated shortcuts for route signatures
AppSettings = Annotated[Settings, Depends(get_settings)]
EngineConfig = Annotated[PredictionConfig, Depends(get_engine_config)]
Predictor = Annotated[CyclePredictor, Depends(get_predictor)]
