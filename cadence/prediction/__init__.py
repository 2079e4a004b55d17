"""Cadence cycle prediction engine.

Pure, deterministic functions over an in-memory period history.  No I/O,
no persistence, no state between calls; "today" comes from an injectable
clock.

Modules:
    base            — PeriodRecord, PredictedWindow and date helpers
    config_loader   — Load/validate/hot-reload prediction_config.yaml
    cycle_predictor — Cycle/period length estimation and future windows
    cycle_phase     — Calendar-based cycle phase labeling
    cycle_stats     — Outlier-filtered history statistics
"""

from cadence.prediction.base import PeriodRecord, PredictedWindow
from cadence.prediction.config_loader import PredictionConfig, get_prediction_config
from cadence.prediction.cycle_phase import CyclePhase, CyclePhaseLabeler, PhaseInfo
from cadence.prediction.cycle_predictor import CyclePredictor, is_plausible_cycle_length
from cadence.prediction.cycle_stats import CycleStatistics, CycleStatsCalculator

__all__ = [
    "PeriodRecord",
    "PredictedWindow",
    "PredictionConfig",
    "get_prediction_config",
    "CyclePredictor",
    "is_plausible_cycle_length",
    "CyclePhase",
    "CyclePhaseLabeler",
    "PhaseInfo",
    "CycleStatistics",
    "CycleStatsCalculator",
]
