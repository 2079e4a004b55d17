"""Cycle prediction endpoints.

The caller sends the period history and the user's settings with every
request; nothing is stored server-side.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from cadence.dependencies import AppSettings, EngineConfig, Predictor
from cadence.models.base import ErrorDetail
from cadence.models.predictions import (
    CycleLengthPointRead,
    ForecastRead,
    ForecastRequest,
    NextPeriodRead,
    PhaseRead,
    PhaseRequest,
    PredictionRequest,
    StatisticsRead,
    WindowRead,
)
from cadence.prediction.base import sort_by_start
from cadence.prediction.cycle_phase import CyclePhaseLabeler
from cadence.prediction.cycle_stats import CycleStatsCalculator

router = APIRouter(prefix="/predictions", tags=["predictions"])
logger = logging.getLogger("cadence.routers.predictions")


def _settings_for(body: PredictionRequest, settings: AppSettings) -> tuple[int, int]:
    cycle = body.cycle_length or settings.default_cycle_length
    period = body.period_length or settings.default_period_length
    return cycle, period


@router.post("/next", response_model=NextPeriodRead)
async def next_period(
    body: PredictionRequest, settings: AppSettings, predictor: Predictor
) -> Any:
    cycle, period = _settings_for(body, settings)
    records = body.records()
    ordered = sort_by_start(records)
    window = predictor.predict_period_window(records, cycle, period)
    return NextPeriodRead(
        next_start=predictor.predict_next_start(records, cycle),
        window=WindowRead.from_window(window),
        reminder_date=predictor.predict_reminder_date(records, cycle),
        estimated_cycle_length=predictor.estimate_cycle_length(ordered, cycle),
        estimated_period_length=predictor.estimate_period_length(ordered, period),
    )


@router.post(
    "/forecast",
    response_model=ForecastRead,
    responses={400: {"model": ErrorDetail}},
)
async def forecast(
    body: ForecastRequest, settings: AppSettings, predictor: Predictor
) -> Any:
    if (body.count is None) == (body.until is None):
        raise HTTPException(
            status_code=400, detail="Provide exactly one of 'count' or 'until'"
        )

    cycle, period = _settings_for(body, settings)
    records = body.records()
    if body.count is not None:
        windows = predictor.predict_future_periods(records, cycle, period, body.count)
    else:
        windows = predictor.predict_future_periods_until(records, cycle, period, body.until)

    ordered = sort_by_start(records)
    return ForecastRead(
        estimated_cycle_length=predictor.estimate_cycle_length(ordered, cycle),
        estimated_period_length=predictor.estimate_period_length(ordered, period),
        windows=[WindowRead.from_window(w) for w in windows],
    )


@router.post(
    "/phase",
    response_model=PhaseRead,
    responses={404: {"model": ErrorDetail}},
)
async def phase(body: PhaseRequest, settings: AppSettings, predictor: Predictor) -> Any:
    cycle, period = _settings_for(body, settings)
    records = body.records()
    day = body.day or predictor.today()

    labeler = CyclePhaseLabeler(predictor)
    info = labeler.phase_on(records, cycle, period, day)
    if info is None:
        raise HTTPException(status_code=404, detail=f"No period logged on or before {day}")

    return PhaseRead(
        day=info.day,
        phase=info.phase,
        cycle_day=info.cycle_day,
        cycle_start=info.cycle_start,
        estimated_cycle_length=info.estimated_cycle_length,
        ovulation_date=info.ovulation_date,
        fertile_window_start=info.fertile_window_start,
        fertile_window_end=info.fertile_window_end,
        in_fertile_window=info.in_fertile_window(),
        is_overdue=info.is_overdue,
        is_projected=info.is_projected,
        is_predicted_period_day=labeler.is_predicted_period_day(records, cycle, period, day),
    )


@router.post("/stats", response_model=StatisticsRead)
async def stats(body: PredictionRequest, settings: AppSettings, config: EngineConfig) -> Any:
    cycle, period = _settings_for(body, settings)
    result = CycleStatsCalculator(config).compute(body.records(), cycle, period)
    logger.debug(
        "Computed stats over %d period(s), %d cycle(s) excluded",
        result.period_count,
        result.excluded_cycle_count,
    )
    return StatisticsRead(
        cycle_lengths=[
            CycleLengthPointRead(length=p.length, start_date=p.start_date)
            for p in result.cycle_lengths
        ],
        avg_cycle_length=result.avg_cycle_length,
        std_cycle_length=result.std_cycle_length,
        avg_period_length=result.avg_period_length,
        period_count=result.period_count,
        excluded_cycle_count=result.excluded_cycle_count,
        is_irregular=result.is_irregular,
    )
