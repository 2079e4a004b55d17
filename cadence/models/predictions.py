"""Pydantic models for cycle prediction requests and responses."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from pydantic import Field, field_validator, model_validator

from cadence.models.base import CadenceBase
from cadence.prediction.base import PeriodRecord, PredictedWindow
from cadence.prediction.cycle_phase import CyclePhase

# Request dates further out than this are rejected; forecasts walk forward
# from them and must stay well inside the calendar.
MAX_YEARS_AHEAD = 10


def latest_accepted_date() -> date:
    return date.today() + timedelta(days=365 * MAX_YEARS_AHEAD)


def _not_too_far_ahead(value: date | None) -> date | None:
    if value is not None and value > latest_accepted_date():
        raise ValueError(f"date must be within {MAX_YEARS_AHEAD} years from today")
    return value


# ---------- Periods ----------

class PeriodIn(CadenceBase):
    id: Any = None
    start_date: date
    end_date: date | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_within_range(cls, v: date | None) -> date | None:
        return _not_too_far_ahead(v)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "PeriodIn":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self

    def to_record(self) -> PeriodRecord:
        return PeriodRecord(
            start_date=self.start_date,
            end_date=self.end_date,
            period_id=self.id,
        )


class WindowRead(CadenceBase):
    start_date: date
    end_date: date
    length_days: int

    @classmethod
    def from_window(cls, window: PredictedWindow) -> "WindowRead":
        return cls(
            start_date=window.start_date,
            end_date=window.end_date,
            length_days=window.length_days,
        )


# ---------- Requests ----------

class PredictionRequest(CadenceBase):
    """History plus the user's settings.  Omitted settings use server defaults."""

    periods: list[PeriodIn] = Field(default_factory=list)
    cycle_length: int | None = Field(default=None, ge=1, le=99)
    period_length: int | None = Field(default=None, ge=1, le=99)

    def records(self) -> list[PeriodRecord]:
        return [p.to_record() for p in self.periods]


class ForecastRequest(PredictionRequest):
    count: int | None = Field(default=None, le=60)
    until: date | None = None

    @field_validator("until")
    @classmethod
    def until_within_range(cls, v: date | None) -> date | None:
        return _not_too_far_ahead(v)


class PhaseRequest(PredictionRequest):
    day: date | None = None  # defaults to today

    @field_validator("day")
    @classmethod
    def day_within_range(cls, v: date | None) -> date | None:
        return _not_too_far_ahead(v)


# ---------- Responses ----------

class NextPeriodRead(CadenceBase):
    next_start: date | None
    window: WindowRead
    reminder_date: date | None
    estimated_cycle_length: int
    estimated_period_length: int


class ForecastRead(CadenceBase):
    estimated_cycle_length: int
    estimated_period_length: int
    windows: list[WindowRead]


class PhaseRead(CadenceBase):
    day: date
    phase: CyclePhase
    cycle_day: int
    cycle_start: date
    estimated_cycle_length: int
    ovulation_date: date
    fertile_window_start: date
    fertile_window_end: date
    in_fertile_window: bool
    is_overdue: bool
    is_projected: bool
    is_predicted_period_day: bool


class CycleLengthPointRead(CadenceBase):
    length: int
    start_date: date


class StatisticsRead(CadenceBase):
    cycle_lengths: list[CycleLengthPointRead]
    avg_cycle_length: float | None
    std_cycle_length: float | None
    avg_period_length: float | None
    period_count: int
    excluded_cycle_count: int
    is_irregular: bool
