"""Canonical data models shared by the prediction engine.

Every collaborator (record store, calendar, notifications, statistics)
talks to the engine through these two types:

    PeriodRecord     — one observed period, read-only snapshot
    PredictedWindow  — one projected period, derived and never persisted
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterator


@dataclass(frozen=True)
class PeriodRecord:
    """A single observed menstrual period.

    Attributes:
        start_date: First day of bleeding.
        end_date:   Last day of bleeding, or None while the period is ongoing.
        period_id:  Opaque identifier from the record store.
    """

    start_date: date
    end_date: date | None = None
    period_id: Any = None

    @property
    def is_ongoing(self) -> bool:
        return self.end_date is None

    @property
    def length_days(self) -> int | None:
        """Inclusive duration in days, or None for an ongoing period."""
        if self.end_date is None:
            return None
        return days_between(self.start_date, self.end_date) + 1


@dataclass(frozen=True)
class PredictedWindow:
    """A projected period, inclusive on both ends.

    Unpacks as a ``(start, end)`` pair::

        start, end = predictor.predict_period_window(periods, 28, 5)
    """

    start_date: date
    end_date: date

    @property
    def length_days(self) -> int:
        return days_between(self.start_date, self.end_date) + 1

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def __iter__(self) -> Iterator[date]:
        yield self.start_date
        yield self.end_date


def days_between(start: date, end: date) -> int:
    """Signed number of days from ``start`` to ``end``."""
    return (end - start).days


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def sort_by_start(periods: list[PeriodRecord]) -> list[PeriodRecord]:
    """Return a new list ordered by start date, oldest first."""
    return sorted(periods, key=lambda p: p.start_date)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for value >= 0."""
    # Built-in round() uses banker's rounding (round(26.5) == 26)
    return math.floor(value + 0.5)
