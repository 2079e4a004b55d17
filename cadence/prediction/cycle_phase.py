"""Simple cycle-phase labeling for calendar days.

Phases are derived from the calendar alone: the most recent logged period
anchors the cycle, ovulation is placed a fixed luteal length before the next
expected start, and the fertile window ends on the ovulation day.  Past the
next expected start, the latest predicted window that has begun takes over
as the anchor.  This is a display aid, not a fertility or medical signal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from cadence.prediction.base import (
    PeriodRecord,
    PredictedWindow,
    add_days,
    days_between,
    sort_by_start,
)
from cadence.prediction.config_loader import PhaseConfig
from cadence.prediction.cycle_predictor import CyclePredictor

logger = logging.getLogger("cadence.prediction.cycle_phase")


class CyclePhase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    ovulation = "ovulation"
    luteal = "luteal"


@dataclass(frozen=True)
class PhaseInfo:
    """Phase details for a single day.

    Attributes:
        day:                  The day being labeled.
        phase:                Phase the day falls in.
        cycle_day:            Day within the anchoring cycle (1-indexed).
        cycle_start:          Start of the logged or predicted period anchoring
                              this cycle.
        estimated_cycle_length: Cycle length used for the labeling.
        ovulation_date:       Estimated ovulation date for this cycle.
        fertile_window_start: First day of the fertile window.
        fertile_window_end:   Last day of the fertile window (ovulation day).
        is_overdue:           True for a day up to today that is past the expected
                              next start with no new period logged.
        is_projected:         True when the anchor is a predicted window.
    """

    day: date
    phase: CyclePhase
    cycle_day: int
    cycle_start: date
    estimated_cycle_length: int
    ovulation_date: date
    fertile_window_start: date
    fertile_window_end: date
    is_overdue: bool = False
    is_projected: bool = False

    def in_fertile_window(self) -> bool:
        return self.fertile_window_start <= self.day <= self.fertile_window_end


class CyclePhaseLabeler:
    """Label days with a cycle phase using the predictor's estimates."""

    def __init__(self, predictor: CyclePredictor | None = None) -> None:
        self._predictor = predictor or CyclePredictor()

    @property
    def _phase_config(self) -> PhaseConfig:
        return self._predictor.config.phase

    def _projected_window(
        self,
        periods: list[PeriodRecord],
        cycle_length_setting: int,
        period_length_setting: int,
        day: date,
    ) -> PredictedWindow | None:
        """Latest predicted window starting on or before ``day``, if any."""
        windows = self._predictor.predict_future_periods_until(
            periods, cycle_length_setting, period_length_setting, day
        )
        started = [w for w in windows if w.start_date <= day]
        return started[-1] if started else None

    def phase_on(
        self,
        periods: list[PeriodRecord],
        cycle_length_setting: int,
        period_length_setting: int,
        day: date,
    ) -> PhaseInfo | None:
        """Return phase info for ``day``, or None if no period started by then.

        Once ``day`` reaches the next expected start, the cycle is re-anchored
        on the latest predicted window that has begun, so days inside a
        forecast window read as menstrual.  Without such a window the logged
        period stays the anchor and days up to today are flagged overdue.
        """
        ordered = sort_by_start(periods)
        started = [p for p in ordered if p.start_date <= day]
        if not started:
            logger.debug("No period logged on or before %s", day)
            return None

        anchor = started[-1]
        pc = self._phase_config
        cycle = self._predictor.estimate_cycle_length(ordered, cycle_length_setting)

        projected = None
        if days_between(anchor.start_date, day) >= cycle:
            projected = self._projected_window(
                ordered, cycle_length_setting, period_length_setting, day
            )

        if projected is not None:
            cycle_start = projected.start_date
            bleed_days = projected.length_days
        elif anchor.length_days is not None:
            cycle_start = anchor.start_date
            bleed_days = anchor.length_days
        else:
            cycle_start = anchor.start_date
            bleed_days = self._predictor.estimate_period_length(ordered, period_length_setting)

        cycle_day = days_between(cycle_start, day) + 1
        ovulation = add_days(cycle_start, max(0, cycle - pc.luteal_phase_days))
        fertile_start = add_days(ovulation, -(pc.fertile_window_days - 1))
        offset = days_between(ovulation, day)

        if cycle_day <= bleed_days:
            phase = CyclePhase.menstrual
        elif abs(offset) <= pc.ovulation_margin_days:
            phase = CyclePhase.ovulation
        elif offset < 0:
            phase = CyclePhase.follicular
        else:
            phase = CyclePhase.luteal

        is_overdue = (
            projected is None
            and cycle_day > cycle
            and day <= self._predictor.today()
        )
        return PhaseInfo(
            day=day,
            phase=phase,
            cycle_day=cycle_day,
            cycle_start=cycle_start,
            estimated_cycle_length=cycle,
            ovulation_date=ovulation,
            fertile_window_start=fertile_start,
            fertile_window_end=ovulation,
            is_overdue=is_overdue,
            is_projected=projected is not None,
        )

    def is_predicted_period_day(
        self,
        periods: list[PeriodRecord],
        cycle_length_setting: int,
        period_length_setting: int,
        day: date,
    ) -> bool:
        """True if ``day`` falls inside any predicted window up to that day."""
        windows = self._predictor.predict_future_periods_until(
            periods, cycle_length_setting, period_length_setting, day
        )
        return any(w.contains(day) for w in windows)
