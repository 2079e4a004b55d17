"""Menstrual cycle prediction engine.

Estimates a person's cycle length and period length from noisy, sparse
history and projects future periods strictly after "today":

- Cycle length: recency-weighted mean of the last 6 start-to-start gaps,
  outliers removed, blended with the user's declared cycle length.
- Period length: mean observed duration of closed periods, blended with the
  user's declared period length.
- Next start: last start + estimated cycle, rolled forward by whole cycles
  until it lands after today.

The user settings act as pseudo-observations, so one noisy cycle cannot
dominate a short history.  Nothing here raises for "no data", "one data
point" or "everything filtered"; those come back as None, [] or a fallback.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from cadence.prediction.base import (
    PeriodRecord,
    PredictedWindow,
    add_days,
    days_between,
    round_half_up,
    sort_by_start,
)
from cadence.prediction.config_loader import PredictionConfig, get_prediction_config

logger = logging.getLogger("cadence.prediction.cycle_predictor")

Clock = Callable[[], date]


def is_plausible_cycle_length(
    length: int,
    cycle_length_setting: int,
    config: PredictionConfig | None = None,
) -> bool:
    """Return True if a start-to-start gap is trusted as a real cycle.

    The lower bound is fixed; the upper bound adapts to the declared cycle
    length so long-cycle users keep their legitimate variability.  The
    statistics calculator uses this same predicate for its trend chart.

    Args:
        length:               Gap in days between two period starts.
        cycle_length_setting: User-declared cycle length.
        config:               Override config (defaults to the global one).
    """
    cl = (config or get_prediction_config()).cycle
    return cl.min_days <= length <= cl.max_plausible_days(cycle_length_setting)


def max_plausible_cycle_length(
    cycle_length_setting: int, config: PredictionConfig | None = None
) -> int:
    return (config or get_prediction_config()).cycle.max_plausible_days(cycle_length_setting)


class CyclePredictor:
    """Predict upcoming periods from logged history and user settings.

    Usage::

        predictor = CyclePredictor()
        start = predictor.predict_next_start(periods, cycle_length_setting=28)
        window = predictor.predict_period_window(periods, 28, 5)
        upcoming = predictor.predict_future_periods(periods, 28, 5, count=6)

    ``clock`` supplies "today"; pass a fixed callable for reproducible
    results.  The predictor holds no state beyond its config and clock.
    """

    def __init__(
        self,
        config: PredictionConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or get_prediction_config()
        self._clock: Clock = clock or date.today

    @property
    def config(self) -> PredictionConfig:
        return self._config

    def today(self) -> date:
        return self._clock()

    # ------------------------------------------------------------------
    # Estimators
    # ------------------------------------------------------------------

    def is_plausible_cycle_length(self, length: int, cycle_length_setting: int) -> bool:
        return is_plausible_cycle_length(length, cycle_length_setting, self._config)

    def cycle_gaps(self, periods: list[PeriodRecord]) -> list[int]:
        """Start-to-start gaps over the most recent window, oldest first.

        Args:
            periods: Periods sorted by start date ascending.
        """
        recent = periods[-self._config.cycle.recent_window:]
        return [
            days_between(a.start_date, b.start_date)
            for a, b in zip(recent, recent[1:])
        ]

    def estimate_cycle_length(
        self, periods: list[PeriodRecord], cycle_length_setting: int
    ) -> int:
        """Estimate the current cycle length in days.

        The k-th surviving gap (oldest = 1) carries weight k, and the setting
        is added as ``prior_weight`` extra observations.

        Args:
            periods:              Periods sorted by start date ascending.
            cycle_length_setting: User-declared cycle length.

        Returns:
            Blended estimate, never below the minimum plausible cycle.
        """
        if len(periods) < 2:
            return cycle_length_setting

        gaps = [
            g for g in self.cycle_gaps(periods)
            if self.is_plausible_cycle_length(g, cycle_length_setting)
        ]
        if not gaps:
            logger.debug("All cycle gaps rejected as implausible; using setting")
            return cycle_length_setting

        weighted_sum = sum(gap * weight for weight, gap in enumerate(gaps, start=1))
        weight_sum = len(gaps) * (len(gaps) + 1) // 2

        prior_weight = self._config.blending.prior_weight
        blended = (weighted_sum + cycle_length_setting * prior_weight) / (
            weight_sum + prior_weight
        )
        estimate = max(self._config.cycle.min_days, round_half_up(blended))
        logger.debug(
            "Cycle estimate %d from gaps=%s setting=%d", estimate, gaps, cycle_length_setting
        )
        return estimate

    def estimate_period_length(
        self, periods: list[PeriodRecord], period_length_setting: int
    ) -> int:
        """Estimate period duration from closed periods.

        Ongoing periods carry no duration and are skipped.  Durations
        outside the accepted range are ignored.
        """
        pl = self._config.period
        lengths = [
            p.length_days
            for p in periods
            if p.length_days is not None and pl.min_days <= p.length_days <= pl.max_days
        ]
        if not lengths:
            return period_length_setting

        mean = sum(lengths) / len(lengths)
        bl = self._config.blending
        blended = (mean * bl.observed_weight + period_length_setting * bl.prior_weight) / (
            bl.observed_weight + bl.prior_weight
        )
        return min(pl.max_days, max(pl.min_days, round_half_up(blended)))

    # ------------------------------------------------------------------
    # Single predictions
    # ------------------------------------------------------------------

    def predict_next_start(
        self, periods: list[PeriodRecord], cycle_length_setting: int
    ) -> date | None:
        """Predict the next period start, always strictly after today.

        Returns None when there is no history; callers fall back to
        ``settings_only_start``.
        """
        if not periods:
            return None

        ordered = sort_by_start(periods)
        cycle = self.estimate_cycle_length(ordered, cycle_length_setting)
        base = add_days(ordered[-1].start_date, cycle)
        return self._align_to_future(base, cycle)

    def _align_to_future(self, base: date, cycle: int) -> date:
        # Stale history: roll forward by whole cycles
        today = self.today()
        while base <= today:
            base = add_days(base, cycle)
        return base

    def settings_only_start(self, cycle_length_setting: int) -> date:
        """First prediction with no history, anchored to today."""
        return add_days(self.today(), cycle_length_setting)

    def predict_period_window(
        self,
        periods: list[PeriodRecord],
        cycle_length_setting: int,
        period_length_setting: int,
    ) -> PredictedWindow:
        """Predict the next period as an inclusive (start, end) window."""
        start = self.predict_next_start(periods, cycle_length_setting)
        if start is None:
            start = self.settings_only_start(cycle_length_setting)
        period_len = self.estimate_period_length(periods, period_length_setting)
        return PredictedWindow(start, add_days(start, period_len - 1))

    def predict_reminder_date(
        self, periods: list[PeriodRecord], cycle_length_setting: int
    ) -> date | None:
        """Date on which to remind the user of the upcoming period.

        None when there is no history to predict from.
        """
        start = self.predict_next_start(periods, cycle_length_setting)
        if start is None:
            return None
        return add_days(start, -self._config.reminder.days_before)

    # ------------------------------------------------------------------
    # Multi-window forecasts
    # ------------------------------------------------------------------

    def predict_future_periods(
        self,
        periods: list[PeriodRecord],
        cycle_length_setting: int,
        period_length_setting: int,
        count: int,
    ) -> list[PredictedWindow]:
        """Predict up to ``count`` upcoming periods.

        The horizon is ``count`` declared cycles from today, so fewer than
        ``count`` windows come back when the estimated cycle is longer than
        the setting.
        """
        if count <= 0:
            return []
        horizon = add_days(self.today(), count * cycle_length_setting)
        windows = self.predict_future_periods_until(
            periods, cycle_length_setting, period_length_setting, horizon
        )
        return windows[:count]

    def predict_future_periods_until(
        self,
        periods: list[PeriodRecord],
        cycle_length_setting: int,
        period_length_setting: int,
        end_date: date,
    ) -> list[PredictedWindow]:
        """Predict every period starting on or before ``end_date``.

        Always returns at least one window: when the first predicted start
        already falls after ``end_date`` it is returned on its own, so not
        every window is guaranteed to start within the horizon.
        """
        ordered = sort_by_start(periods)
        cycle = self.estimate_cycle_length(ordered, cycle_length_setting)
        period_len = self.estimate_period_length(ordered, period_length_setting)

        first_start = self.predict_next_start(ordered, cycle_length_setting)
        if first_start is None:
            first_start = self.settings_only_start(cycle_length_setting)

        if first_start > end_date:
            return [PredictedWindow(first_start, add_days(first_start, period_len - 1))]

        windows: list[PredictedWindow] = []
        current = first_start
        while current <= end_date:
            windows.append(PredictedWindow(current, add_days(current, period_len - 1)))
            current = add_days(current, cycle)

        logger.debug(
            "Forecast %d window(s) until %s (cycle=%d, period=%d)",
            len(windows),
            end_date,
            cycle,
            period_len,
        )
        return windows
