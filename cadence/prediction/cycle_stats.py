"""Cycle history statistics for trend charts and summary cards.

Outlier gaps are dropped with the same plausibility predicate the predictor
uses, so the chart and the prediction never disagree about what counts as a
real cycle.
"""

from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass, field
from datetime import date

from cadence.prediction.base import PeriodRecord, days_between, sort_by_start
from cadence.prediction.config_loader import PredictionConfig, get_prediction_config
from cadence.prediction.cycle_predictor import is_plausible_cycle_length

logger = logging.getLogger("cadence.prediction.cycle_stats")


@dataclass(frozen=True)
class CycleLengthPoint:
    """One plausible cycle on the trend chart.

    ``start_date`` is the start of the later period, i.e. the day the cycle
    was closed.
    """

    length: int
    start_date: date


@dataclass
class CycleStatistics:
    """Summary statistics over a period history.

    Attributes:
        cycle_lengths:        Plausible cycles, oldest first.
        avg_cycle_length:     Mean of plausible cycle lengths.
        std_cycle_length:     Sample standard deviation (needs >= 2 cycles).
        avg_period_length:    Mean period duration; ongoing periods count as
                              the declared period length.
        period_count:         Number of periods in the history.
        excluded_cycle_count: Gaps dropped as implausible.
        is_irregular:         True if cycle lengths vary more than the
                              configured threshold.
    """

    cycle_lengths: list[CycleLengthPoint] = field(default_factory=list)
    avg_cycle_length: float | None = None
    std_cycle_length: float | None = None
    avg_period_length: float | None = None
    period_count: int = 0
    excluded_cycle_count: int = 0
    is_irregular: bool = False


class CycleStatsCalculator:
    def __init__(self, config: PredictionConfig | None = None) -> None:
        self._config = config or get_prediction_config()

    def cycle_length_history(
        self, periods: list[PeriodRecord], cycle_length_setting: int
    ) -> tuple[list[CycleLengthPoint], int]:
        """Return plausible cycles (oldest first) and the number excluded."""
        ordered = sort_by_start(periods)
        points: list[CycleLengthPoint] = []
        excluded = 0
        for a, b in zip(ordered, ordered[1:]):
            length = days_between(a.start_date, b.start_date)
            if is_plausible_cycle_length(length, cycle_length_setting, self._config):
                points.append(CycleLengthPoint(length=length, start_date=b.start_date))
            else:
                excluded += 1
        return points, excluded

    def compute(
        self,
        periods: list[PeriodRecord],
        cycle_length_setting: int,
        period_length_setting: int,
    ) -> CycleStatistics:
        stats = CycleStatistics(period_count=len(periods))
        if not periods:
            return stats

        points, excluded = self.cycle_length_history(periods, cycle_length_setting)
        stats.cycle_lengths = points
        stats.excluded_cycle_count = excluded
        if excluded:
            logger.debug("Excluded %d implausible cycle(s) from statistics", excluded)

        lengths = [p.length for p in points]
        if lengths:
            stats.avg_cycle_length = round(statistics.mean(lengths), 1)
        if len(lengths) > 1:
            std = statistics.stdev(lengths)
            stats.std_cycle_length = round(std, 1)
            stats.is_irregular = std > self._config.statistics.irregular_std_days

        durations = [
            period_length_setting if p.is_ongoing else p.length_days
            for p in periods
        ]
        stats.avg_period_length = round(statistics.mean(durations), 1)
        return stats
