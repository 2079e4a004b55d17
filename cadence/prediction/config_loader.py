"""Load, validate, and hot-reload the Cadence prediction configuration.

The config lives in ``prediction_config.yaml`` alongside this module.  At
startup it is loaded once and cached.  Call ``reload_prediction_config()`` to
re-read from disk after an edit; no restart required.

Usage::

    from cadence.prediction.config_loader import get_prediction_config

    config = get_prediction_config()
    config.cycle.min_days                    # 15
    config.cycle.max_plausible_days(35)      # 63
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from cadence.prediction.base import round_half_up

logger = logging.getLogger("cadence.prediction.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "prediction_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CycleLengthConfig:
    """Plausibility bounds and window for cycle-length estimation."""

    min_days: int = 15
    max_days_floor: int = 50
    max_setting_factor: float = 1.8
    recent_window: int = 6

    def max_plausible_days(self, cycle_length_setting: int) -> int:
        """Adaptive upper bound; widens for people with long declared cycles."""
        scaled = round_half_up(cycle_length_setting * self.max_setting_factor)
        return max(self.max_days_floor, scaled)


@dataclass(frozen=True)
class PeriodLengthConfig:
    """Accepted range for an observed period duration."""

    min_days: int = 1
    max_days: int = 15


@dataclass(frozen=True)
class BlendingConfig:
    """Pseudo-count weights used to blend observations with user priors."""

    prior_weight: int = 2
    observed_weight: int = 1


@dataclass(frozen=True)
class PhaseConfig:
    """Cycle-phase labeling settings."""

    luteal_phase_days: int = 14
    fertile_window_days: int = 6
    ovulation_margin_days: int = 1


@dataclass(frozen=True)
class StatisticsConfig:
    irregular_std_days: float = 7.0


@dataclass(frozen=True)
class ReminderConfig:
    days_before: int = 1


@dataclass(frozen=True)
class PredictionConfig:
    """Complete, validated prediction configuration.

    This is the single in-memory representation of prediction_config.yaml.
    The predictor, phase labeler and statistics calculator all read from it.

    Attributes:
        version:    Config schema version string.
        cycle:      Cycle-length plausibility and estimation window.
        period:     Period-length acceptance range.
        blending:   Prior/observation weights.
        phase:      Phase labeling parameters.
        statistics: Trend statistics parameters.
        reminder:   Reminder offset for the notification collaborator.
    """

    version: str = "1.0"
    cycle: CycleLengthConfig = field(default_factory=CycleLengthConfig)
    period: PeriodLengthConfig = field(default_factory=PeriodLengthConfig)
    blending: BlendingConfig = field(default_factory=BlendingConfig)
    phase: PhaseConfig = field(default_factory=PhaseConfig)
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
    reminder: ReminderConfig = field(default_factory=ReminderConfig)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when prediction_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Prediction config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> PredictionConfig:
    """Validate the raw YAML dict and construct a PredictionConfig.

    Missing sections and keys fall back to the dataclass defaults.  Every
    problem found is collected and reported in a single exception.

    Raises:
        ConfigValidationError: If any value is missing a sane type or range.
    """
    errors: list[str] = []

    def _section(name: str) -> dict:
        value = raw.get(name) or {}
        if not isinstance(value, dict):
            errors.append(f"'{name}' must be a mapping")
            return {}
        return value

    def _int(d: dict, key: str, section: str, default: int, minimum: int) -> int:
        val: Any = d.get(key, default)
        if isinstance(val, bool):
            errors.append(f"{section}.{key} must be an integer, got {val!r}")
            return default
        try:
            result = int(val)
        except (TypeError, ValueError):
            errors.append(f"{section}.{key} must be an integer, got {val!r}")
            return default
        if result < minimum:
            errors.append(f"{section}.{key} = {result} must be >= {minimum}")
        return result

    def _float(d: dict, key: str, section: str, default: float) -> float:
        val: Any = d.get(key, default)
        try:
            result = float(val)
        except (TypeError, ValueError):
            errors.append(f"{section}.{key} must be a number, got {val!r}")
            return default
        if result <= 0.0:
            errors.append(f"{section}.{key} = {result} must be positive")
        return result

    version = str(raw.get("version", "1.0"))

    # ── Cycle length ──
    cl_raw = _section("cycle_length")
    cycle = CycleLengthConfig(
        min_days=_int(cl_raw, "min_days", "cycle_length", 15, 1),
        max_days_floor=_int(cl_raw, "max_days_floor", "cycle_length", 50, 1),
        max_setting_factor=_float(cl_raw, "max_setting_factor", "cycle_length", 1.8),
        recent_window=_int(cl_raw, "recent_window", "cycle_length", 6, 2),
    )
    if cycle.min_days > cycle.max_days_floor:
        errors.append(
            f"cycle_length.min_days ({cycle.min_days}) exceeds "
            f"max_days_floor ({cycle.max_days_floor})"
        )

    # ── Period length ──
    pl_raw = _section("period_length")
    period = PeriodLengthConfig(
        min_days=_int(pl_raw, "min_days", "period_length", 1, 1),
        max_days=_int(pl_raw, "max_days", "period_length", 15, 1),
    )
    if period.min_days > period.max_days:
        errors.append(
            f"period_length.min_days ({period.min_days}) exceeds "
            f"max_days ({period.max_days})"
        )

    # ── Blending ──
    bl_raw = _section("blending")
    blending = BlendingConfig(
        prior_weight=_int(bl_raw, "prior_weight", "blending", 2, 0),
        observed_weight=_int(bl_raw, "observed_weight", "blending", 1, 1),
    )

    # ── Phase ──
    ph_raw = _section("phase")
    phase = PhaseConfig(
        luteal_phase_days=_int(ph_raw, "luteal_phase_days", "phase", 14, 1),
        fertile_window_days=_int(ph_raw, "fertile_window_days", "phase", 6, 1),
        ovulation_margin_days=_int(ph_raw, "ovulation_margin_days", "phase", 1, 0),
    )

    # ── Statistics ──
    st_raw = _section("statistics")
    statistics = StatisticsConfig(
        irregular_std_days=_float(st_raw, "irregular_std_days", "statistics", 7.0),
    )

    # ── Reminder ──
    rm_raw = _section("reminder")
    reminder = ReminderConfig(
        days_before=_int(rm_raw, "days_before", "reminder", 1, 0),
    )

    if errors:
        raise ConfigValidationError(
            f"prediction_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return PredictionConfig(
        version=version,
        cycle=cycle,
        period=period,
        blending=blending,
        phase=phase,
        statistics=statistics,
        reminder=reminder,
    )


def load_prediction_config(path: Path | None = None) -> PredictionConfig:
    """Load and validate the prediction config from disk.

    Args:
        path: Override path to YAML. Uses the bundled prediction_config.yaml by default.

    Returns:
        Validated PredictionConfig instance.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded prediction config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: PredictionConfig | None = None
_config_path: Path = _CONFIG_PATH
_config_lock = threading.Lock()


def get_prediction_config() -> PredictionConfig:
    """Return the global PredictionConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_prediction_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_prediction_config(_config_path)
    return _config


def use_prediction_config_path(path: Path) -> PredictionConfig:
    """Point the singleton at ``path`` and return the config loaded from it.

    Later ``reload_prediction_config()`` calls without an argument re-read this
    file.  Calling again with the current path is a no-op.
    """
    global _config, _config_path
    if path == _config_path and _config is not None:
        return _config
    new_config = load_prediction_config(path)
    with _config_lock:
        _config_path = path
        _config = new_config
    return new_config


def reload_prediction_config(path: Path | None = None) -> PredictionConfig:
    """Reload the prediction config from disk and replace the global singleton.

    Without ``path`` the file the singleton was last loaded from is re-read.
    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config, _config_path
    target = path or _config_path
    new_config = load_prediction_config(target)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config_path = target
        _config = new_config
    logger.info(
        "Reloaded prediction config: %s → %s",
        old_version,
        new_config.version,
    )
    return new_config
