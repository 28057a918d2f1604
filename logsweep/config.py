#!/usr/bin/env python3
"""
Sweep configuration for logsweep.

SweepConfig holds the user-facing parameters, all optional except the sweep
duration. resolve() fills the documented defaults once and validates the
result, so the synthesis code only ever sees a ResolvedSweepConfig.
"""

import logging
import math
from dataclasses import dataclass, asdict, replace
from typing import Optional, Tuple

from logsweep.errors import ConfigurationError

DEFAULT_FADE_OUT_TIME = 0.1  # seconds
DEFAULT_FREQUENCY_RANGE = (20.0, 24000.0)  # Hz
DEFAULT_REPETITION_COUNT = 1


@dataclass(frozen=True)
class ResolvedSweepConfig:
    sweep_duration: float
    fade_out_time: float
    frequency_range: Tuple[float, float]
    sample_rate: float
    repetition_count: int
    inter_sweep_interval: float

    @property
    def f_low(self) -> float:
        return self.frequency_range[0]

    @property
    def f_high(self) -> float:
        return self.frequency_range[1]

    @property
    def data_length(self) -> int:
        """Samples in one sweep: floor(sample_rate * sweep_duration) + 1."""
        return int(math.floor(self.sample_rate * self.sweep_duration)) + 1

    @property
    def fade_out_samples(self) -> int:
        return int(math.ceil(self.fade_out_time * self.sample_rate))

    @property
    def composite_length(self) -> int:
        period = self.sweep_duration + self.inter_sweep_interval
        return int(math.floor(period * self.repetition_count * self.sample_rate)) + 1

    def to_dict(self) -> dict:
        data = asdict(self)
        data["frequency_range"] = list(self.frequency_range)
        return data


@dataclass
class SweepConfig:
    """
    Parameters of an exponential sweep measurement signal.

    Args:
        sweep_duration: Length of one sweep in seconds (required, > 0)
        fade_out_time: Length of the tail fade in seconds (default 0.1)
        frequency_range: (f_low, f_high) in Hz (default 20 Hz - 24 kHz)
        sample_rate: Sampling rate in Hz (default 2 * f_high)
        repetition_count: Number of sweeps in the composite (default 1)
        inter_sweep_interval: Silence between sweeps in seconds
            (default sweep_duration)
    """

    sweep_duration: float
    fade_out_time: Optional[float] = None
    frequency_range: Optional[Tuple[float, float]] = None
    sample_rate: Optional[float] = None
    repetition_count: Optional[int] = None
    inter_sweep_interval: Optional[float] = None

    @classmethod
    def from_dict(cls, data):
        """Build a config from a mapping such as a parsed JSON file."""
        known = {
            "sweep_duration", "fade_out_time", "frequency_range",
            "sample_rate", "repetition_count", "inter_sweep_interval",
        }
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Sweep parameters must be a mapping, got {type(data).__name__}"
            )
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown sweep parameters: {', '.join(sorted(unknown))}")
        if "sweep_duration" not in data:
            raise ConfigurationError("sweep_duration is required")

        values = dict(data)
        if isinstance(values.get("frequency_range"), list):
            values["frequency_range"] = tuple(values["frequency_range"])
        return cls(**values)

    def resolve(self) -> ResolvedSweepConfig:
        """Substitute defaults for absent fields and validate the result."""
        frequency_range = self.frequency_range
        if frequency_range is None:
            frequency_range = DEFAULT_FREQUENCY_RANGE
        try:
            f_low, f_high = frequency_range
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"frequency_range must be a (low, high) pair, got {frequency_range!r}"
            ) from None
        f_low = _as_float("frequency_range low", f_low)
        f_high = _as_float("frequency_range high", f_high)
        sweep_duration = _as_float("sweep_duration", self.sweep_duration)

        resolved = ResolvedSweepConfig(
            sweep_duration=sweep_duration,
            fade_out_time=_as_float(
                "fade_out_time", DEFAULT_FADE_OUT_TIME if self.fade_out_time is None else self.fade_out_time
            ),
            frequency_range=(f_low, f_high),
            sample_rate=_as_float("sample_rate", 2 * f_high if self.sample_rate is None else self.sample_rate),
            repetition_count=_as_float(
                "repetition_count",
                DEFAULT_REPETITION_COUNT if self.repetition_count is None else self.repetition_count,
            ),
            inter_sweep_interval=_as_float(
                "inter_sweep_interval",
                sweep_duration if self.inter_sweep_interval is None else self.inter_sweep_interval,
            ),
        )
        validate_config(resolved)
        return replace(resolved, repetition_count=int(resolved.repetition_count))


def _as_float(name, value):
    """Convert a parameter to float, rejecting booleans and non-numeric values."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


def validate_config(config: ResolvedSweepConfig) -> None:
    """
    Reject configurations that cannot be synthesized.

    Raises:
        ConfigurationError: on the first violated constraint
    """
    for name, value in [
        ("sweep_duration", config.sweep_duration),
        ("fade_out_time", config.fade_out_time),
        ("frequency_range low", config.f_low),
        ("frequency_range high", config.f_high),
        ("sample_rate", config.sample_rate),
        ("repetition_count", config.repetition_count),
        ("inter_sweep_interval", config.inter_sweep_interval),
    ]:
        if isinstance(value, bool) or not math.isfinite(value):
            raise ConfigurationError(f"{name} must be a finite number, got {value!r}")

    # sample counts must stay representable before they are converted to int
    total = (config.sweep_duration + config.inter_sweep_interval) * config.repetition_count * config.sample_rate
    if not math.isfinite(total) or not math.isfinite(config.fade_out_time * config.sample_rate):
        raise ConfigurationError("Sweep parameters give a sample count that is not finite")

    if not config.sweep_duration > 0:
        raise ConfigurationError(f"sweep_duration must be positive, got {config.sweep_duration}")
    if not config.fade_out_time >= 0:
        raise ConfigurationError(f"fade_out_time must not be negative, got {config.fade_out_time}")
    if not 0 < config.f_low < config.f_high:
        raise ConfigurationError(
            f"frequency_range must satisfy 0 < low < high, got {config.frequency_range}"
        )
    if int(config.repetition_count) != config.repetition_count or config.repetition_count < 1:
        raise ConfigurationError(
            f"repetition_count must be an integer >= 1, got {config.repetition_count!r}"
        )
    if not config.inter_sweep_interval >= 0:
        raise ConfigurationError(
            f"inter_sweep_interval must not be negative, got {config.inter_sweep_interval}"
        )
    if config.sample_rate < 2 * config.f_high:
        raise ConfigurationError(
            f"Sample rate {config.sample_rate:g} Hz is below the Nyquist rate "
            f"{2 * config.f_high:g} Hz required by the {config.f_high:g} Hz upper frequency"
        )
    if config.fade_out_samples >= config.data_length:
        raise ConfigurationError(
            f"Fade-out of {config.fade_out_samples} samples does not fit in a "
            f"{config.data_length}-sample sweep"
        )
    logging.info(
        f"Sweep config validated: {config.sweep_duration}s, "
        f"{config.f_low:g}-{config.f_high:g}Hz at {config.sample_rate:g}Hz, "
        f"{config.repetition_count} repetition(s)"
    )
