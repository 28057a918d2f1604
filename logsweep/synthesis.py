#!/usr/bin/env python3
"""
Exponential Sine Sweep Synthesis

Generates the logarithmic sweep stimulus used for impulse response
measurement (Farina's method) and tiles it into a repeated playback signal.

Pipeline:
    1. Instantaneous frequency: geometric ramp from f_low to f_high
    2. Phase: trapezoidal integration of 2*pi*f
    3. Trim: zero the phase after its last wrap below a multiple of pi
    4. Fade-out: descending half of a Hann window over the tail
    5. Tiling: copies placed in a zero buffer with half an interval lead-in
"""

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Union

import numpy as np
from scipy import integrate
from scipy import signal

from logsweep.config import SweepConfig, ResolvedSweepConfig
from logsweep.errors import AllocationBoundsError, ConfigurationError, NumericDegeneracyError

# 2**28 float64 samples is 2 GiB
MAX_COMPOSITE_SAMPLES = 2 ** 28


class SweepResult(NamedTuple):
    composite: np.ndarray
    single: np.ndarray
    repetition_count: int
    inter_sweep_interval: float


@dataclass
class SweepSignals:
    """Every intermediate array of one synthesis run."""
    config: ResolvedSweepConfig
    time: np.ndarray
    frequency: np.ndarray
    phase: np.ndarray
    trimmed_phase: np.ndarray
    cutoff_index: int
    single: np.ndarray
    offsets: np.ndarray
    composite: np.ndarray

    def as_result(self) -> SweepResult:
        return SweepResult(
            self.composite,
            self.single,
            self.config.repetition_count,
            self.config.inter_sweep_interval,
        )


def time_vector(sweep_duration, sample_rate):
    """Sample instants 0, 1/fs, ... up to sweep_duration (floor(fs*T)+1 points)."""
    n = int(math.floor(sample_rate * sweep_duration)) + 1
    return np.arange(n) / sample_rate


def instantaneous_frequency(t, frequency_range, sweep_duration):
    """
    Exponential frequency trajectory f(t) = f_low * (f_high/f_low)^(t/T).

    The constant ratio per unit time gives equal time (and energy) per octave.
    """
    f_low, f_high = frequency_range
    return f_low * np.power(f_high / f_low, t / sweep_duration)


def integrate_phase(frequency, sample_rate):
    """
    Integrate instantaneous frequency into phase with the trapezoidal rule.

    phase[0] = 0, phase[k] = phase[k-1] + 2*pi*(f[k] + f[k-1]) / (2*fs)
    """
    return 2 * np.pi * integrate.cumulative_trapezoid(frequency, dx=1.0 / sample_rate, initial=0)


def find_phase_cutoff(phase) -> Optional[int]:
    """
    Index of the last local peak of phase mod pi, or None if there is none.

    A peak is where the first difference of the wrapped phase goes from
    positive to negative, i.e. the last sample before the sine crosses zero.
    """
    wrapped = np.mod(phase, np.pi)
    step = np.diff(wrapped)
    peaks = (step[:-1] > 0) & (step[1:] < 0)

    # Search from the end
    hits = np.flatnonzero(peaks[::-1])
    if hits.size == 0:
        return None
    return len(peaks) - int(hits[0])


def trim_phase(phase):
    """
    Zero all phase values after the last wrap so the sweep ends on a zero crossing.

    Returns:
        tuple: (trimmed phase, cutoff index)

    Raises:
        NumericDegeneracyError: if the phase never wraps past a multiple of pi
    """
    cutoff = find_phase_cutoff(phase)
    if cutoff is None:
        raise NumericDegeneracyError(
            f"No phase zero crossing found in {len(phase)} samples; "
            "the sweep is too short for its lowest frequency"
        )
    trimmed = np.array(phase, dtype=float, copy=True)
    trimmed[cutoff + 1:] = 0.0
    return trimmed, cutoff


def apply_fade_out(sweep, fade_out_time, sample_rate, sweep_duration):
    """
    Taper the sweep tail with the descending half of a symmetric Hann window.

    The window covers ceil(fade_out_time * fs) samples and ends at the last
    sample of the sweep, which therefore becomes exactly zero.

    Raises:
        ConfigurationError: if the fade is not shorter than the sweep
    """
    fade_out_samples = int(math.ceil(fade_out_time * sample_rate))
    data_length = int(math.floor(sample_rate * sweep_duration)) + 1
    if fade_out_samples >= data_length:
        raise ConfigurationError(
            f"Fade-out of {fade_out_samples} samples does not fit in a {data_length}-sample sweep"
        )

    faded = np.array(sweep, dtype=float, copy=True)
    if fade_out_samples == 0:
        return faded

    window = signal.get_window('hann', 2 * fade_out_samples, fftbins=False)
    faded[data_length - fade_out_samples:data_length] *= window[fade_out_samples:]
    return faded


def placement_offsets(repetition_count, inter_sweep_interval, sweep_duration, sample_rate):
    """
    First sample of each repetition in the composite signal.

    The first sweep starts after half an interval of silence so the gaps sit
    symmetrically around each repetition boundary.
    """
    initial_lag = inter_sweep_interval / 2
    period = sweep_duration + inter_sweep_interval
    return np.array([
        int(math.floor((initial_lag + period * i) * sample_rate))
        for i in range(repetition_count)
    ], dtype=np.int64)


def check_composite_size(length, max_samples=MAX_COMPOSITE_SAMPLES):
    if length > max_samples:
        raise AllocationBoundsError(
            f"Composite signal of {length} samples exceeds the limit of {max_samples} samples"
        )


def tile_repetitions(single, offsets, length, max_samples=MAX_COMPOSITE_SAMPLES):
    """
    Write copies of the single sweep into a zero buffer at the given offsets.

    Raises:
        AllocationBoundsError: if the buffer is too large or a copy would
            run past its end
    """
    check_composite_size(length, max_samples)
    composite = np.zeros(length)

    for i, offset in enumerate(offsets):
        end = int(offset) + len(single)
        if offset < 0 or end > length:
            raise AllocationBoundsError(
                f"Repetition {i + 1} spans samples {offset}-{end}, "
                f"outside the {length}-sample composite"
            )
        composite[offset:end] = single

    return composite


def synthesize_detailed(config: Union[SweepConfig, ResolvedSweepConfig],
                        max_samples: int = MAX_COMPOSITE_SAMPLES) -> SweepSignals:
    """
    Run the full synthesis pipeline and keep every intermediate array.

    Args:
        config: SweepConfig (defaults are resolved here) or an already
            resolved config
        max_samples: Upper bound on the composite buffer length

    Returns:
        SweepSignals with the single sweep, composite and intermediates
    """
    if isinstance(config, SweepConfig):
        config = config.resolve()

    logging.info(
        f"Synthesizing {config.repetition_count}x {config.sweep_duration}s sweep, "
        f"{config.f_low:g}-{config.f_high:g}Hz at {config.sample_rate:g}Hz"
    )
    check_composite_size(config.composite_length, max_samples)

    # 1. Frequency trajectory
    t = time_vector(config.sweep_duration, config.sample_rate)
    frequency = instantaneous_frequency(t, config.frequency_range, config.sweep_duration)
    logging.info(f"Step 1: frequency curve computed - {len(t)} samples")

    # 2. Phase
    phase = integrate_phase(frequency, config.sample_rate)
    logging.info(f"Step 2: phase integrated - final phase {phase[-1]:.1f} rad")

    # 3. Trim to the last zero crossing
    trimmed_phase, cutoff = trim_phase(phase)
    single = np.sin(trimmed_phase)
    logging.info(f"Step 3: phase trimmed after sample {cutoff} ({len(t) - cutoff - 1} samples zeroed)")

    # 4. Fade-out
    single = apply_fade_out(single, config.fade_out_time, config.sample_rate, config.sweep_duration)
    logging.info(f"Step 4: fade-out applied over {config.fade_out_samples} samples")

    # 5. Tiling
    offsets = placement_offsets(
        config.repetition_count, config.inter_sweep_interval,
        config.sweep_duration, config.sample_rate,
    )
    composite = tile_repetitions(single, offsets, config.composite_length, max_samples)
    logging.info(f"Step 5: {len(offsets)} repetition(s) placed in {len(composite)} samples at {offsets.tolist()}")

    return SweepSignals(
        config=config,
        time=t,
        frequency=frequency,
        phase=phase,
        trimmed_phase=trimmed_phase,
        cutoff_index=cutoff,
        single=single,
        offsets=offsets,
        composite=composite,
    )


def synthesize(config: Union[SweepConfig, ResolvedSweepConfig],
               max_samples: int = MAX_COMPOSITE_SAMPLES) -> SweepResult:
    """Synthesize and return (composite, single, repetition_count, inter_sweep_interval)."""
    return synthesize_detailed(config, max_samples).as_result()


def generate_sweep(sweep_duration, fade_out_time=None, frequency_range=None, sample_rate=None,
                   repetition_count=None, inter_sweep_interval=None) -> SweepResult:
    """
    Generate an exponential sweep and its repeated composite.

    Absent arguments take the defaults: 0.1s fade-out, 20Hz-24kHz,
    sample rate 2 * f_high, one repetition, interval equal to the duration.
    Repetition count and interval are returned since they may be defaults.

    Returns:
        SweepResult: (composite, single, repetition_count, inter_sweep_interval)
    """
    config = SweepConfig(
        sweep_duration=sweep_duration,
        fade_out_time=fade_out_time,
        frequency_range=frequency_range,
        sample_rate=sample_rate,
        repetition_count=repetition_count,
        inter_sweep_interval=inter_sweep_interval,
    )
    return synthesize(config)
