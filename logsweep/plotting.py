#!/usr/bin/env python3
"""
Plots of the composite signal and the single-sweep spectrum.
"""

import logging
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.ticker import EngFormatter


def composite_time_axis(composite, sample_rate):
    """Time in seconds for each sample of the composite signal."""
    return np.arange(len(composite)) / sample_rate


def sweep_spectrum(single, sample_rate):
    """
    Magnitude spectrum of the single sweep.

    Returns:
        tuple: (frequencies in Hz, linear magnitude), DC bin excluded so the
        result can go straight onto log axes
    """
    spectrum = np.fft.rfft(single)
    frequencies = np.fft.rfftfreq(len(single), 1 / sample_rate)
    return frequencies[1:], np.abs(spectrum[1:])


def _save(fig, output_path):
    if output_path:
        fig.savefig(output_path, dpi=120)
        logging.info(f"Saved figure to {output_path}")
        plt.close(fig)


def plot_composite(time, composite, output_path=None, ax=None):
    """Time-domain plot of the composite signal."""
    fig = None
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 3))
    ax.plot(time, composite, linewidth=0.5)
    ax.set_xlabel("Time [s]")
    ax.set_ylabel("Amplitude")
    ax.set_title("Composite sweep signal")
    ax.set_xlim(time[0], time[-1])
    ax.grid(True, alpha=0.3)
    if fig is not None:
        fig.tight_layout()
        _save(fig, output_path)
    return ax


def plot_spectrum(frequencies, magnitude, output_path=None, ax=None):
    """Log-log magnitude spectrum of the single sweep."""
    fig = None
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))
    ax.loglog(frequencies, magnitude, linewidth=0.8)
    ax.xaxis.set_major_formatter(EngFormatter(unit="Hz"))
    ax.set_xlabel("Frequency")
    ax.set_ylabel("Magnitude")
    ax.set_title("Single sweep spectrum")
    ax.grid(True, which="both", alpha=0.3)
    if fig is not None:
        fig.tight_layout()
        _save(fig, output_path)
    return ax


def plot_sweep(result, sample_rate, output_path=None):
    """
    Both panels in one figure: composite over time and single-sweep spectrum.

    Args:
        result: SweepResult (or any object with composite and single arrays)
        sample_rate: Sampling rate in Hz
        output_path: PNG destination; the figure is left open when None

    Returns:
        matplotlib Figure
    """
    fig, (ax_time, ax_freq) = plt.subplots(2, 1, figsize=(10, 7))
    plot_composite(composite_time_axis(result.composite, sample_rate), result.composite, ax=ax_time)
    freqs, magnitude = sweep_spectrum(result.single, sample_rate)
    plot_spectrum(freqs, magnitude, ax=ax_freq)
    fig.tight_layout()
    _save(fig, output_path)
    return fig
