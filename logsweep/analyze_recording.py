#!/usr/bin/env python3
"""
Impulse Response Recovery for logsweep

Deconvolves a recording of the composite sweep signal against the reference
sweep to obtain the impulse and frequency response of the measured system.
"""

import logging
import math
from dataclasses import dataclass
from typing import List

import numpy as np
from scipy import signal

from logsweep.reference_signals import get_reference_manager
from logsweep.sweep_io import load_audio


@dataclass
class ImpulseResponse:
    impulse: np.ndarray
    windowed: np.ndarray
    frequencies: np.ndarray
    response_db: np.ndarray
    delay: int
    repetitions: int
    sample_rate: float


class ImpulseResponseAnalyzer:
    """
    Impulse response measurement by sweep deconvolution.

    Splits a recorded composite into its repetitions, averages them to
    improve SNR and divides out the reference sweep spectrum.
    """

    def __init__(self, fft_size=32768, lambda_reg=1e-3, pre_peak=0.05, post_peak=0.4):
        self.fft_size = fft_size  # 32k FFT for high resolution
        self.lambda_reg = lambda_reg
        self.pre_peak = pre_peak  # seconds kept before the impulse peak
        self.post_peak = post_peak  # seconds kept after it
        self.ref_manager = get_reference_manager()

    def find_delay(self, recorded, reference):
        """Lag (in samples) of the reference inside the recording, by cross-correlation."""
        if len(recorded) < len(reference):
            recorded = np.concatenate([recorded, np.zeros(len(reference) - len(recorded))])

        correlation = signal.correlate(recorded, reference, mode='valid')
        delay = int(np.argmax(np.abs(correlation)))
        logging.info(f"Optimal delay found: {delay} samples")
        return delay

    def align_signals(self, recorded, reference):
        """
        Align recorded signal with reference using cross-correlation.

        Args:
            recorded: Recorded audio signal (numpy array)
            reference: Reference signal (numpy array)

        Returns:
            numpy array: Recorded signal starting at the reference onset,
            zero padded to at least the reference length
        """
        logging.info("Aligning signals using cross-correlation")
        delay = self.find_delay(recorded, reference)
        aligned = recorded[delay:]
        if len(aligned) < len(reference):
            aligned = np.concatenate([aligned, np.zeros(len(reference) - len(aligned))])
        logging.info(f"Aligned signal length: {len(aligned)} samples")
        return aligned

    def split_repetitions(self, aligned, signals) -> List[np.ndarray]:
        """
        Cut an aligned composite recording into one segment per repetition.

        Each segment runs from a sweep onset to the next onset, so it holds
        the sweep plus the decay recorded during the following silence.
        """
        config = signals.config
        period = int(math.floor((config.sweep_duration + config.inter_sweep_interval) * config.sample_rate))
        period = max(period, len(signals.single))

        segments = []
        for offset in signals.offsets:
            segment = aligned[offset:offset + period]
            if len(segment) < period:
                segment = np.concatenate([segment, np.zeros(period - len(segment))])
            segments.append(segment)
        logging.info(f"Split recording into {len(segments)} segments of {period} samples")
        return segments

    def average_repetitions(self, segments):
        """Synchronous average of equally long repetition segments."""
        if not segments:
            raise ValueError("No repetitions to average")
        return np.mean(np.vstack(segments), axis=0)

    def deconvolve_signals(self, recorded, reference_sweep, lambda_reg=None):
        """
        Deconvolve recorded signal with reference sweep using regularized spectral division.

        Args:
            recorded: Recorded segment (numpy array)
            reference_sweep: Reference sweep signal (numpy array)
            lambda_reg: Regularization parameter (default: analyzer setting)

        Returns:
            numpy array: Impulse response
        """
        if lambda_reg is None:
            lambda_reg = self.lambda_reg

        # Pad to avoid circular convolution artifacts
        n = len(recorded) + len(reference_sweep) - 1

        Y = np.fft.rfft(recorded, n)
        X = np.fft.rfft(reference_sweep, n)

        # H = (Y * conj(X)) / (|X|^2 + lambda)
        H = (Y * np.conj(X)) / (np.abs(X)**2 + lambda_reg)
        impulse = np.fft.irfft(H, n)

        logging.info(f"Deconvolution completed - impulse response length: {len(impulse)} samples")
        return impulse

    def extract_impulse_window(self, impulse, sample_rate):
        """
        Extract the main impulse response around its peak.

        Keeps pre_peak seconds before the peak and post_peak seconds after it.
        """
        peak_idx = int(np.argmax(np.abs(impulse)))

        pre_samples = int(self.pre_peak * sample_rate)
        post_samples = int(self.post_peak * sample_rate)

        start = max(0, peak_idx - pre_samples)
        end = min(len(impulse), peak_idx + post_samples)

        logging.info(f"Impulse window: peak at {peak_idx}, window from {start} to {end} ({(end-start)/sample_rate*1000:.1f}ms)")
        return impulse[start:end]

    def impulse_to_frequency_response(self, impulse, sample_rate, frequency_range=None):
        """
        Convert impulse response to frequency response in dB.

        With a (low, high) frequency_range only the swept band is returned,
        otherwise every bin above DC up to Nyquist.
        """
        window = signal.get_window('blackmanharris', len(impulse))
        windowed = impulse * window

        fft_result = np.fft.rfft(windowed, n=self.fft_size)
        frequencies = np.fft.rfftfreq(self.fft_size, 1/sample_rate)

        magnitude_db = 20 * np.log10(np.abs(fft_result) + 1e-12)

        if frequency_range is None:
            return frequencies[1:], magnitude_db[1:]

        f_low, f_high = frequency_range
        band_mask = (frequencies >= f_low) & (frequencies <= f_high)
        return frequencies[band_mask], magnitude_db[band_mask]

    def measure(self, recorded, signals) -> ImpulseResponse:
        """
        Recover the impulse response from a recording of a synthesized composite.

        Args:
            recorded: Recorded signal at the reference sample rate
            signals: SweepSignals the recording was made with

        Returns:
            ImpulseResponse
        """
        config = signals.config
        recorded = np.asarray(recorded, dtype=float)

        # 1. Locate the composite inside the recording
        logging.info("Step 1: Aligning recording with the composite signal")
        delay = self.find_delay(recorded, signals.composite)
        aligned = recorded[delay:]

        # 2. Synchronous averaging over repetitions
        logging.info("Step 2: Averaging repetitions")
        segments = self.split_repetitions(aligned, signals)
        averaged = self.average_repetitions(segments)

        # 3. Deconvolution
        logging.info("Step 3: Performing regularized spectral division deconvolution")
        impulse = self.deconvolve_signals(averaged, signals.single)

        # 4. Impulse window and frequency response
        logging.info("Step 4: Extracting impulse window and frequency response")
        windowed = self.extract_impulse_window(impulse, config.sample_rate)
        freqs, response_db = self.impulse_to_frequency_response(
            windowed, config.sample_rate, config.frequency_range
        )

        logging.info(f"Measurement completed - {len(segments)} repetitions, {len(freqs)} frequency points")
        return ImpulseResponse(
            impulse=impulse,
            windowed=windowed,
            frequencies=freqs,
            response_db=response_db,
            delay=delay,
            repetitions=len(segments),
            sample_rate=config.sample_rate,
        )

    def analyze_file(self, recorded_file, signal_id) -> ImpulseResponse:
        """
        Measure a recording made with one of the reference presets.

        The recording is resampled to the preset's rate when they differ.
        """
        logging.info(f"Starting sweep deconvolution for file: {recorded_file}, signal: {signal_id}")

        ref_data = self.ref_manager.get_signal_data(signal_id)
        if not ref_data:
            raise ValueError(f"Unknown or invalid signal ID: {signal_id}")

        sample_rate = ref_data["sample_rate"]
        recorded, _ = load_audio(recorded_file, sample_rate=sample_rate)
        return self.measure(recorded, ref_data["signals"])
