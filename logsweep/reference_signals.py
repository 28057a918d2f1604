#!/usr/bin/env python3
"""
Reference Sweep Manager for logsweep

Keeps named sweep presets and their synthesized signals, with the single
sweep FFT pre-computed for deconvolution of recordings.
"""

import logging
import numpy as np

from logsweep.config import SweepConfig
from logsweep.errors import SweepError
from logsweep.synthesis import synthesize_detailed


class ReferenceSignalManager:
    """
    Manages reference sweeps for acoustic measurement.

    Presets are synthesized on first use and cached afterwards.
    """

    def __init__(self):
        self.signals = {
            "exp_sweep_20_24k_48": {
                "config": SweepConfig(sweep_duration=10),
                "description": "10s exponential sine sweep 20Hz-24kHz at 48kHz"
            },
            "exp_sweep_20_20k_44_x3": {
                "config": SweepConfig(sweep_duration=5, frequency_range=(20, 20000), sample_rate=44100,
                                      repetition_count=3, inter_sweep_interval=2),
                "description": "3x 5s exponential sine sweep 20Hz-20kHz at 44.1kHz, 2s gaps"
            },
        }
        self.cache = {}

    def register(self, signal_id, config, description=""):
        """Add or replace a preset; any cached signal for it is dropped."""
        self.signals[signal_id] = {"config": config, "description": description}
        self.cache.pop(signal_id, None)

    def _synthesize(self, signal_id):
        config = self.signals[signal_id]["config"]
        try:
            signals = synthesize_detailed(config)
        except SweepError as e:
            logging.error(f"Error synthesizing reference signal {signal_id}: {e}")
            raise

        self.cache[signal_id] = {
            "signals": signals,
            "sweep_fft": np.fft.rfft(signals.single),
            "sample_rate": signals.config.sample_rate,
        }
        logging.info(f"Synthesized reference signal: {signal_id}")

    def get_signal_data(self, signal_id):
        """Get cached signal data, synthesizing it on first access. None for unknown ids."""
        if signal_id not in self.signals:
            return None
        if signal_id not in self.cache:
            self._synthesize(signal_id)
        return self.cache[signal_id]

    def get_description(self, signal_id):
        config = self.signals.get(signal_id)
        if config:
            return config["description"]
        return None

    def list_available_signals(self):
        """List all available reference signals"""
        return list(self.signals.keys())

    def validate_signal(self, signal_id):
        """Check that a signal synthesizes and carries all cached fields"""
        try:
            data = self.get_signal_data(signal_id)
        except SweepError:
            return False
        if data is None:
            return False

        required_keys = ["signals", "sweep_fft", "sample_rate"]
        return all(key in data for key in required_keys)


# Global instance for easy access
_ref_manager = None

def get_reference_manager():
    """Get global reference signal manager instance"""
    global _ref_manager
    if _ref_manager is None:
        _ref_manager = ReferenceSignalManager()
    return _ref_manager
