#!/usr/bin/env python3
"""Tests for the sweep plots"""

import os
import shutil
import tempfile
import unittest
import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from logsweep.synthesis import generate_sweep
from logsweep.plotting import composite_time_axis, plot_composite, plot_spectrum, plot_sweep, sweep_spectrum


class TestPlotting(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.sample_rate = 8000
        self.result = generate_sweep(0.5, frequency_range=(50, 3000), sample_rate=self.sample_rate,
                                     repetition_count=2)

    def tearDown(self):
        plt.close("all")
        shutil.rmtree(self.temp_dir)

    def test_time_axis(self):
        t = composite_time_axis(self.result.composite, self.sample_rate)
        self.assertEqual(len(t), len(self.result.composite))
        self.assertAlmostEqual(t[-1], (len(t) - 1) / self.sample_rate)

    def test_spectrum_covers_swept_band(self):
        """Spectrum energy lies inside the swept band"""
        freqs, magnitude = sweep_spectrum(self.result.single, self.sample_rate)
        self.assertGreater(freqs[0], 0)
        self.assertAlmostEqual(freqs[-1], self.sample_rate / 2, delta=self.sample_rate / len(self.result.single))

        in_band = (freqs >= 100) & (freqs <= 2500)
        out_band = freqs >= 3600
        self.assertGreater(np.median(magnitude[in_band]), 10 * np.median(magnitude[out_band]))

    def test_plot_sweep_saves_png(self):
        path = os.path.join(self.temp_dir, "sweep.png")
        fig = plot_sweep(self.result, self.sample_rate, output_path=path)
        self.assertTrue(os.path.exists(path))
        self.assertGreater(os.path.getsize(path), 0)
        self.assertEqual(len(fig.axes), 2)

    def test_individual_plots(self):
        t = composite_time_axis(self.result.composite, self.sample_rate)
        ax = plot_composite(t, self.result.composite)
        self.assertEqual(ax.get_xlabel(), "Time [s]")

        freqs, magnitude = sweep_spectrum(self.result.single, self.sample_rate)
        ax = plot_spectrum(freqs, magnitude)
        self.assertEqual(ax.get_xscale(), "log")
        self.assertEqual(ax.get_yscale(), "log")


if __name__ == '__main__':
    unittest.main()
