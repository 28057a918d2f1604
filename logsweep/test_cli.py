#!/usr/bin/env python3
"""Tests for the logsweep command line"""

import io
import json
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout

import matplotlib
matplotlib.use("Agg")
from scipy.io import wavfile

from logsweep.cli import main


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.output = os.path.join(self.temp_dir, "sweep.wav")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def run_main(self, argv):
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            status = main(argv)
        return status, json.loads(stdout.getvalue())

    def test_generates_wav_and_summary(self):
        status, summary = self.run_main([
            "--duration", "1", "--f-low", "20", "--f-high", "20000", "--sample-rate", "48000",
            "--repetitions", "2", "--interval", "1", "--output", self.output,
        ])
        self.assertEqual(status, 0)
        self.assertEqual(summary["single_length"], 48001)
        self.assertEqual(summary["composite_length"], 192001)
        self.assertEqual(summary["offsets"], [24000, 120000])
        self.assertEqual(summary["config"]["repetition_count"], 2)

        sr, data = wavfile.read(self.output)
        self.assertEqual(sr, 48000)
        self.assertEqual(len(data), 192001)

    def test_config_file_with_override(self):
        config_path = os.path.join(self.temp_dir, "sweep.json")
        with open(config_path, "w") as f:
            json.dump({"sweep_duration": 0.5, "frequency_range": [50, 4000], "sample_rate": 8000}, f)

        status, summary = self.run_main([
            "--config", config_path, "--repetitions", "3", "--output", self.output, "--format", "FLOAT",
        ])
        self.assertEqual(status, 0)
        self.assertEqual(summary["config"]["frequency_range"], [50.0, 4000.0])
        self.assertEqual(summary["config"]["repetition_count"], 3)
        self.assertEqual(summary["offsets"], [2000, 10000, 18000])

    def test_plot_option(self):
        plot_path = os.path.join(self.temp_dir, "sweep.png")
        status, _ = self.run_main([
            "--duration", "0.3", "--f-high", "4000", "--output", self.output, "--plot", plot_path,
        ])
        self.assertEqual(status, 0)
        self.assertTrue(os.path.exists(plot_path))

    def test_nyquist_violation_reports_error(self):
        status, summary = self.run_main([
            "--duration", "1", "--sample-rate", "30000", "--output", self.output,
        ])
        self.assertEqual(status, 1)
        self.assertIn("error", summary)
        self.assertIn("Nyquist", summary["error"])
        self.assertFalse(os.path.exists(self.output))

    def test_non_finite_options_report_error(self):
        for option, value in [("--interval", "inf"), ("--sample-rate", "nan"), ("--duration", "inf")]:
            with self.subTest(option=option, value=value):
                args = {"--duration": "1", "--f-high": "4000", "--output": self.output}
                args[option] = value
                status, summary = self.run_main([part for pair in args.items() for part in pair])
                self.assertEqual(status, 1)
                self.assertIn("finite", summary["error"])
                self.assertFalse(os.path.exists(self.output))

    def test_null_duration_in_config_file(self):
        config_path = os.path.join(self.temp_dir, "sweep.json")
        with open(config_path, "w") as f:
            json.dump({"sweep_duration": None}, f)

        status, summary = self.run_main(["--config", config_path, "--output", self.output])
        self.assertEqual(status, 1)
        self.assertIn("sweep_duration", summary["error"])

    def test_config_file_not_a_mapping(self):
        config_path = os.path.join(self.temp_dir, "sweep.json")
        with open(config_path, "w") as f:
            json.dump([1, 2, 3], f)

        status, summary = self.run_main(["--config", config_path, "--output", self.output])
        self.assertEqual(status, 1)
        self.assertIn("mapping", summary["error"])

    def test_missing_duration(self):
        status, summary = self.run_main(["--output", self.output])
        self.assertEqual(status, 1)
        self.assertIn("sweep_duration", summary["error"])


if __name__ == '__main__':
    unittest.main()
