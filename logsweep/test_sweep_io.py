#!/usr/bin/env python3
"""Tests for WAV output and audio loading"""

import os
import shutil
import tempfile
import unittest
import numpy as np
from scipy.io import wavfile

from logsweep.synthesis import generate_sweep
from logsweep.sweep_io import load_audio, to_pcm, write_sweep


class TestSweepIO(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_pcm16_conversion(self):
        data = to_pcm(np.array([0.0, 1.0, -1.0, 0.5]))
        self.assertEqual(data.dtype, np.int16)
        self.assertEqual(data.tolist(), [0, 32767, -32767, 16383])

    def test_amplitude_scaling(self):
        data = to_pcm(np.array([1.0, -1.0]), amplitude=0.5)
        self.assertEqual(data.tolist(), [16383, -16383])

    def test_float_format(self):
        data = to_pcm(np.array([0.25, -0.75]), subtype="FLOAT")
        self.assertEqual(data.dtype, np.float32)
        np.testing.assert_array_equal(data, np.array([0.25, -0.75], dtype=np.float32))

    def test_clipping_rejected(self):
        with self.assertRaises(ValueError):
            to_pcm(np.array([0.9]), amplitude=1.5)

    def test_unknown_format_rejected(self):
        with self.assertRaises(ValueError):
            to_pcm(np.zeros(4), subtype="MP3")

    def test_write_creates_directories(self):
        """Output destination is an explicit path, parents created as needed"""
        result = generate_sweep(0.2, frequency_range=(50, 4000), sample_rate=8000, repetition_count=2)
        path = os.path.join(self.temp_dir, "nested", "out.wav")

        returned = write_sweep(path, result.composite, 8000)

        self.assertEqual(returned, path)
        sr, data = wavfile.read(path)
        self.assertEqual(sr, 8000)
        self.assertEqual(data.dtype, np.int16)
        self.assertEqual(len(data), len(result.composite))
        np.testing.assert_array_equal(data, (result.composite * 32767).astype(np.int16))

    def test_load_round_trip(self):
        """librosa loads the written file back at its native rate"""
        result = generate_sweep(0.2, frequency_range=(50, 4000), sample_rate=8000)
        path = os.path.join(self.temp_dir, "sweep.wav")
        write_sweep(path, result.single, 8000, subtype="FLOAT")

        samples, sr = load_audio(path)

        self.assertEqual(sr, 8000)
        self.assertEqual(len(samples), len(result.single))
        np.testing.assert_allclose(samples, result.single, atol=1e-6)

    def test_load_missing_file(self):
        with self.assertRaises(ValueError):
            load_audio(os.path.join(self.temp_dir, "missing.wav"))


if __name__ == '__main__':
    unittest.main()
