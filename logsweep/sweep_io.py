#!/usr/bin/env python3
"""
Reading and writing sweep signals as WAV files.
"""

import os
import logging
import numpy as np
from scipy.io import wavfile
import librosa

# Scale factor and dtype for each supported sample format
PCM_FORMATS = {
    "PCM_16": (32767, np.int16),
    "PCM_32": (2147483647, np.int32),
    "FLOAT": (1.0, np.float32),
}


def to_pcm(samples, subtype="PCM_16", amplitude=1.0):
    """
    Scale a [-1, 1] float signal and convert it to a WAV sample format.

    Args:
        samples: Signal as a numpy array
        subtype: One of PCM_16, PCM_32 or FLOAT
        amplitude: Linear gain applied before conversion (0.5 = -6dBFS)

    Returns:
        numpy array in the dtype of the requested format
    """
    if subtype not in PCM_FORMATS:
        raise ValueError(f"Unsupported sample format {subtype!r}, expected one of {sorted(PCM_FORMATS)}")

    scaled = np.asarray(samples, dtype=float) * amplitude
    peak = np.max(np.abs(scaled)) if scaled.size else 0.0
    if peak > 1.0:
        raise ValueError(f"Signal peak {peak:.3f} exceeds full scale; reduce the amplitude")

    full_scale, dtype = PCM_FORMATS[subtype]
    return (scaled * full_scale).astype(dtype)


def write_sweep(path, samples, sample_rate, subtype="PCM_16", amplitude=1.0):
    """
    Write a mono signal to an uncompressed WAV file.

    The destination directory is created if needed. Returns the path written.
    """
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    data = to_pcm(samples, subtype, amplitude)
    wavfile.write(path, int(round(sample_rate)), data)

    logging.info(f"Wrote {len(data)} samples at {sample_rate:g}Hz ({subtype}) to {path}")
    return path


def load_audio(path, sample_rate=None):
    """
    Load an audio file as a mono float signal.

    Args:
        path: Audio file path
        sample_rate: Resample to this rate, or None to keep the file's rate

    Returns:
        tuple: (signal, sample_rate)
    """
    try:
        samples, sr = librosa.load(path, sr=sample_rate, mono=True)
    except Exception as e:
        raise ValueError(f"Failed to load audio file {path}: {e}") from e

    logging.info(f"Loaded {path} - sample rate: {sr}Hz, samples: {len(samples)}")
    return samples, sr
