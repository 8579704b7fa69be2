"""Shared audio fixtures."""

import numpy as np
import pytest
import soundfile as sf

SR = 44100


def write_sine(path, freq=440.0, duration=1.0, amplitude=0.8, sr=SR):
    """Write a mono sine wave and return its path as a string."""
    t = np.arange(int(sr * duration)) / sr
    audio = amplitude * np.sin(2 * np.pi * freq * t)
    sf.write(str(path), audio, sr)
    return str(path)


@pytest.fixture
def sine_wav(tmp_path):
    # RMS of a 0.8 sine is ~0.566, which maps to pitch 48 + 20 = 68
    return write_sine(tmp_path / "sine.wav")


@pytest.fixture
def silent_wav(tmp_path):
    path = tmp_path / "silence.wav"
    sf.write(str(path), np.zeros(SR), SR)
    return str(path)


@pytest.fixture
def broken_wav(tmp_path):
    path = tmp_path / "broken.wav"
    path.write_bytes(b"this is not a RIFF file")
    return str(path)
