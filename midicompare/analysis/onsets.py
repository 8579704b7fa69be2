"""Energy-based onset extraction - coarse pitched events from a waveform.

This is a heuristic, not a transcription: each fixed-size chunk whose
RMS energy clears a threshold becomes one event, and louder chunks map
to higher pitches across roughly four octaves.
"""

import logging
import math
from typing import List, Optional

import numpy as np

from ..config import ConversionConfig
from ..core import clamp_midi

logger = logging.getLogger(__name__)


class AudioOnsetExtractor:
    """Turn a sample buffer into a short list of MIDI pitches."""

    FALLBACK_TRIAD = (60, 64, 67)  # C major
    TRIAD_INTERVALS = (4, 7)  # major third, perfect fifth

    def __init__(self, config: Optional[ConversionConfig] = None):
        """
        Initialize AudioOnsetExtractor.

        Args:
            config: Thresholds and pitch mapping (default: ConversionConfig())
        """
        self.config = config or ConversionConfig()

    def extract(
        self,
        samples: np.ndarray,
        sample_rate: int,
        max_events: Optional[int] = None,
    ) -> List[int]:
        """
        Extract pitched events from audio.

        Args:
            samples: Audio samples in [-1, 1]; multi-channel input is averaged
            sample_rate: Sample rate in Hz
            max_events: Maximum events to return (default: config.max_events)

        Returns:
            At least three MIDI pitches (0-127)
        """
        max_events = max_events or self.config.max_events
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim > 1:
            samples = samples.mean(axis=0)

        pitches = []
        if samples.size:
            chunk_size = self.chunk_size(samples.size, max_events)
            for start in range(0, samples.size, chunk_size):
                if len(pitches) >= max_events:
                    break
                rms = self.rms(samples[start:start + chunk_size])
                if rms > self.config.rms_threshold:
                    pitches.append(self.rms_to_pitch(rms))

        logger.debug(
            "Extracted %d events from %.2fs of audio",
            len(pitches),
            samples.size / sample_rate if sample_rate else 0.0,
        )
        return self._ensure_triad(pitches)

    def chunk_size(self, n_samples: int, max_events: int) -> int:
        """Samples per analysis chunk, never below the configured minimum."""
        return max(self.config.min_chunk_size, math.ceil(n_samples / max_events))

    @staticmethod
    def rms(chunk: np.ndarray) -> float:
        """Root-mean-square energy of a chunk."""
        if chunk.size == 0:
            return 0.0
        return float(np.sqrt(np.mean(np.square(chunk))))

    def rms_to_pitch(self, rms: float) -> int:
        """Map RMS energy onto a MIDI pitch."""
        return clamp_midi(self.config.base_pitch + math.floor(rms * self.config.pitch_span))

    def _ensure_triad(self, pitches: List[int]) -> List[int]:
        if not pitches:
            return list(self.FALLBACK_TRIAD)
        if len(pitches) == 1:
            root = pitches[0]
            return [root] + [clamp_midi(root + i) for i in self.TRIAD_INTERVALS]
        return pitches
