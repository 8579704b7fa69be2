"""Named policy constants for comparison and audio conversion.

Changing any of these changes observable similarity scores or output
bytes, so they live here rather than inline in the algorithms.
"""

from dataclasses import dataclass
from typing import Tuple

from .core.errors import ConfigurationError


@dataclass(frozen=True)
class ComparisonConfig:
    """Configuration for symbolic comparison.

    Attributes:
        basic_weight: Blend weight of exact note matching (default: 0.4)
        harmonic_weight: Blend weight of chord overlap (default: 0.3)
        rhythm_weight: Blend weight of inter-onset overlap (default: 0.2)
        key_weight: Blend weight of key proximity (default: 0.1)
        onset_decimals: Decimal places of the onset tolerance window (default: 2)
        chord_windows_per_second: Chord window resolution (default: 4)
        min_chord_size: Distinct pitch classes for a window to count as a chord (default: 3)
        rhythm_grid: Inter-onset quantization steps per second (default: 16)
        max_reported_chords: Common chord labels kept in analysis details (default: 5)
        common_intervals: Interval list reported in analysis details
        min_tempo_interval: Floor on the mean onset interval for tempo (default: 0.1)
        default_note_duration: Held time written for zero-length notes (default: 0.5)
        enhanced_min_velocity: Velocity floor of the enhanced output file (default: 89)
    """

    basic_weight: float = 0.4
    harmonic_weight: float = 0.3
    rhythm_weight: float = 0.2
    key_weight: float = 0.1
    onset_decimals: int = 2
    chord_windows_per_second: int = 4
    min_chord_size: int = 3
    rhythm_grid: int = 16
    max_reported_chords: int = 5
    common_intervals: Tuple[int, ...] = (3, 4, 5, 7)
    min_tempo_interval: float = 0.1
    default_note_duration: float = 0.5
    enhanced_min_velocity: int = 89

    def __post_init__(self):
        weights = (
            self.basic_weight,
            self.harmonic_weight,
            self.rhythm_weight,
            self.key_weight,
        )
        if any(w < 0 for w in weights):
            raise ConfigurationError("Blend weights must be non-negative", config_key="weights")
        if abs(sum(weights) - 1.0) > 1e-9:
            raise ConfigurationError(
                f"Blend weights must sum to 1.0, got {sum(weights):.3f}",
                config_key="weights",
            )


@dataclass(frozen=True)
class ConversionConfig:
    """Configuration for the audio-to-MIDI path.

    Attributes:
        rms_threshold: Chunk RMS above which a chunk becomes an event (default: 0.15)
        min_chunk_size: Smallest analysis chunk in samples (default: 1024)
        base_pitch: Pitch for an RMS of zero (default: 48, C3)
        pitch_span: Semitones spanned by RMS 0..1 (default: 36)
        max_events: Events extracted from one buffer (default: 12)
        max_encoded_notes: Events written to the output file (default: 8)
        max_audio_seconds: Audio analyzed per file (default: 30)
        fallback_duration: Length of the fallback document in seconds (default: 4)
        sample_rate: Decode sample rate (default: 44100)
        cache_size: Completed conversions kept in memory (default: 128)
        base_confidence: Lower bound of reported confidence (default: 0.85)
        confidence_jitter: Random spread added to confidence (default: 0.1)
    """

    rms_threshold: float = 0.15
    min_chunk_size: int = 1024
    base_pitch: int = 48
    pitch_span: int = 36
    max_events: int = 12
    max_encoded_notes: int = 8
    max_audio_seconds: float = 30.0
    fallback_duration: float = 4.0
    sample_rate: int = 44100
    cache_size: int = 128
    base_confidence: float = 0.85
    confidence_jitter: float = 0.1

    def __post_init__(self):
        if self.max_events < 1:
            raise ConfigurationError("max_events must be at least 1", config_key="max_events")
        if self.cache_size < 1:
            raise ConfigurationError("cache_size must be at least 1", config_key="cache_size")
