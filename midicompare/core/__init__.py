"""Core types and constants for midi-compare."""

from .note import Note, Track, Document, clamp_midi, round_half_up
from .constants import (
    PITCH_NAMES,
    DEFAULT_SR,
    DEFAULT_TEMPO,
    TICKS_PER_QUARTER,
)
from .errors import (
    MidiCompareError,
    AudioDecodeError,
    MidiDecodeError,
    ConversionCancelledError,
    ConfigurationError,
)

__all__ = [
    "Note",
    "Track",
    "Document",
    "clamp_midi",
    "round_half_up",
    "PITCH_NAMES",
    "DEFAULT_SR",
    "DEFAULT_TEMPO",
    "TICKS_PER_QUARTER",
    "MidiCompareError",
    "AudioDecodeError",
    "MidiDecodeError",
    "ConversionCancelledError",
    "ConfigurationError",
]
