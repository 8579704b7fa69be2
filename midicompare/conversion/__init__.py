"""Conversion layer - audio to MIDI with caching and cancellation."""

from .cancellation import CancellationToken
from .cache import AudioFingerprint, ConversionCache
from .fallback import FallbackScale, choose_fallback_scale, fallback_pitches
from .converter import (
    AudioToMidiConverter,
    ConversionProgress,
    ConversionResult,
    ConversionStatus,
)

__all__ = [
    "CancellationToken",
    "AudioFingerprint",
    "ConversionCache",
    "FallbackScale",
    "choose_fallback_scale",
    "fallback_pitches",
    "AudioToMidiConverter",
    "ConversionProgress",
    "ConversionResult",
    "ConversionStatus",
]
