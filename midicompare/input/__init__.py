"""Input layer - decode audio and MIDI files."""

from .loader import AudioLoader
from .midi import MidiLoader

__all__ = [
    "AudioLoader",
    "MidiLoader",
]
