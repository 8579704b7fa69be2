"""Output layer - Export to Standard MIDI File bytes."""

from .midi import MIDIEncoder, encode, encode_variable_length, seconds_to_ticks

__all__ = [
    "MIDIEncoder",
    "encode",
    "encode_variable_length",
    "seconds_to_ticks",
]
