"""Global constants for midi-compare."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Audio processing defaults
DEFAULT_SR = 44100
MAX_AUDIO_SECONDS = 30.0

# Musical defaults
DEFAULT_TEMPO = 120.0
TICKS_PER_QUARTER = 96
MICROSECONDS_PER_QUARTER = 500000  # 120 BPM

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127
