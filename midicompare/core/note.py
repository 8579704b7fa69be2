"""Note, Track and Document - the symbolic music model shared by every layer."""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple
import numpy as np

from .constants import PITCH_NAMES, MIDI_MIN, MIDI_MAX


def clamp_midi(value: int) -> int:
    """Clamp an integer into the MIDI data range 0-127."""
    return max(MIDI_MIN, min(MIDI_MAX, int(value)))


def round_half_up(value: float, places: int = 2) -> float:
    """Round to a number of decimal places, ties away from zero.

    Uses the exact binary value of ``value`` so that keys agree with
    fixed-point string formatting (``f"{x:.2f}"`` style) rather than
    banker's rounding.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Note:
    """Represents a musical note."""

    pitch: int  # MIDI pitch (0-127)
    onset: float  # Start time in seconds
    duration: float  # Held time in seconds
    velocity: Optional[int] = None  # MIDI velocity (0-127), None = synthesize on export

    @property
    def offset(self) -> float:
        """End time in seconds."""
        return self.onset + self.duration

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        octave = (self.pitch // 12) - 1
        name = PITCH_NAMES[self.pitch % 12]
        return f"{name}{octave}"

    @property
    def pitch_class(self) -> int:
        """Get pitch class (0-11, where 0=C)."""
        return self.pitch % 12

    @staticmethod
    def freq_to_midi(freq: float) -> int:
        """Convert frequency (Hz) to MIDI pitch."""
        if freq <= 0:
            return 0
        return int(round(69 + 12 * np.log2(freq / 440.0)))

    @staticmethod
    def midi_to_freq(midi: int) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return 440.0 * (2 ** ((midi - 69) / 12.0))


@dataclass(frozen=True)
class Track:
    """An ordered run of notes. Order is kept for export only."""

    notes: Tuple[Note, ...] = ()
    name: str = ""
    program: int = 0

    def __len__(self) -> int:
        return len(self.notes)


@dataclass(frozen=True)
class Document:
    """A decoded music file: a label, its tracks and its length in seconds."""

    label: str
    tracks: Tuple[Track, ...] = field(default_factory=tuple)
    duration: float = 0.0

    @classmethod
    def from_notes(
        cls,
        label: str,
        notes: Iterable[Note],
        duration: Optional[float] = None,
    ) -> "Document":
        """Build a single-track document.

        Args:
            label: Display name of the document
            notes: Notes in playback order
            duration: Length in seconds (default: end of the last note)
        """
        notes = tuple(notes)
        end = max((n.offset for n in notes), default=0.0)
        if duration is None:
            duration = end
        return cls(
            label=label,
            tracks=(Track(notes=notes),),
            duration=max(0.0, float(duration), end),
        )

    @property
    def notes(self) -> List[Note]:
        """All notes of all tracks, flattened in track order."""
        return [note for track in self.tracks for note in track.notes]

    @property
    def note_count(self) -> int:
        return sum(len(track) for track in self.tracks)

    @property
    def end_time(self) -> float:
        """Latest note end, which may be earlier than ``duration``."""
        return max((n.offset for n in self.notes), default=0.0)
