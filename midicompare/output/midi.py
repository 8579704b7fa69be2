"""MIDI export - bit-exact Standard MIDI File writer.

Writes format 0, single-track files at 96 ticks per quarter note with a
fixed 4/4 time signature and a fixed 120 BPM tempo. Events are written
with explicit status bytes (no running status) so the layout is stable
for any consumer.
"""

import logging
import random
import struct
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core import Note, Document, clamp_midi
from ..core.constants import TICKS_PER_QUARTER, MICROSECONDS_PER_QUARTER, DEFAULT_TEMPO

logger = logging.getLogger(__name__)

NOTE_ON = 0x90
NOTE_OFF = 0x80

HEADER_CHUNK = b"MThd" + struct.pack(">IHHH", 6, 0, 1, TICKS_PER_QUARTER)
TIME_SIGNATURE_EVENT = bytes([0x00, 0xFF, 0x58, 0x04, 0x04, 0x02, 0x18, 0x08])
TEMPO_EVENT = bytes([0x00, 0xFF, 0x51, 0x03]) + MICROSECONDS_PER_QUARTER.to_bytes(3, "big")
END_OF_TRACK_EVENT = bytes([0x00, 0xFF, 0x2F, 0x00])

TICKS_PER_SECOND = TICKS_PER_QUARTER * DEFAULT_TEMPO / 60.0


def encode_variable_length(value: int) -> bytes:
    """Encode a delta time as a MIDI variable-length quantity.

    Seven bits per byte, most significant group first; every byte but the
    last has its high bit set.
    """
    value = max(0, int(value))
    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))


def seconds_to_ticks(seconds: float) -> int:
    """Convert seconds to ticks at the fixed export tempo."""
    return max(0, int(round(seconds * TICKS_PER_SECOND)))


class MIDIEncoder:
    """Encode notes into Standard MIDI File bytes."""

    # Audio-derived pitches: a quarter note every half note
    PITCH_NOTE_TICKS = TICKS_PER_QUARTER
    PITCH_SPACING_TICKS = TICKS_PER_QUARTER * 2

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        max_pitch_notes: int = 8,
    ):
        """
        Initialize MIDIEncoder.

        Args:
            rng: Source for synthesized velocities (default: unseeded)
            max_pitch_notes: Cap on notes written by ``encode_pitches``
        """
        self.rng = rng or random.Random()
        self.max_pitch_notes = max_pitch_notes

    def encode(
        self,
        duration: float,
        notes: Iterable[Note],
        max_notes: Optional[int] = None,
    ) -> bytes:
        """
        Encode notes as a format 0 MIDI file.

        Args:
            duration: Document length in seconds. The track ends at the
                last note-off, so this is informational only.
            notes: Notes to write, in insertion order
            max_notes: Optional cap on the number of notes written

        Returns:
            Complete file contents
        """
        notes = list(notes)
        if max_notes is not None:
            notes = notes[:max_notes]

        events = self._note_events(notes)
        logger.debug("Encoding %d notes (%d events, %.2fs)", len(notes), len(events), duration)
        return self._assemble(events)

    def encode_pitches(self, duration: float, pitches: Sequence[int]) -> bytes:
        """
        Encode bare pitches as evenly spaced quarter notes.

        Used for audio-derived events, which carry no timing of their own.

        Args:
            duration: Document length in seconds
            pitches: MIDI pitches in order

        Returns:
            Complete file contents
        """
        notes = self.pitches_to_notes(pitches[: self.max_pitch_notes])
        return self.encode(duration, notes, max_notes=self.max_pitch_notes)

    @classmethod
    def pitches_to_notes(cls, pitches: Sequence[int]) -> List[Note]:
        """Lay pitches out on the fixed quarter-note grid with no velocity."""
        step = cls.PITCH_SPACING_TICKS / TICKS_PER_SECOND
        length = cls.PITCH_NOTE_TICKS / TICKS_PER_SECOND
        return [
            Note(pitch=clamp_midi(pitch), onset=i * step, duration=length)
            for i, pitch in enumerate(pitches)
        ]

    def export(self, document: Document, output_path: str) -> None:
        """
        Export a document to a MIDI file.

        Args:
            document: Document to write (all tracks merged)
            output_path: Path to output MIDI file
        """
        data = self.encode(document.duration, document.notes)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(data)

    def _velocity(self, note: Note) -> int:
        if note.velocity is None:
            velocity = 64 + self.rng.randrange(32)
        else:
            velocity = note.velocity
        return max(1, clamp_midi(velocity))

    def _note_events(self, notes: List[Note]) -> List[Tuple[int, int, int, bytes]]:
        """Build (tick, priority, sequence, payload) events; note-offs sort first."""
        events = []
        for seq, note in enumerate(notes):
            pitch = clamp_midi(note.pitch)
            start = seconds_to_ticks(note.onset)
            # At least one tick so a note-off never sorts ahead of its own note-on
            end = start + max(1, seconds_to_ticks(max(0.0, note.duration)))
            events.append((start, 1, seq, bytes([NOTE_ON, pitch, self._velocity(note)])))
            events.append((end, 0, seq, bytes([NOTE_OFF, pitch, 0x00])))
        events.sort(key=lambda e: (e[0], e[1], e[2]))
        return events

    def _assemble(self, events: List[Tuple[int, int, int, bytes]]) -> bytes:
        track = bytearray(TIME_SIGNATURE_EVENT)
        track += TEMPO_EVENT
        last_tick = 0
        for tick, _, _, payload in events:
            track += encode_variable_length(tick - last_tick)
            track += payload
            last_tick = tick
        track += END_OF_TRACK_EVENT

        return HEADER_CHUNK + b"MTrk" + struct.pack(">I", len(track)) + bytes(track)


def encode(duration: float, notes: Iterable[Note], rng: Optional[random.Random] = None) -> bytes:
    """Encode notes with a one-off encoder. See ``MIDIEncoder.encode``."""
    return MIDIEncoder(rng=rng).encode(duration, notes)
