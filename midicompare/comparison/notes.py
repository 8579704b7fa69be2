"""Exact note-identity comparison.

Two notes are the same when their pitches match and their onsets agree
to two decimal places (about 10 ms). This is a deliberate tolerance
window, not floating-point equality.
"""

import logging
from typing import List, Optional, Set, Tuple

from ..config import ComparisonConfig
from ..core import Note, Document, round_half_up
from ..output import MIDIEncoder
from .results import ComparisonResult

logger = logging.getLogger(__name__)

NoteKey = Tuple[int, float]


class NoteSetComparator:
    """Compare two documents by their (pitch, rounded onset) keys."""

    def __init__(
        self,
        config: Optional[ComparisonConfig] = None,
        encoder: Optional[MIDIEncoder] = None,
    ):
        """
        Initialize NoteSetComparator.

        Args:
            config: Comparison constants (default: ComparisonConfig())
            encoder: Encoder for the common-note file (default: MIDIEncoder())
        """
        self.config = config or ComparisonConfig()
        self.encoder = encoder or MIDIEncoder()

    def note_key(self, note: Note) -> NoteKey:
        """Identity key of a note."""
        return (note.pitch, round_half_up(note.onset, self.config.onset_decimals))

    def note_keys(self, notes: List[Note]) -> Set[NoteKey]:
        return {self.note_key(note) for note in notes}

    def common_notes(self, notes1: List[Note], common: Set[NoteKey]) -> List[Note]:
        """Notes of the first list whose key is shared, in their original order."""
        return [note for note in notes1 if self.note_key(note) in common]

    def compare(
        self, doc1: Document, doc2: Document, min_velocity: int = 0
    ) -> ComparisonResult:
        """
        Compare two documents note by note.

        Args:
            doc1: First document; its notes make up the output document
            doc2: Second document
            min_velocity: Velocity floor applied when encoding the output

        Returns:
            ComparisonResult with the common-note document and its MIDI bytes
        """
        notes1 = doc1.notes
        notes2 = doc2.notes
        keys1 = self.note_keys(notes1)
        keys2 = self.note_keys(notes2)
        common = keys1 & keys2

        largest = max(len(keys1), len(keys2))
        similarity = len(common) / largest if largest else 0.0

        output = Document.from_notes(
            label=f"common_{doc1.label}_{doc2.label}",
            notes=self.common_notes(notes1, common),
        )
        logger.info(
            "Compared %s (%d) with %s (%d): %d common, similarity %.3f",
            doc1.label,
            len(keys1),
            doc2.label,
            len(keys2),
            len(common),
            similarity,
        )

        return ComparisonResult(
            similarity=similarity,
            common_note_count=len(common),
            total_notes_1=len(keys1),
            total_notes_2=len(keys2),
            output_document=output,
            midi_bytes=self.encode_document(output, min_velocity=min_velocity),
        )

    def encode_document(self, document: Document, min_velocity: int = 0) -> bytes:
        """
        Encode an output document for playback.

        Zero-length notes get the default held duration and velocities are
        raised to ``min_velocity``.
        """
        notes = [self._playable(note, min_velocity) for note in document.notes]
        return self.encoder.encode(document.duration, notes)

    def _playable(self, note: Note, min_velocity: int) -> Note:
        duration = note.duration or self.config.default_note_duration
        velocity = note.velocity
        if velocity is not None:
            velocity = max(velocity, min_velocity)
        return Note(pitch=note.pitch, onset=note.onset, duration=duration, velocity=velocity)
