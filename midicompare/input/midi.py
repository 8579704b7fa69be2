"""MIDI decoding - map pretty_midi objects onto Documents.

Parsing of the container format is left to pretty_midi; this module only
adapts its instruments and notes to the engine's model.
"""

import io
import logging
from pathlib import Path
from typing import Optional

import pretty_midi

from ..core import Note, Track, Document, MidiDecodeError, clamp_midi

logger = logging.getLogger(__name__)


class MidiLoader:
    """Load MIDI files into Documents."""

    SUPPORTED_FORMATS = {".mid", ".midi", ".smf"}

    def load(self, path: str) -> Document:
        """
        Decode a MIDI file from disk.

        Args:
            path: Path to the MIDI file

        Returns:
            Document labelled with the file name

        Raises:
            MidiDecodeError: If the file is missing or cannot be parsed
        """
        path = Path(path)
        if not path.exists():
            raise MidiDecodeError(f"MIDI file not found: {path}", file_path=str(path))

        try:
            pm = pretty_midi.PrettyMIDI(str(path))
        except Exception as e:
            raise MidiDecodeError(f"Could not parse MIDI: {e}", file_path=str(path)) from e

        return self.from_pretty_midi(pm, label=path.name)

    def load_bytes(self, data: bytes, label: str = "untitled") -> Document:
        """Decode MIDI file contents held in memory."""
        try:
            pm = pretty_midi.PrettyMIDI(io.BytesIO(data))
        except Exception as e:
            raise MidiDecodeError(f"Could not parse MIDI: {e}", file_path=label) from e

        return self.from_pretty_midi(pm, label=label)

    @staticmethod
    def from_pretty_midi(pm: pretty_midi.PrettyMIDI, label: Optional[str] = None) -> Document:
        """Convert a PrettyMIDI object; drum tracks are kept like any other."""
        tracks = []
        for instrument in pm.instruments:
            notes = tuple(
                Note(
                    pitch=clamp_midi(n.pitch),
                    onset=float(n.start),
                    duration=max(0.0, float(n.end - n.start)),
                    velocity=clamp_midi(n.velocity),
                )
                for n in instrument.notes
            )
            tracks.append(Track(notes=notes, name=instrument.name, program=instrument.program))

        duration = float(pm.get_end_time())
        document = Document(label=label or "untitled", tracks=tuple(tracks), duration=duration)
        logger.debug(
            "Decoded %s: %d tracks, %d notes, %.2fs",
            document.label,
            len(document.tracks),
            document.note_count,
            duration,
        )
        return document
