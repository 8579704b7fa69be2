"""Result containers for MIDI comparison."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core import Document


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of an exact note-identity comparison."""

    similarity: float  # 0.0 - 1.0
    common_note_count: int
    total_notes_1: int  # unique (pitch, onset) keys in the first document
    total_notes_2: int
    output_document: Document  # notes present in both inputs
    midi_bytes: bytes = field(default=b"", repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "similarity": self.similarity,
            "common_notes": self.common_note_count,
            "total_notes_1": self.total_notes_1,
            "total_notes_2": self.total_notes_2,
            "output_notes": self.output_document.note_count,
        }


@dataclass(frozen=True)
class AnalysisDetails:
    """Supporting detail for an enhanced comparison."""

    common_chords: List[str]  # e.g. ["C-E-G"]
    common_intervals: List[int]  # semitones
    tempo_1: float  # BPM
    tempo_2: float
    tempo_similarity: float
    key_1: str  # pitch-class name
    key_2: str
    key_distance: int  # 0-6 semitones

    def to_dict(self) -> Dict[str, Any]:
        return {
            "common_chords": list(self.common_chords),
            "common_intervals": list(self.common_intervals),
            "tempo_analysis": {
                "file1_tempo": self.tempo_1,
                "file2_tempo": self.tempo_2,
                "tempo_similarity": self.tempo_similarity,
            },
            "key_signatures": {
                "file1_key": self.key_1,
                "file2_key": self.key_2,
                "key_distance": self.key_distance,
            },
        }


@dataclass(frozen=True)
class EnhancedComparisonResult(ComparisonResult):
    """Comparison blended with harmonic, rhythmic and key similarity.

    ``similarity`` holds the blended score; ``basic_similarity`` keeps the
    exact-match score it was built from.
    """

    basic_similarity: float = 0.0
    harmonic_similarity: float = 0.0
    rhythm_similarity: float = 0.0
    key_similarity: float = 0.0
    analysis_details: Optional[AnalysisDetails] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "basic_similarity": self.basic_similarity,
                "harmonic_similarity": self.harmonic_similarity,
                "rhythm_similarity": self.rhythm_similarity,
                "key_similarity": self.key_similarity,
            }
        )
        if self.analysis_details is not None:
            data["analysis_details"] = self.analysis_details.to_dict()
        return data
