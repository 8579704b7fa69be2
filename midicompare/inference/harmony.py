"""Harmony analysis - chord extraction and chord-overlap similarity.

A "chord" here is the set of pitch classes sounding within one
quarter-second window, kept only when it has enough distinct pitch
classes. Voicing and inversion are ignored.
"""

import math
from collections import defaultdict
from typing import Dict, FrozenSet, List, Optional, Set, Sequence

from ..config import ComparisonConfig
from ..core import Note, PITCH_NAMES


class HarmonicAnalyzer:
    """Extract chords from notes and compare chord content."""

    def __init__(self, config: Optional[ComparisonConfig] = None):
        self.config = config or ComparisonConfig()

    def extract_chords(self, notes: Sequence[Note]) -> List[FrozenSet[int]]:
        """
        Group notes into time windows and keep the windows that form chords.

        Args:
            notes: List of notes

        Returns:
            Pitch-class sets, ordered by window start time
        """
        windows: Dict[int, Set[int]] = defaultdict(set)
        for note in notes:
            window = math.floor(note.onset * self.config.chord_windows_per_second)
            windows[window].add(note.pitch % 12)

        return [
            frozenset(windows[key])
            for key in sorted(windows)
            if len(windows[key]) >= self.config.min_chord_size
        ]

    def common_chords(
        self, notes1: Sequence[Note], notes2: Sequence[Note]
    ) -> List[FrozenSet[int]]:
        """Chords of the first list contained in some chord of the second."""
        chords1 = self.extract_chords(notes1)
        chords2 = self.extract_chords(notes2)
        return self._contained(chords1, chords2)

    def harmonic_similarity(self, notes1: Sequence[Note], notes2: Sequence[Note]) -> float:
        """
        Fraction of chords shared between two note lists.

        Returns:
            common chords / max(chords in either list, 1)
        """
        chords1 = self.extract_chords(notes1)
        chords2 = self.extract_chords(notes2)
        common = self._contained(chords1, chords2)
        return len(common) / max(len(chords1), len(chords2), 1)

    @staticmethod
    def chord_label(chord: FrozenSet[int]) -> str:
        """Render a chord as pitch-class names, e.g. 'C-E-G'."""
        return "-".join(PITCH_NAMES[pc] for pc in sorted(chord))

    @staticmethod
    def _contained(
        chords1: List[FrozenSet[int]], chords2: List[FrozenSet[int]]
    ) -> List[FrozenSet[int]]:
        return [c1 for c1 in chords1 if any(c1 <= c2 for c2 in chords2)]
