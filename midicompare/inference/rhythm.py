"""Rhythm and tempo analysis from note onsets."""

import math
from typing import List, Optional, Sequence

import numpy as np

from ..config import ComparisonConfig
from ..core import Note


class RhythmAnalyzer:
    """Compare inter-onset interval patterns and estimate tempo."""

    def __init__(self, config: Optional[ComparisonConfig] = None):
        self.config = config or ComparisonConfig()

    def extract_pattern(self, notes: Sequence[Note]) -> List[int]:
        """
        Quantized inter-onset intervals.

        Args:
            notes: List of notes, in any order

        Returns:
            Successive onset gaps in grid steps (16ths of a second by default)
        """
        onsets = sorted(note.onset for note in notes)
        grid = self.config.rhythm_grid
        # Onsets are sorted, so gaps are non-negative and floor(x + 0.5) rounds half up
        return [math.floor((b - a) * grid + 0.5) for a, b in zip(onsets, onsets[1:])]

    def rhythm_similarity(self, notes1: Sequence[Note], notes2: Sequence[Note]) -> float:
        """
        Share of intervals in the first pattern that also occur in the second.

        Membership is set-based, so order does not matter; repeated
        intervals in the first pattern each count.

        Returns:
            matches / max(len1, len2, 1)
        """
        pattern1 = self.extract_pattern(notes1)
        pattern2 = self.extract_pattern(notes2)
        present = set(pattern2)
        matches = sum(1 for interval in pattern1 if interval in present)
        return matches / max(len(pattern1), len(pattern2), 1)

    def estimate_tempo(self, notes: Sequence[Note]) -> float:
        """
        Coarse tempo from the mean onset interval.

        Args:
            notes: List of notes

        Returns:
            Tempo in BPM, rounded to a whole number. Fewer than two notes
            gives 60 BPM.
        """
        onsets = np.sort(np.array([note.onset for note in notes], dtype=float))
        if len(onsets) > 1:
            mean_interval = float(np.mean(np.diff(onsets)))
        else:
            mean_interval = 1.0
        bpm = 60.0 / max(mean_interval, self.config.min_tempo_interval)
        # Half-up, so 62.5 BPM reports as 63
        return float(math.floor(bpm + 0.5))

    @staticmethod
    def tempo_similarity(tempo1: float, tempo2: float) -> float:
        """1 minus the relative tempo difference."""
        fastest = max(tempo1, tempo2)
        if fastest <= 0:
            return 0.0
        return 1.0 - abs(tempo1 - tempo2) / fastest
