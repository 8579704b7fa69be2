"""Key detection - Identify the tonal center of a note list.

Uses a duration-weighted pitch-class histogram: the pitch class held
longest is taken as the key. Mode is not inferred.
"""

import numpy as np
from typing import List, Sequence

from ..core import Note, PITCH_NAMES


class KeyDetector:
    """Detect the dominant pitch class and compare keys.

    Key distance is measured around the circle of semitones, so the
    largest possible distance is a tritone (6 semitones).
    """

    MAX_DISTANCE = 6

    def pitch_class_histogram(self, notes: Sequence[Note]) -> np.ndarray:
        """
        Sum note durations per pitch class.

        Args:
            notes: List of notes

        Returns:
            12-element numpy array of held seconds per pitch class
        """
        pitch_classes = np.zeros(12)
        for note in notes:
            pitch_classes[note.pitch % 12] += note.duration
        return pitch_classes

    def detect_key(self, notes: Sequence[Note]) -> int:
        """
        Detect key from note list.

        Args:
            notes: List of notes

        Returns:
            Pitch class 0-11. Ties go to the lowest index; an empty list is C.
        """
        # np.argmax returns the first maximum
        return int(np.argmax(self.pitch_class_histogram(notes)))

    @staticmethod
    def key_name(pitch_class: int) -> str:
        """Get the pitch-class name of a key (e.g. 'F#')."""
        return PITCH_NAMES[pitch_class % 12]

    def key_distance(self, key1: int, key2: int) -> int:
        """Semitone distance around the circle, 0-6."""
        d = abs(key1 - key2) % 12
        return min(d, 12 - d)

    def key_similarity(self, notes1: List[Note], notes2: List[Note]) -> float:
        """
        Compare the detected keys of two note lists.

        Returns:
            1.0 for the same key down to 0.0 for keys a tritone apart.
            0.0 if both lists are empty; an empty list alone has key C.
        """
        if not notes1 and not notes2:
            return 0.0
        distance = self.key_distance(self.detect_key(notes1), self.detect_key(notes2))
        return 1.0 - distance / self.MAX_DISTANCE
