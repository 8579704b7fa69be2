"""Inference layer - Musical understanding used for comparison.

This layer builds higher-level features from notes:
- Key detection (dominant pitch class)
- Chord extraction and chord overlap
- Rhythm pattern overlap and tempo estimation

Pipeline: Notes → [Key, Chords, Rhythm] → Similarity scores
"""

from .key import KeyDetector
from .harmony import HarmonicAnalyzer
from .rhythm import RhythmAnalyzer

__all__ = [
    "KeyDetector",
    "HarmonicAnalyzer",
    "RhythmAnalyzer",
]
