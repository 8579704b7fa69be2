"""Fallback scale fragments used when audio cannot be decoded."""

import random
from enum import Enum
from typing import Dict, List, Optional, Tuple


class FallbackScale(Enum):
    """Eight-note scale fragments rooted at middle C."""
    MAJOR = "major"
    NATURAL_MINOR = "natural_minor"
    BLUES = "blues"


SCALE_PITCHES: Dict[FallbackScale, Tuple[int, ...]] = {
    FallbackScale.MAJOR: (60, 62, 64, 65, 67, 69, 71, 72),
    FallbackScale.NATURAL_MINOR: (60, 62, 63, 65, 67, 69, 70, 72),
    FallbackScale.BLUES: (60, 61, 64, 65, 67, 68, 71, 72),
}


def choose_fallback_scale(rng: Optional[random.Random] = None) -> FallbackScale:
    """Pick a scale with the given random source (seed it for repeatable output)."""
    rng = rng or random.Random()
    scales = list(FallbackScale)
    return scales[rng.randrange(len(scales))]


def fallback_pitches(scale: FallbackScale) -> List[int]:
    return list(SCALE_PITCHES[scale])
