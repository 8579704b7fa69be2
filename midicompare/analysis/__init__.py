"""Analysis layer - Low-level signal analysis.

This layer reduces raw audio to coarse pitched events:
- Chunked RMS energy
- Energy-to-pitch mapping
"""

from .onsets import AudioOnsetExtractor

__all__ = [
    "AudioOnsetExtractor",
]
