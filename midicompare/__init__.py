"""midi-compare - MIDI comparison and analysis engine.

Architecture Layers:
    1. core/        - Note, Track, Document, errors
    2. input/       - Audio and MIDI decoding
    3. analysis/    - Energy-based onset extraction from audio
    4. inference/   - Harmony, rhythm and key analysis
    5. comparison/  - Note matching and result orchestration
    6. output/      - Bit-exact Standard MIDI File encoding
    7. conversion/  - Audio to MIDI with caching and cancellation
"""

__version__ = "0.1.0"

# Core types
from .core import Note, Track, Document

# Configuration
from .config import ComparisonConfig, ConversionConfig

# Input layer
from .input import AudioLoader, MidiLoader

# Analysis layer
from .analysis import AudioOnsetExtractor

# Inference layer
from .inference import HarmonicAnalyzer, RhythmAnalyzer, KeyDetector

# Output layer
from .output import MIDIEncoder, encode

# Comparison layer
from .comparison import (
    NoteSetComparator,
    ComparisonOrchestrator,
    ComparisonResult,
    EnhancedComparisonResult,
)

# Conversion layer
from .conversion import AudioToMidiConverter, CancellationToken, ConversionCache

__all__ = [
    # Core
    "Note",
    "Track",
    "Document",
    # Config
    "ComparisonConfig",
    "ConversionConfig",
    # Input
    "AudioLoader",
    "MidiLoader",
    # Analysis
    "AudioOnsetExtractor",
    # Inference
    "HarmonicAnalyzer",
    "RhythmAnalyzer",
    "KeyDetector",
    # Output
    "MIDIEncoder",
    "encode",
    # Comparison
    "NoteSetComparator",
    "ComparisonOrchestrator",
    "ComparisonResult",
    "EnhancedComparisonResult",
    # Conversion
    "AudioToMidiConverter",
    "CancellationToken",
    "ConversionCache",
]
