"""Comparison orchestration - basic and enhanced MIDI comparison.

Basic mode runs exact note matching only. Enhanced mode also runs the
harmonic, rhythmic and key analyzers and blends the four scores with
fixed weights:

    overall = 0.4 * basic + 0.3 * harmonic + 0.2 * rhythm + 0.1 * key
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..config import ComparisonConfig
from ..conversion import AudioToMidiConverter, CancellationToken
from ..core import Document, ConversionCancelledError, MidiDecodeError
from ..inference import HarmonicAnalyzer, KeyDetector, RhythmAnalyzer
from ..input import AudioLoader, MidiLoader
from ..output import MIDIEncoder
from .notes import NoteSetComparator
from .results import AnalysisDetails, ComparisonResult, EnhancedComparisonResult

logger = logging.getLogger(__name__)

MODES = ("basic", "enhanced")


class ComparisonOrchestrator:
    """Compose the comparator and analyzers into comparison results."""

    def __init__(
        self,
        config: Optional[ComparisonConfig] = None,
        encoder: Optional[MIDIEncoder] = None,
        converter: Optional[AudioToMidiConverter] = None,
        midi_loader: Optional[MidiLoader] = None,
    ):
        """
        Initialize ComparisonOrchestrator.

        Args:
            config: Comparison constants (default: ComparisonConfig())
            encoder: Encoder for output files (default: MIDIEncoder())
            converter: AudioToMidiConverter for audio inputs (created on demand)
            midi_loader: Decoder for MIDI inputs (default: MidiLoader())
        """
        self.config = config or ComparisonConfig()
        self.comparator = NoteSetComparator(self.config, encoder)
        self.harmony = HarmonicAnalyzer(self.config)
        self.rhythm = RhythmAnalyzer(self.config)
        self.keys = KeyDetector()
        self.midi_loader = midi_loader or MidiLoader()
        self._converter = converter

    @property
    def converter(self) -> AudioToMidiConverter:
        if self._converter is None:
            self._converter = AudioToMidiConverter()
        return self._converter

    def compare(
        self, doc1: Document, doc2: Document, mode: str = "basic"
    ) -> Union[ComparisonResult, EnhancedComparisonResult]:
        """
        Compare two documents.

        Args:
            doc1: First document
            doc2: Second document
            mode: "basic" or "enhanced"

        Returns:
            ComparisonResult or EnhancedComparisonResult
        """
        if mode == "basic":
            return self.compare_basic(doc1, doc2)
        if mode == "enhanced":
            return self.compare_enhanced(doc1, doc2)
        raise ValueError(f"Unknown comparison mode: {mode!r}. Expected one of {MODES}")

    def compare_basic(self, doc1: Document, doc2: Document) -> ComparisonResult:
        """Exact note-identity comparison with the common notes encoded."""
        return self.comparator.compare(doc1, doc2)

    def compare_enhanced(self, doc1: Document, doc2: Document) -> EnhancedComparisonResult:
        """
        Full comparison: note identity, harmony, rhythm and key.

        Returns:
            EnhancedComparisonResult whose ``similarity`` is the blended score
        """
        cfg = self.config
        basic = self.comparator.compare(doc1, doc2, min_velocity=cfg.enhanced_min_velocity)
        notes1 = doc1.notes
        notes2 = doc2.notes

        harmonic = self.harmony.harmonic_similarity(notes1, notes2)
        rhythm = self.rhythm.rhythm_similarity(notes1, notes2)
        key = self.keys.key_similarity(notes1, notes2)

        overall = (
            basic.similarity * cfg.basic_weight
            + harmonic * cfg.harmonic_weight
            + rhythm * cfg.rhythm_weight
            + key * cfg.key_weight
        )
        logger.info(
            "Enhanced comparison: basic %.3f, harmonic %.3f, rhythm %.3f, key %.3f -> %.3f",
            basic.similarity,
            harmonic,
            rhythm,
            key,
            overall,
        )

        return EnhancedComparisonResult(
            similarity=overall,
            common_note_count=basic.common_note_count,
            total_notes_1=basic.total_notes_1,
            total_notes_2=basic.total_notes_2,
            output_document=basic.output_document,
            midi_bytes=basic.midi_bytes,
            basic_similarity=basic.similarity,
            harmonic_similarity=harmonic,
            rhythm_similarity=rhythm,
            key_similarity=key,
            analysis_details=self.analysis_details(doc1, doc2),
        )

    def analysis_details(self, doc1: Document, doc2: Document) -> AnalysisDetails:
        """Chord labels, tempo estimates and keys for the enhanced report."""
        notes1 = doc1.notes
        notes2 = doc2.notes

        chords = self.harmony.common_chords(notes1, notes2)
        labels = [self.harmony.chord_label(c) for c in chords[: self.config.max_reported_chords]]

        tempo1 = self.rhythm.estimate_tempo(notes1)
        tempo2 = self.rhythm.estimate_tempo(notes2)

        key1 = self.keys.detect_key(notes1)
        key2 = self.keys.detect_key(notes2)

        return AnalysisDetails(
            common_chords=labels,
            common_intervals=list(self.config.common_intervals),
            tempo_1=tempo1,
            tempo_2=tempo2,
            tempo_similarity=self.rhythm.tempo_similarity(tempo1, tempo2),
            key_1=self.keys.key_name(key1),
            key_2=self.keys.key_name(key2),
            key_distance=self.keys.key_distance(key1, key2),
        )

    def load_document(self, path: str, token: Optional[CancellationToken] = None) -> Document:
        """
        Load a MIDI file, or convert an audio file and load the result.

        Raises:
            MidiDecodeError: If a MIDI input cannot be parsed or the suffix is
                neither a MIDI nor an audio format
            ConversionCancelledError: If an audio conversion was cancelled
        """
        suffix = Path(path).suffix.lower()
        if suffix in MidiLoader.SUPPORTED_FORMATS:
            return self.midi_loader.load(path)
        if suffix in AudioLoader.SUPPORTED_FORMATS:
            return self.document_from_audio(path, token)
        raise MidiDecodeError(
            f"Unsupported input format: {suffix or '(none)'}. "
            f"Supported: {sorted(MidiLoader.SUPPORTED_FORMATS | AudioLoader.SUPPORTED_FORMATS)}",
            file_path=str(path),
        )

    def document_from_audio(self, path: str, token: Optional[CancellationToken] = None) -> Document:
        """Convert audio to MIDI and decode it into a Document."""
        result = self.converter.convert(path, token=token)
        if result.is_cancelled:
            raise ConversionCancelledError(f"Conversion of {Path(path).name} was cancelled")
        return self.midi_loader.load_bytes(result.midi_bytes, label=result.filename)

    def compare_files(
        self,
        path1: str,
        path2: str,
        mode: str = "basic",
        token: Optional[CancellationToken] = None,
    ) -> Union[ComparisonResult, EnhancedComparisonResult]:
        """Load two files (MIDI or audio) and compare them."""
        doc1 = self.load_document(path1, token)
        doc2 = self.load_document(path2, token)
        return self.compare(doc1, doc2, mode)

    def compare_audio(
        self,
        path: str,
        document: Document,
        mode: str = "basic",
        token: Optional[CancellationToken] = None,
    ) -> Union[ComparisonResult, EnhancedComparisonResult]:
        """Convert an audio file and compare the result against ``document``."""
        return self.compare(self.document_from_audio(path, token), document, mode)
