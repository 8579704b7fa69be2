"""Audio to MIDI conversion with caching, cancellation and fallback.

Stages: uploading -> processing -> transcribing -> generating -> complete.
The cancellation token is checked before every stage and after decoding.
A decode failure never reaches the caller; it is replaced by a short
fallback document built from a fixed scale.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..config import ConversionConfig
from ..core import AudioDecodeError, ConversionCancelledError
from ..analysis import AudioOnsetExtractor
from ..input import AudioLoader
from ..output import MIDIEncoder
from .cache import AudioFingerprint, ConversionCache
from .cancellation import CancellationToken
from .fallback import choose_fallback_scale, fallback_pitches

logger = logging.getLogger(__name__)


class ConversionStatus(Enum):
    """How a conversion ended."""
    CONVERTED = "converted"
    FALLBACK = "fallback"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ConversionProgress:
    """A progress report sent to the caller's callback."""
    stage: str
    progress: int  # percent
    message: str


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one conversion. Cancellation is a status, not an exception."""

    status: ConversionStatus
    filename: str
    midi_bytes: bytes = field(default=b"", repr=False)
    confidence: float = 0.0
    processing_time: float = 0.0  # seconds
    pitches: tuple = ()

    @property
    def is_cancelled(self) -> bool:
        return self.status is ConversionStatus.CANCELLED

    @property
    def ok(self) -> bool:
        return not self.is_cancelled


ProgressCallback = Callable[[ConversionProgress], None]

STAGES = (
    ConversionProgress("uploading", 20, "Reading audio file..."),
    ConversionProgress("processing", 40, "Analyzing audio content..."),
    ConversionProgress("transcribing", 70, "Transcribing musical notes..."),
    ConversionProgress("generating", 90, "Generating MIDI file..."),
)
COMPLETE = ConversionProgress("complete", 100, "Conversion completed!")


class AudioToMidiConverter:
    """Convert audio files to short MIDI files.

    Completed results are cached by file fingerprint (name, size,
    modification time); concurrent calls for the same file share one run.
    """

    def __init__(
        self,
        config: Optional[ConversionConfig] = None,
        loader: Optional[AudioLoader] = None,
        extractor: Optional[AudioOnsetExtractor] = None,
        encoder: Optional[MIDIEncoder] = None,
        cache: Optional[ConversionCache] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize AudioToMidiConverter.

        Args:
            config: Conversion constants (default: ConversionConfig())
            loader: Audio decoder (default: AudioLoader at config sample rate)
            extractor: Onset extractor (default: AudioOnsetExtractor(config))
            encoder: MIDI encoder (default: one sharing ``rng``)
            cache: Result cache (default: bounded LRU of ``config.cache_size``)
            rng: Source for fallback choice, velocities and confidence
        """
        self.config = config or ConversionConfig()
        self.rng = rng or random.Random()
        self.loader = loader or AudioLoader(
            target_sr=self.config.sample_rate,
            max_duration=self.config.max_audio_seconds,
        )
        self.extractor = extractor or AudioOnsetExtractor(self.config)
        self.encoder = encoder or MIDIEncoder(
            rng=self.rng, max_pitch_notes=self.config.max_encoded_notes
        )
        self.cache = cache or ConversionCache(
            max_size=self.config.cache_size,
            should_store=lambda result: result.ok,
        )

    def convert(
        self,
        path: str,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ConversionResult:
        """
        Convert an audio file, reusing a cached or in-flight result.

        Args:
            path: Path to the audio file
            token: Cancellation token checked between stages
            progress: Callback receiving ConversionProgress reports

        Returns:
            ConversionResult; CANCELLED results are never cached
        """
        try:
            key = AudioFingerprint.from_path(path)
        except OSError:
            # No fingerprint for unreadable paths; convert uncached
            logger.warning("Cannot fingerprint %s; skipping cache", path)
            return self._run(path, token, progress)

        token = token or CancellationToken()
        try:
            return self.cache.get_or_compute(
                key, lambda: self._run(path, token, progress), token=token
            )
        except ConversionCancelledError as e:
            # Cancelled while waiting on another caller's run, which continues
            logger.info("Stopped waiting for %s at %s", key.name, e.stage)
            return self._cancelled()

    def _run(
        self,
        path: str,
        token: Optional[CancellationToken],
        progress: Optional[ProgressCallback],
    ) -> ConversionResult:
        token = token or CancellationToken()
        stem = Path(path).stem
        start_time = time.perf_counter()

        try:
            for stage in STAGES:
                token.raise_if_cancelled(stage.stage)
                if progress:
                    progress(stage)

            result = self._convert_audio(path, stem, token)
            token.raise_if_cancelled("complete")
        except ConversionCancelledError as e:
            logger.info("Conversion of %s cancelled at %s", stem, e.stage)
            return self._cancelled(time.perf_counter() - start_time)

        if progress:
            progress(COMPLETE)

        elapsed = time.perf_counter() - start_time
        logger.info("Converted %s (%s) in %.2fs", stem, result.status.value, elapsed)
        return ConversionResult(
            status=result.status,
            filename=result.filename,
            midi_bytes=result.midi_bytes,
            confidence=self.config.base_confidence + self.rng.random() * self.config.confidence_jitter,
            processing_time=elapsed,
            pitches=result.pitches,
        )

    def _convert_audio(self, path: str, stem: str, token: CancellationToken) -> ConversionResult:
        try:
            audio, sr = self.loader.load(path)
        except AudioDecodeError as e:
            token.raise_if_cancelled("decode")
            logger.warning("Falling back to scale fragment for %s: %s", stem, e)
            return self.fallback(stem)

        token.raise_if_cancelled("decode")
        duration = min(self.loader.get_duration(audio, sr), self.config.max_audio_seconds)
        pitches = self.extractor.extract(audio, sr, self.config.max_events)

        token.raise_if_cancelled("encode")
        return ConversionResult(
            status=ConversionStatus.CONVERTED,
            filename=f"{stem}_converted.mid",
            midi_bytes=self.encoder.encode_pitches(duration, pitches),
            pitches=tuple(pitches[: self.config.max_encoded_notes]),
        )

    @staticmethod
    def _cancelled(processing_time: float = 0.0) -> ConversionResult:
        return ConversionResult(
            status=ConversionStatus.CANCELLED,
            filename="",
            processing_time=processing_time,
        )

    def fallback(self, stem: str) -> ConversionResult:
        """Build the fixed-scale fallback file. Never fails."""
        scale = choose_fallback_scale(self.rng)
        pitches = fallback_pitches(scale)[: self.config.max_encoded_notes]
        logger.debug("Fallback scale: %s", scale.value)
        return ConversionResult(
            status=ConversionStatus.FALLBACK,
            filename=f"{stem}_fallback.mid",
            midi_bytes=self.encoder.encode_pitches(self.config.fallback_duration, pitches),
            pitches=tuple(pitches),
        )
