"""Audio loading and preprocessing utilities."""

import logging
import numpy as np
import librosa
from pathlib import Path
from typing import Tuple, Optional

from ..core import AudioDecodeError
from ..core.constants import DEFAULT_SR, MAX_AUDIO_SECONDS

logger = logging.getLogger(__name__)


class AudioLoader:
    """Handles audio file loading and preprocessing."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4", ".aiff", ".aif"}

    def __init__(
        self,
        target_sr: int = DEFAULT_SR,
        mono: bool = True,
        max_duration: Optional[float] = MAX_AUDIO_SECONDS,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling
            mono: Convert to mono if True
            max_duration: Seconds of audio to read (None = whole file)
        """
        self.target_sr = target_sr
        self.mono = mono
        self.max_duration = max_duration

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load an audio file as a float sample buffer in [-1, 1].

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            AudioDecodeError: If the file is missing, unsupported or unreadable
        """
        path = Path(path)

        if not path.exists():
            raise AudioDecodeError(f"Audio file not found: {path}", file_path=str(path))

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise AudioDecodeError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}",
                file_path=str(path),
            )

        try:
            # librosa handles resampling and mono conversion
            audio, sr = librosa.load(
                str(path),
                sr=self.target_sr,
                mono=self.mono,
                duration=self.max_duration,
            )
        except Exception as e:
            raise AudioDecodeError(f"Could not decode audio: {e}", file_path=str(path)) from e

        if audio.size == 0:
            raise AudioDecodeError("Decoded audio is empty", file_path=str(path))

        logger.debug("Loaded %s: %d samples at %d Hz", path.name, audio.shape[-1], sr)
        return audio, sr

    def get_duration(self, audio: np.ndarray, sr: Optional[int] = None) -> float:
        """Get duration in seconds."""
        sr = sr or self.target_sr
        return audio.shape[-1] / sr
