"""
Custom exceptions for midi-compare.

Analyzers are pure and never raise; these cover the I/O-adjacent steps
(decoding audio and MIDI), pipeline cancellation and bad configuration.
"""

from typing import Any, Optional


class MidiCompareError(Exception):
    """Base exception for all midi-compare errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class AudioDecodeError(MidiCompareError):
    """Raised when an audio file cannot be read or decoded."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class MidiDecodeError(MidiCompareError):
    """Raised when a MIDI file cannot be parsed."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class ConversionCancelledError(MidiCompareError):
    """Raised when an audio conversion was cancelled by its caller."""

    def __init__(self, message: str = "Conversion cancelled", stage: Optional[str] = None):
        super().__init__(message, details={"stage": stage} if stage else None)
        self.stage = stage


class ConfigurationError(MidiCompareError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
