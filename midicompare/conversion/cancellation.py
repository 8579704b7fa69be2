"""Cooperative cancellation for the conversion pipeline."""

import threading
from typing import Optional

from ..core import ConversionCancelledError


class CancellationToken:
    """A thread-safe flag passed through every conversion stage.

    Stages call ``raise_if_cancelled`` at their boundaries; the converter
    turns the resulting error into a CANCELLED result.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: Optional[str] = None) -> None:
        """Raise ConversionCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise ConversionCancelledError(stage=stage)
