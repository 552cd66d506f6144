"""Port: in-process incremental speech recognizer."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class SpeechRecognizer(Protocol):
    """Streaming recognizer with interim results.

    ``on_result(text, is_final)`` and ``on_end()`` may be called from a
    worker thread; adapters marshal them onto the event loop.
    """

    def start(self, on_result: Callable[[str, bool], None], on_end: Callable[[], None]) -> None:
        """Open the microphone and begin recognizing."""
        ...

    def stop(self) -> None:
        """Flush pending audio as final results, then release the device. Blocks until done."""
        ...
