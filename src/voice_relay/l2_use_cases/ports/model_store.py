"""Port: local whisper model files."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from voice_relay.l1_entities.whisper_model import WhisperModelDescriptor


class ModelStore(Protocol):
    """Abstract model store — probes and fetches model weights on disk."""

    def catalog(self) -> list[WhisperModelDescriptor]:
        """Known model variants, not yet probed (installed=False)."""
        ...

    def probe(self, name: str) -> Path | None:
        """Return the model file path if present on disk, else None."""
        ...

    def fetch(self, name: str, on_progress: Callable[[int], None]) -> Path:
        """Download *name* (blocking), reporting integer percentages. Returns the local path."""
        ...
