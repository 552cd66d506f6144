"""Port: audio capture source."""

from __future__ import annotations

from typing import Protocol

import numpy as np


class AudioSource(Protocol):
    """Abstract audio input stream delivering mono float32 samples."""

    def open(self, sample_rate: int, channels: int) -> None:
        """Open the audio stream. Raises DeviceUnavailableError when the device cannot be opened."""
        ...

    def read(self, timeout: float) -> np.ndarray | None:
        """Read a chunk of audio. Returns None on timeout."""
        ...

    def drain(self) -> np.ndarray | None:
        """Return everything still buffered without waiting, or None."""
        ...

    def close(self) -> None:
        """Close the audio stream."""
        ...
