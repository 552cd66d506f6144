"""Port: host-side native recorder (device-level microphone capture)."""

from __future__ import annotations

from typing import Protocol

from voice_relay.l1_entities.audio_artifact import AudioArtifact


class NativeRecorderHost(Protocol):
    """Abstract host recorder. Calls may block; callers run them off the event loop."""

    def begin_capture(self) -> None:
        """Start device capture. Raises RecorderBusyError if one is already active."""
        ...

    def end_capture(self) -> AudioArtifact:
        """Stop capture and return a reference to the recorded audio."""
        ...

    def read_artifact(self, artifact: AudioArtifact) -> bytes:
        """Return the encoded audio payload behind *artifact*."""
        ...

    def is_recording(self) -> bool:
        ...
