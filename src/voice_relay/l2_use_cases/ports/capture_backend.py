"""Port: capture backend — one capability interface for every capture mode."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from voice_relay.l1_entities.audio_artifact import AudioArtifact
from voice_relay.l1_entities.capture import BackendKind

TextCallback = Callable[[str], None]
EndedCallback = Callable[[], None]


@dataclass(frozen=True)
class CaptureOutcome:
    """What a backend yields on stop: a direct transcript or an artifact, never both."""

    transcript: str | None = None
    artifact: AudioArtifact | None = None


class CaptureBackend(Protocol):
    """Abstract capture backend. Callbacks are invoked on the event loop thread."""

    kind: BackendKind

    async def start_listening(
        self,
        on_final_chunk: TextCallback,
        on_interim_chunk: TextCallback,
        on_backend_ended: EndedCallback,
    ) -> None:
        """Begin capture. Raises DeviceUnavailableError (or RecorderBusyError) on failure."""
        ...

    async def stop_listening(self) -> CaptureOutcome:
        """Finish capture and hand back the transcript or the recorded artifact."""
        ...
