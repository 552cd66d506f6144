"""Capture session entity — one logical listening episode."""

from __future__ import annotations

import enum
import uuid

from pydantic import BaseModel, Field

from voice_relay.l1_entities.audio_artifact import AudioArtifact


class CaptureStatus(enum.Enum):
    IDLE = 'idle'
    LISTENING = 'listening'
    STOPPING = 'stopping'
    TRANSCRIBING = 'transcribing'
    COMPLETED = 'completed'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        """Idle, Completed and Failed sessions do not hold the microphone."""
        return self in (CaptureStatus.IDLE, CaptureStatus.COMPLETED, CaptureStatus.FAILED)


class BackendKind(enum.Enum):
    NATIVE_RECORDER = 'native_recorder'
    BROWSER_RECOGNIZER = 'browser_recognizer'


class CaptureSession(BaseModel):
    """Mutable state of a single capture session."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    status: CaptureStatus = CaptureStatus.IDLE
    backend_kind: BackendKind = BackendKind.NATIVE_RECORDER
    interim_text: str = ''
    final_parts: list[str] = Field(default_factory=list)
    artifact: AudioArtifact | None = None
    error: str = ''

    @property
    def final_text(self) -> str:
        return ' '.join(p.strip() for p in self.final_parts if p.strip()).strip()

    def apply_interim(self, text: str) -> None:
        """Replace the live preview. Never merged with the previous value."""
        self.interim_text = text

    def append_final(self, text: str) -> None:
        """Append a confirmed segment; the preview it replaces is cleared."""
        if text.strip():
            self.final_parts.append(text.strip())
        self.interim_text = ''
