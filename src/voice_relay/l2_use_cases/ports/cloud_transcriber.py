"""Port: one cloud transcription API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class CloudAudio:
    """Encoded audio plus the format contract the capture backend declared."""

    data: bytes
    sample_rate: int
    encoding: str = 'LINEAR16'
    filename: str = 'audio.wav'
    mime_type: str = 'audio/wav'


class CloudTranscriber(Protocol):
    """Abstract provider call. Raises HttpError / UnsupportedAudioFormatError."""

    async def transcribe(self, audio: CloudAudio, model: str, api_key: str, language: str) -> str:
        ...
