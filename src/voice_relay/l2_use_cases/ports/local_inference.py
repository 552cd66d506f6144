"""Port: on-device inference engine."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from voice_relay.l1_entities.audio_artifact import AudioArtifact


class LocalInferenceEngine(Protocol):
    """Runs transcription against a downloaded model file. Blocking."""

    def run(self, artifact: AudioArtifact, model_path: Path, language: str) -> str:
        """Return the transcript text for *artifact*."""
        ...
