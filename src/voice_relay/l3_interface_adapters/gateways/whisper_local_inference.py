"""Gateway: on-device whisper.cpp inference — implements LocalInferenceEngine port."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from voice_relay.l1_entities.audio_artifact import AudioArtifact
from voice_relay.l3_interface_adapters.gateways.audio_file_loader import load_artifact
from voice_relay.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber

log = logging.getLogger('vr.local')


class WhisperLocalInference:
    """Decodes the artifact with ffmpeg and runs whisper.cpp on it.

    One loaded model is cached and reused until a different model path is
    requested. Calls are serialised; whisper.cpp contexts are not re-entrant.
    """

    def __init__(self, transcriber: WhisperTranscriber | None = None) -> None:
        self._transcriber = transcriber or WhisperTranscriber()
        self._lock = threading.Lock()

    def run(self, artifact: AudioArtifact, model_path: Path, language: str) -> str:
        audio = load_artifact(artifact)
        log.debug('Decoded %s to %d samples', artifact.describe(), len(audio))
        with self._lock:
            self._transcriber.load_model(str(model_path))
            segments = self._transcriber.transcribe(audio, language=language)
        text = ' '.join(seg.text for seg in segments).strip()
        log.info('Local inference produced %d segments', len(segments))
        return text

    def close(self) -> None:
        with self._lock:
            self._transcriber.close()
