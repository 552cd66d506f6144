"""Use case: turn a recorded artifact into text, on-device or through a cloud provider."""

from __future__ import annotations

import asyncio
import logging

from voice_relay.l1_entities.audio_artifact import AudioArtifact
from voice_relay.l1_entities.provider import ProviderSelection
from voice_relay.l2_use_cases.cloud_transcription_router import CloudTranscriptionRouter
from voice_relay.l2_use_cases.model_manager import ModelManager
from voice_relay.l2_use_cases.ports.cloud_transcriber import CloudAudio
from voice_relay.l2_use_cases.ports.native_recorder import NativeRecorderHost

log = logging.getLogger('vr.controller')


class TranscribeArtifactUseCase:
    def __init__(
        self,
        model_manager: ModelManager,
        router: CloudTranscriptionRouter,
        host: NativeRecorderHost,
    ) -> None:
        self._models = model_manager
        self._router = router
        self._host = host

    async def execute(self, artifact: AudioArtifact, selection: ProviderSelection, language: str) -> str:
        if selection.uses_local_inference:
            log.debug('Local inference for %s', artifact.describe())
            return await self._models.infer(artifact, language)

        data = artifact.data if artifact.data is not None else await asyncio.to_thread(self._host.read_artifact, artifact)
        audio = CloudAudio(data=data, sample_rate=artifact.sample_rate, encoding=artifact.encoding)
        return await self._router.transcribe(
            audio,
            provider=selection.provider,
            model=selection.transcription_model_id,
            api_key=selection.api_key,
            language=language,
        )
