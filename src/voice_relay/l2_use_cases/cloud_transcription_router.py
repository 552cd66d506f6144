"""Use case: route captured audio to the selected cloud transcription provider."""

from __future__ import annotations

import logging
from typing import assert_never

from voice_relay.l1_entities.errors import NoApiKeyError, ProviderUnsupportedError
from voice_relay.l1_entities.provider import Provider
from voice_relay.l2_use_cases.ports.cloud_transcriber import CloudAudio, CloudTranscriber

log = logging.getLogger('vr.cloud')


class CloudTranscriptionRouter:
    """One handler per cloud provider. Missing handlers are rejected, not guessed."""

    def __init__(
        self,
        openai: CloudTranscriber | None = None,
        google: CloudTranscriber | None = None,
        openrouter: CloudTranscriber | None = None,
    ) -> None:
        self._openai = openai
        self._google = google
        self._openrouter = openrouter

    def _handler_for(self, provider: Provider) -> CloudTranscriber | None:
        match provider:
            case Provider.OPENAI:
                return self._openai
            case Provider.GOOGLE:
                return self._google
            case Provider.OPENROUTER:
                return self._openrouter
            case Provider.CUSTOM_LOCAL:
                return None
            case _:
                assert_never(provider)

    async def transcribe(
        self,
        audio: CloudAudio,
        provider: Provider,
        model: str,
        api_key: str | None,
        language: str,
    ) -> str:
        """Transcribe *audio* with *provider*.

        Raises NoApiKeyError before any handler is consulted, so a missing key
        never costs a network round-trip.
        """
        if not api_key or not api_key.strip():
            raise NoApiKeyError(f'No API key configured for {provider.value}')

        handler = self._handler_for(provider)
        if handler is None:
            raise ProviderUnsupportedError(f'{provider.value} has no cloud transcription handler')

        log.info('Transcribing %d bytes via %s (model=%s)', len(audio.data), provider.value, model or 'default')
        text = await handler.transcribe(audio, model=model, api_key=api_key, language=language)
        return text.strip()
