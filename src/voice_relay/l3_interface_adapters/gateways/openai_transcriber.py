"""Gateway: OpenAI audio transcription — implements CloudTranscriber port (multipart upload)."""

from __future__ import annotations

import logging

import openai

from voice_relay.l1_entities.errors import HttpError
from voice_relay.l1_entities.provider import language_subtag
from voice_relay.l2_use_cases.ports.cloud_transcriber import CloudAudio

log = logging.getLogger('vr.cloud')

DEFAULT_MODEL = 'whisper-1'


class OpenAITranscriber:
    def __init__(self, base_url: str = 'https://api.openai.com/v1') -> None:
        self._base_url = base_url

    async def transcribe(self, audio: CloudAudio, model: str, api_key: str, language: str) -> str:
        client = openai.AsyncOpenAI(api_key=api_key, base_url=self._base_url, max_retries=0)
        log.debug('OpenAI transcription: %d bytes, model=%s', len(audio.data), model or DEFAULT_MODEL)
        try:
            resp = await client.audio.transcriptions.create(
                model=model or DEFAULT_MODEL,
                file=(audio.filename, audio.data, audio.mime_type),
                language=language_subtag(language),
            )
        except openai.APIStatusError as e:
            raise HttpError(e.status_code, e.response.text) from e
        except openai.APIConnectionError as e:
            raise HttpError(0, str(e)) from e
        return resp.text or ''
