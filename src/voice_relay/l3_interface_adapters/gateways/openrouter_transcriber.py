"""Gateway: OpenRouter transcription via chat completion with an audio part — implements CloudTranscriber port."""

from __future__ import annotations

import base64
import logging

import openai

from voice_relay.l1_entities.errors import HttpError
from voice_relay.l2_use_cases.ports.cloud_transcriber import CloudAudio
from voice_relay.l2_use_cases.utils.prompt_builder import TRANSCRIBE_ONLY_INSTRUCTION

log = logging.getLogger('vr.cloud')

DEFAULT_MODEL = 'google/gemini-2.0-flash-001'

OPENROUTER_HEADERS = {
    'HTTP-Referer': 'https://github.com/voice-relay/voice-relay',
    'X-Title': 'voice-relay',
}


def _audio_format(mime_type: str) -> str:
    return mime_type.split('/')[-1].removeprefix('x-') or 'wav'


class OpenRouterTranscriber:
    def __init__(self, base_url: str = 'https://openrouter.ai/api/v1') -> None:
        self._base_url = base_url

    async def transcribe(self, audio: CloudAudio, model: str, api_key: str, language: str) -> str:
        client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=self._base_url,
            max_retries=0,
            default_headers=OPENROUTER_HEADERS,
        )
        log.debug('OpenRouter transcription: %d bytes, model=%s', len(audio.data), model or DEFAULT_MODEL)
        content = [
            {'type': 'text', 'text': f'{TRANSCRIBE_ONLY_INSTRUCTION} Language: {language}.'},
            {
                'type': 'input_audio',
                'input_audio': {
                    'data': base64.b64encode(audio.data).decode('ascii'),
                    'format': _audio_format(audio.mime_type),
                },
            },
        ]
        try:
            resp = await client.chat.completions.create(
                model=model or DEFAULT_MODEL,
                messages=[{'role': 'user', 'content': content}],  # ty: ignore[invalid-argument-type] -- dict satisfies ChatCompletionMessageParam at runtime
            )
        except openai.APIStatusError as e:
            raise HttpError(e.status_code, e.response.text) from e
        except openai.APIConnectionError as e:
            raise HttpError(0, str(e)) from e
        if not resp.choices:
            return ''
        return resp.choices[0].message.content or ''
