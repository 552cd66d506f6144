"""Gateway: Google Cloud Speech-to-Text v1 REST — implements CloudTranscriber port (JSON + base64 + locale)."""

from __future__ import annotations

import base64
import logging

import httpx

from voice_relay.l1_entities.errors import HttpError, UnsupportedAudioFormatError
from voice_relay.l2_use_cases.ports.cloud_transcriber import CloudAudio

log = logging.getLogger('vr.cloud')

SPEECH_ENDPOINT = 'https://speech.googleapis.com/v1/speech:recognize'

MIN_SAMPLE_RATE = 8000
MAX_SAMPLE_RATE = 48000


def build_recognition_config(audio: CloudAudio, model: str, language: str) -> dict:
    """Recognition config for *audio*. Raises UnsupportedAudioFormatError for formats Google rejects."""
    if audio.encoding != 'LINEAR16':
        raise UnsupportedAudioFormatError(f'Google Speech expects LINEAR16 audio, got {audio.encoding}')
    if not MIN_SAMPLE_RATE <= audio.sample_rate <= MAX_SAMPLE_RATE:
        raise UnsupportedAudioFormatError(
            f'Sample rate {audio.sample_rate} Hz is outside {MIN_SAMPLE_RATE}-{MAX_SAMPLE_RATE} Hz'
        )

    config: dict = {
        'encoding': 'LINEAR16',
        'sampleRateHertz': audio.sample_rate,
        'languageCode': language,
        'enableAutomaticPunctuation': True,
    }
    if model == 'enhanced':
        config['useEnhanced'] = True
        config['model'] = 'phone_call'
    else:
        config['model'] = 'default'
    return config


class GoogleSpeechTranscriber:
    def __init__(self, endpoint: str = SPEECH_ENDPOINT) -> None:
        self._endpoint = endpoint

    async def transcribe(self, audio: CloudAudio, model: str, api_key: str, language: str) -> str:
        body = {
            'config': build_recognition_config(audio, model, language),
            'audio': {'content': base64.b64encode(audio.data).decode('ascii')},
        }
        log.debug(
            'Google transcription: %d bytes at %d Hz, tier=%s', len(audio.data), audio.sample_rate, model or 'standard'
        )
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.post(self._endpoint, params={'key': api_key}, json=body)
        except httpx.HTTPError as e:
            raise HttpError(0, str(e)) from e

        if resp.status_code >= 400:
            raise HttpError(resp.status_code, resp.text)

        results = resp.json().get('results') or []
        parts = [(r.get('alternatives') or [{}])[0].get('transcript', '') for r in results]
        return ' '.join(p.strip() for p in parts if p.strip())
