"""Tests for cloud transcription gateways — mocks openai / httpx here (L3 boundary)."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from voice_relay.l1_entities.errors import HttpError, UnsupportedAudioFormatError
from voice_relay.l2_use_cases.ports.cloud_transcriber import CloudAudio
from voice_relay.l3_interface_adapters.gateways.google_speech_transcriber import (
    GoogleSpeechTranscriber,
    build_recognition_config,
)
from voice_relay.l3_interface_adapters.gateways.openai_transcriber import OpenAITranscriber
from voice_relay.l3_interface_adapters.gateways.openrouter_transcriber import OPENROUTER_HEADERS, OpenRouterTranscriber

_OPENAI = 'voice_relay.l3_interface_adapters.gateways.openai_transcriber.openai.AsyncOpenAI'
_OPENROUTER = 'voice_relay.l3_interface_adapters.gateways.openrouter_transcriber.openai.AsyncOpenAI'
_HTTPX = 'voice_relay.l3_interface_adapters.gateways.google_speech_transcriber.httpx.AsyncClient'

AUDIO = CloudAudio(data=b'RIFFWAVE', sample_rate=16000)
_REQUEST = httpx.Request('POST', 'https://example.test/v1')


def _status_error(status: int, body: str) -> openai.APIStatusError:
    return openai.APIStatusError(body, response=httpx.Response(status, text=body, request=_REQUEST), body=None)


def _chat_response(content):
    choice = MagicMock()
    choice.message.content = content
    resp = MagicMock()
    resp.choices = [choice]
    return resp


class TestOpenAITranscriber:
    @pytest.mark.asyncio
    @patch(_OPENAI)
    async def test_multipart_upload(self, mock_cls):
        client = MagicMock()
        client.audio.transcriptions.create = AsyncMock(return_value=MagicMock(text='hola'))
        mock_cls.return_value = client

        text = await OpenAITranscriber().transcribe(AUDIO, model='', api_key='sk-1', language='es-ES')

        assert text == 'hola'
        assert mock_cls.call_args.kwargs['api_key'] == 'sk-1'
        kwargs = client.audio.transcriptions.create.call_args.kwargs
        assert kwargs['model'] == 'whisper-1'
        assert kwargs['file'] == ('audio.wav', b'RIFFWAVE', 'audio/wav')
        assert kwargs['language'] == 'es'

    @pytest.mark.asyncio
    @patch(_OPENAI)
    async def test_status_error_mapped(self, mock_cls):
        client = MagicMock()
        client.audio.transcriptions.create = AsyncMock(side_effect=_status_error(401, 'invalid key'))
        mock_cls.return_value = client

        with pytest.raises(HttpError) as exc_info:
            await OpenAITranscriber().transcribe(AUDIO, model='whisper-1', api_key='bad', language='en-US')
        assert exc_info.value.status == 401
        assert 'invalid key' in exc_info.value.body

    @pytest.mark.asyncio
    @patch(_OPENAI)
    async def test_connection_error_is_status_zero(self, mock_cls):
        client = MagicMock()
        client.audio.transcriptions.create = AsyncMock(side_effect=openai.APIConnectionError(request=_REQUEST))
        mock_cls.return_value = client

        with pytest.raises(HttpError) as exc_info:
            await OpenAITranscriber().transcribe(AUDIO, model='whisper-1', api_key='k', language='en-US')
        assert exc_info.value.status == 0


class TestOpenRouterTranscriber:
    @pytest.mark.asyncio
    @patch(_OPENROUTER)
    async def test_chat_with_audio_part(self, mock_cls):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_chat_response('bonjour'))
        mock_cls.return_value = client

        text = await OpenRouterTranscriber().transcribe(AUDIO, model='', api_key='or-1', language='fr-FR')

        assert text == 'bonjour'
        assert mock_cls.call_args.kwargs['default_headers'] == OPENROUTER_HEADERS
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs['model'] == 'google/gemini-2.0-flash-001'
        text_part, audio_part = kwargs['messages'][0]['content']
        assert 'fr-FR' in text_part['text']
        assert audio_part['input_audio']['format'] == 'wav'
        assert base64.b64decode(audio_part['input_audio']['data']) == b'RIFFWAVE'

    @pytest.mark.asyncio
    @patch(_OPENROUTER)
    async def test_empty_content(self, mock_cls):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_chat_response(None))
        mock_cls.return_value = client
        assert await OpenRouterTranscriber().transcribe(AUDIO, model='m', api_key='k', language='en-US') == ''

    @pytest.mark.asyncio
    @patch(_OPENROUTER)
    async def test_status_error_mapped(self, mock_cls):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=_status_error(402, 'insufficient credits'))
        mock_cls.return_value = client
        with pytest.raises(HttpError) as exc_info:
            await OpenRouterTranscriber().transcribe(AUDIO, model='m', api_key='k', language='en-US')
        assert exc_info.value.status == 402


class TestGoogleRecognitionConfig:
    def test_standard_tier(self):
        config = build_recognition_config(AUDIO, model='', language='pt-BR')
        assert config == {
            'encoding': 'LINEAR16',
            'sampleRateHertz': 16000,
            'languageCode': 'pt-BR',
            'enableAutomaticPunctuation': True,
            'model': 'default',
        }

    def test_enhanced_tier(self):
        config = build_recognition_config(AUDIO, model='enhanced', language='en-US')
        assert config['useEnhanced'] is True
        assert config['model'] == 'phone_call'

    @pytest.mark.parametrize('rate', [4000, 96000])
    def test_rejects_out_of_range_rate(self, rate):
        with pytest.raises(UnsupportedAudioFormatError):
            build_recognition_config(CloudAudio(data=b'x', sample_rate=rate), model='', language='en-US')

    def test_rejects_other_encoding(self):
        with pytest.raises(UnsupportedAudioFormatError):
            build_recognition_config(CloudAudio(data=b'x', sample_rate=16000, encoding='FLAC'), '', 'en-US')


def _mock_async_client(mock_cls, post: AsyncMock) -> None:
    client = MagicMock()
    client.post = post
    mock_cls.return_value.__aenter__.return_value = client


class TestGoogleSpeechTranscriber:
    @pytest.mark.asyncio
    @patch(_HTTPX)
    async def test_posts_base64_and_joins_results(self, mock_cls):
        body = {
            'results': [
                {'alternatives': [{'transcript': 'olá '}]},
                {'alternatives': [{'transcript': ' mundo'}]},
            ]
        }
        post = AsyncMock(return_value=httpx.Response(200, json=body, request=_REQUEST))
        _mock_async_client(mock_cls, post)

        text = await GoogleSpeechTranscriber().transcribe(AUDIO, model='', api_key='g-key', language='pt-BR')

        assert text == 'olá mundo'
        kwargs = post.call_args.kwargs
        assert kwargs['params'] == {'key': 'g-key'}
        assert kwargs['json']['config']['languageCode'] == 'pt-BR'
        assert base64.b64decode(kwargs['json']['audio']['content']) == b'RIFFWAVE'

    @pytest.mark.asyncio
    @patch(_HTTPX)
    async def test_no_results_is_empty(self, mock_cls):
        _mock_async_client(mock_cls, AsyncMock(return_value=httpx.Response(200, json={}, request=_REQUEST)))
        assert await GoogleSpeechTranscriber().transcribe(AUDIO, model='', api_key='k', language='en-US') == ''

    @pytest.mark.asyncio
    @patch(_HTTPX)
    async def test_http_status_error(self, mock_cls):
        resp = httpx.Response(403, text='API key not valid', request=_REQUEST)
        _mock_async_client(mock_cls, AsyncMock(return_value=resp))
        with pytest.raises(HttpError) as exc_info:
            await GoogleSpeechTranscriber().transcribe(AUDIO, model='', api_key='k', language='en-US')
        assert exc_info.value.status == 403
        assert 'not valid' in exc_info.value.body

    @pytest.mark.asyncio
    @patch(_HTTPX)
    async def test_network_error(self, mock_cls):
        _mock_async_client(mock_cls, AsyncMock(side_effect=httpx.ConnectError('unreachable')))
        with pytest.raises(HttpError) as exc_info:
            await GoogleSpeechTranscriber().transcribe(AUDIO, model='', api_key='k', language='en-US')
        assert exc_info.value.status == 0

    @pytest.mark.asyncio
    @patch(_HTTPX)
    async def test_unsupported_format_skips_request(self, mock_cls):
        post = AsyncMock()
        _mock_async_client(mock_cls, post)
        with pytest.raises(UnsupportedAudioFormatError):
            await GoogleSpeechTranscriber().transcribe(
                CloudAudio(data=b'x', sample_rate=96000), model='', api_key='k', language='en-US'
            )
        post.assert_not_called()
