"""Tests for WhisperStreamingRecognizer — fake audio source and transcriber, real thread."""

from __future__ import annotations

import threading

import numpy as np
import pytest

from voice_relay.l1_entities.audio_constants import SAMPLE_RATE
from voice_relay.l1_entities.errors import (
    DeviceUnavailableError,
    InferenceFailedError,
    NotInstalledError,
    RecorderBusyError,
)
from voice_relay.l1_entities.transcript import TranscriptSegment
from voice_relay.l3_interface_adapters.gateways.whisper_streaming_recognizer import WhisperStreamingRecognizer
from tests.conftest import FakeAudioSource, FakeModelStore, FakeTranscriber

SPEECH = np.full(SAMPLE_RATE, 0.1, dtype=np.float32)


class _Collector:
    def __init__(self, expected: int = 1) -> None:
        self.results: list[tuple[str, bool]] = []
        self.ended = threading.Event()
        self._expected = expected
        self.done = threading.Event()

    def on_result(self, text: str, is_final: bool) -> None:
        self.results.append((text, is_final))
        if len(self.results) >= self._expected:
            self.done.set()

    def on_end(self) -> None:
        self.ended.set()


class _ExplodingTranscriber(FakeTranscriber):
    def transcribe(self, audio, language, hints=None):
        raise RuntimeError('ggml assert')


def _recognizer(source, transcriber, store=None, **kwargs) -> WhisperStreamingRecognizer:
    return WhisperStreamingRecognizer(
        model_store=store or FakeModelStore(installed={'base'}),
        model_name='base',
        language='en-US',
        audio_source_factory=lambda: source,
        transcriber_factory=lambda: transcriber,
        **kwargs,
    )


class TestStreamingRecognizer:
    def test_chunk_limit_emits_final(self):
        source = FakeAudioSource(chunks=[SPEECH])
        transcriber = FakeTranscriber(segments=[TranscriptSegment(text='hello', wall_start=0.0, wall_end=1.0)])
        rec = _recognizer(source, transcriber, chunk_duration=1.0)
        out = _Collector()

        rec.start(out.on_result, out.on_end)
        assert rec.running
        assert out.done.wait(2)
        rec.stop()

        assert out.results == [('hello', True)]
        assert transcriber.load_model_calls == ['/fake/models/ggml-base.bin']
        assert source.open_calls == [(SAMPLE_RATE, 1)]
        assert source.close_calls == 1
        assert transcriber.close_calls == 1
        assert not rec.running

    def test_preview_then_final_on_stop(self):
        source = FakeAudioSource(chunks=[SPEECH])
        transcriber = FakeTranscriber(segments=[TranscriptSegment(text='hello', wall_start=0.0, wall_end=1.0)])
        rec = _recognizer(source, transcriber, chunk_duration=10.0, interim_interval=0.0)
        out = _Collector()

        rec.start(out.on_result, out.on_end)
        assert out.done.wait(2)
        rec.stop()

        assert out.results == [('hello', False), ('hello', True)]

    def test_drained_audio_is_flushed_on_stop(self):
        source = FakeAudioSource(chunks=[], remaining=SPEECH)
        transcriber = FakeTranscriber(segments=[TranscriptSegment(text='tail', wall_start=0.0, wall_end=1.0)])
        rec = _recognizer(source, transcriber, chunk_duration=10.0)
        out = _Collector()

        rec.start(out.on_result, out.on_end)
        rec.stop()

        assert out.results == [('tail', True)]

    def test_model_not_installed(self):
        source = FakeAudioSource()
        rec = _recognizer(source, FakeTranscriber(), store=FakeModelStore())
        with pytest.raises(NotInstalledError):
            rec.start(lambda *_: None, lambda: None)
        assert source.open_calls == []

    def test_start_twice_is_busy(self):
        rec = _recognizer(FakeAudioSource(), FakeTranscriber())
        rec.start(lambda *_: None, lambda: None)
        with pytest.raises(RecorderBusyError):
            rec.start(lambda *_: None, lambda: None)
        rec.stop()

    def test_device_failure_releases_transcriber(self):
        source = FakeAudioSource()
        source.open_error = DeviceUnavailableError('no mic')
        transcriber = FakeTranscriber()
        rec = _recognizer(source, transcriber)
        with pytest.raises(DeviceUnavailableError):
            rec.start(lambda *_: None, lambda: None)
        assert transcriber.close_calls == 1
        assert not rec.running

    def test_loop_failure_ends_backend_and_surfaces_on_stop(self):
        source = FakeAudioSource(chunks=[SPEECH])
        rec = _recognizer(source, _ExplodingTranscriber(), chunk_duration=1.0)
        out = _Collector()

        rec.start(out.on_result, out.on_end)
        assert out.ended.wait(2)
        with pytest.raises(InferenceFailedError, match='ggml assert'):
            rec.stop()
        assert source.close_calls == 1

    def test_stop_when_not_started_is_noop(self):
        _recognizer(FakeAudioSource(), FakeTranscriber()).stop()
