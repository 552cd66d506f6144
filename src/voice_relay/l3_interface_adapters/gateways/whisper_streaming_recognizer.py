"""Gateway: whisper.cpp streaming recognizer over the microphone — implements SpeechRecognizer port."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from voice_relay.l1_entities.audio_constants import SAMPLE_RATE
from voice_relay.l1_entities.errors import InferenceFailedError, NotInstalledError, RecorderBusyError, VoiceRelayError
from voice_relay.l1_entities.transcript import TranscriptSegment
from voice_relay.l2_use_cases.ports.audio_source import AudioSource
from voice_relay.l2_use_cases.ports.model_store import ModelStore
from voice_relay.l2_use_cases.ports.transcriber import Transcriber
from voice_relay.l2_use_cases.transcribe_audio_use_case import TranscribeAudioUseCase

log = logging.getLogger('vr.recorder')

ResultCallback = Callable[[str, bool], None]


def _join(segments: list[TranscriptSegment]) -> str:
    return ' '.join(seg.text for seg in segments).strip()


class WhisperStreamingRecognizer:
    """Live recognition: finals on a pause or the chunk limit, previews of the pending buffer in between.

    Runs its capture/transcribe loop on a dedicated thread. ``stop()`` drains
    the device, flushes the last buffer as a final result and joins the thread.
    """

    def __init__(
        self,
        model_store: ModelStore,
        model_name: str,
        language: str,
        audio_source_factory: Callable[[], AudioSource],
        transcriber_factory: Callable[[], Transcriber],
        *,
        chunk_duration: float = 10.0,
        overlap: float = 0.0,
        silence_threshold: float = 0.01,
        pause_duration: float = 1.0,
        interim_interval: float = 1.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = model_store
        self._model_name = model_name
        self._language = language
        self._source_factory = audio_source_factory
        self._transcriber_factory = transcriber_factory
        self._chunk_duration = chunk_duration
        self._overlap = overlap
        self._silence_threshold = silence_threshold
        self._pause_duration = pause_duration
        self._interim_interval = interim_interval
        self._clock = clock

        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._error: Exception | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self, on_result: ResultCallback, on_end: Callable[[], None]) -> None:
        if self._thread is not None:
            raise RecorderBusyError('Already recording')

        model_path = self._store.probe(self._model_name)
        if model_path is None:
            raise NotInstalledError(f'Recognizer model {self._model_name!r} is not installed')

        transcriber = self._transcriber_factory()
        transcriber.load_model(str(model_path))
        source = self._source_factory()
        try:
            source.open(SAMPLE_RATE, 1)
        except Exception:
            transcriber.close()
            raise

        use_case = TranscribeAudioUseCase(
            transcriber=transcriber,
            language=self._language,
            chunk_duration=self._chunk_duration,
            overlap=self._overlap,
            silence_threshold=self._silence_threshold,
            pause_duration=self._pause_duration,
        )
        self._stop_event.clear()
        self._error = None
        self._thread = threading.Thread(
            target=self._run,
            args=(source, transcriber, use_case, on_result, on_end),
            name='vr-recognizer',
            daemon=True,
        )
        self._thread.start()
        log.info('Streaming recognizer started (model=%s, language=%s)', self._model_name, self._language)

    def _run(
        self,
        source: AudioSource,
        transcriber: Transcriber,
        use_case: TranscribeAudioUseCase,
        on_result: ResultCallback,
        on_end: Callable[[], None],
    ) -> None:
        last_preview = self._clock()
        last_interim = ''
        try:
            while not self._stop_event.is_set():
                chunk = source.read(timeout=0.1)
                if chunk is None:
                    continue
                use_case.feed_audio(chunk)

                if use_case.should_trigger():
                    text = _join(use_case.process_buffer())
                    if text:
                        on_result(text, True)
                    last_interim = ''
                    last_preview = self._clock()
                elif self._clock() - last_preview >= self._interim_interval:
                    preview = use_case.preview()
                    if preview and preview != last_interim:
                        on_result(preview, False)
                        last_interim = preview
                    last_preview = self._clock()

            remaining = source.drain()
            if remaining is not None:
                use_case.feed_audio(remaining)
            text = _join(use_case.flush())
            if text:
                on_result(text, True)
        except Exception as e:
            log.error('Streaming recognizer failed: %s', e, exc_info=True)
            self._error = e
            if not self._stop_event.is_set():
                on_end()
        finally:
            source.close()
            transcriber.close()

    def stop(self) -> None:
        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        thread.join()
        self._thread = None
        error, self._error = self._error, None
        log.info('Streaming recognizer stopped')
        if error is not None:
            if isinstance(error, VoiceRelayError):
                raise error
            raise InferenceFailedError(f'Streaming recognition failed: {error}') from error
