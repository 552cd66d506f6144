"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from voice_relay.l1_entities.audio_artifact import AudioArtifact
from voice_relay.l1_entities.capture import BackendKind
from voice_relay.l1_entities.config import AppConfig
from voice_relay.l1_entities.errors import RecorderBusyError
from voice_relay.l1_entities.provider import Provider, ProviderSelection
from voice_relay.l1_entities.transcript import TranscriptSegment
from voice_relay.l1_entities.whisper_model import WhisperModelDescriptor
from voice_relay.l2_use_cases.cloud_transcription_router import CloudTranscriptionRouter
from voice_relay.l2_use_cases.microphone_lease import MICROPHONE
from voice_relay.l2_use_cases.model_manager import ModelManager
from voice_relay.l2_use_cases.ports.capture_backend import CaptureOutcome
from voice_relay.l2_use_cases.ports.cloud_transcriber import CloudAudio
from voice_relay.l2_use_cases.silence_monitor import SilenceMonitor
from voice_relay.l2_use_cases.transcribe_artifact_use_case import TranscribeArtifactUseCase
from voice_relay.l3_interface_adapters.controllers.capture_controller import CaptureSessionController
from voice_relay.l4_frameworks_and_drivers.infra_config import build_app_config

# --- Protocol-conforming Fakes ---


class FakeBackend:
    """Fake capture backend. Tests drive the callbacks it was handed directly."""

    def __init__(
        self,
        kind: BackendKind = BackendKind.NATIVE_RECORDER,
        outcome: CaptureOutcome | None = None,
    ) -> None:
        self.kind = kind
        self.outcome = outcome or CaptureOutcome(artifact=AudioArtifact(data=b'RIFF', sample_rate=16000))
        self.start_calls = 0
        self.stop_calls = 0
        self.start_error: Exception | None = None
        self.stop_error: Exception | None = None
        self.start_gate: asyncio.Event | None = None
        self.stop_gate: asyncio.Event | None = None
        self.on_final_chunk: Callable[[str], None] | None = None
        self.on_interim_chunk: Callable[[str], None] | None = None
        self.on_backend_ended: Callable[[], None] | None = None

    async def start_listening(self, on_final_chunk, on_interim_chunk, on_backend_ended) -> None:
        self.start_calls += 1
        self.on_final_chunk = on_final_chunk
        self.on_interim_chunk = on_interim_chunk
        self.on_backend_ended = on_backend_ended
        if self.start_gate is not None:
            await self.start_gate.wait()
        if self.start_error is not None:
            raise self.start_error

    async def stop_listening(self) -> CaptureOutcome:
        self.stop_calls += 1
        if self.stop_gate is not None:
            await self.stop_gate.wait()
        if self.stop_error is not None:
            raise self.stop_error
        return self.outcome


class FakeRecorderHost:
    """Fake native recorder host — records calls, returns a fixed artifact."""

    def __init__(self, artifact: AudioArtifact | None = None, payload: bytes = b'RIFF....WAVE') -> None:
        self.artifact = artifact or AudioArtifact(path=Path('/fake/recording.wav'), sample_rate=16000)
        self.payload = payload
        self.begin_calls = 0
        self.end_calls = 0
        self.read_calls: list[AudioArtifact] = []
        self._recording = False
        self.busy = False

    def begin_capture(self) -> None:
        self.begin_calls += 1
        if self.busy or self._recording:
            raise RecorderBusyError('Already recording')
        self._recording = True

    def end_capture(self) -> AudioArtifact:
        self.end_calls += 1
        self._recording = False
        return self.artifact

    def read_artifact(self, artifact: AudioArtifact) -> bytes:
        self.read_calls.append(artifact)
        return self.payload

    def is_recording(self) -> bool:
        return self._recording


class FakeModelStore:
    """Fake model store. ``installed`` names probe as present; fetch() installs them."""

    def __init__(
        self,
        names: list[str] | None = None,
        installed: set[str] | None = None,
        root: Path = Path('/fake/models'),
    ) -> None:
        self._names = names or ['tiny', 'base', 'small']
        self.installed = set(installed or ())
        self._root = root
        self.fetch_calls: list[str] = []
        self.progress_steps: list[int] = [10, 50, 100]
        self.fetch_error: Exception | None = None

    def catalog(self) -> list[WhisperModelDescriptor]:
        return [WhisperModelDescriptor(name=n, size_description='1 MiB', ram_description='~1 MB') for n in self._names]

    def probe(self, name: str) -> Path | None:
        return self._root / f'ggml-{name}.bin' if name in self.installed else None

    def fetch(self, name: str, on_progress: Callable[[int], None]) -> Path:
        self.fetch_calls.append(name)
        for step in self.progress_steps:
            on_progress(step)
        if self.fetch_error is not None:
            raise self.fetch_error
        self.installed.add(name)
        return self._root / f'ggml-{name}.bin'


class FakeInferenceEngine:
    def __init__(self, text: str = 'local transcript') -> None:
        self.text = text
        self.error: Exception | None = None
        self.run_calls: list[tuple[AudioArtifact, Path, str]] = []

    def run(self, artifact: AudioArtifact, model_path: Path, language: str) -> str:
        self.run_calls.append((artifact, model_path, language))
        if self.error is not None:
            raise self.error
        return self.text


class FakeSettingsStore:
    def __init__(self, active: str | None = None, advisory_shown: bool = False) -> None:
        self._active = active
        self._advisory_shown = advisory_shown
        self.set_calls: list[str] = []
        self.mark_calls = 0

    def active_model(self) -> str | None:
        return self._active

    def set_active_model(self, name: str) -> None:
        self.set_calls.append(name)
        self._active = name

    def advisory_shown(self) -> bool:
        return self._advisory_shown

    def mark_advisory_shown(self) -> None:
        self.mark_calls += 1
        self._advisory_shown = True


class FakeCloudTranscriber:
    def __init__(self, text: str = 'cloud transcript') -> None:
        self.text = text
        self.error: Exception | None = None
        self.calls: list[tuple[CloudAudio, str, str, str]] = []

    async def transcribe(self, audio: CloudAudio, model: str, api_key: str, language: str) -> str:
        self.calls.append((audio, model, api_key, language))
        if self.error is not None:
            raise self.error
        return self.text


class FakeLLMClient:
    """Fake LLM client for L2 use case tests."""

    def __init__(self, response: str = '["One", "Two", "Three", "Four"]') -> None:
        self._response = response
        self.error: Exception | None = None
        self.chat_single_calls: list[tuple[str, str]] = []
        self._connectivity = (True, '')

    async def chat_single(self, model: str, prompt: str) -> str:
        self.chat_single_calls.append((model, prompt))
        if self.error is not None:
            raise self.error
        return self._response

    def check_connectivity(self) -> tuple[bool, str]:
        return self._connectivity

    def set_response(self, response: str) -> None:
        self._response = response

    def set_connectivity(self, ok: bool, msg: str = '') -> None:
        self._connectivity = (ok, msg)


class FakeTranscriber:
    """Fake transcriber for L2 use case tests."""

    def __init__(self, segments: list[TranscriptSegment] | None = None):
        self._segments = segments or []
        self.load_model_calls: list[str] = []
        self.transcribe_calls: list[tuple[np.ndarray, str, list[str] | None]] = []
        self.close_calls = 0

    def load_model(self, model_path: str) -> None:
        self.load_model_calls.append(model_path)

    def transcribe(
        self,
        audio: np.ndarray,
        language: str,
        hints: list[str] | None = None,
    ) -> list[TranscriptSegment]:
        self.transcribe_calls.append((audio, language, hints))
        return self._segments

    def close(self) -> None:
        self.close_calls += 1

    def set_segments(self, segments: list[TranscriptSegment]) -> None:
        self._segments = segments


class FakeAudioSource:
    """Fake audio source — implements AudioSource protocol."""

    def __init__(self, chunks: list[np.ndarray] | None = None, remaining: np.ndarray | None = None) -> None:
        self._chunks = list(chunks or [])
        self._remaining = remaining
        self.open_calls: list[tuple[int, int]] = []
        self.close_calls: int = 0
        self.open_error: Exception | None = None
        self._idx = 0

    def open(self, sample_rate: int, channels: int) -> None:
        self.open_calls.append((sample_rate, channels))
        if self.open_error is not None:
            raise self.open_error

    def read(self, timeout: float = 0.1) -> np.ndarray | None:
        if self._idx >= len(self._chunks):
            time.sleep(min(timeout, 0.01))
            return None
        chunk = self._chunks[self._idx]
        self._idx += 1
        return chunk

    def drain(self) -> np.ndarray | None:
        remaining, self._remaining = self._remaining, None
        return remaining

    def close(self) -> None:
        self.close_calls += 1


class FakeRecognizer:
    """Fake SpeechRecognizer. Tests call ``emit`` / ``end`` to simulate the recognizer thread."""

    def __init__(self) -> None:
        self.on_result: Callable[[str, bool], None] | None = None
        self.on_end: Callable[[], None] | None = None
        self.start_calls = 0
        self.stop_calls = 0
        self.pending_on_stop: list[str] = []

    def start(self, on_result: Callable[[str, bool], None], on_end: Callable[[], None]) -> None:
        self.start_calls += 1
        self.on_result = on_result
        self.on_end = on_end

    def stop(self) -> None:
        self.stop_calls += 1
        assert self.on_result is not None
        for text in self.pending_on_stop:
            self.on_result(text, True)

    def emit(self, text: str, is_final: bool) -> None:
        assert self.on_result is not None
        self.on_result(text, is_final)

    def end(self) -> None:
        assert self.on_end is not None
        self.on_end()


class FakeAdvisor:
    def __init__(self) -> None:
        self.show_calls = 0

    def show(self) -> None:
        self.show_calls += 1


# --- Builders ---


def make_selection(
    provider: Provider = Provider.OPENAI,
    model: str = 'whisper-1',
    api_key: str | None = 'sk-test',
) -> ProviderSelection:
    return ProviderSelection(provider=provider, transcription_model_id=model, api_key=api_key)


def make_controller(
    backend: FakeBackend | None = None,
    *,
    cloud: FakeCloudTranscriber | None = None,
    store: FakeModelStore | None = None,
    engine: FakeInferenceEngine | None = None,
    settings: FakeSettingsStore | None = None,
    advisor: FakeAdvisor | None = None,
    silence: SilenceMonitor | None = None,
    extra_backends: list[FakeBackend] | None = None,
) -> CaptureSessionController:
    backend = backend or FakeBackend()
    settings = settings or FakeSettingsStore(advisory_shown=True)
    manager = ModelManager(store or FakeModelStore(), engine or FakeInferenceEngine(), settings)
    cloud = cloud or FakeCloudTranscriber()
    router = CloudTranscriptionRouter(openai=cloud, google=cloud, openrouter=cloud)
    backends = {backend.kind: backend}
    for extra in extra_backends or []:
        backends[extra.kind] = extra
    return CaptureSessionController(
        backends=backends,
        transcribe_artifact=TranscribeArtifactUseCase(manager, router, FakeRecorderHost()),
        silence_monitor=silence or SilenceMonitor(),
        settings=settings,
        advisor=advisor,
        strategy=backend.kind,
    )


# --- Standard Fixtures ---


@pytest.fixture(autouse=True)
def _release_microphone():
    MICROPHONE.reset()
    yield
    MICROPHONE.reset()


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    content = """\
capture:
  strategy: "browser_recognizer"
  language: "pt-BR"
silence:
  duration: 2.0
provider:
  active: "Google"
google:
  api_key: "g-key"
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def fake_transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def fake_settings() -> FakeSettingsStore:
    return FakeSettingsStore()
