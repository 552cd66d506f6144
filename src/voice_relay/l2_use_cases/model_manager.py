"""Use case: local whisper model lifecycle — probe, download, select, infer."""

from __future__ import annotations

import asyncio
import logging

from voice_relay.l1_entities.audio_artifact import AudioArtifact
from voice_relay.l1_entities.errors import (
    AlreadyDownloadingError,
    InferenceFailedError,
    ModelResolutionError,
    NotInstalledError,
    VoiceRelayError,
)
from voice_relay.l1_entities.whisper_model import DownloadProgress, WhisperModelDescriptor
from voice_relay.l2_use_cases.ports.local_inference import LocalInferenceEngine
from voice_relay.l2_use_cases.ports.model_store import ModelStore
from voice_relay.l2_use_cases.ports.settings_store import SettingsStore

log = logging.getLogger('vr.models')


class DownloadStream:
    """Async iterator over one download task's progress events.

    Percentages start at 0 and never decrease. Exactly one terminal event is
    delivered; when the task failed, its error is raised on the next
    iteration after that terminal event.
    """

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        self._queue: asyncio.Queue[DownloadProgress] = asyncio.Queue()
        self._last = -1
        self._finished = False
        self._terminal_seen = False
        self._error: BaseException | None = None
        self._task: asyncio.Task | None = None

    @property
    def done(self) -> bool:
        return self._finished

    def push_progress(self, percentage: int) -> None:
        if self._finished:
            return
        pct = max(0, min(int(percentage), 100))
        if pct <= self._last:
            return
        self._last = pct
        self._queue.put_nowait(DownloadProgress(model_name=self.model_name, percentage=pct))

    def finish(self, error: BaseException | None = None) -> None:
        if self._finished:
            return
        self._finished = True
        self._error = error
        if error is None:
            event = DownloadProgress(model_name=self.model_name, percentage=100, terminal=True, installed=True)
        else:
            event = DownloadProgress(
                model_name=self.model_name,
                percentage=max(self._last, 0),
                terminal=True,
                installed=False,
                error=str(error),
            )
        self._queue.put_nowait(event)

    def __aiter__(self) -> DownloadStream:
        return self

    async def __anext__(self) -> DownloadProgress:
        if self._terminal_seen:
            if self._error is not None:
                error, self._error = self._error, None
                raise error
            raise StopAsyncIteration
        event = await self._queue.get()
        if event.terminal:
            self._terminal_seen = True
        return event

    async def wait(self) -> DownloadProgress:
        """Drain the stream and return its terminal event. Raises the task's error."""
        async for event in self:
            if not event.terminal:
                continue
            if self._error is not None:
                error, self._error = self._error, None
                raise error
            return event
        raise ModelResolutionError(f'Download stream for {self.model_name} was already drained')


class ModelManager:
    """Owns local model state. The persisted active model is written only after a successful select."""

    def __init__(
        self,
        store: ModelStore,
        engine: LocalInferenceEngine,
        settings: SettingsStore,
        default_model: str = 'tiny',
    ) -> None:
        self._store = store
        self._engine = engine
        self._settings = settings
        self._default_model = default_model
        self._downloads: dict[str, DownloadStream] = {}

    def _known_names(self) -> list[str]:
        return [d.name for d in self._store.catalog()]

    def _probe_all(self) -> list[WhisperModelDescriptor]:
        probed = []
        for descriptor in self._store.catalog():
            path = self._store.probe(descriptor.name)
            probed.append(descriptor.model_copy(update={'installed': path is not None, 'path': path}))
        return probed

    async def list_models(self) -> list[WhisperModelDescriptor]:
        return await asyncio.to_thread(self._probe_all)

    def is_installed(self, name: str) -> bool:
        return self._store.probe(name) is not None

    def is_downloading(self, name: str) -> bool:
        return name in self._downloads

    def download(self, name: str) -> DownloadStream:
        """Start downloading *name* and return its progress stream.

        Must be called from a running event loop. Rejections are raised
        synchronously, before any task is created.
        """
        if name not in self._known_names():
            raise ModelResolutionError(f'Unknown whisper model: {name}')
        if name in self._downloads:
            raise AlreadyDownloadingError(f'Model {name!r} is already downloading')

        stream = DownloadStream(name)
        self._downloads[name] = stream
        stream.push_progress(0)
        stream._task = asyncio.get_running_loop().create_task(self._run_download(stream))
        return stream

    async def _run_download(self, stream: DownloadStream) -> None:
        name = stream.model_name
        loop = asyncio.get_running_loop()

        def on_progress(pct: int) -> None:
            loop.call_soon_threadsafe(stream.push_progress, pct)

        log.info('Downloading model %s', name)
        try:
            path = await asyncio.to_thread(self._store.fetch, name, on_progress)
            if self._store.probe(name) is None:
                raise ModelResolutionError(f'Model file missing after download: {path}')
        except Exception as e:
            log.warning('Download of %s failed: %s', name, e)
            stream.finish(error=e)
        else:
            log.info('Model %s installed at %s', name, path)
            stream.finish()
        finally:
            self._downloads.pop(name, None)

    @property
    def active_model(self) -> str:
        return self._settings.active_model() or self._default_model

    def select_active(self, name: str) -> None:
        if not self.is_installed(name):
            raise NotInstalledError(f'Model {name!r} is not installed')
        self._settings.set_active_model(name)
        log.info('Active model set to %s', name)

    async def infer(self, artifact: AudioArtifact, language: str, model_name: str | None = None) -> str:
        """Transcribe *artifact* on-device. Never returns a partial transcript on failure."""
        name = model_name or self.active_model
        path = self._store.probe(name)
        if path is None:
            raise NotInstalledError(f'Model {name!r} is not installed')

        try:
            text = await asyncio.to_thread(self._engine.run, artifact, path, language)
        except VoiceRelayError:
            raise
        except Exception as e:
            raise InferenceFailedError(f'Local inference with {name} failed: {e}') from e
        return text.strip()
