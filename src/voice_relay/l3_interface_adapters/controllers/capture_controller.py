"""CaptureSessionController — the capture-mode state machine.

Owns the current CaptureSession, routes backend callbacks into it, turns
stop requests (user, silence, backend end) into a single finalisation and
publishes session events to subscribers.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial

from voice_relay.l1_entities.capture import BackendKind, CaptureSession, CaptureStatus
from voice_relay.l1_entities.errors import (
    AlreadyListeningError,
    DeviceUnavailableError,
    InferenceFailedError,
    ModeSwitchRejectedError,
    NotListeningError,
    RecorderBusyError,
    VoiceRelayError,
)
from voice_relay.l1_entities.provider import ProviderSelection
from voice_relay.l1_entities.session_events import (
    FinalChunkAppended,
    InterimTextUpdated,
    SessionCompleted,
    SessionEvent,
    SessionFailed,
)
from voice_relay.l2_use_cases.microphone_lease import MICROPHONE, MicrophoneLease
from voice_relay.l2_use_cases.ports.capture_backend import CaptureBackend
from voice_relay.l2_use_cases.ports.permission_advisor import PermissionAdvisor
from voice_relay.l2_use_cases.ports.settings_store import SettingsStore
from voice_relay.l2_use_cases.session_events import SessionEventChannel
from voice_relay.l2_use_cases.silence_monitor import SilenceMonitor, Subscription
from voice_relay.l2_use_cases.transcribe_artifact_use_case import TranscribeArtifactUseCase

log = logging.getLogger('vr.controller')


class CaptureSessionController:
    """Central orchestrator between capture backends, transcription and the UI.

    All methods run on the event loop thread. Backend callbacks are bound to
    the session id they were registered for; anything arriving for another
    session is dropped.
    """

    def __init__(
        self,
        backends: dict[BackendKind, CaptureBackend],
        transcribe_artifact: TranscribeArtifactUseCase,
        silence_monitor: SilenceMonitor,
        settings: SettingsStore,
        advisor: PermissionAdvisor | None = None,
        *,
        strategy: BackendKind = BackendKind.NATIVE_RECORDER,
        language: str = 'en-US',
        silence_enabled: bool = True,
        lease: MicrophoneLease = MICROPHONE,
    ) -> None:
        self._backends = backends
        self._transcribe = transcribe_artifact
        self._silence = silence_monitor
        self._settings = settings
        self._advisor = advisor
        self._strategy = strategy
        self._language = language
        self._silence_enabled = silence_enabled
        self._lease = lease

        self._session = CaptureSession(backend_kind=strategy)
        self._selection: ProviderSelection | None = None
        self._attached: str | None = None
        self._silence_sub: Subscription | None = None
        self._finalize_task: asyncio.Task[str] | None = None
        self._start_done: asyncio.Event | None = None
        self._channels: list[SessionEventChannel] = []
        self._pending_channels: list[SessionEventChannel] = []
        self._background: set[asyncio.Task] = set()

    # --- state ---

    @property
    def strategy(self) -> BackendKind:
        return self._strategy

    @property
    def language(self) -> str:
        return self._language

    def get_state(self) -> CaptureSession:
        return self._session.model_copy(deep=True)

    def set_strategy(self, kind: BackendKind) -> None:
        if not self._session.status.is_terminal:
            raise ModeSwitchRejectedError(f'Cannot switch capture mode while {self._session.status.value}')
        if kind not in self._backends:
            raise ModeSwitchRejectedError(f'No capture backend registered for {kind.value}')
        self._strategy = kind
        log.info('Capture strategy set to %s', kind.value)

    def set_advisor(self, advisor: PermissionAdvisor | None) -> None:
        self._advisor = advisor

    def subscribe(self) -> SessionEventChannel:
        """Events of the active session, or of the next one when idle."""
        channel = SessionEventChannel()
        if self._session.status.is_terminal:
            self._pending_channels.append(channel)
        else:
            self._channels.append(channel)
        return channel

    # --- lifecycle ---

    async def start(self, selection: ProviderSelection) -> CaptureSession:
        if not self._session.status.is_terminal:
            raise AlreadyListeningError(f'Already {self._session.status.value}')

        session = CaptureSession(status=CaptureStatus.LISTENING, backend_kind=self._strategy)
        self._lease.claim(session.id)
        self._session = session
        self._selection = selection
        self._finalize_task = None
        self._channels, self._pending_channels = self._pending_channels, []
        self._attached = session.id
        sid = session.id
        backend = self._backends[session.backend_kind]
        log.info('Starting session %s (%s, %s)', sid, session.backend_kind.value, selection.provider.value)

        started = asyncio.Event()
        self._start_done = started
        try:
            self._maybe_show_advisory()
            await backend.start_listening(
                on_final_chunk=partial(self._on_final_chunk, sid),
                on_interim_chunk=partial(self._on_interim_chunk, sid),
                on_backend_ended=partial(self._on_backend_ended, sid),
            )
        except RecorderBusyError:
            log.warning('Host reports a capture already running; resyncing session %s to listening', sid)
            session.status = CaptureStatus.LISTENING
        except VoiceRelayError as e:
            self._fail(session, e)
            raise
        except Exception as e:
            err = DeviceUnavailableError(f'Could not start capture: {e}')
            self._fail(session, err)
            raise err from e
        finally:
            started.set()

        if (
            session.backend_kind is BackendKind.NATIVE_RECORDER
            and self._silence_enabled
            and self._session is session
            and session.status is CaptureStatus.LISTENING
        ):
            self._silence_sub = self._silence.subscribe(partial(self._on_silence, sid))
        return session.model_copy(deep=True)

    async def stop(self) -> str | None:
        """Finalise the active session and return its transcript.

        A no-op returning None when nothing is listening. Concurrent calls
        share one finalisation and its outcome. A stop issued while start() is
        still awaiting the backend waits for it first.
        """
        started = self._start_done
        if started is not None and not started.is_set():
            log.debug('stop() waiting for start to finish')
            await started.wait()

        task = self._finalize_task
        if task is not None and not task.done():
            return await asyncio.shield(task)

        session = self._session
        if session.status is not CaptureStatus.LISTENING:
            log.debug('stop() ignored, session status is %s', session.status.value)
            return None

        session.status = CaptureStatus.STOPPING
        self._finalize_task = asyncio.get_running_loop().create_task(self._finalize(session, self._selection))
        return await asyncio.shield(self._finalize_task)

    async def close(self) -> None:
        if self._session.status is CaptureStatus.LISTENING or self._finalize_task is not None:
            try:
                await self.stop()
            except VoiceRelayError as e:
                log.warning('Session ended with error during shutdown: %s', e)
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def _finalize(self, session: CaptureSession, selection: ProviderSelection | None) -> str:
        backend = self._backends[session.backend_kind]
        try:
            try:
                outcome = await backend.stop_listening()
            except VoiceRelayError:
                raise
            except Exception as e:
                raise DeviceUnavailableError(f'Capture backend failed to stop: {e}') from e
            finally:
                self._detach()

            if outcome.transcript is not None:
                transcript = outcome.transcript.strip()
            elif outcome.artifact is not None:
                session.artifact = outcome.artifact
                session.status = CaptureStatus.TRANSCRIBING
                log.info('Session %s transcribing %s', session.id, outcome.artifact.describe())
                if selection is None:
                    raise NotListeningError(f'Session {session.id} has no provider selection')
                try:
                    transcript = await self._transcribe.execute(outcome.artifact, selection, self._language)
                except VoiceRelayError:
                    raise
                except Exception as e:
                    raise InferenceFailedError(f'Transcription failed: {e}') from e
            else:
                transcript = session.final_text
        except Exception as e:
            self._fail(session, e)
            raise

        self._complete(session, transcript)
        return transcript

    # --- backend / silence callbacks ---

    def _is_live(self, sid: str) -> bool:
        return self._attached == sid and self._session.id == sid

    def _on_interim_chunk(self, sid: str, text: str) -> None:
        if not self._is_live(sid):
            log.debug('Dropping stale interim text for session %s', sid)
            return
        self._session.apply_interim(text)
        self._publish(InterimTextUpdated(session_id=sid, text=text))

    def _on_final_chunk(self, sid: str, text: str) -> None:
        if not self._is_live(sid):
            log.debug('Dropping stale final chunk for session %s', sid)
            return
        self._session.append_final(text)
        self._publish(FinalChunkAppended(session_id=sid, text=text.strip(), final_text=self._session.final_text))

    def _on_backend_ended(self, sid: str) -> None:
        if self._is_live(sid):
            self._request_stop('backend ended')

    def _on_silence(self, sid: str) -> None:
        if self._is_live(sid):
            self._request_stop('silence detected')

    def _request_stop(self, reason: str) -> None:
        if self._session.status is not CaptureStatus.LISTENING:
            return
        log.info('Auto-stop for session %s: %s', self._session.id, reason)
        task = asyncio.ensure_future(self.stop())
        self._background.add(task)
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log.warning('Auto-stopped session failed: %s', task.exception())

    # --- helpers ---

    def _maybe_show_advisory(self) -> None:
        if self._advisor is None or self._settings.advisory_shown():
            return
        self._advisor.show()
        self._settings.mark_advisory_shown()

    def _detach(self) -> None:
        if self._silence_sub is not None:
            self._silence_sub.cancel()
            self._silence_sub = None
        self._attached = None

    def _publish(self, event: SessionEvent) -> None:
        for channel in self._channels:
            channel.publish(event)

    def _end(self, session: CaptureSession, event: SessionEvent) -> None:
        self._detach()
        session.interim_text = ''
        self._publish(event)
        self._channels = []
        self._lease.release(session.id)

    def _complete(self, session: CaptureSession, transcript: str) -> None:
        if transcript != session.final_text:
            session.final_parts = [transcript] if transcript else []
        session.status = CaptureStatus.COMPLETED
        log.info('Session %s completed (%d chars)', session.id, len(transcript))
        self._end(session, SessionCompleted(session_id=session.id, transcript=transcript))

    def _fail(self, session: CaptureSession, error: Exception) -> None:
        session.status = CaptureStatus.FAILED
        session.error = str(error)
        log.error('Session %s failed: %s', session.id, error)
        self._end(session, SessionFailed(session_id=session.id, error=error))
