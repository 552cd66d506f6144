"""ListenApp — push-to-talk capture TUI: start/stop, live interim text, final transcript, suggestions."""

from __future__ import annotations

import logging

from rich.markup import escape
from textual.app import App as TextualApp
from textual.app import ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from voice_relay.l1_entities.capture import BackendKind, CaptureStatus
from voice_relay.l1_entities.errors import VoiceRelayError
from voice_relay.l1_entities.provider import ProviderSelection
from voice_relay.l1_entities.session_events import (
    FinalChunkAppended,
    InterimTextUpdated,
    SessionCompleted,
    SessionFailed,
)
from voice_relay.l2_use_cases.model_manager import ModelManager
from voice_relay.l2_use_cases.session_events import SessionEventChannel
from voice_relay.l2_use_cases.suggest_actions_use_case import SuggestActionsUseCase
from voice_relay.l3_interface_adapters.controllers.capture_controller import CaptureSessionController
from voice_relay.l4_frameworks_and_drivers.messages import (
    ActionsReady,
    FinalChunk,
    InterimText,
    ModelDownloadProgress,
    SessionFinished,
)
from voice_relay.l4_frameworks_and_drivers.widgets.download_modal import DownloadModal
from voice_relay.l4_frameworks_and_drivers.widgets.permission_advisory import TuiPermissionAdvisor
from voice_relay.l4_frameworks_and_drivers.widgets.status_bar import StatusBar
from voice_relay.l4_frameworks_and_drivers.widgets.transcript_panel import InterimLine, TranscriptPanel

log = logging.getLogger('vr.app')

_MODE_LABELS = {
    BackendKind.NATIVE_RECORDER: 'Recorder',
    BackendKind.BROWSER_RECOGNIZER: 'Live',
}


def _describe_error(error: Exception) -> str:
    hint = getattr(error, 'hint', '')
    return f'{error} {hint}'.strip()


class ListenApp(TextualApp):
    """Single-window capture UI driven entirely by the CaptureSessionController."""

    CSS = """
    #header {
        dock: top;
        height: 1;
        background: $primary;
        color: $text;
        padding: 0 1;
    }
    #transcript-panel {
        height: 1fr;
    }
    #actions {
        height: auto;
        padding: 0 1;
        color: $secondary;
    }
    """

    BINDINGS = [
        Binding('space', 'toggle_capture', 'Start/Stop', priority=True),
        Binding('m', 'switch_mode', 'Mode', show=False),
        Binding('d', 'download_model', 'Download model', show=False),
        Binding('q', 'quit_app', 'Quit', priority=True),
    ]

    def __init__(
        self,
        controller: CaptureSessionController,
        selection: ProviderSelection,
        model_manager: ModelManager | None = None,
        suggest_actions: SuggestActionsUseCase | None = None,
        suggestion_model: str = '',
        advisor: TuiPermissionAdvisor | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._controller = controller
        self._selection = selection
        self._model_manager = model_manager
        self._suggest = suggest_actions
        self._suggestion_model = suggestion_model
        self._advisor = advisor
        self._download_modal: DownloadModal | None = None
        self.last_transcript = ''
        self.last_error: Exception | None = None

    def compose(self) -> ComposeResult:
        yield Static(f'  voice-relay | {self._selection.provider.value}', id='header')
        yield TranscriptPanel(id='transcript-panel')
        yield InterimLine(id='interim-line')
        yield Static('', id='actions')
        yield StatusBar(id='status-bar')

    def on_mount(self) -> None:
        if self._advisor is not None:
            self._advisor.attach(self)
        bar = self.query_one('#status-bar', StatusBar)
        bar.provider_label = self._selection.provider.value
        self._sync_status()

    def _hints_for_state(self, status: CaptureStatus) -> str:
        if status is CaptureStatus.LISTENING:
            return r'\[Space] stop  \[q] quit'
        if status.is_terminal:
            return r'\[Space] listen  \[m] mode  \[d] download  \[c] copy  \[q] quit'
        return r'\[q] quit'

    def _sync_status(self) -> None:
        state = self._controller.get_state()
        bar = self.query_one('#status-bar', StatusBar)
        bar.status = state.status.value
        bar.mode_label = _MODE_LABELS[self._controller.strategy]
        bar.keybinding_hints = self._hints_for_state(state.status)

    # --- Actions ---

    def action_toggle_capture(self) -> None:
        status = self._controller.get_state().status
        if status is CaptureStatus.LISTENING:
            self.run_worker(self._stop_capture(), exclusive=True, group='capture-stop')
        elif status.is_terminal:
            self.run_worker(self._start_capture(), exclusive=True, group='capture-start')

    def action_switch_mode(self) -> None:
        current = self._controller.strategy
        target = (
            BackendKind.BROWSER_RECOGNIZER if current is BackendKind.NATIVE_RECORDER else BackendKind.NATIVE_RECORDER
        )
        try:
            self._controller.set_strategy(target)
        except VoiceRelayError as e:
            self.notify(str(e), severity='warning', timeout=3)
            return
        self._sync_status()
        self.notify(f'Capture mode: {_MODE_LABELS[target]}', timeout=2)

    def action_download_model(self) -> None:
        if self._model_manager is None:
            return
        self.run_worker(self._download_active_model(self._model_manager), exclusive=True, group='download')

    async def action_quit_app(self) -> None:
        await self._controller.close()
        state = self._controller.get_state()
        if state.status is CaptureStatus.COMPLETED:
            self.last_transcript = state.final_text
        self.exit(self.last_transcript or None)

    # --- Workers ---

    async def _start_capture(self) -> None:
        channel = self._controller.subscribe()
        self.query_one('#transcript-panel', TranscriptPanel).reset()
        self.query_one('#interim-line', InterimLine).show_text('')
        self.query_one('#actions', Static).update('')
        try:
            await self._controller.start(self._selection)
        except VoiceRelayError as e:
            log.warning('Could not start listening: %s', e)
            self.notify(_describe_error(e), severity='error', timeout=6)
            self._sync_status()
            return
        self._sync_status()
        self.run_worker(self._pump_events(channel), group='capture-events')

    async def _stop_capture(self) -> None:
        try:
            await self._controller.stop()
        except VoiceRelayError as e:
            log.debug('stop() surfaced %s; reported through the event channel', e)
        self._sync_status()

    async def _pump_events(self, channel: SessionEventChannel) -> None:
        async for event in channel:
            match event:
                case InterimTextUpdated(text=text):
                    self.post_message(InterimText(text))
                case FinalChunkAppended(text=text, final_text=final_text):
                    self.post_message(FinalChunk(text, final_text))
                case SessionCompleted(transcript=transcript):
                    self.post_message(SessionFinished(transcript=transcript))
                case SessionFailed(error=error):
                    self.post_message(SessionFinished(error=error))

    async def _suggest_actions(self, suggest: SuggestActionsUseCase, transcript: str) -> None:
        actions = await suggest.execute(transcript, self._suggestion_model)
        self.post_message(ActionsReady(actions))

    async def _download_active_model(self, manager: ModelManager) -> None:
        name = manager.active_model
        if manager.is_installed(name):
            self.notify(f'Model {name} is already installed', timeout=2)
            return
        try:
            stream = manager.download(name)
        except VoiceRelayError as e:
            self.notify(str(e), severity='warning', timeout=3)
            return
        try:
            async for progress in stream:
                self.post_message(
                    ModelDownloadProgress(
                        percent=progress.percentage,
                        model_name=progress.model_name,
                        terminal=progress.terminal,
                        error=progress.error,
                    )
                )
        except Exception as e:  # noqa: BLE001 -- terminal progress event already carried the error
            log.warning('Model download failed: %s', e)

    # --- Message Handlers ---

    def on_interim_text(self, message: InterimText) -> None:
        self.query_one('#interim-line', InterimLine).show_text(message.text)

    def on_final_chunk(self, message: FinalChunk) -> None:
        self.query_one('#interim-line', InterimLine).show_text('')
        self.query_one('#transcript-panel', TranscriptPanel).append_final(message.text)

    def on_session_finished(self, message: SessionFinished) -> None:
        self.query_one('#interim-line', InterimLine).show_text('')
        self._sync_status()
        if message.error is not None:
            self.last_error = message.error
            self.notify(_describe_error(message.error), severity='error', timeout=6)
            return
        self.last_transcript = message.transcript
        self.query_one('#transcript-panel', TranscriptPanel).replace_all(message.transcript)
        if self._suggest is not None and message.transcript:
            self.run_worker(self._suggest_actions(self._suggest, message.transcript), exclusive=True, group='suggest')

    def on_actions_ready(self, message: ActionsReady) -> None:
        text = '  '.join(rf'\[{i + 1}] {escape(action)}' for i, action in enumerate(message.actions))
        self.query_one('#actions', Static).update(text)

    def on_model_download_progress(self, message: ModelDownloadProgress) -> None:
        bar = self.query_one('#status-bar', StatusBar)
        if message.terminal:
            bar.download_percent = -1
            if self._download_modal is not None:
                self._download_modal.dismiss()
                self._download_modal = None
            if message.error:
                self.notify(f'Download failed: {message.error}', severity='error', timeout=6)
            else:
                self.notify(f'Model {message.model_name} installed', timeout=3)
            return

        bar.download_percent = message.percent
        bar.download_model = message.model_name
        if self._download_modal is None:
            self._download_modal = DownloadModal(model_name=message.model_name)
            self.push_screen(self._download_modal)
        else:
            self._download_modal.update_progress(message.percent)
