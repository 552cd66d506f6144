"""Gateway: incremental-recognizer capture backend — implements CaptureBackend port."""

from __future__ import annotations

import asyncio
import logging
import threading

from voice_relay.l1_entities.capture import BackendKind
from voice_relay.l2_use_cases.ports.capture_backend import CaptureOutcome, EndedCallback, TextCallback
from voice_relay.l2_use_cases.ports.speech_recognizer import SpeechRecognizer

log = logging.getLogger('vr.recorder')


class RecognizerBackend:
    """Streams interim and final text from an in-process recognizer.

    The recognizer reports from its own thread; every callback is marshalled
    onto the event loop with call_soon_threadsafe, which keeps arrival order.
    """

    kind = BackendKind.BROWSER_RECOGNIZER

    def __init__(self, recognizer: SpeechRecognizer) -> None:
        self._recognizer = recognizer
        self._lock = threading.Lock()
        self._finals: list[str] = []

    async def start_listening(
        self,
        on_final_chunk: TextCallback,
        on_interim_chunk: TextCallback,
        on_backend_ended: EndedCallback,
    ) -> None:
        loop = asyncio.get_running_loop()
        with self._lock:
            self._finals = []

        def _post(callback, *args) -> None:
            if loop.is_closed():
                log.debug('Event loop closed; dropping recognizer callback')
                return
            loop.call_soon_threadsafe(callback, *args)

        def on_result(text: str, is_final: bool) -> None:
            if is_final:
                with self._lock:
                    if text.strip():
                        self._finals.append(text.strip())
                _post(on_final_chunk, text)
            else:
                _post(on_interim_chunk, text)

        def on_end() -> None:
            _post(on_backend_ended)

        await asyncio.to_thread(self._recognizer.start, on_result, on_end)

    async def stop_listening(self) -> CaptureOutcome:
        await asyncio.to_thread(self._recognizer.stop)
        with self._lock:
            transcript = ' '.join(self._finals).strip()
        return CaptureOutcome(transcript=transcript)
