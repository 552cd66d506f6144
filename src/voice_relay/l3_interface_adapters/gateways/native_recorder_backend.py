"""Gateway: native recorder capture backend — implements CaptureBackend port."""

from __future__ import annotations

import asyncio
import logging

from voice_relay.l1_entities.capture import BackendKind
from voice_relay.l2_use_cases.ports.capture_backend import CaptureOutcome, EndedCallback, TextCallback
from voice_relay.l2_use_cases.ports.native_recorder import NativeRecorderHost

log = logging.getLogger('vr.recorder')


class NativeRecorderBackend:
    """Host-side capture. Yields an artifact on stop and never emits interim text."""

    kind = BackendKind.NATIVE_RECORDER

    def __init__(self, host: NativeRecorderHost) -> None:
        self._host = host

    @property
    def host(self) -> NativeRecorderHost:
        return self._host

    async def start_listening(
        self,
        on_final_chunk: TextCallback,
        on_interim_chunk: TextCallback,
        on_backend_ended: EndedCallback,
    ) -> None:
        await asyncio.to_thread(self._host.begin_capture)

    async def stop_listening(self) -> CaptureOutcome:
        artifact = await asyncio.to_thread(self._host.end_capture)
        log.debug('Native capture produced %s', artifact.describe())
        return CaptureOutcome(artifact=artifact)
