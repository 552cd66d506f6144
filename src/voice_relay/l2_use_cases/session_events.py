"""Bounded per-session event channel with a guaranteed terminal event."""

from __future__ import annotations

import asyncio
import logging

from voice_relay.l1_entities.errors import NotListeningError
from voice_relay.l1_entities.session_events import (
    TERMINAL_EVENTS,
    InterimTextUpdated,
    SessionEvent,
)

log = logging.getLogger('vr.controller')

DEFAULT_CAPACITY = 256


class SessionEventChannel:
    """Async iterator over one session's events; ends after Completed or Failed.

    Capacity only bounds interim previews: when the buffer is full the
    oldest pending preview is evicted, or the incoming one is dropped if
    none is pending. Final chunks and the terminal event are always queued,
    even past capacity.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._capacity = capacity
        self._events: list[SessionEvent] = []
        self._ready = asyncio.Event()
        self._closed = False
        self._delivered_terminal = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: SessionEvent) -> None:
        if self._closed:
            return
        if len(self._events) >= self._capacity:
            for idx, pending in enumerate(self._events):
                if isinstance(pending, InterimTextUpdated):
                    del self._events[idx]
                    break
            else:
                if isinstance(event, InterimTextUpdated):
                    log.debug('Event channel full, dropping interim preview')
                    return
                log.warning('Event channel over capacity (%d), keeping %s', self._capacity, type(event).__name__)
        self._events.append(event)
        if isinstance(event, TERMINAL_EVENTS):
            self._closed = True
        self._ready.set()

    def __aiter__(self) -> SessionEventChannel:
        return self

    async def __anext__(self) -> SessionEvent:
        while not self._events:
            if self._delivered_terminal:
                raise StopAsyncIteration
            self._ready.clear()
            await self._ready.wait()
        event = self._events.pop(0)
        if isinstance(event, TERMINAL_EVENTS):
            self._delivered_terminal = True
        return event

    async def wait_terminal(self) -> SessionEvent:
        """Drain the channel and return its terminal event."""
        async for event in self:
            if isinstance(event, TERMINAL_EVENTS):
                return event
        raise NotListeningError('Session event channel was already drained')
