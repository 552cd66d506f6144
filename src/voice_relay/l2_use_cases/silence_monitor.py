"""Silence detection and the signal channel that turns it into an auto-stop request."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable

import numpy as np

log = logging.getLogger('vr.silence')


class SilenceDetector:
    """RMS-based end-of-speech detector fed with raw capture blocks.

    Silence only counts once speech has been heard, so a capture never
    stops before the user starts talking. Fires at most once per reset().
    """

    def __init__(
        self,
        threshold: float = 0.015,
        duration: float = 1.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._threshold = threshold
        self._duration = duration
        self._clock = clock
        self.reset()

    def reset(self) -> None:
        self._speaking_started = False
        self._silence_start: float | None = None
        self._fired = False

    @property
    def speaking_started(self) -> bool:
        return self._speaking_started

    def feed(self, block: np.ndarray) -> bool:
        """Consume one block of float samples in [-1, 1]. Returns True exactly once when silence is long enough."""
        if self._fired or block.size == 0:
            return False

        rms = float(np.sqrt(np.mean(np.square(block, dtype=np.float64))))
        if rms > self._threshold:
            self._speaking_started = True
            self._silence_start = None
            return False

        if not self._speaking_started:
            return False

        now = self._clock()
        if self._silence_start is None:
            self._silence_start = now
            return False
        if now - self._silence_start >= self._duration:
            self._fired = True
            return True
        return False


class Subscription:
    """Handle returned by SilenceMonitor.subscribe(). cancel() is idempotent."""

    def __init__(self, monitor: SilenceMonitor) -> None:
        self._monitor = monitor
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._monitor._detach(self)


class SilenceMonitor:
    """Single-subscriber signal channel between the host recorder and the controller.

    ``signal()`` may be called from any thread (the audio callback thread in
    practice). The subscriber callback always runs on the event loop that
    was current when it subscribed. A signal with nobody subscribed is
    dropped so it can never leak into a later session.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscription: Subscription | None = None
        self._callback: Callable[[], None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def armed(self) -> bool:
        return self._subscription is not None

    def subscribe(self, callback: Callable[[], None]) -> Subscription:
        with self._lock:
            if self._subscription is not None:
                self._subscription.active = False
            sub = Subscription(self)
            self._subscription = sub
            self._callback = callback
            self._loop = asyncio.get_running_loop()
        return sub

    def _detach(self, sub: Subscription) -> None:
        with self._lock:
            if self._subscription is sub:
                self._subscription = None
                self._callback = None
                self._loop = None

    def signal(self) -> None:
        with self._lock:
            sub, callback, loop = self._subscription, self._callback, self._loop
        if sub is None or callback is None or loop is None:
            log.debug('Silence signal dropped: no subscriber')
            return
        log.info('Silence detected, requesting stop')

        def _deliver() -> None:
            if sub.active:
                callback()

        loop.call_soon_threadsafe(_deliver)
