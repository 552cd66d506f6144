"""Process-wide microphone lease — at most one capture session holds the device."""

from __future__ import annotations

import threading

from voice_relay.l1_entities.errors import AlreadyListeningError


class MicrophoneLease:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._holder: str | None = None

    @property
    def holder(self) -> str | None:
        return self._holder

    def claim(self, session_id: str) -> None:
        with self._lock:
            if self._holder is not None and self._holder != session_id:
                raise AlreadyListeningError(f'Microphone is held by session {self._holder}')
            self._holder = session_id

    def release(self, session_id: str) -> None:
        """Release if *session_id* still holds the lease. Releasing twice is harmless."""
        with self._lock:
            if self._holder == session_id:
                self._holder = None

    def reset(self) -> None:
        with self._lock:
            self._holder = None


MICROPHONE = MicrophoneLease()
