"""Events delivered to capture-session subscribers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InterimTextUpdated:
    """Live preview replaced. Not authoritative."""

    session_id: str
    text: str


@dataclass(frozen=True)
class FinalChunkAppended:
    session_id: str
    text: str
    final_text: str


@dataclass(frozen=True)
class SessionCompleted:
    session_id: str
    transcript: str


@dataclass(frozen=True)
class SessionFailed:
    session_id: str
    error: Exception


SessionEvent = InterimTextUpdated | FinalChunkAppended | SessionCompleted | SessionFailed

TERMINAL_EVENTS = (SessionCompleted, SessionFailed)
