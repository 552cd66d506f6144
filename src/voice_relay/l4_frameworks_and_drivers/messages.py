"""Textual Message subclasses — contracts between the capture session pump and the App."""

from __future__ import annotations

from textual.message import Message


class InterimText(Message):
    """Posted when the live preview is replaced."""

    def __init__(self, text: str) -> None:
        super().__init__()
        self.text = text


class FinalChunk(Message):
    """Posted when a confirmed chunk is appended to the session transcript."""

    def __init__(self, text: str, final_text: str) -> None:
        super().__init__()
        self.text = text
        self.final_text = final_text


class SessionFinished(Message):
    """Posted once per session with either the transcript or the error."""

    def __init__(self, transcript: str = '', error: Exception | None = None) -> None:
        super().__init__()
        self.transcript = transcript
        self.error = error


class ModelDownloadProgress(Message):
    """Posted during model download to report progress percentage."""

    def __init__(self, percent: int, model_name: str, terminal: bool = False, error: str = '') -> None:
        super().__init__()
        self.percent = percent
        self.model_name = model_name
        self.terminal = terminal
        self.error = error


class ActionsReady(Message):
    """Posted when follow-up action suggestions for the last transcript arrive."""

    def __init__(self, actions: list[str]) -> None:
        super().__init__()
        self.actions = actions
