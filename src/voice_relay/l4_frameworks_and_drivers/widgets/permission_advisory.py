"""Microphone permission advisory — non-blocking overlay shown before the first capture."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Markdown, Static

ADVISORY_BODY = """\
voice-relay is about to use your **microphone**.

- If nothing is captured, grant microphone access to your terminal
  in your system's privacy settings.
- Audio is sent to the selected transcription provider unless a
  local whisper model is active.
"""


class PermissionAdvisory(ModalScreen[None]):
    """One-time notice; any key dismisses it."""

    DEFAULT_CSS = """
    PermissionAdvisory {
        align: center middle;
    }

    PermissionAdvisory > VerticalScroll {
        width: 60%;
        max-width: 72;
        height: auto;
        max-height: 60%;
        background: $surface;
        border: thick $warning;
        padding: 1 2;
    }

    PermissionAdvisory > VerticalScroll > #advisory-title {
        text-style: bold;
        color: $warning;
        margin-bottom: 1;
    }

    PermissionAdvisory > VerticalScroll > #advisory-body {
        height: auto;
    }

    PermissionAdvisory > VerticalScroll > #advisory-hint {
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        ('escape', 'dismiss', 'Close'),
    ]

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static('Microphone Access', id='advisory-title')
            yield Markdown(ADVISORY_BODY, id='advisory-body')
            yield Static('Press any key to dismiss', id='advisory-hint')

    def on_key(self, event) -> None:  # noqa: ANN001 -- Textual Key event; type not needed
        event.stop()
        self.dismiss()


class TuiPermissionAdvisor:
    """PermissionAdvisor that pushes PermissionAdvisory onto the attached app without waiting."""

    def __init__(self, app: App | None = None) -> None:
        self._app = app

    def attach(self, app: App) -> None:
        self._app = app

    def show(self) -> None:
        if self._app is not None:
            self._app.push_screen(PermissionAdvisory())
