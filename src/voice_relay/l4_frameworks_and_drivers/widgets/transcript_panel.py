"""Transcript panel — scrolling log of confirmed text plus a replaceable interim line."""

from __future__ import annotations

import pyperclip
from textual.binding import Binding
from textual.widgets import RichLog, Static


class TranscriptPanel(RichLog):
    """Auto-scrolling log of final chunks. Copy puts the joined transcript on the clipboard."""

    DEFAULT_CSS = """
    TranscriptPanel {
        border: solid $primary;
        scrollbar-size: 1 1;
    }
    TranscriptPanel:focus {
        border: solid $accent;
    }
    """

    BINDINGS = [Binding('c', 'copy_content', 'Copy', show=False)]

    def __init__(self, title: str = 'Transcript', **kwargs) -> None:
        super().__init__(highlight=False, markup=False, wrap=True, auto_scroll=True, **kwargs)
        self.border_title = title
        self._parts: list[str] = []

    @property
    def transcript(self) -> str:
        return ' '.join(self._parts)

    def append_final(self, text: str) -> None:
        if not text.strip():
            return
        self._parts.append(text.strip())
        self.write(text.strip())

    def replace_all(self, transcript: str) -> None:
        """Show the authoritative transcript of a finished session."""
        self.clear()
        self._parts = [transcript.strip()] if transcript.strip() else []
        if self._parts:
            self.write(self._parts[0])

    def reset(self) -> None:
        self.clear()
        self._parts = []

    def action_copy_content(self) -> None:
        """Copy full transcript text to system clipboard."""
        if not self._parts:
            self.app.notify('No transcript to copy', severity='warning', timeout=2)
            return
        pyperclip.copy(self.transcript)
        self.app.notify('Transcript copied', timeout=2)


class InterimLine(Static):
    """Live preview line. Each update replaces the previous text."""

    DEFAULT_CSS = """
    InterimLine {
        height: auto;
        min-height: 1;
        color: $text-muted;
        text-style: italic;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__('', markup=False, **kwargs)
        self.preview = ''

    def show_text(self, text: str) -> None:
        self.preview = text
        self.update(f'… {text}' if text else '')
