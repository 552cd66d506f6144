"""Status bar — bottom bar showing capture state, elapsed time, provider and keybinding hints."""

from __future__ import annotations

import time

from rich.cells import cell_len
from textual.reactive import reactive
from textual.widgets import Static

_STATUS_ICONS = {
    'idle': '○ Idle',
    'listening': '● Listening',
    'stopping': '■ Stopping',
    'transcribing': '⟳ Transcribing',
    'completed': '✓ Done',
    'failed': '✗ Failed',
}


class StatusBar(Static):
    """Bottom status bar with capture state, download progress, and keybinding hints."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: auto;
        background: $surface;
        color: $text;
        padding: 0 1;
        overflow: hidden hidden;
    }
    """

    status: reactive[str] = reactive('idle')
    mode_label: reactive[str] = reactive('')
    provider_label: reactive[str] = reactive('')
    download_percent: reactive[int] = reactive(-1)
    download_model: reactive[str] = reactive('')
    keybinding_hints: reactive[str] = reactive('')

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._listen_start: float | None = None
        self._frozen_elapsed: float | None = None

    def watch_status(self, value: str) -> None:
        """Run the elapsed timer while listening; freeze it when the session leaves Listening."""
        if value == 'listening':
            self._listen_start = time.monotonic()
            self._frozen_elapsed = None
        elif self._listen_start is not None and self._frozen_elapsed is None:
            self._frozen_elapsed = time.monotonic() - self._listen_start

    def watch_download_percent(self, value: int) -> None:
        self.refresh()

    def _format_elapsed(self, now: float) -> str:
        if self._listen_start is None:
            return '00:00'
        elapsed = self._frozen_elapsed if self._frozen_elapsed is not None else now - self._listen_start
        return f'{int(elapsed // 60):02d}:{int(elapsed % 60):02d}'

    def render(self) -> str:
        now = time.monotonic()
        if self.download_percent >= 0 and self.status not in ('listening', 'stopping', 'transcribing'):
            status_icon = f'⟳ Downloading {self.download_model}… {self.download_percent}%'
        else:
            status_icon = _STATUS_ICONS.get(self.status, self.status)

        left_parts = [p for p in (self.mode_label, self.provider_label) if p]
        left_parts.extend([status_icon, self._format_elapsed(now)])
        left = ' │ '.join(left_parts)

        hints = self.keybinding_hints
        if hints:
            content_width = (self.size.width or 80) - 2
            gap = content_width - cell_len(left) - cell_len(hints.replace(r'\[', '['))
            if gap >= 2:
                left = left + ' ' * gap + hints
        return left
