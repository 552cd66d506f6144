"""Download modal — blocks interaction while a whisper model downloads."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import ProgressBar, Static


class DownloadModal(ModalScreen[None]):
    """Modal overlay shown while a model download is in flight."""

    DEFAULT_CSS = """
    DownloadModal {
        align: center middle;
    }

    DownloadModal > Vertical {
        width: auto;
        min-width: 40;
        max-width: 60;
        height: auto;
        background: $surface;
        border: thick $primary;
        padding: 1 3;
    }

    DownloadModal > Vertical > #dl-status {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    DownloadModal > Vertical > #dl-detail {
        text-align: center;
        color: $text-muted;
    }
    """

    def __init__(self, model_name: str = '', size_description: str = '', **kwargs) -> None:
        super().__init__(**kwargs)
        self.model_name = model_name
        self.size_description = size_description
        self.percent = 0

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(f'Downloading {self.model_name}…', id='dl-status')
            yield ProgressBar(total=100, show_eta=False, id='dl-bar')
            yield Static(self.size_description, id='dl-detail')

    def on_mount(self) -> None:
        self._render_progress()

    def update_progress(self, percent: int) -> None:
        self.percent = max(self.percent, percent)
        if self.is_mounted:
            self._render_progress()

    def _render_progress(self) -> None:
        self.query_one('#dl-status', Static).update(f'Downloading {self.model_name}… {self.percent}%')
        self.query_one('#dl-bar', ProgressBar).update(progress=self.percent)
