"""Gateway: HuggingFace-backed whisper.cpp model store — implements ModelStore port."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from huggingface_hub import hf_hub_download
from pywhispercpp.constants import MODELS_DIR

from voice_relay.l1_entities.errors import ModelResolutionError
from voice_relay.l1_entities.whisper_model import WhisperModelDescriptor

log = logging.getLogger('vr.models')

WHISPER_CPP_REPO = 'ggerganov/whisper.cpp'

# name -> (disk size, approximate RAM while running)
WHISPER_CPP_CATALOG: dict[str, tuple[str, str]] = {
    'tiny': ('75 MiB', '~273 MB'),
    'base': ('142 MiB', '~388 MB'),
    'small': ('466 MiB', '~852 MB'),
    'medium': ('1.5 GiB', '~2.1 GB'),
    'large-v3-turbo': ('1.5 GiB', '~2.1 GB'),
    'large-v3-turbo-q8_0': ('834 MiB', '~1.1 GB'),
}


def model_filename(name: str) -> str:
    return f'ggml-{name}.bin'


def _make_progress_class(callback: Callable[[int], None]) -> type:
    """Create a tqdm-compatible class that reports download progress via *callback*."""

    class _ProgressReporter:
        def __init__(self, *args, **kwargs):
            self.total: int = kwargs.get('total', 0) or 0
            self.n: int = kwargs.get('initial', 0) or 0
            if self.total > 0:
                callback(min(int(self.n / self.total * 100), 100))

        def update(self, n: int = 1) -> None:
            self.n += n
            if self.total > 0:
                callback(min(int(self.n / self.total * 100), 100))

        def close(self) -> None:
            pass

        def set_description(self, *a, **kw) -> None:
            pass

        def set_description_str(self, *a, **kw) -> None:
            pass

        def refresh(self) -> None:
            pass

        def __enter__(self):
            return self

        def __exit__(self, *args):
            self.close()

    return _ProgressReporter


class HfModelStore:
    """Probes and downloads ggml whisper models under pywhispercpp's model directory."""

    def __init__(self, models_dir: Path | None = None) -> None:
        self._models_dir = models_dir if models_dir is not None else Path(MODELS_DIR) / 'whisper-cpp'

    @property
    def models_dir(self) -> Path:
        return self._models_dir

    def catalog(self) -> list[WhisperModelDescriptor]:
        return [
            WhisperModelDescriptor(name=name, size_description=size, ram_description=ram)
            for name, (size, ram) in WHISPER_CPP_CATALOG.items()
        ]

    def probe(self, name: str) -> Path | None:
        if name not in WHISPER_CPP_CATALOG:
            return None
        path = self._models_dir / model_filename(name)
        return path if path.is_file() and path.stat().st_size > 0 else None

    def fetch(self, name: str, on_progress: Callable[[int], None]) -> Path:
        if name not in WHISPER_CPP_CATALOG:
            raise ModelResolutionError(f'Unknown whisper model: {name}')
        self._models_dir.mkdir(parents=True, exist_ok=True)
        existing = self.probe(name)
        if existing is not None:
            on_progress(100)
            return existing
        log.debug('hf_hub_download %s/%s -> %s', WHISPER_CPP_REPO, model_filename(name), self._models_dir)
        downloaded = hf_hub_download(
            repo_id=WHISPER_CPP_REPO,
            filename=model_filename(name),
            local_dir=self._models_dir,
            tqdm_class=_make_progress_class(on_progress),
        )
        on_progress(100)
        return Path(downloaded)
