"""Gateway: whisper.cpp transcriber — implements Transcriber port."""

from __future__ import annotations

import contextlib
import os

import numpy as np
from pywhispercpp.model import Model

from voice_relay.l1_entities.errors import InferenceFailedError
from voice_relay.l1_entities.provider import language_subtag
from voice_relay.l1_entities.transcript import TranscriptSegment


@contextlib.contextmanager
def _suppress_c_stdout():
    """Redirect C-level stdout and stderr to /dev/null.

    whisper.cpp prints init/progress messages directly via C fprintf,
    bypassing Python's sys.stdout. This corrupts the TUI and the console
    listen view.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    old_stdout = os.dup(1)
    old_stderr = os.dup(2)
    try:
        os.dup2(devnull, 1)
        os.dup2(devnull, 2)
        yield
    finally:
        os.dup2(old_stdout, 1)
        os.dup2(old_stderr, 2)
        os.close(devnull)
        os.close(old_stdout)
        os.close(old_stderr)


def _to_segment(raw) -> TranscriptSegment | None:  # noqa: ANN001 -- pywhispercpp Segment
    text = raw.text.strip()
    if not text:
        return None
    # whisper.cpp timestamps are centiseconds
    return TranscriptSegment(text=text, wall_start=raw.t0 / 100.0, wall_end=raw.t1 / 100.0)


class WhisperTranscriber:
    """pywhispercpp adapter caching one loaded model.

    Reloading the same path is a no-op; a different path releases the old
    model first. Locale tags are reduced to the ISO-639-1 code whisper expects.
    """

    def __init__(self) -> None:
        self._model: Model | None = None
        self._model_path: str | None = None

    @property
    def model_path(self) -> str | None:
        return self._model_path

    def close(self) -> None:
        """Explicitly release the model, suppressing C-level teardown noise."""
        if self._model is not None:
            with _suppress_c_stdout():
                del self._model
                self._model = None
            self._model_path = None

    def load_model(self, model_path: str) -> None:
        if self._model is not None and self._model_path == model_path:
            return
        self.close()
        with _suppress_c_stdout():
            self._model = Model(model_path, print_progress=False, print_realtime=False)
        self._model_path = model_path

    def transcribe(
        self,
        audio: np.ndarray,
        language: str,
        hints: list[str] | None = None,
    ) -> list[TranscriptSegment]:
        if self._model is None:
            raise InferenceFailedError('Model not loaded. Call load_model() first.')

        options: dict = {'language': language_subtag(language)}
        if hints:
            options['initial_prompt'] = ' '.join(hints)
        with _suppress_c_stdout():
            raw_segments = self._model.transcribe(audio, **options)

        segments = [_to_segment(raw) for raw in raw_segments]
        return [seg for seg in segments if seg is not None]
