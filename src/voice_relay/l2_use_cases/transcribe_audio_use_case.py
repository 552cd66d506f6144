"""Use case: incremental transcription of a live audio stream — buffering, pause detection, previews."""

from __future__ import annotations

import numpy as np

from voice_relay.l1_entities.audio_constants import SAMPLE_RATE
from voice_relay.l1_entities.transcript import TranscriptSegment
from voice_relay.l2_use_cases.ports.transcriber import Transcriber


class TranscribeAudioUseCase:
    """Encapsulates buffer management, pause triggering, overlap, and prompt chaining.

    Does NO I/O itself — audio data is fed in via ``feed_audio()``,
    confirmed text comes out via ``process_buffer()`` and a live preview of
    the pending buffer via ``preview()``.
    """

    def __init__(
        self,
        transcriber: Transcriber,
        language: str,
        chunk_duration: float = 10.0,
        overlap: float = 0.0,
        silence_threshold: float = 0.01,
        pause_duration: float = 1.0,
        min_speech: float = 0.5,
    ) -> None:
        self._transcriber = transcriber
        self._language = language
        self._current_hints: list[str] = []

        self._chunk_samples = int(SAMPLE_RATE * chunk_duration)
        self._overlap_samples = int(SAMPLE_RATE * overlap)
        self._pause_samples = int(SAMPLE_RATE * pause_duration)
        self._min_speech_samples = int(SAMPLE_RATE * min_speech)
        self._silence_threshold = silence_threshold

        self._buffer = np.array([], dtype=np.float32)
        self._is_first_chunk = True

    @property
    def overlap(self) -> float:
        return self._overlap_samples / SAMPLE_RATE

    @property
    def buffered_seconds(self) -> float:
        return len(self._buffer) / SAMPLE_RATE

    def feed_audio(self, data: np.ndarray) -> None:
        """Append raw audio samples to the internal buffer."""
        self._buffer = np.concatenate([self._buffer, data.flatten()])

    def reset_buffer(self) -> None:
        self._buffer = np.array([], dtype=np.float32)

    def _tail(self, buf: np.ndarray) -> np.ndarray:
        return buf[-self._overlap_samples :] if self._overlap_samples > 0 else np.array([], dtype=np.float32)

    def should_trigger(self) -> bool:
        """Check if the buffer should be confirmed as final text."""
        if len(self._buffer) >= self._chunk_samples:
            return True

        if len(self._buffer) >= self._min_speech_samples + self._pause_samples:
            tail_rms = np.sqrt(np.mean(self._buffer[-self._pause_samples :] ** 2))
            body_rms = np.sqrt(np.mean(self._buffer[: -self._pause_samples] ** 2))
            if tail_rms < self._silence_threshold and body_rms >= self._silence_threshold:
                return True

        return False

    def preview(self) -> str:
        """Transcribe the pending buffer without consuming it. Empty when silent."""
        if len(self._buffer) < self._min_speech_samples:
            return ''
        rms = np.sqrt(np.mean(self._buffer**2))
        if rms < self._silence_threshold:
            return ''
        segments = self._transcriber.transcribe(
            audio=self._buffer.copy(),
            language=self._language,
            hints=self._current_hints,
        )
        return ' '.join(seg.text for seg in segments).strip()

    def process_buffer(self) -> list[TranscriptSegment]:
        """Transcribe the current buffer and return new segments.

        Handles overlap dedup, silence skip, and prompt chaining.
        Retains overlap tail in the buffer for next cycle.
        """
        buf = self._buffer

        # Skip if entire buffer is silence
        rms = np.sqrt(np.mean(buf**2)) if len(buf) else 0.0
        if rms < self._silence_threshold:
            self._buffer = self._tail(buf)
            return []

        segments = self._transcriber.transcribe(
            audio=buf,
            language=self._language,
            hints=self._current_hints,
        )

        # Filter out overlap region (except for first chunk)
        min_start = 0.0 if self._is_first_chunk else self.overlap
        new_segments = [seg for seg in segments if seg.wall_end > min_start]
        self._is_first_chunk = False

        if new_segments:
            self._current_hints = [new_segments[-1].text]

        self._buffer = self._tail(buf)
        return new_segments

    def flush(self) -> list[TranscriptSegment]:
        """Process any remaining audio on shutdown."""
        if len(self._buffer) < self._min_speech_samples:
            return []
        rms = np.sqrt(np.mean(self._buffer**2))
        if rms < self._silence_threshold:
            return []
        return self.process_buffer()
