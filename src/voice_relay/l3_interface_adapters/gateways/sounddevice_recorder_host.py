"""Gateway: sounddevice-backed native recorder — implements NativeRecorderHost port.

Records mono int16 at the input device's default sample rate straight into a
WAV file, and runs silence detection on every captured block.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
import wave
from collections.abc import Callable
from pathlib import Path

import numpy as np
import sounddevice as sd

from voice_relay.l1_entities.audio_artifact import AudioArtifact
from voice_relay.l1_entities.errors import DeviceUnavailableError, RecorderBusyError
from voice_relay.l2_use_cases.silence_monitor import SilenceDetector
from voice_relay.l3_interface_adapters.gateways.paths import RECORDINGS_DIR

log = logging.getLogger('vr.recorder')

_INT16_SCALE = 32768.0


class SounddeviceRecorderHost:
    def __init__(
        self,
        recordings_dir: Path = RECORDINGS_DIR,
        on_silence: Callable[[], None] | None = None,
        detector: SilenceDetector | None = None,
    ) -> None:
        self._recordings_dir = recordings_dir
        self._on_silence = on_silence
        self._detector = detector or SilenceDetector()
        self._lock = threading.Lock()
        self._stream: sd.InputStream | None = None
        self._writer: threading.Thread | None = None
        self._queue: queue.Queue[np.ndarray | None] | None = None
        self._sample_rate = 0
        self._last_path: Path | None = None

    def is_recording(self) -> bool:
        return self._stream is not None

    def begin_capture(self) -> None:
        with self._lock:
            if self._stream is not None:
                raise RecorderBusyError('Already recording')

            try:
                device_info = sd.query_devices(kind='input')
            except (sd.PortAudioError, ValueError) as e:
                raise DeviceUnavailableError(f'No microphone available: {e}') from e
            sample_rate = int(device_info['default_samplerate'])

            self._recordings_dir.mkdir(parents=True, exist_ok=True)
            wav_path = self._recordings_dir / f'recording-{time.strftime("%Y%m%d-%H%M%S")}.wav'
            raw_q: queue.Queue[np.ndarray | None] = queue.Queue()
            self._detector.reset()

            def _callback(indata, frames, time_info, status):
                raw_q.put(indata.copy())
                block = indata.reshape(-1).astype(np.float32) / _INT16_SCALE
                if self._detector.feed(block) and self._on_silence is not None:
                    self._on_silence()

            try:
                stream = sd.InputStream(samplerate=sample_rate, channels=1, dtype='int16', callback=_callback)
            except sd.PortAudioError as e:
                raise DeviceUnavailableError(f'Cannot open microphone: {e}') from e

            writer = threading.Thread(target=_write_wav, args=(wav_path, sample_rate, raw_q), daemon=True)
            writer.start()
            try:
                stream.start()
            except sd.PortAudioError as e:
                raw_q.put(None)
                writer.join()
                stream.close()
                raise DeviceUnavailableError(f'Cannot start microphone: {e}') from e

            self._stream, self._writer, self._queue = stream, writer, raw_q
            self._sample_rate = sample_rate
            self._last_path = wav_path
            log.info('Recording to %s at %d Hz', wav_path, sample_rate)

    def end_capture(self) -> AudioArtifact:
        with self._lock:
            stream, writer, raw_q, path = self._stream, self._writer, self._queue, self._last_path
            if stream is None or writer is None or raw_q is None or path is None:
                if path is not None and path.exists() and self._sample_rate:
                    return AudioArtifact(path=path, sample_rate=self._sample_rate)
                raise DeviceUnavailableError('Recording file not found')

            try:
                stream.stop()
                stream.close()
            finally:
                raw_q.put(None)
                writer.join()
                self._stream = self._writer = self._queue = None

            log.info('Recording finished: %s', path)
            return AudioArtifact(path=path, sample_rate=self._sample_rate)

    def read_artifact(self, artifact: AudioArtifact) -> bytes:
        if artifact.data is not None:
            return artifact.data
        if artifact.path is None or not artifact.path.exists():
            raise DeviceUnavailableError('Recording file not found')
        return artifact.path.read_bytes()


def _write_wav(wav_path: Path, sample_rate: int, raw_q: queue.Queue[np.ndarray | None]) -> None:
    wf = wave.open(str(wav_path), 'wb')
    wf.setnchannels(1)
    wf.setsampwidth(2)  # int16
    wf.setframerate(sample_rate)
    try:
        while True:
            data = raw_q.get()
            if data is None:
                break
            wf.writeframes(data.tobytes())
    finally:
        wf.close()
