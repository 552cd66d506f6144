"""Gateway: audio decoding for local inference — any format ffmpeg reads, to 16 kHz mono float32."""

from __future__ import annotations

import shutil
import subprocess  # noqa: S404 -- intentional: shells out to ffmpeg with a fixed arg list, not shell=True
from pathlib import Path

import numpy as np

from voice_relay.l1_entities.audio_artifact import AudioArtifact
from voice_relay.l1_entities.audio_constants import SAMPLE_RATE

_FFMPEG_TIMEOUT = 300  # seconds


def _decode(source: str, label: str, stdin: bytes | None = None) -> np.ndarray:
    if shutil.which('ffmpeg') is None:
        raise RuntimeError(
            'ffmpeg is required but not found on PATH.\n  macOS:  brew install ffmpeg\n  Debian: apt install ffmpeg'
        )

    cmd = ['ffmpeg', '-i', source, '-ar', str(SAMPLE_RATE), '-ac', '1', '-f', 'f32le', '-v', 'quiet', 'pipe:1']

    try:
        result = subprocess.run(cmd, input=stdin, capture_output=True, timeout=_FFMPEG_TIMEOUT)  # noqa: S603
    except subprocess.TimeoutExpired as exc:
        raise RuntimeError(f'ffmpeg timed out after {_FFMPEG_TIMEOUT}s processing: {label}') from exc
    except OSError as exc:
        raise RuntimeError(f'Failed to launch ffmpeg: {exc}') from exc

    if result.returncode != 0:
        stderr = result.stderr.decode('utf-8', errors='replace').strip()
        raise RuntimeError(f'ffmpeg exited with code {result.returncode} for: {label}\n{stderr}')

    audio = np.frombuffer(result.stdout, dtype=np.float32)
    if len(audio) == 0:
        raise RuntimeError(f'No decodable audio in: {label}')
    return audio


def load_audio_file(path: Path) -> np.ndarray:
    """Load *path* using ffmpeg, returning float32 mono PCM at 16 kHz.

    Raises:
        FileNotFoundError: audio file does not exist.
        RuntimeError: ffmpeg is missing, conversion failed, timed out, or
                      the file contains no decodable audio.
    """
    if not path.exists():
        raise FileNotFoundError(f'Audio file not found: {path}')
    return _decode(str(path), str(path))


def load_audio_bytes(data: bytes) -> np.ndarray:
    """Decode an in-memory encoded payload (e.g. a WAV blob) via ffmpeg's stdin."""
    return _decode('pipe:0', f'<{len(data)} bytes>', stdin=data)


def load_artifact(artifact: AudioArtifact) -> np.ndarray:
    if artifact.data is not None:
        return load_audio_bytes(artifact.data)
    return load_audio_file(artifact.path)
