"""Local whisper model descriptors and download progress events."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class WhisperModelDescriptor(BaseModel):
    """One local model variant as probed on disk."""

    name: str
    size_description: str
    ram_description: str
    installed: bool = False
    path: Path | None = None


class DownloadProgress(BaseModel):
    """A single progress event of one download task."""

    model_name: str
    percentage: int = 0
    terminal: bool = False
    installed: bool = False
    error: str = ''
