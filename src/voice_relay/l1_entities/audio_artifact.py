"""Audio artifact entity — opaque reference to a captured audio payload."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, model_validator


class AudioArtifact(BaseModel):
    """Recorded audio awaiting transcription, with its explicit format contract."""

    path: Path | None = None
    data: bytes | None = None
    sample_rate: int
    channels: int = 1
    encoding: Literal['LINEAR16'] = 'LINEAR16'

    @model_validator(mode='after')
    def _exactly_one_source(self) -> AudioArtifact:
        if (self.path is None) == (self.data is None):
            raise ValueError('AudioArtifact needs exactly one of path or data')
        return self

    def describe(self) -> str:
        where = str(self.path) if self.path is not None else f'<{len(self.data or b"")} bytes>'
        return f'{where} ({self.encoding}, {self.sample_rate} Hz, {self.channels} ch)'
