"""Transcript segment entity."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TranscriptSegment(BaseModel):
    """A single transcribed speech segment from whisper.cpp."""

    text: str
    wall_start: float = Field(description='Offset in seconds from the start of the recognizer stream')
    wall_end: float = Field(description='Offset in seconds from the start of the recognizer stream')
