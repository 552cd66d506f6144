"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from pydantic import BaseModel

from voice_relay.l1_entities.capture import BackendKind
from voice_relay.l1_entities.provider import Provider


class CaptureConfig(BaseModel):
    strategy: BackendKind
    language: str  # full locale tag, e.g. 'pt-BR'


class SilenceConfig(BaseModel):
    enabled: bool
    threshold: float  # RMS, 0.0-1.0
    duration: float  # seconds of silence after speech before auto-stop


class RecognizerConfig(BaseModel):
    model: str
    chunk_duration: float
    overlap: float
    silence_threshold: float
    pause_duration: float
    interim_interval: float


class LocalModelConfig(BaseModel):
    default: str


class ProviderConfig(BaseModel):
    active: Provider
    transcription_model: str
    suggestion_model: str


class AppConfig(BaseModel):
    capture: CaptureConfig
    silence: SilenceConfig
    recognizer: RecognizerConfig
    local_model: LocalModelConfig
    provider: ProviderConfig
