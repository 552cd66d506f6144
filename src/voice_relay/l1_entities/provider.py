"""Provider selection — which engine turns a capture into text."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict

LOCAL_TRANSCRIPTION_MODEL = 'whisper_cpp'


class Provider(enum.Enum):
    OPENAI = 'OpenAI'
    GOOGLE = 'Google'
    OPENROUTER = 'OpenRouter'
    CUSTOM_LOCAL = 'CustomLocal'


class ProviderSelection(BaseModel):
    """Read-only per-session input owned by the UI layer."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    transcription_model_id: str = ''
    api_key: str | None = None

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def uses_local_inference(self) -> bool:
        return self.provider is Provider.CUSTOM_LOCAL or self.transcription_model_id == LOCAL_TRANSCRIPTION_MODEL


def language_subtag(locale: str) -> str:
    """'pt-BR' -> 'pt'. ISO-639-1 code for APIs that reject full locale tags."""
    return locale.split('-')[0].split('_')[0].lower()
