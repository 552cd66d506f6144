"""Infrastructure provider configs — lives in L4, not domain."""

from __future__ import annotations

import copy

from pydantic import BaseModel, Field

from voice_relay.l1_entities.config import AppConfig
from voice_relay.l1_entities.provider import Provider, ProviderSelection
from voice_relay.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'capture': {
        'strategy': 'native_recorder',
        'language': 'en-US',
    },
    'silence': {
        'enabled': True,
        'threshold': 0.015,
        'duration': 1.5,
    },
    'recognizer': {
        'model': 'base',
        'chunk_duration': 10.0,
        'overlap': 0.0,
        'silence_threshold': 0.01,
        'pause_duration': 1.0,
        'interim_interval': 1.5,
    },
    'local_model': {
        'default': 'tiny',
    },
    'provider': {
        'active': 'OpenAI',
        'transcription_model': 'whisper-1',
        'suggestion_model': 'gpt-4o-mini',
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)


class OpenAIProviderConfig(BaseModel):
    api_key: str | None = None
    base_url: str = 'https://api.openai.com/v1'


class GoogleProviderConfig(BaseModel):
    api_key: str | None = None
    endpoint: str = 'https://speech.googleapis.com/v1/speech:recognize'


class OpenRouterProviderConfig(BaseModel):
    api_key: str | None = None
    base_url: str = 'https://openrouter.ai/api/v1'


class OllamaProviderConfig(BaseModel):
    host: str = 'http://localhost:11434'


class InfraConfig(BaseModel):
    """Groups all provider-specific settings outside the domain layer."""

    openai: OpenAIProviderConfig = Field(default_factory=OpenAIProviderConfig)
    google: GoogleProviderConfig = Field(default_factory=GoogleProviderConfig)
    openrouter: OpenRouterProviderConfig = Field(default_factory=OpenRouterProviderConfig)
    ollama: OllamaProviderConfig = Field(default_factory=OllamaProviderConfig)

    def api_key_for(self, provider: Provider) -> str | None:
        match provider:
            case Provider.OPENAI:
                return self.openai.api_key
            case Provider.GOOGLE:
                return self.google.api_key
            case Provider.OPENROUTER:
                return self.openrouter.api_key
            case Provider.CUSTOM_LOCAL:
                return None


def build_selection(config: AppConfig, infra: InfraConfig, provider: Provider | None = None) -> ProviderSelection:
    """Snapshot the configured provider choice for one capture session."""
    active = provider or config.provider.active
    return ProviderSelection(
        provider=active,
        transcription_model_id=config.provider.transcription_model,
        api_key=infra.api_key_for(active),
    )
