"""Tests for app config defaults, provider infra config and selection snapshots."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from voice_relay.l1_entities.capture import BackendKind
from voice_relay.l1_entities.provider import Provider
from voice_relay.l4_frameworks_and_drivers.infra_config import (
    APP_CONFIG_DEFAULTS,
    InfraConfig,
    build_app_config,
    build_selection,
)


class TestBuildAppConfig:
    def test_defaults(self):
        config = build_app_config({})
        assert config.capture.strategy == BackendKind.NATIVE_RECORDER
        assert config.capture.language == 'en-US'
        assert config.silence.enabled is True
        assert config.provider.active == Provider.OPENAI
        assert config.local_model.default == 'tiny'

    def test_partial_override_keeps_siblings(self):
        config = build_app_config({'silence': {'duration': 3.0}})
        assert config.silence.duration == 3.0
        assert config.silence.threshold == APP_CONFIG_DEFAULTS['silence']['threshold']

    def test_defaults_not_mutated(self):
        build_app_config({'capture': {'language': 'de-DE'}})
        assert APP_CONFIG_DEFAULTS['capture']['language'] == 'en-US'

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValidationError):
            build_app_config({'provider': {'active': 'Azure'}})


class TestInfraConfig:
    def test_defaults(self):
        infra = InfraConfig()
        assert infra.openai.api_key is None
        assert infra.ollama.host == 'http://localhost:11434'

    def test_ignores_app_sections(self):
        infra = InfraConfig.model_validate({'capture': {'language': 'pt-BR'}, 'google': {'api_key': 'g'}})
        assert infra.google.api_key == 'g'

    @pytest.mark.parametrize(
        ('provider', 'expected'),
        [
            (Provider.OPENAI, 'o'),
            (Provider.GOOGLE, 'g'),
            (Provider.OPENROUTER, 'r'),
            (Provider.CUSTOM_LOCAL, None),
        ],
    )
    def test_api_key_for(self, provider, expected):
        infra = InfraConfig.model_validate(
            {'openai': {'api_key': 'o'}, 'google': {'api_key': 'g'}, 'openrouter': {'api_key': 'r'}}
        )
        assert infra.api_key_for(provider) == expected


class TestBuildSelection:
    def test_uses_configured_provider(self):
        config = build_app_config({'provider': {'active': 'Google', 'transcription_model': 'enhanced'}})
        infra = InfraConfig.model_validate({'google': {'api_key': 'g-key'}})

        selection = build_selection(config, infra)

        assert selection.provider == Provider.GOOGLE
        assert selection.transcription_model_id == 'enhanced'
        assert selection.api_key == 'g-key'

    def test_explicit_provider_wins(self):
        config = build_app_config({})
        selection = build_selection(config, InfraConfig(), Provider.CUSTOM_LOCAL)
        assert selection.provider == Provider.CUSTOM_LOCAL
        assert selection.uses_local_inference
        assert not selection.has_api_key
