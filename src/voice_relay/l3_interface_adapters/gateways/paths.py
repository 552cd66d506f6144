"""Shared path constants for configuration, persisted state and recordings."""

from __future__ import annotations

from platformdirs import user_cache_path, user_config_path, user_log_path

APP_NAME = 'voice-relay'

CONFIG_DIR = user_config_path(APP_NAME)
STATE_PATH = CONFIG_DIR / 'state.yaml'

MIC_ADVISORY_PATH = CONFIG_DIR / '.mic_advisory_shown'

DEFAULT_CONFIG_PATHS = [
    CONFIG_DIR / 'config.yaml',
    CONFIG_DIR / 'config.yml',
]

LOG_DIR = user_log_path(APP_NAME)
RECORDINGS_DIR = user_cache_path(APP_NAME) / 'recordings'
