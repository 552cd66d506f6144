"""Gateway: file-backed settings store — implements SettingsStore port."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from voice_relay.l3_interface_adapters.gateways.paths import MIC_ADVISORY_PATH, STATE_PATH

log = logging.getLogger('vr.app')


class FileSettingsStore:
    """Persists the active whisper model in a YAML state file and the advisory flag as a marker file."""

    def __init__(self, state_path: Path = STATE_PATH, advisory_path: Path = MIC_ADVISORY_PATH) -> None:
        self._state_path = state_path
        self._advisory_path = advisory_path

    def _read_state(self) -> dict:
        if not self._state_path.exists():
            return {}
        data = yaml.safe_load(self._state_path.read_text(encoding='utf-8'))
        return data if isinstance(data, dict) else {}

    def active_model(self) -> str | None:
        value = self._read_state().get('active_whisper_model')
        return str(value) if value else None

    def set_active_model(self, name: str) -> None:
        state = self._read_state()
        state['active_whisper_model'] = name
        self._state_path.parent.mkdir(parents=True, exist_ok=True)
        self._state_path.write_text(yaml.safe_dump(state, sort_keys=True), encoding='utf-8')

    def advisory_shown(self) -> bool:
        return self._advisory_path.exists()

    def mark_advisory_shown(self) -> None:
        try:
            self._advisory_path.parent.mkdir(parents=True, exist_ok=True)
            self._advisory_path.touch()
        except OSError as e:
            log.warning('Could not persist advisory flag at %s: %s', self._advisory_path, e)
