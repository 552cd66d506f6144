"""Port: small persisted settings owned by the pipeline."""

from __future__ import annotations

from typing import Protocol


class SettingsStore(Protocol):
    """Survives process restarts."""

    def active_model(self) -> str | None:
        ...

    def set_active_model(self, name: str) -> None:
        ...

    def advisory_shown(self) -> bool:
        ...

    def mark_advisory_shown(self) -> None:
        ...
