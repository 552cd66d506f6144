"""Port: one-time microphone permission advisory."""

from __future__ import annotations

from typing import Protocol


class PermissionAdvisor(Protocol):
    def show(self) -> None:
        """Show the advisory. Must not block waiting for the user."""
        ...
